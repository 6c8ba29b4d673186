"""Quotes."""

from .models import QUOTES_TABLES_CQL, Category, Quote, QuoteImage
from .service import QuoteService


__all__ = ["QUOTES_TABLES_CQL", "Category", "Quote", "QuoteImage", "QuoteService"]
