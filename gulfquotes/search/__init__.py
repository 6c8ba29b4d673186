"""Search analytics and suggestions."""

from .models import SEARCH_TABLES_CQL
from .service import SearchService


__all__ = ["SEARCH_TABLES_CQL", "SearchService"]
