"""FastAPI dependencies for quotes."""

from typing import Annotated

from fastapi import Depends, Request

from gulfquotes.core.dependencies import service_from_state

from .service import QuoteService


def get_quote_service(request: Request) -> QuoteService:
    """Get QuoteService from app state."""
    return service_from_state(request, "quote_service")


QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]
