"""FastAPI dependencies for author profiles."""

from typing import Annotated

from fastapi import Depends, Request

from gulfquotes.core.dependencies import service_from_state

from .service import AuthorService


def get_author_service(request: Request) -> AuthorService:
    """Get AuthorService from app state."""
    return service_from_state(request, "author_service")


AuthorServiceDep = Annotated[AuthorService, Depends(get_author_service)]
