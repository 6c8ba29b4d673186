"""FastAPI dependencies for comments."""

from typing import Annotated

from fastapi import Depends, Request

from gulfquotes.core.dependencies import service_from_state

from .service import CommentService


def get_comment_service(request: Request) -> CommentService:
    """Get CommentService from app state."""
    return service_from_state(request, "comment_service")


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
