"""Python client for the Gulfquotes comment API."""

from .api import ApiError, GulfquotesClient
from .comments import CommentState, CommentThread, Notifier, ReplyState


__all__ = [
    "ApiError",
    "CommentState",
    "CommentThread",
    "GulfquotesClient",
    "Notifier",
    "ReplyState",
]
