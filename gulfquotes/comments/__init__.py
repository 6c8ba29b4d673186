"""Quote comments and replies.

Note: Router is not exported here to avoid circular imports.
Import directly from gulfquotes.comments.router when needed.
"""

from .models import COMMENTS_TABLES_CQL, Comment, Reply
from .service import CommentService


__all__ = ["COMMENTS_TABLES_CQL", "Comment", "CommentService", "Reply"]
