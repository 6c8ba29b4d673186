"""Author profiles and follows."""

from .models import AUTHORS_TABLES_CQL, AuthorProfile
from .router import router
from .service import AuthorService


__all__ = ["AUTHORS_TABLES_CQL", "AuthorProfile", "AuthorService", "router"]
