"""Tags."""

from .models import TAGS_TABLES_CQL, Tag
from .service import TagService


__all__ = ["TAGS_TABLES_CQL", "Tag", "TagService"]
