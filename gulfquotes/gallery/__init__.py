"""Image gallery."""

from .models import GALLERY_TABLES_CQL, GalleryItem
from .router import router
from .service import GalleryService


__all__ = ["GALLERY_TABLES_CQL", "GalleryItem", "GalleryService", "router"]
