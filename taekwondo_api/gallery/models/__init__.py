"""Gallery models."""

from taekwondo_api.gallery.models.gallery_item import GalleryItem

__all__ = ["GalleryItem"]
