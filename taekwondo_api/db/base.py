"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with the metadata, both for Alembic autogeneration and for tests that
create the schema directly. While the imports appear unused, they are
essential for the mapper registry to be complete.
"""

from taekwondo_api.auth.models.user import User
from taekwondo_api.contact.models.contact_message import ContactMessage
from taekwondo_api.db.session import Base
from taekwondo_api.enrollments.models.enrollment import Enrollment
from taekwondo_api.events.models.event import Event
from taekwondo_api.gallery.models.gallery_item import GalleryItem

# Export all models for Alembic
__all__ = [
    "Base",
    "User",
    "Event",
    "GalleryItem",
    "ContactMessage",
    "Enrollment",
]
