"""Contact models."""

from taekwondo_api.contact.models.contact_message import ContactMessage

__all__ = ["ContactMessage"]
