"""Event models."""

from taekwondo_api.events.models.event import Event

__all__ = ["Event"]
