"""Enrollment models."""

from taekwondo_api.enrollments.models.enrollment import Enrollment

__all__ = ["Enrollment"]
