"""Core schema definitions for standardized API responses.

This module provides the response envelope used by every endpoint.
Routes declare ``response_model=ApiResponse[...]`` together with
``response_model_exclude_none=True`` so that unused envelope keys are
left out of the JSON body.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope.

    Example success response:
        {
            "success": true,
            "data": [ ... ],
            "meta": { "count": 12 }
        }

    Example error response (built by the exception handlers):
        {
            "success": false,
            "message": "Enrollment not found",
            "error": { "code": "NOT_FOUND", "details": { "resource": "enrollment" } }
        }
    """

    success: bool = True
    data: T | None = None
    message: str | None = None
    error: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def listing(cls, items: list[Any], message: str | None = None) -> "ApiResponse[Any]":
        """Wrap a list result and report its size in ``meta.count``."""
        return cls(data=items, message=message, meta={"count": len(items)})  # type: ignore[arg-type]
