# gst_returns/api/v1/envelope.py
"""
Standardized API response envelope used by the v1 JSON endpoints.

Every response wraps data in:
    {
        "status": "ok",
        "data": <payload>,
        "message": <optional string>
    }

Failures use FastAPI's ``{"detail": ...}`` error bodies. File downloads are
returned as attachments, not wrapped.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for all v1 API responses."""

    status: str = "ok"
    data: T | None = None
    message: str | None = None


def ok(data: Any = None, message: str | None = None) -> dict:
    """Build a success response dict."""
    return ApiResponse(status="ok", data=data, message=message).model_dump()
