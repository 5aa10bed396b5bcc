"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from gst_returns.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from gst_returns.api.v1.routes.gstr1 import router as gstr1_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(gstr1_router)
