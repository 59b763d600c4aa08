"""API route registration helpers."""

from .session import get_router as get_session_router
from .settings import get_router as get_settings_router

__all__ = ["get_session_router", "get_settings_router"]
