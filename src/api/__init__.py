"""HTTP control plane for starting and inspecting seedshotter sessions."""

from .server import app, create_app

__all__ = ["app", "create_app"]
