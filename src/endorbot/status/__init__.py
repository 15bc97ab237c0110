"""Read-only status view."""

from .server import StateHolder, start_status_server

__all__ = ["StateHolder", "start_status_server"]
