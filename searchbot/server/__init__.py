"""HTTP transport for searchbot."""

from searchbot.server.app import create_app

__all__ = ["create_app"]
