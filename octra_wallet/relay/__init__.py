"""ASGI passthrough relay exposing ``/api/proxy?path=...``."""

from .app import create_app, serve

__all__ = ["create_app", "serve"]
