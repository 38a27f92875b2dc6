"""Command-line front end (`octra-wallet`)."""

from .main import app, main

__all__ = ["app", "main"]
