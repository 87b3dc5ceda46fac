"""HTTP surface for the Capstur workspace."""

from .app import create_app

__all__ = ["create_app"]
