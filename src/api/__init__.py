"""HTTP interface for Gradient Surface Lab."""

from .server import create_app

__all__ = ["create_app"]
