"""Command line interface for ybproxy."""

from .main import app


__all__ = ["app"]
