"""ASGI integration for ybproxy."""

from .app import create_app
from .streaming import create_streaming_response


__all__ = ["create_app", "create_streaming_response"]
