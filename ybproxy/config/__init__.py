"""Configuration models for ybproxy."""

from .logging import LoggingSettings
from .settings import Settings, StreamingSettings, UpstreamSettings, get_settings


__all__ = [
    "LoggingSettings",
    "Settings",
    "StreamingSettings",
    "UpstreamSettings",
    "get_settings",
]
