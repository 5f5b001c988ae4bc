"""Upstream HTTP access."""

from .client import YuanbaoClient


__all__ = ["YuanbaoClient"]
