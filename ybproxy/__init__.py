"""OpenAI-compatible streaming adapter for the Yuanbao chat protocol."""

from ._version import __version__


__all__ = ["__version__"]
