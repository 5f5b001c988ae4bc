"""Exception hierarchy for ybproxy."""


class ProxyError(Exception):
    """Base class for all ybproxy errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MalformedChunkError(ProxyError):
    """Raised when a vendor event payload is not a JSON object.

    Keep-alive markers never reach this point; anything else that fails to
    decode ends the current read loop.
    """

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class ConfigurationError(ProxyError):
    """Raised when configuration loading or validation fails."""
