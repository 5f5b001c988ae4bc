from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import LoggingSettings


__all__ = ["Settings", "StreamingSettings", "UpstreamSettings", "get_settings"]


class UpstreamSettings(BaseModel):
    """Vendor endpoint configuration."""

    base_url: str = Field(
        default="https://yuanbao.tencent.com",
        description="Base URL of the vendor chat API",
    )

    chat_path: str = Field(
        default="/api/chat",
        description="Path of the streaming chat endpoint, appended to base_url",
    )

    timeout: float = Field(
        default=300.0,
        description="Read timeout in seconds for a single streaming request",
        gt=0,
    )

    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers sent with every upstream request",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class StreamingSettings(BaseModel):
    """Stream transformation behaviour."""

    reasoning_open_tag: str = Field(
        default="<thinking>",
        description="Marker opening a reasoning span inside a text block",
    )

    reasoning_close_tag: str = Field(
        default="</thinking>",
        description="Marker closing a reasoning span inside a text block",
    )


class Settings(BaseSettings):
    """
    Configuration settings for ybproxy.

    Values are loaded from environment variables prefixed with ``YBPROXY_``
    and from a ``.env`` file. Nested sections use ``__`` as delimiter, e.g.
    ``YBPROXY_UPSTREAM__TIMEOUT=60``.
    """

    model_config = SettingsConfigDict(
        env_prefix="YBPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    upstream: UpstreamSettings = Field(
        default_factory=UpstreamSettings,
        description="Vendor endpoint configuration",
    )

    streaming: StreamingSettings = Field(
        default_factory=StreamingSettings,
        description="Stream transformation behaviour",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
