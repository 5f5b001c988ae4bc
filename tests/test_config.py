"""Tests for settings loading and validation."""

import pytest
from pydantic import ValidationError

from ybproxy.config import LoggingSettings, Settings, UpstreamSettings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.logging.level == "INFO"
        assert settings.upstream.chat_path == "/api/chat"
        assert settings.streaming.reasoning_open_tag == "<thinking>"
        assert settings.streaming.reasoning_close_tag == "</thinking>"

    def test_environment_overrides(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YBPROXY_LOGGING__LEVEL", "debug")
        monkeypatch.setenv("YBPROXY_UPSTREAM__BASE_URL", "https://vendor.test/")
        monkeypatch.setenv("YBPROXY_UPSTREAM__TIMEOUT", "12.5")

        settings = Settings()

        assert settings.logging.level == "DEBUG"
        assert settings.upstream.base_url == "https://vendor.test"
        assert settings.upstream.timeout == 12.5

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValidationError):
            UpstreamSettings(timeout=0)


@pytest.mark.unit
class TestLoggingSettings:
    def test_invalid_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="loud")

    def test_invalid_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(format="xml")

    @pytest.mark.parametrize(
        ("log_format", "is_tty", "expected"),
        [
            ("auto", True, False),
            ("auto", False, True),
            ("json", True, True),
            ("rich", False, False),
        ],
    )
    def test_use_json(self, log_format: str, is_tty: bool, expected: bool) -> None:
        assert LoggingSettings(format=log_format).use_json(is_tty) is expected
