"""Tests for settings loading."""
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from pageprobe.browser.connection import HttpxExecutor
from pageprobe.browser.session import Session
from pageprobe.core.config import Settings
from pageprobe.core.logging import NOISY_LOGGERS, setup_logging


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PAGEPROBE_BASE_URL", raising=False)
    settings = Settings()
    assert settings.base_url is None
    assert settings.data_dir == Path("tests/_data")
    assert settings.executor.backend == "httpx"
    assert settings.executor.follow_redirects is True


def test_from_yaml(tmp_path: Path) -> None:
    config = tmp_path / "pageprobe.yaml"
    config.write_text(
        "base_url: http://localhost:8000\n"
        "data_dir: fixtures\n"
        "executor:\n"
        "  timeout: 5\n"
        "  headers:\n"
        "    Accept-Language: en\n"
    )
    settings = Settings.from_yaml(config)
    assert settings.base_url == "http://localhost:8000"
    assert settings.data_dir == Path("fixtures")
    assert settings.executor.timeout == 5.0
    assert settings.executor.headers == {"Accept-Language": "en"}


def test_empty_yaml(tmp_path: Path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text("")
    assert Settings.from_yaml(config).executor.max_redirects == 20


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAGEPROBE_BASE_URL", "http://example.test")
    monkeypatch.setenv("PAGEPROBE_EXECUTOR__BACKEND", "playwright")
    settings = Settings()
    assert settings.base_url == "http://example.test"
    assert settings.executor.backend == "playwright"


def test_session_from_settings(tmp_path: Path) -> None:
    settings = Settings(base_url="http://localhost", data_dir=tmp_path, log_level="WARNING")
    with patch("pageprobe.browser.session.setup_logging") as mock_setup:
        session = Session.from_settings(settings)
    try:
        mock_setup.assert_called_once_with("WARNING")
        assert isinstance(session._executor, HttpxExecutor)
        assert session.state.is_blank
    finally:
        session.close()


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def isolated_loggers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", logging.WARNING)
        for name in NOISY_LOGGERS:
            monkeypatch.setattr(logging.getLogger(name), "level", logging.NOTSET)

    def test_sets_root_level(self) -> None:
        setup_logging("debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_transport_loggers_quiet_unless_debugging(self) -> None:
        setup_logging("INFO")
        assert logging.getLogger("httpx").level == logging.WARNING
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="verbose"):
            setup_logging("verbose")
