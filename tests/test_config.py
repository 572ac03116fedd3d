"""Tests for lyven.config — AppConfig frozen dataclass."""

import logging
from pathlib import Path

import pytest

from lyven.config import AppConfig
from lyven.properties import Properties


class TestAppConfig:
    def test_defaults(self) -> None:
        cfg = AppConfig()

        assert cfg.host == "localhost"
        assert cfg.port == 8080
        assert cfg.context_path == ""
        assert cfg.cors_enabled is True
        assert cfg.dev_mode is False
        assert cfg.log_level == "INFO"
        assert cfg.strict_constructors is False
        assert cfg.strict_binding is False

    def test_override(self) -> None:
        cfg = AppConfig(host="0.0.0.0", port=3000, dev_mode=True)

        assert cfg.host == "0.0.0.0"
        assert cfg.port == 3000
        assert cfg.dev_mode is True

    def test_frozen(self) -> None:
        cfg = AppConfig()

        with pytest.raises(AttributeError):
            cfg.dev_mode = True  # type: ignore[misc]


class TestFromProperties:
    def test_defaults(self) -> None:
        assert AppConfig.from_properties(Properties()) == AppConfig()

    def test_reads_keys(self) -> None:
        props = Properties()
        props.set_property("server.port", "3000")
        props.set_property("server.host", "0.0.0.0")
        props.set_property("server.context-path", "/api")
        props.set_property("server.cors.enabled", "false")
        props.set_property("lyven.dev-mode", "yes")
        props.set_property("lyven.strict-constructors", "true")
        props.set_property("lyven.strict-binding", "on")

        cfg = AppConfig.from_properties(props)

        assert cfg.port == 3000
        assert cfg.host == "0.0.0.0"
        assert cfg.context_path == "/api"
        assert cfg.cors_enabled is False
        assert cfg.dev_mode is True
        assert cfg.strict_constructors is True
        assert cfg.strict_binding is True

    def test_log_level_normalized(self) -> None:
        props = Properties()
        props.set_property("logging.level", "warn")
        assert AppConfig.from_properties(props).log_level == "WARNING"

    def test_unknown_log_level(self, caplog: pytest.LogCaptureFixture) -> None:
        props = Properties()
        props.set_property("logging.level", "chatty")
        with caplog.at_level(logging.WARNING, logger="lyven.config"):
            assert AppConfig.from_properties(props).log_level == "INFO"
        assert "Unknown logging.level" in caplog.text


class TestLoad:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        cfg = AppConfig.load(tmp_path / "absent.properties", environ={})
        assert cfg == AppConfig()

    def test_file_then_environment(self, tmp_path: Path) -> None:
        path = tmp_path / "application.properties"
        path.write_text("server.port=3000\nlyven.dev-mode=true\n", encoding="utf-8")

        cfg = AppConfig.load(path, environ={"LYVEN_SERVER_PORT": "4000"})

        assert cfg.port == 4000
        assert cfg.dev_mode is True

    def test_populates_given_properties(self, tmp_path: Path) -> None:
        props = Properties()
        AppConfig.load(None, environ={"LYVEN_CUSTOM_KEY": "v"}, properties=props)
        assert props.get_string("custom.key") == "v"
