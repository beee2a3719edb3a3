"""Tests for horizon.config — load order, overrides, default file creation."""

from __future__ import annotations

import logging
import pathlib
import tomllib

import pytest

import horizon.config
import horizon.errors
import horizon.schema
import horizon.security

Environment = horizon.schema.Environment


def _alert_fields(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [
        r.field
        for r in caplog.records
        if r.getMessage() == horizon.security.ALERT_MESSAGE
    ]


class TestLoadConfig:
    def test_defaults_fill_unset_fields(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[server]\nport = 9000\n")
        cfg = horizon.config.load_config(path, logger, environ={})
        assert cfg.server.port == 9000
        assert cfg.server.ip == "127.0.0.1"
        assert cfg.server.environment is Environment.DEVELOPMENT
        assert cfg.database.name == "example_db"
        assert cfg.database.port == 3306
        assert cfg.logging.console_color is True
        assert cfg.logging.json is False
        assert cfg.logging.level == "info"

    def test_file_value_beats_environment(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[database]\npassword = from_file\n")
        cfg = horizon.config.load_config(
            path, logger, environ={"DATABASE_PASSWORD": "from_env"}
        )
        assert cfg.database.password == "from_file"

    def test_environment_beats_default(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[server]\nip = 0.0.0.0\n")
        cfg = horizon.config.load_config(
            path,
            logger,
            environ={"SERVER_PORT": "7000", "LOGGING_JSON": "true"},
        )
        assert cfg.server.port == 7000
        assert cfg.logging.json is True

    def test_empty_environment_variables_ignored(
        self, ini_file, logger: logging.Logger
    ) -> None:
        path = ini_file("[server]\nip = 0.0.0.0\n")
        cfg = horizon.config.load_config(
            path, logger, environ={"SERVER_PORT": "", "DATABASE_PASSWORD": ""}
        )
        assert cfg.server.port == 8080
        assert cfg.database.password == "password"

    def test_empty_file_value_is_zero(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[database]\nport =\n\n[logging]\njson =\n")
        cfg = horizon.config.load_config(path, logger, environ={})
        assert cfg.database.port == 0
        assert cfg.logging.json is False

    def test_default_section_not_inherited(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[DEFAULT]\nport = 9\n\n[server]\nip = 0.0.0.0\n\n[database]\nname = x\n")
        cfg = horizon.config.load_config(path, logger, environ={})
        assert cfg.server.port == 8080
        assert cfg.database.port == 3306
        assert cfg.database.name == "x"

    def test_environment_from_process(
        self, ini_file, logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DATABASE_HOST", "db.internal")
        path = ini_file("[server]\nip = 0.0.0.0\n")
        cfg = horizon.config.load_config(path, logger)
        assert cfg.database.host == "db.internal"

    def test_toml_source(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file(
            '[server]\nport = 9100\nenvironment = "staging"\n[logging]\njson = true\n',
            name="config.toml",
        )
        cfg = horizon.config.load_config(path, logger, environ={})
        assert cfg.server.port == 9100
        assert cfg.server.environment is Environment.STAGING
        assert cfg.logging.json is True
        assert cfg.server.ip == "127.0.0.1"

    def test_logs_success(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file("[server]\nip = 0.0.0.0\n")
        horizon.config.load_config(path, logger, environ={})
        assert "Configuration loaded" in caplog.text

    def test_missing_file(self, tmp_path: pathlib.Path, logger: logging.Logger) -> None:
        with pytest.raises(horizon.errors.ConfigReadError):
            horizon.config.load_config(tmp_path / "config.ini", logger, environ={})

    def test_bad_value(self, ini_file, logger: logging.Logger) -> None:
        path = ini_file("[server]\nport = eighty\n")
        with pytest.raises(horizon.errors.ConfigUnmarshalError, match="server.port"):
            horizon.config.load_config(path, logger, environ={})


class TestLoadConfigAlerts:
    def test_explicit_password_in_production(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file(
            "[server]\nenvironment = PRODUCTION\n\n[database]\npassword = prod_secret\n"
        )
        cfg = horizon.config.load_config(path, logger, environ={})
        assert _alert_fields(caplog) == ["password"]
        record = next(
            r for r in caplog.records if r.getMessage() == horizon.security.ALERT_MESSAGE
        )
        assert record.environment == "production"
        # Defaults still fill the rest after the scan.
        assert cfg.database.username == "user"

    def test_defaults_never_alert(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file("[server]\nenvironment = production\n")
        horizon.config.load_config(path, logger, environ={})
        assert _alert_fields(caplog) == []

    def test_environment_overrides_never_alert(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file("[server]\nenvironment = production\n")
        cfg = horizon.config.load_config(
            path, logger, environ={"DATABASE_PASSWORD": "from_env"}
        )
        assert cfg.database.password == "from_env"
        assert _alert_fields(caplog) == []

    def test_development_never_alerts(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file(
            "[server]\nenvironment = development\n\n[database]\npassword = secret\n"
        )
        horizon.config.load_config(path, logger, environ={})
        assert _alert_fields(caplog) == []


class TestCreateDefaultConfig:
    def test_creates_loadable_file(
        self, tmp_path: pathlib.Path, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "config.ini"
        assert horizon.config.create_default_config(path, logger) is True
        assert path.exists()
        assert "Created default config file" in caplog.text

        cfg = horizon.config.load_config(path, logger, environ={})
        assert cfg == horizon.config.default_config()
        assert _alert_fields(caplog) == []

    def test_file_contents(self, tmp_path: pathlib.Path, logger: logging.Logger) -> None:
        path = tmp_path / "config.ini"
        horizon.config.create_default_config(path, logger)
        text = path.read_text()
        for section in ("[server]", "[database]", "[logging]"):
            assert section in text
        assert "ip = 127.0.0.1" in text
        assert "environment = development" in text
        assert "console_color = true" in text

    def test_existing_file_untouched(
        self, ini_file, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = ini_file("[server]\nip = 10.0.0.9\n")
        assert horizon.config.create_default_config(path, logger) is False
        assert path.read_text() == "[server]\nip = 10.0.0.9\n"
        assert "Created default config file" not in caplog.text

    def test_unwritable_path(self, tmp_path: pathlib.Path, logger: logging.Logger) -> None:
        path = tmp_path / "no" / "such" / "dir" / "config.ini"
        with pytest.raises(
            horizon.errors.ConfigWriteError, match="error creating default config file"
        ) as info:
            horizon.config.create_default_config(path, logger)
        assert isinstance(info.value.original_error, OSError)
        assert isinstance(info.value.__cause__, horizon.errors.ConfigWriteError)

    def test_toml_target(self, tmp_path: pathlib.Path, logger: logging.Logger) -> None:
        path = tmp_path / "config.toml"
        horizon.config.create_default_config(path, logger)
        data = tomllib.loads(path.read_text())
        assert data["server"]["port"] == 8080
        assert data["logging"]["console_color"] is True
        assert data["server"]["environment"] == "development"


class TestDefaultConfig:
    def test_matches_declared_defaults(self) -> None:
        cfg = horizon.config.default_config()
        assert cfg.server.ip == "127.0.0.1"
        assert cfg.server.port == 8080
        assert cfg.database.password == "password"
        assert cfg.logging.console_color is True

    def test_ignores_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_PORT", "1")
        assert horizon.config.default_config().server.port == 8080


class TestExplicitConfig:
    def test_only_file_values(self, ini_file, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_PORT", "1")
        path = ini_file("[server]\nip = 10.0.0.1\n")
        cfg = horizon.config.explicit_config(path)
        assert cfg.server.ip == "10.0.0.1"
        assert cfg.server.port == 0
        assert cfg.database.name == ""
