"""Shared test fixtures for horizon tests."""

from __future__ import annotations

import logging
import pathlib

import pytest

import horizon.log


@pytest.fixture(autouse=True)
def _restore_horizon_logger():
    """Undo handler and level changes made by create_temp_logger/setup_logger."""
    root = logging.getLogger(horizon.log.LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def logger(caplog: pytest.LogCaptureFixture) -> logging.Logger:
    """A logger whose records land in caplog."""
    caplog.set_level(logging.DEBUG, logger="horizon.tests")
    return logging.getLogger("horizon.tests")


@pytest.fixture
def ini_file(tmp_path: pathlib.Path):
    """Factory for writing a config.ini with the given content."""

    def _create(content: str, name: str = "config.ini") -> pathlib.Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return _create
