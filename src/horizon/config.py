"""Load the Horizon emulator configuration.

Sources, highest precedence first:

    config file            config.ini (or .toml) at the caller's path
    environment variables  DATABASE_PASSWORD overrides database.password
    schema defaults        ``default`` metadata in horizon.schema

The file is unmarshaled twice. The first pass sees only what the file sets
and is what the security scan runs on, so placeholder credentials coming
from defaults never alert. The second pass adds the environment overlay
and defaults and is the configuration handed to the rest of the server.
"""

from __future__ import annotations

import logging
import pathlib

import horizon.defaults
import horizon.errors
import horizon.schema
import horizon.security
import horizon.store

DEFAULT_PATH = pathlib.Path("config.ini")


def load_config(
    path: str | pathlib.Path,
    logger: logging.Logger,
    environ: dict[str, str] | None = None,
) -> horizon.schema.Config:
    """Read *path*, scan it, then resolve overrides and defaults."""
    store = horizon.store.Store(environ)
    store.read_config(path)

    explicit = store.unmarshal(horizon.schema.Config)
    horizon.security.check_security_alerts(explicit, logger)

    store.automatic_env()
    horizon.defaults.apply_defaults(store, horizon.schema.Config)

    config = store.unmarshal(horizon.schema.Config)
    logger.info("Configuration loaded", extra={"path": str(path)})
    return config


def default_config() -> horizon.schema.Config:
    """Return a config populated purely from schema defaults."""
    store = horizon.store.Store(environ={})
    horizon.defaults.apply_defaults(store, horizon.schema.Config)
    return store.unmarshal(horizon.schema.Config)


def create_default_config(path: str | pathlib.Path, logger: logging.Logger) -> bool:
    """Write the default configuration to *path* unless it already exists.

    Returns True if a file was written.
    """
    path = pathlib.Path(path)
    if path.exists():
        return False

    settings = horizon.schema.to_settings(default_config())
    store = horizon.store.Store(environ={})
    try:
        store.write_config(path, settings)
    except horizon.errors.ConfigWriteError as exc:
        raise horizon.errors.ConfigWriteError(
            f"error creating default config file: {exc.original_error or exc}",
            details={"path": str(path)},
            original_error=exc.original_error,
        ) from exc

    logger.info("Config file not found. Created default config file.", extra={"path": str(path)})
    return True


def explicit_config(path: str | pathlib.Path) -> horizon.schema.Config:
    """Return only what *path* sets: no defaults, no environment overlay."""
    store = horizon.store.Store(environ={})
    store.read_config(path)
    return store.unmarshal(horizon.schema.Config)
