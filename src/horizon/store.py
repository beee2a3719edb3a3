"""Layered key/value store behind the configuration loader.

Three layers, highest precedence first:

    explicit   values read from the config file (or ``set``)
    env        ``SERVER_PORT`` style variables, once ``automatic_env()`` is on
    defaults   ``set_default``; never shadows the layers above

Keys are dotted and case-insensitive. The file format follows the suffix:
``.toml`` is TOML, anything else is INI (section ``server`` + key ``ip`` is
``server.ip``).
"""

from __future__ import annotations

import configparser
import os
import pathlib
import tomllib
from typing import TYPE_CHECKING, Any, TypeVar

import tomli_w

import horizon.errors
import horizon.schema

if TYPE_CHECKING:
    from collections.abc import Mapping

T = TypeVar("T")

_TRUE = frozenset({"true", "t", "1", "yes", "on"})
_FALSE = frozenset({"false", "f", "0", "no", "off"})

# Keeps configparser from copying [DEFAULT] keys into every section.
_NO_DEFAULT_SECTION = "\x00default"


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def _is_toml(path: pathlib.Path) -> bool:
    return path.suffix.lower() == ".toml"


def _read_ini(path: pathlib.Path) -> dict[str, Any]:
    cp = configparser.ConfigParser(interpolation=None, default_section=_NO_DEFAULT_SECTION)
    with path.open(encoding="utf-8") as f:
        cp.read_file(f)
    data: dict[str, Any] = {}
    for section in cp.sections():
        data[section] = {k: cp.get(section, k) for k in cp.options(section)}
    return data


def _read_toml(path: pathlib.Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _ini_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _ini_sections(settings: dict[str, Any], prefix: str = "") -> dict[str, dict[str, str]]:
    """Flatten nested settings into ``{section: {key: text}}``."""
    sections: dict[str, dict[str, str]] = {}
    scalars = {k: _ini_value(v) for k, v in settings.items() if not isinstance(v, dict)}
    if scalars:
        sections[prefix or configparser.DEFAULTSECT] = scalars
    for k, v in settings.items():
        if isinstance(v, dict):
            sections.update(_ini_sections(v, horizon.schema.join(prefix, k)))
    return sections


def _write_ini(path: pathlib.Path, settings: dict[str, Any]) -> None:
    cp = configparser.ConfigParser(interpolation=None, default_section=_NO_DEFAULT_SECTION)
    for section, values in _ini_sections(settings).items():
        cp[section] = values
    with path.open("w", encoding="utf-8") as f:
        cp.write(f)


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in data.items():
        key = horizon.schema.join(prefix, str(k).lower())
        if isinstance(v, dict):
            out.update(_flatten(v, key))
        else:
            out[key] = v
    return out


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------

def _coerce(value: Any, target_type: Any) -> Any:
    """Coerce a raw file or environment value to *target_type*."""
    if target_type is horizon.schema.Environment:
        return horizon.schema.Environment.parse(str(value))
    if isinstance(value, str):
        if not value.strip() and target_type in (bool, int, float):
            return target_type()
        if target_type is bool:
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(f"invalid boolean {value!r}")
        if target_type is int:
            return int(value.strip())
        if target_type is float:
            return float(value.strip())
        return value
    if target_type is str:
        return _ini_value(value)
    if target_type is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if isinstance(target_type, type) and isinstance(value, target_type):
        if target_type is int and isinstance(value, bool):
            raise TypeError(f"expected int, got {value!r}")
        return value
    raise TypeError(f"cannot use {value!r} as {getattr(target_type, '__name__', target_type)}")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class Store:
    """Explicit values over environment variables over defaults."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, Any] = {}
        self._defaults: dict[str, Any] = {}
        self._environ = os.environ if environ is None else environ
        self._automatic_env = False

    @staticmethod
    def env_key(key: str) -> str:
        """Environment variable name for a dotted key."""
        return key.upper().replace(".", "_")

    def automatic_env(self) -> None:
        """Start consulting environment variables in :meth:`get`."""
        self._automatic_env = True

    def set_default(self, key: str, value: Any) -> None:
        self._defaults[key.lower()] = value

    def set(self, key: str, value: Any) -> None:
        self._values[key.lower()] = value

    def get(self, key: str) -> Any:
        """Return the effective raw value for *key*, or ``None``.

        An empty environment variable counts as unset.
        """
        key = key.lower()
        if key in self._values:
            return self._values[key]
        if self._automatic_env:
            env_value = self._environ.get(self.env_key(key))
            if env_value:
                return env_value
        return self._defaults.get(key)

    def is_set(self, key: str) -> bool:
        return self.get(key) is not None

    def read_config(self, path: str | pathlib.Path) -> None:
        """Load explicit values from *path*."""
        path = pathlib.Path(path)
        try:
            data = _read_toml(path) if _is_toml(path) else _read_ini(path)
        except (OSError, UnicodeDecodeError, configparser.Error, tomllib.TOMLDecodeError) as exc:
            raise horizon.errors.ConfigReadError(
                f"error reading config file: {exc}",
                details={"path": str(path)},
                original_error=exc,
            ) from exc
        for key, value in _flatten(data).items():
            self.set(key, value)

    def write_config(self, path: str | pathlib.Path, settings: dict[str, Any]) -> None:
        """Write nested *settings* to *path*. Parent directories must exist."""
        path = pathlib.Path(path)
        try:
            if _is_toml(path):
                path.write_bytes(tomli_w.dumps(settings).encode())
            else:
                _write_ini(path, settings)
        except OSError as exc:
            raise horizon.errors.ConfigWriteError(
                f"error writing config file: {exc}",
                details={"path": str(path)},
                original_error=exc,
            ) from exc

    def unmarshal(self, schema: type[T], prefix: str = "") -> T:
        """Build a fresh *schema* instance from the effective values.

        Leaves with no value keep their zero value.
        """
        kwargs: dict[str, Any] = {}
        for f in horizon.schema.walk(schema):
            path = horizon.schema.join(prefix, f.key)
            if f.nested is not None:
                if path in self._values:
                    raise horizon.errors.ConfigUnmarshalError(
                        f"error unmarshaling config: {path!r} is a section, "
                        f"got value {self._values[path]!r}",
                        details={"key": path},
                    )
                kwargs[f.name] = self.unmarshal(f.nested, path)
                continue
            if not f.key:
                continue
            raw = self.get(path)
            if raw is None:
                continue
            try:
                kwargs[f.name] = _coerce(raw, f.hint)
            except (TypeError, ValueError) as exc:
                raise horizon.errors.ConfigUnmarshalError(
                    f"error unmarshaling config: {path}: {exc}",
                    details={"key": path, "value": raw},
                    original_error=exc,
                ) from exc
        return schema(**kwargs)
