"""Configuration schema for the Horizon emulator.

Each dataclass field carries its metadata in ``dataclasses.field(metadata=...)``,
built with :func:`tag`:

    key             path segment; dotted paths join the segments
    default         default value as an opaque string
    security_alert  environment in which a populated value is flagged

Instances built with no arguments are zero-valued: every leaf is ``""``,
``0``, ``False`` or ``None``. Defaults are applied by the store, never by
the dataclass itself, so an unmarshaled instance only holds what the
sources actually supplied.
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import types
import typing
from typing import Any

import horizon.errors

KEY = "key"
DEFAULT = "default"
SECURITY_ALERT = "security_alert"


class Environment(enum.Enum):
    """Runtime mode the server is deployed in."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    STAGING = "staging"

    @classmethod
    def parse(cls, text: str | None) -> Environment | None:
        """Parse *text* case-insensitively. Empty input means no environment."""
        if text is None:
            return None
        value = str(text).strip().lower()
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(e.value for e in cls)
            raise horizon.errors.ConfigUnmarshalError(
                f"unknown environment {text!r} (expected one of: {allowed})",
                details={"value": text},
            ) from None


def tag(
    key: str,
    *,
    default: str | None = None,
    security_alert: Environment | None = None,
) -> dict[str, Any]:
    """Build the field metadata mapping."""
    return {KEY: key, DEFAULT: default, SECURITY_ALERT: security_alert}


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class ServerConfig:
    ip: str = dataclasses.field(default="", metadata=tag("ip", default="127.0.0.1"))
    port: int = dataclasses.field(default=0, metadata=tag("port", default="8080"))
    environment: Environment | None = dataclasses.field(
        default=None, metadata=tag("environment", default="development")
    )


_PROD = Environment.PRODUCTION


@dataclasses.dataclass
class DatabaseConfig:
    name: str = dataclasses.field(
        default="", metadata=tag("name", default="example_db", security_alert=_PROD)
    )
    username: str = dataclasses.field(
        default="", metadata=tag("username", default="user", security_alert=_PROD)
    )
    password: str = dataclasses.field(
        default="", metadata=tag("password", default="password", security_alert=_PROD)
    )
    host: str = dataclasses.field(
        default="", metadata=tag("host", default="localhost", security_alert=_PROD)
    )
    port: int = dataclasses.field(
        default=0, metadata=tag("port", default="3306", security_alert=_PROD)
    )


@dataclasses.dataclass
class LoggingConfig:
    console_color: bool = dataclasses.field(
        default=False, metadata=tag("console_color", default="true")
    )
    json: bool = dataclasses.field(default=False, metadata=tag("json", default="false"))
    level: str = dataclasses.field(default="", metadata=tag("level", default="info"))


@dataclasses.dataclass
class Config:
    """Root of the configuration tree."""

    server: ServerConfig = dataclasses.field(
        default_factory=ServerConfig, metadata=tag("server")
    )
    database: DatabaseConfig = dataclasses.field(
        default_factory=DatabaseConfig, metadata=tag("database")
    )
    logging: LoggingConfig = dataclasses.field(
        default_factory=LoggingConfig, metadata=tag("logging")
    )


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class SchemaField:
    """One dataclass field with its metadata and resolved type."""

    name: str
    key: str
    default: str | None
    security_alert: Environment | None
    hint: Any
    nested: type | None


def _unwrap_optional(hint: Any) -> Any:
    """Return ``X`` for ``X | None``; anything else unchanged."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


@functools.cache
def _hints(cls: type) -> dict[str, Any]:
    return typing.get_type_hints(cls)


def is_schema(obj: Any) -> bool:
    """True for dataclass classes and instances."""
    return dataclasses.is_dataclass(obj)


def walk(obj: Any) -> list[SchemaField]:
    """Describe the fields of a schema class or instance in declaration order."""
    cls = obj if isinstance(obj, type) else type(obj)
    hints = _hints(cls)
    result = []
    for f in dataclasses.fields(cls):
        hint = _unwrap_optional(hints.get(f.name, f.type))
        nested = hint if isinstance(hint, type) and is_schema(hint) else None
        result.append(
            SchemaField(
                name=f.name,
                key=f.metadata.get(KEY) or "",
                default=f.metadata.get(DEFAULT),
                security_alert=f.metadata.get(SECURITY_ALERT),
                hint=hint,
                nested=nested,
            )
        )
    return result


def join(prefix: str, key: str) -> str:
    """Join a dotted path prefix and a segment."""
    return f"{prefix}.{key}" if prefix else key


def to_settings(instance: Any) -> dict[str, Any]:
    """Render a populated tree as nested ``{key: value}`` dicts.

    ``None`` leaves are left out; enums become their value.
    """
    out: dict[str, Any] = {}
    for f in walk(instance):
        value = getattr(instance, f.name)
        if value is None:
            continue
        if f.nested is not None:
            out[f.key] = to_settings(value)
        elif isinstance(value, enum.Enum):
            out[f.key] = value.value
        else:
            out[f.key] = value
    return out
