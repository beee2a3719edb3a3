"""Configuration errors.

Every failure in the load path is one of these. Each carries the operation
that produced it and, where there is one, the underlying exception.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base for configuration errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class ConfigReadError(ConfigError):
    """Source file missing, unreadable, or syntactically malformed."""

    def __init__(self, message: str, **kwargs: object) -> None:
        kwargs.setdefault("code", "read")
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ConfigUnmarshalError(ConfigError):
    """Raw key/value data does not fit the schema."""

    def __init__(self, message: str, **kwargs: object) -> None:
        kwargs.setdefault("code", "unmarshal")
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ConfigWriteError(ConfigError):
    """Writing a config file failed."""

    def __init__(self, message: str, **kwargs: object) -> None:
        kwargs.setdefault("code", "write")
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
