"""Flag credentials that are set while running in a sensitive environment.

Fields opt in with ``security_alert=<Environment>`` in their metadata. A
field alerts when its scope equals the active environment and its value is
not the zero value for its type. Findings are logged, never raised.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

import horizon.schema

ALERT_MESSAGE = "Security Alert: Sensitive data detected in configuration"


@dataclasses.dataclass(frozen=True)
class SecurityAlert:
    field: str
    path: str
    environment: horizon.schema.Environment


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if horizon.schema.is_schema(value):
        return all(
            _is_zero(getattr(value, f.name)) for f in horizon.schema.walk(value)
        )
    return not value


def scan(
    tree: Any,
    environment: horizon.schema.Environment | None,
    logger: logging.Logger,
    prefix: str = "",
) -> list[SecurityAlert]:
    """Walk *tree* depth-first and report populated fields scoped to *environment*.

    Non-schema values (including ``None``) produce nothing.
    """
    if tree is None or isinstance(tree, type) or not horizon.schema.is_schema(tree):
        return []

    alerts: list[SecurityAlert] = []
    for f in horizon.schema.walk(tree):
        value = getattr(tree, f.name)
        path = horizon.schema.join(prefix, f.key)
        if (
            f.security_alert is not None
            and f.security_alert is environment
            and not _is_zero(value)
        ):
            alert = SecurityAlert(field=f.name, path=path, environment=environment)
            logger.warning(
                ALERT_MESSAGE,
                extra={
                    "field": alert.field,
                    "path": alert.path,
                    "environment": alert.environment.value,
                },
            )
            alerts.append(alert)
        if horizon.schema.is_schema(value) and not isinstance(value, type):
            alerts.extend(scan(value, environment, logger, path))
    return alerts


def check_security_alerts(
    config: horizon.schema.Config, logger: logging.Logger
) -> list[SecurityAlert]:
    """Scan *config* against its own declared server environment."""
    return scan(config, config.server.environment, logger)
