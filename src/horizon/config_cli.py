"""CLI for the Horizon configuration.

Usage:
    horizon config list                   Show every key with its default
    horizon config get <section.key>      Print effective value
    horizon config show                   Dump full effective config
    horizon config init                   Write config.ini with defaults if missing
    horizon config check                  Report credentials set for the environment

All commands except ``list`` accept ``--path`` (default: config.ini).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import horizon.config
import horizon.errors
import horizon.log
import horizon.schema
import horizon.security

logger = logging.getLogger("horizon.config_cli")


def _print_section(name: str, schema: Any) -> None:
    leaves = [f for f in horizon.schema.walk(schema) if f.nested is None]
    if leaves:
        print(f"[{name}]")
        for f in leaves:
            type_name = getattr(f.hint, "__name__", str(f.hint))
            line = f"  {f.key}: {type_name} = {f.default!r}"
            if f.security_alert is not None:
                line += f"  (alert in {f.security_alert.value})"
            print(line)
        print()
    for f in horizon.schema.walk(schema):
        if f.nested is not None:
            _print_section(horizon.schema.join(name, f.key), f.nested)


def cmd_list() -> int:
    """Print every schema key with its type, default and alert scope."""
    _print_section("", horizon.schema.Config)
    return 0


def _load(path: Path) -> horizon.schema.Config | None:
    try:
        return horizon.config.load_config(path, logger)
    except horizon.errors.ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return None


def cmd_get(key: str, path: Path) -> int:
    """Print the effective value for section.key."""
    parts = key.split(".")
    if len(parts) < 2:
        print(f"Invalid key format: {key!r} (expected section.key)", file=sys.stderr)
        return 1
    config = _load(path)
    if config is None:
        return 1
    value: Any = horizon.schema.to_settings(config)
    for part in parts:
        if not isinstance(value, dict) or part not in value:
            print(f"Unknown key: {key}", file=sys.stderr)
            return 1
        value = value[part]
    if isinstance(value, dict):
        print(f"Unknown key: {key} (is a section)", file=sys.stderr)
        return 1
    print(value)
    return 0


def _print_settings(settings: dict[str, Any], prefix: str = "") -> None:
    scalars = {k: v for k, v in settings.items() if not isinstance(v, dict)}
    if scalars:
        print(f"[{prefix}]")
        for k, v in scalars.items():
            print(f"  {k} = {v!r}")
        print()
    for k, v in settings.items():
        if isinstance(v, dict):
            _print_settings(v, horizon.schema.join(prefix, k))


def cmd_show(path: Path) -> int:
    """Dump the full effective config."""
    config = _load(path)
    if config is None:
        return 1
    _print_settings(horizon.schema.to_settings(config))
    return 0


def cmd_init(path: Path) -> int:
    """Write the default config file unless one exists."""
    try:
        created = horizon.config.create_default_config(path, logger)
    except horizon.errors.ConfigWriteError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if created:
        print(f"Created {path}")
    else:
        print(f"{path} already exists, left unchanged")
    return 0


def cmd_check(path: Path) -> int:
    """Scan the values set in *path* for credentials in their alert environment."""
    try:
        explicit = horizon.config.explicit_config(path)
    except horizon.errors.ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    alerts = horizon.security.check_security_alerts(explicit, logger)
    env = explicit.server.environment
    env_name = env.value if env is not None else "unset"
    if not alerts:
        print(f"No sensitive fields set (environment: {env_name})")
        return 0
    for alert in alerts:
        print(f"ALERT {alert.path} is set (environment: {alert.environment.value})")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``horizon config``."""
    parser = argparse.ArgumentParser(
        prog="horizon config",
        description="Horizon emulator configuration.",
    )
    sub = parser.add_subparsers(dest="subcmd")

    sub.add_parser("list", help="Show every key with its default")

    p_get = sub.add_parser("get", help="Print effective value")
    p_get.add_argument("key", help="section.key")
    p_get.add_argument("--path", type=Path, default=horizon.config.DEFAULT_PATH)

    p_show = sub.add_parser("show", help="Dump full effective config")
    p_show.add_argument("--path", type=Path, default=horizon.config.DEFAULT_PATH)

    p_init = sub.add_parser("init", help="Write default config if missing")
    p_init.add_argument("--path", type=Path, default=horizon.config.DEFAULT_PATH)

    p_check = sub.add_parser("check", help="Report sensitive fields")
    p_check.add_argument("--path", type=Path, default=horizon.config.DEFAULT_PATH)

    args = parser.parse_args(argv)
    horizon.log.create_temp_logger()

    if args.subcmd is None:
        parser.print_help()
        return 1

    if args.subcmd == "list":
        return cmd_list()
    elif args.subcmd == "get":
        return cmd_get(args.key, args.path)
    elif args.subcmd == "show":
        return cmd_show(args.path)
    elif args.subcmd == "init":
        return cmd_init(args.path)
    elif args.subcmd == "check":
        return cmd_check(args.path)
    else:
        parser.print_help()
        return 1
