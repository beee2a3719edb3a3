"""Horizon emulator CLI.

Usage:
    horizon start [--config PATH]   Load configuration and start the server
    horizon config <cmd>            Inspect or initialise the configuration
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import horizon.config
import horizon.errors
import horizon.log
import horizon.schema


def _cmd_start(args: list[str]) -> int:
    """Load the configuration and bring up logging."""
    parser = argparse.ArgumentParser(prog="horizon start")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=horizon.config.DEFAULT_PATH,
        help="Path to config file (default: config.ini)",
    )
    opts = parser.parse_args(args)

    tlog = horizon.log.create_temp_logger()
    tlog.info("Starting Horizon emulator, please wait...")

    try:
        horizon.config.create_default_config(opts.config, tlog)
        cfg = horizon.config.load_config(opts.config, tlog)
    except horizon.errors.ConfigError as exc:
        tlog.error("Failed to load configuration: %s", exc, extra={"code": exc.code})
        return 1

    logger = horizon.log.setup_logger(cfg.logging)
    env = cfg.server.environment or horizon.schema.Environment.DEVELOPMENT
    logger.info(
        "Horizon emulator configured",
        extra={"ip": cfg.server.ip, "port": cfg.server.port, "environment": env.value},
    )
    return 0


def _cmd_config(args: list[str]) -> int:
    """Configuration commands."""
    import horizon.config_cli

    return horizon.config_cli.main(args)


def main() -> None:
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        sys.exit(1)

    cmd = args[0]
    rest = args[1:]

    if cmd == "start":
        sys.exit(_cmd_start(rest))
    elif cmd == "config":
        sys.exit(_cmd_config(rest))
    else:
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
