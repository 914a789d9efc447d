"""
CLI entry point for DDNS Relay.

This module provides the command-line interface for starting the server.
"""

from __future__ import annotations

import sys

import uvicorn

from ddns_relay.config import ConfigValidationError, load_config, parse_args
from ddns_relay.logging_config import build_uvicorn_log_config, setup_logging
from ddns_relay.server import set_preloaded_config


def main() -> None:
    """
    Start the DDNS Relay server.

    Parse command-line arguments, load configuration, and run the server.
    """
    args = parse_args()
    try:
        config = load_config(args)
    except ConfigValidationError as e:
        print(e, file=sys.stderr)  # noqa: T201
        sys.exit(1)

    setup_logging(config.logging)

    # Hand the configuration to the server module so the app does not
    # parse the command line again on startup.
    set_preloaded_config(config)

    uvicorn.run(
        "ddns_relay.server:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        access_log=True,
        log_config=build_uvicorn_log_config(config.logging),
    )


if __name__ == "__main__":
    main()
