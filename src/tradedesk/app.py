from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import load_settings
from .di import build_container
from .logging import configure_logging
from .runtime import run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point supporting both server and CLI modes.

    - `tradedesk` or `tradedesk serve`: run the HTTP API
    - `tradedesk <typer-subcommand>`: run CLI mode (e.g. `tradedesk balances-show ...`)
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        return _run_server_mode([])

    if argv[0] == "serve":
        return _run_server_mode(argv[1:])

    return _run_cli_mode(argv)


def _run_server_mode(argv: list[str]) -> int:
    """Run the dashboard HTTP API."""
    parser = argparse.ArgumentParser(
        prog="tradedesk serve", description="Run the dashboard HTTP API"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (default: TRADEDESK_CONFIG or ./config.yml)",
    )

    args = parser.parse_args(argv)
    configure_logging(Path("logs"))

    settings = load_settings(args.config)
    container = build_container(settings)

    logger.info("tradedesk server booting")
    try:
        asyncio.run(run(container))
    except KeyboardInterrupt:
        logger.info("interrupted")
    logger.info("tradedesk server exit")

    return 0


def _run_cli_mode(argv: list[str]) -> int:
    """Run in CLI mode using Typer."""
    try:
        configure_logging(Path("logs"))

        from .cli import run_cli
        run_cli(argv)
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0
    except Exception as e:
        logger.error("CLI error: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
