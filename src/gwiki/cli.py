"""Command line entry point: serve the wiki over HTTP."""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from gwiki.config import Settings
from gwiki.core.templates import TemplateBundleError
from gwiki.main import create_app

logger = logging.getLogger(__name__)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts; an empty host means all interfaces.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid listen address {address!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    """Build the argument parser with defaults taken from the environment."""
    parser = argparse.ArgumentParser(prog="gwiki", description="Markdown wiki backed by git")
    parser.add_argument(
        "-dir",
        "--dir",
        dest="data_dir",
        type=Path,
        default=defaults.data_dir,
        help="directory where the markdown files are stored",
    )
    parser.add_argument(
        "-log-limit",
        "--log-limit",
        dest="log_limit",
        type=int,
        default=defaults.log_limit,
        help="log depth limit",
    )
    parser.add_argument(
        "-local",
        "--local",
        default=defaults.local,
        help="serve as webserver, example: 0.0.0.0:8000",
    )
    parser.add_argument(
        "-http",
        "--http",
        default=defaults.http,
        help="serve as webserver, example: 0.0.0.0:8000",
    )
    parser.add_argument(
        "-title",
        "--title",
        dest="app_title",
        default=defaults.app_title,
        help="title to display",
    )
    parser.add_argument(
        "-debug",
        "--debug",
        action="store_true",
        default=defaults.debug,
        help="verbose logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    defaults = Settings()
    args = build_parser(defaults).parse_args(argv)
    settings = defaults.model_copy(update=vars(args))

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    address = settings.address
    if not address:
        return 0
    try:
        host, port = parse_address(address)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    if not settings.data_dir.exists():
        logger.warning("The specified directory (%r) does not exist!", str(settings.data_dir))

    try:
        app = create_app(settings)
    except TemplateBundleError as e:
        logger.critical("%s", e)
        return 1

    logger.info("Start listening on %s.", address)
    uvicorn.run(app, host=host, port=port, log_level="debug" if settings.debug else "info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
