"""Run the pylazarillo server: ``python -m pylazarillo``."""

from __future__ import annotations

import argparse
import logging
import sys

from aiohttp import web

from pylazarillo.config import LazarilloConfig
from pylazarillo.exceptions import LazarilloConfigError
from pylazarillo.server import create_app


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Guided walking navigation server")
    parser.add_argument("--host", default=None, help="Bind address (default: LAZARILLO_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 3001)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level",
    )
    return parser.parse_args(argv)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # Common noisy libs
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.log_level)

    overrides: dict[str, object] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    config = LazarilloConfig.from_env(**overrides)
    try:
        config.validate()
    except LazarilloConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    logging.getLogger(__name__).info("Serving on %s:%d (city: %s)", config.host, config.port, config.city)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
