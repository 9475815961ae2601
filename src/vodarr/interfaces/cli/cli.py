"""``vodarr`` console entrypoint: parse flags, load config, run uvicorn."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from vodarr.infrastructure.config import load_config
from vodarr.infrastructure.logging.setup import configure_logging
from vodarr.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7980

# argparse dest -> flat config key understood by load_config()
_OVERRIDE_FLAGS: dict[str, str] = {
    "log_level": "log_level",
    "log_format": "log_format",
    "max_pages": "search_max_pages",
    "concurrency": "search_concurrency_limit",
    "cache_ttl": "cache_ttl_seconds",
    "sources_backend": "sources_backend",
    "sources_dir": "sources_dir",
}


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vodarr",
        description="Federated search over videolist-compatible VOD sources.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help=f"Bind host (env HOST, default {DEFAULT_HOST}).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (env PORT, default {DEFAULT_PORT})."
    )

    files = parser.add_argument_group("config files")
    files.add_argument("--config", type=Path, help="YAML config file.")
    files.add_argument("--dotenv", type=Path, help=".env file with VODARR_* vars.")

    overrides = parser.add_argument_group("overrides (beat YAML and env)")
    overrides.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    overrides.add_argument("--log-format", choices=["json", "console"])
    overrides.add_argument(
        "--max-pages", type=_positive_int, help="Pages fetched per source."
    )
    overrides.add_argument(
        "--concurrency", type=_positive_int, help="Sources searched at once."
    )
    overrides.add_argument(
        "--cache-ttl", type=_positive_int, help="Search cache TTL in seconds."
    )
    overrides.add_argument("--sources-backend", choices=["memory", "diskcache"])
    overrides.add_argument("--sources-dir", help="Diskcache source store directory.")

    return parser.parse_args(argv)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat config overrides for every flag that was given."""
    return {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def start(argv: Iterable[str] | None = None) -> None:
    """Process entrypoint: load config once, then serve the app with it."""
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    host = args.host or os.getenv("HOST", DEFAULT_HOST)
    port = args.port or int(os.getenv("PORT", str(DEFAULT_PORT)))

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )

    log_config = configure_logging(config)
    log.info(
        "vodarr_starting",
        host=host,
        port=port,
        environment=config.environment,
        sources=len(config.sources.entries),
    )

    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
