"""``cinestream`` console script: layered config, logging, then uvicorn."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from cinestream.infrastructure.config import load_config
from cinestream.infrastructure.config.load import FLAT_KEYS
from cinestream.infrastructure.logging.setup import configure_logging
from cinestream.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7000

# flag -> (flat config key, argparse type, choices, help)
_OVERRIDE_FLAGS: dict[str, tuple[str, type, Sequence[str] | None, str]] = {
    "--sources": (
        "sources_enabled",
        str,
        None,
        "Comma separated source names to enable (default: all).",
    ),
    "--http-timeout": (
        "http_timeout_seconds",
        float,
        None,
        "Per-request fetch timeout in seconds.",
    ),
    "--store-max-age": (
        "store_max_age_seconds",
        float,
        None,
        "Age in seconds after which stored identifiers are swept.",
    ),
    "--log-level": (
        "log_level",
        str,
        ("DEBUG", "INFO", "WARNING", "ERROR"),
        "Log level.",
    ),
    "--log-format": ("log_format", str, ("json", "console"), "Log output format."),
}


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cinestream",
        description="Stremio addon serving streams scraped from movie sites.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help=f"Bind host (env HOST, default {DEFAULT_HOST}).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (env PORT, default {DEFAULT_PORT})."
    )

    files = parser.add_argument_group("config files")
    files.add_argument("--config", type=Path, help="YAML config file.")
    files.add_argument("--dotenv", type=Path, help=".env file (never overrides env).")

    overrides = parser.add_argument_group("overrides (win over YAML and env)")
    for flag, (dest, kind, choices, help_text) in _OVERRIDE_FLAGS.items():
        overrides.add_argument(
            flag, dest=dest, type=kind, choices=choices, help=help_text
        )

    return parser.parse_args(list(argv) if argv is not None else None)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat-key overrides for the flags that were actually given."""
    overrides: dict[str, Any] = {}
    for key in FLAT_KEYS:
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    return overrides


def _bind_address(args: argparse.Namespace) -> tuple[str, int]:
    host = args.host or os.getenv("HOST") or DEFAULT_HOST
    port = args.port or int(os.getenv("PORT") or DEFAULT_PORT)
    return host, port


def start(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )
    log_config = configure_logging(config)

    host, port = _bind_address(args)
    log.info(
        "cinestream_starting",
        host=host,
        port=port,
        environment=config.environment,
    )
    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
