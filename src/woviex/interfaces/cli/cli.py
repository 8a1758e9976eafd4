from __future__ import annotations

import argparse
import getpass
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from woviex.infrastructure.config import load_config
from woviex.infrastructure.logging.setup import configure_logging
from woviex.infrastructure.security import hash_password
from woviex.interfaces.app import create_app

log = structlog.get_logger(__name__)

# argparse dest -> flat config key understood by load_config()
_OVERRIDE_FLAGS: dict[str, str] = {
    "cache_backend": "cache_backend",
    "cache_dir": "cache_dir",
    "log_level": "log_level",
    "log_format": "log_format",
    "public_base_url": "public_base_url",
    "enforce_origin_whitelist": "enforce_origin_whitelist",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="woviex",
        description="Serve the video resolver, stream proxy and admin API.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help="Bind host (overrides HOST env).")
    server.add_argument("--port", type=int, help="Bind port (overrides PORT env).")

    files = parser.add_argument_group("configuration files")
    files.add_argument("--config", type=Path, help="Path to YAML config file.")
    files.add_argument("--dotenv", type=Path, help="Path to .env file.")

    overrides = parser.add_argument_group("overrides")
    overrides.add_argument(
        "--cache-backend",
        choices=["memory", "diskcache"],
        help="Record store backend.",
    )
    overrides.add_argument("--cache-dir", help="Diskcache directory.")
    overrides.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    overrides.add_argument("--log-format", choices=["json", "console"])
    overrides.add_argument(
        "--public-base-url",
        help="Absolute base used when building /stream links.",
    )
    overrides.add_argument(
        "--enforce-origin-whitelist",
        action="store_true",
        default=None,
        help="Reject admin API calls from origins missing in the whitelist.",
    )

    parser.add_argument(
        "--hash-password",
        action="store_true",
        help="Prompt for a password, print its admin_password_hash and exit.",
    )
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def start(argv: Iterable[str] | None = None) -> int:
    """Process entrypoint: load config once, configure logging, run uvicorn."""
    args = _build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))

    if args.hash_password:
        print(hash_password(getpass.getpass("Admin password: ")))
        return 0

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=_cli_overrides(args),
    )
    log_config = configure_logging(config)

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = args.port or int(os.getenv("PORT", "5000"))
    log.info("woviex_starting", host=host, port=port, environment=config.environment)

    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
