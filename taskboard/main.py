"""
Process entry point: read settings, connect to storage, serve HTTP.
"""

from __future__ import annotations

import argparse
import logging
import re

import uvicorn
from pydantic import ValidationError

from taskboard.app import create_app
from taskboard.config import LOG_LEVELS, get_settings
from taskboard.dependencies import get_task_store
from taskboard.store import StoreError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(name)s %(levelname)s %(asctime)s %(message)s"
LOG_DATEFMT = "%m/%d/%Y %I:%M:%S %p"

_URI_CREDENTIALS = re.compile(r"(?<=://)([^:/@]+):([^@]*)@")


def mask_uri(uri: str) -> str:
    """Hide the password part of a connection string for logging."""
    return _URI_CREDENTIALS.sub(r"\1:****@", uri)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Task board HTTP backend")
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Address to bind (defaults to HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (defaults to PORT or 8080)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (defaults to LOG_LEVEL or INFO)",
    )
    args = parser.parse_args(argv)
    if args.port is not None and not 1 <= args.port <= 65535:
        parser.error("--port must be between 1 and 65535")
    return args


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or "INFO").upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    log_level = (args.log_level or settings.log_level).upper()
    logging.getLogger().setLevel(log_level)
    host = args.host or settings.host
    port = args.port if args.port is not None else settings.port

    if settings.use_in_memory_backends:
        logger.info("Using in-memory task store")
    else:
        logger.info("Connecting to MongoDB at: %s", mask_uri(settings.mongodb_uri))

    try:
        store = get_task_store()
        store.ping()
    except (StoreError, ValueError):
        logger.exception("Failed to connect to the task store")
        return 1
    logger.info("Connected to task store successfully")

    logger.info("Starting server on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
