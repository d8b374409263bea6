"""
Command line entry point.

Every flag falls back to an environment variable of the same meaning
(PORT, USERNAME, PASSWORD, REALM, BUCKET, PREFIX, MAX_AGE, VERBOSE,
INDEX), then to its default. Flags win over the environment.

Usage:
    s3gateway --bucket my-site --prefix public --port 8080
    BUCKET=my-site USERNAME=admin PASSWORD=secret s3gateway
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvicorn
from pydantic import ValidationError

from .config.settings import Settings
from .infrastructure.storage.client import StorageError
from .main import configure_logging, create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Defaults are None so an omitted flag leaves the value to the
    environment; the real defaults live on Settings.
    """
    parser = argparse.ArgumentParser(
        prog="s3gateway",
        description="Serve the contents of an S3 bucket over HTTP, optionally behind Basic auth",
    )
    parser.add_argument("--port", default=None, help="port to run on [$PORT, default 8080]")
    parser.add_argument("--username", default=None, help="the username to prompt for [$USERNAME]")
    parser.add_argument("--password", default=None, help="the password to prompt for [$PASSWORD]")
    parser.add_argument("--realm", default=None, help="the challenge realm [$REALM, default Realm]")
    parser.add_argument("--bucket", default=None, help="the name of the s3 bucket to serve from [$BUCKET]")
    parser.add_argument(
        "--prefix",
        default=None,
        help="the optional prefix to serve from e.g. s3://bucket/prefix/... [$PREFIX]",
    )
    parser.add_argument(
        "--max-age",
        dest="max_age",
        type=int,
        default=None,
        help="the cache-control header; max-age [$MAX_AGE, default 90]",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="enable enhanced logging [$VERBOSE]",
    )
    parser.add_argument(
        "--index-file",
        dest="index_file",
        default=None,
        help="file to search for indexes [$INDEX, default index.html]",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Merge parsed flags over environment settings."""
    overrides = {name: value for name, value in vars(args).items() if value is not None}
    return Settings(**overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse flags, build the app and serve it until interrupted.

    Returns the process exit code. Startup failures (invalid settings,
    no storage credentials) return 1 before anything listens; a port
    that can't be bound makes uvicorn exit non-zero itself.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"ERROR: invalid configuration\n{e}", file=sys.stderr)
        return 1

    configure_logging(settings)

    try:
        app = create_app(settings)
    except StorageError as e:
        logger.error("Failed to create object store: %s", e)
        return 1

    if settings.verbose:
        logger.info("starting server on port %s", settings.port)

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.bind_port,
        log_level=settings.log_level.lower(),
    )
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
