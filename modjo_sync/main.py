#!/usr/bin/env python3
"""
Main entrypoint for the Modjo to Dust transcript sync.

Runs a one-shot batch job that:
1. Exports call transcripts from the Modjo API, page by page
2. Upserts each call as a text document into a Dust data source

Usage:
    export MODJO_API_KEY="..."
    export DUST_API_KEY="..."
    export DUST_WORKSPACE_ID="..."
    export DUST_DATASOURCE_ID="..."
    python -m modjo_sync.main

    # Everything since a given date, or the whole history:
    python -m modjo_sync.main --since 2024-06-01
    python -m modjo_sync.main --all

Environment Variables:
    MODJO_API_KEY: API key for Modjo
    DUST_API_KEY: API key for Dust
    DUST_WORKSPACE_ID: Dust workspace ID
    DUST_DATASOURCE_ID: Dust data source receiving the documents
    MODJO_BASE_URL: (optional) Custom Modjo API base URL
    DUST_API_URL: (optional) Custom Dust API base URL
    MODJO_TRANSCRIPTS_SINCE: (optional) YYYY-MM-DD, default: 2024-01-01.
                             Set to an empty string to sync every call.
    REQUEST_TIMEOUT: (optional) HTTP timeout in seconds, default: 30

Variables may also be set in a .env file in the working directory;
values already present in the environment take precedence.
"""

import argparse
import logging
import os
import sys
from datetime import date
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .dust_store import DustStore
from .modjo_client import ModjoClient
from .pipeline import SyncPipeline
from .publisher import DustPublisher
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPTS_SINCE = "2024-01-01"
DEFAULT_REQUEST_TIMEOUT = "30"

REQUIRED_SETTINGS = {
    "modjo_api_key": "MODJO_API_KEY",
    "dust_api_key": "DUST_API_KEY",
    "dust_workspace_id": "DUST_WORKSPACE_ID",
    "dust_datasource_id": "DUST_DATASOURCE_ID",
}


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_config(environ: Optional[dict] = None) -> dict:
    """Load configuration from environment variables."""
    env = os.environ if environ is None else environ
    return {
        "modjo_api_key": env.get("MODJO_API_KEY"),
        "dust_api_key": env.get("DUST_API_KEY"),
        "dust_workspace_id": env.get("DUST_WORKSPACE_ID"),
        "dust_datasource_id": env.get("DUST_DATASOURCE_ID"),
        "modjo_base_url": env.get("MODJO_BASE_URL") or None,
        "dust_api_url": env.get("DUST_API_URL") or None,
        "transcripts_since": env.get("MODJO_TRANSCRIPTS_SINCE", DEFAULT_TRANSCRIPTS_SINCE),
        "request_timeout": env.get("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
    }


def parse_since(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD start date. Empty or None means no lower bound."""
    if not value:
        return None
    return date.fromisoformat(value)


def parse_timeout(value: str) -> float:
    """Parse a positive HTTP timeout in seconds."""
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return timeout


def validate_config(config: dict) -> bool:
    """Validate required configuration."""
    missing = [env_name for key, env_name in REQUIRED_SETTINGS.items() if not config[key]]
    for env_name in missing:
        logger.error(f"{env_name} environment variable is required (or set it in a .env file)")

    try:
        parse_since(config["transcripts_since"])
    except ValueError:
        logger.error(
            f"Invalid start date {config['transcripts_since']!r}, expected YYYY-MM-DD"
        )
        return False

    try:
        parse_timeout(config["request_timeout"])
    except ValueError:
        logger.error(
            f"Invalid REQUEST_TIMEOUT {config['request_timeout']!r}, expected a positive number of seconds"
        )
        return False

    return not missing


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sync Modjo call transcripts into a Dust data source"
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument(
        "--since",
        metavar="YYYY-MM-DD",
        default=None,
        help="Only sync calls starting on or after this date",
    )
    window.add_argument(
        "--all",
        action="store_true",
        help="Sync every call, ignoring MODJO_TRANSCRIPTS_SINCE",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entrypoint. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    load_dotenv(find_dotenv(usecwd=True))

    config = get_config()
    if args.all:
        config["transcripts_since"] = None
    elif args.since is not None:
        config["transcripts_since"] = args.since

    if not validate_config(config):
        return 1
    since = parse_since(config["transcripts_since"])
    timeout = parse_timeout(config["request_timeout"])

    modjo_client = ModjoClient(
        api_key=config["modjo_api_key"],
        base_url=config["modjo_base_url"],
        timeout=timeout,
    )
    dust_store = DustStore(
        api_key=config["dust_api_key"],
        workspace_id=config["dust_workspace_id"],
        data_source_id=config["dust_datasource_id"],
        base_url=config["dust_api_url"],
        timeout=timeout,
    )
    publisher = DustPublisher(dust_store, RateLimiter())
    pipeline = SyncPipeline(modjo_client, publisher, since=since)

    logger.info("=" * 60)
    logger.info("Modjo -> Dust Transcript Sync")
    logger.info(f"Since: {since or 'all calls'}")
    logger.info(f"Workspace: {config['dust_workspace_id']}")
    logger.info(f"Data source: {config['dust_datasource_id']}")
    logger.info("=" * 60)

    try:
        pipeline.run()
    except Exception:
        logger.exception("An error occurred")
        return 1
    finally:
        modjo_client.close()
        dust_store.close()

    if pipeline.succeeded:
        logger.info("All transcripts processed successfully.")
        return 0
    logger.warning("Sync finished with errors.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
