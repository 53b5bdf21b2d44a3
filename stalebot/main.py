"""stalebot entry point.

Single run: load config, walk open issues and PRs once, exit.
Usage: stalebot [--config config.yaml] [--dry-run] [--check].
"""

import argparse
import logging
import sys
from pathlib import Path

from stalebot.adapters.github import GitHubAdapter
from stalebot.config import ConfigurationError, load_config
from stalebot.logging import StaleBotLogging
from stalebot.services.stale_processor import StaleProcessor


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="stalebot",
        description="Mark inactive issues and PRs as stale and close them after a grace period",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would change without touching the repository",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: one stale pass over the configured repository."""
    args = parse_args(argv)
    StaleBotLogging.bootstrap()
    log = logging.getLogger("stalebot.main")

    # A missing config.yaml is fine: the run is then configured from the environment
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return 1

    stale = config.stale
    if args.dry_run:
        stale = stale.model_copy(update={"dry_run": True})

    if args.check:
        print("Config OK:", stale.repository, "dry-run" if stale.dry_run else "live")
        return 0

    StaleBotLogging(config.logging).setup()
    log.info(
        "stalebot started | repo=%s | stale=%sd close=%sd | operations=%s | dry_run=%s",
        stale.repository,
        stale.days_before_stale,
        stale.days_before_close,
        stale.operations_per_run,
        stale.dry_run,
    )

    adapter = GitHubAdapter(
        token=config.github_token_resolved,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    )
    try:
        remaining = StaleProcessor(adapter, stale).run()
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    log.info("Done, %s operations left", remaining)
    return 0


if __name__ == "__main__":
    sys.exit(main())
