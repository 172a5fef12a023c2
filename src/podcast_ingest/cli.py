"""Command-line interface for podcast_ingest.

Fetches one feed through ``FeedService`` and prints the requested view as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Callable, Dict, Optional, Sequence, TextIO

from pydantic import ValidationError

from . import __version__, config, logging_setup
from .exceptions import FeedError
from .service import describe_error, FeedService

_LOGGER = logging.getLogger(__name__)

JSON_INDENT = 2

# CLI option dest -> Config field; only options the user actually passed override the file
_CONFIG_OVERRIDES = {
    "feed_url": "feed_url",
    "timeout": "timeout",
    "user_agent": "user_agent",
    "log_level": "log_level",
    "log_file": "log_file",
    "retries": "http_retries",
}


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    """Mutually exclusive selectors for what to print (default: the whole feed)."""
    views = parser.add_mutually_exclusive_group()
    views.add_argument(
        "--episodes", action="store_true", help="Print one page of episode summaries"
    )
    views.add_argument("--episode", metavar="SLUG", help="Print one episode by slug")
    views.add_argument(
        "--people", action="store_true", help="Print contributors aggregated across episodes"
    )
    views.add_argument("--person", metavar="SLUG", help="Print one contributor and their episodes")
    views.add_argument(
        "--search-index", action="store_true", help="Print the client-side search index"
    )
    views.add_argument("--podcast", action="store_true", help="Print show metadata only")

    parser.add_argument("--page", type=int, default=1, help="Page number for --episodes")
    parser.add_argument(
        "--limit", type=int, default=None, help="Page size for --episodes (1-100)"
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "feed_url",
        nargs="?",
        default=None,
        metavar="FEED_URL",
        help="Podcast RSS feed URL (or set PODCAST_FEED_URL / 'rss' in --config)",
    )
    parser.add_argument("--config", default=None, help="Config file (JSON or YAML)")
    parser.add_argument(
        "--refresh", action="store_true", help="Bypass any cached copy and fetch again"
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--user-agent", default=None, help="User-Agent header")
    parser.add_argument(
        "--retries", type=int, default=None, help="Transport-level HTTP retries (default: 0)"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (e.g. DEBUG, INFO)")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument(
        "--version", action="version", version=f"podcast_ingest {__version__}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podcast-ingest",
        description="Fetch a podcast RSS feed and print normalized JSON.",
    )
    _add_common_arguments(parser)
    _add_view_arguments(parser)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and validate CLI arguments.

    Usage errors exit with status 2 through ``argparse``.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.timeout is not None and args.timeout <= 0:
        parser.error(f"--timeout must be positive, got: {args.timeout}")
    if args.retries is not None and args.retries < 0:
        parser.error(f"--retries must be non-negative, got: {args.retries}")
    if args.page < 1:
        parser.error(f"--page must be positive, got: {args.page}")
    if args.limit is not None and args.limit < 1:
        parser.error(f"--limit must be positive, got: {args.limit}")
    if (args.page != 1 or args.limit is not None) and not args.episodes:
        parser.error("--page and --limit require --episodes")
    return args


def _build_config(args: argparse.Namespace) -> config.Config:
    """Merge an optional config file with the options given on the command line."""
    payload: Dict[str, Any] = {}
    if args.config:
        payload.update(config.load_config_file(args.config))
    for dest, field_name in _CONFIG_OVERRIDES.items():
        value = getattr(args, dest)
        if value is None:
            continue
        if field_name == "feed_url":
            # The file may name the feed by its alias
            payload.pop("rss", None)
        payload[field_name] = value
    return config.Config(**payload)


def _render(args: argparse.Namespace, svc: FeedService) -> Any:
    """Run the selected read path and return a JSON-ready value."""
    feed = svc.refresh_feed() if args.refresh else svc.get_feed()

    if args.episodes:
        return svc.list_episodes(page=args.page, limit=args.limit).to_dict()
    if args.episode:
        return svc.get_episode(None, args.episode).to_dict()
    if args.people:
        return [person.to_dict() for person in svc.list_persons(feed)]
    if args.person:
        return svc.get_person_detail(None, args.person).to_dict()
    if args.search_index:
        return [entry.to_dict() for entry in svc.search_index()]
    if args.podcast:
        return feed.podcast.to_dict()
    return feed.to_dict()


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    apply_log_level_fn: Optional[Callable[[str, Optional[str]], None]] = None,
    service_factory: Optional[Callable[[config.Config], FeedService]] = None,
    stdout: Optional[TextIO] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Entry point for the CLI; returns an exit status code."""
    log = logger or _LOGGER
    out = stdout or sys.stdout
    if apply_log_level_fn is None:
        apply_log_level_fn = logging_setup.apply_log_level
    if service_factory is None:
        service_factory = FeedService

    args = parse_args(argv)

    try:
        cfg = _build_config(args)
    except ValidationError as exc:
        log.error("Invalid configuration: %s", exc)
        return 1
    except ValueError as exc:
        log.error("Error: %s", exc)
        return 1

    apply_log_level_fn(cfg.log_level, cfg.log_file)

    svc = service_factory(cfg)
    try:
        payload = _render(args, svc)
    except FeedError as exc:
        log.error(describe_error(exc))
        return 1

    json.dump(payload, out, indent=JSON_INDENT, ensure_ascii=False)
    out.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    raise SystemExit(main())
