from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .logging_utils import configure_logging
from .lookup_store import SQLiteLookupStore
from .models import MatchStatus, ResolutionResult
from .pipeline import DEFAULT_MAX_WORKERS, EventResolver
from .sportsdb import LookupCache, SportsDBClient

LOGGER = logging.getLogger(__name__)

SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"
DIM_COLOR = "dim"

_STATUS_STYLES = {
    MatchStatus.MATCHED: f"[{SUCCESS_COLOR}]✓ matched[/{SUCCESS_COLOR}]",
    MatchStatus.NOT_FOUND: f"[{WARNING_COLOR}]⊘ not found[/{WARNING_COLOR}]",
    MatchStatus.CANCELLED: f"[{ERROR_COLOR}]✗ cancelled[/{ERROR_COLOR}]",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matchday",
        description="Resolve sports video filenames to TheSportsDB events.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Path to the YAML configuration file")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", parents=[common], help="Resolve one or more filenames to events")
    resolve.add_argument("files", nargs="+", metavar="FILE", help="Filenames (or paths) to resolve")
    resolve.add_argument("--series", help="Series/league folder name (defaults to each file's parent folder)")
    resolve.add_argument("--league-id", help="Skip league resolution and use this TheSportsDB league id")
    resolve.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Concurrent resolutions (default: {DEFAULT_MAX_WORKERS})",
    )

    league = subparsers.add_parser("league", parents=[common], help="Resolve a series/folder name to a league")
    league.add_argument("name", help="Series or league name")
    return parser


def build_resolver(config: AppConfig) -> EventResolver:
    settings = config.sportsdb
    client = SportsDBClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        cache=LookupCache(ttl_seconds=settings.cache_ttl_seconds),
    )
    lookup_store = SQLiteLookupStore(config.lookup_store.path) if config.lookup_store.path else None
    return EventResolver(
        client,
        lookup_store=lookup_store,
        league_mappings=config.league_mappings,
        builtin_leagues=config.builtin_leagues,
    )


def _series_for(file: str, explicit: Optional[str]) -> Optional[str]:
    if explicit:
        return explicit
    parent = Path(file).parent.name
    return parent or None


def render_results(console: Console, results: Sequence[ResolutionResult]) -> None:
    table = Table(title="Resolution Results", show_header=True, header_style="bold cyan")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Event")
    table.add_column("Date", justify="right")
    table.add_column("Event ID", justify="right")
    table.add_column("Path", style=DIM_COLOR)

    for result in results:
        query = result.query
        event = result.event
        table.add_row(
            query.filename if query else "-",
            _STATUS_STYLES[result.status],
            event.title if event else "-",
            event.date.isoformat() if event and event.date else "-",
            event.id if event else "-",
            result.path.value if result.path else "-",
        )
    console.print(table)


def _run_resolve(args: argparse.Namespace, resolver: EventResolver, console: Console) -> int:
    groups: dict[Optional[str], List[int]] = {}
    for index, file in enumerate(args.files):
        groups.setdefault(_series_for(file, args.series), []).append(index)

    results: List[Optional[ResolutionResult]] = [None] * len(args.files)
    for series_name, indexes in groups.items():
        batch = resolver.resolve_many(
            [args.files[index] for index in indexes],
            series_name,
            league_id=args.league_id,
            max_workers=args.workers,
        )
        for index, result in zip(indexes, batch):
            results[index] = result

    resolved = [result for result in results if result is not None]
    render_results(console, resolved)
    return 0 if all(result.found for result in resolved) else 1


def _run_league(args: argparse.Namespace, resolver: EventResolver, console: Console) -> int:
    resolved = resolver.leagues.resolve(args.name)
    if resolved is None:
        console.print(f"[{WARNING_COLOR}]No league found for {args.name!r}[/{WARNING_COLOR}]")
        return 1

    table = Table(title="League", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", args.name)
    table.add_row("League ID", resolved.league_id)
    table.add_row("Source", resolved.source.value)
    if resolved.name:
        table.add_row("Canonical Name", resolved.name)
    console.print(table)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "resolve" and args.workers < 1:
        parser.error("--workers must be at least 1")
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        LOGGER.error("Failed to load configuration: %s", exc)
        return 2

    console = Console()
    resolver = build_resolver(config)
    try:
        if args.command == "resolve":
            return _run_resolve(args, resolver, console)
        return _run_league(args, resolver, console)
    finally:
        resolver.client.close()
        if isinstance(resolver.lookup_store, SQLiteLookupStore):
            resolver.lookup_store.close()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
