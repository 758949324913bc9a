"""End-to-end resolution: filename and folder name in, event out."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import PurePath
from typing import List, Optional

from .abbreviations import expand_abbreviations
from .cancellation import CancellationToken, OperationCancelled, check_cancelled
from .leagues import LeagueEntry, LeagueMapping, LeagueResolver
from .logging_utils import render_fields_block
from .lookup_store import LookupStore
from .matcher import EventMatcher
from .metadata import (
    build_episode_metadata,
    build_series_metadata,
    event_images,
    event_search_results,
    league_search_results,
)
from .models import EpisodeMetadata, RemoteImage, RemoteSearchResult, ResolutionQuery, ResolutionResult, SeriesMetadata
from .normalizer import clean_filename
from .sportsdb.client import SportsDBClient, SportsDBError

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class EventResolver:
    """Resolve sports video filenames to TheSportsDB events.

    Example:
        with SportsDBClient() as client:
            resolver = EventResolver(client)
            result = resolver.resolve("2026-01-22-EDM-PIT.mp4", series_name="NHL")
            if result.found:
                print(result.event.title)
    """

    def __init__(
        self,
        client: SportsDBClient,
        lookup_store: Optional[LookupStore] = None,
        league_mappings: Sequence[LeagueMapping] = (),
        builtin_leagues: Optional[Sequence[LeagueEntry]] = None,
    ) -> None:
        self.client = client
        self.lookup_store = lookup_store
        self.leagues = LeagueResolver(
            league_mappings,
            builtin=builtin_leagues,
            lookup_store=lookup_store,
            client=client,
        )
        self.matcher = EventMatcher(client)

    def build_query(
        self,
        filename: str,
        series_name: Optional[str] = None,
        league_id: Optional[str] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> ResolutionQuery:
        """Derive the matcher input for ``filename``.

        An explicit ``league_id`` skips league resolution for ``series_name``.
        """
        if league_id is None:
            league_id = self.leagues.resolve_league_id(series_name, cancel)
        cleaned = clean_filename(filename, series_name)
        expanded = expand_abbreviations(cleaned.title, league_id, self.lookup_store)
        query = ResolutionQuery(
            filename=PurePath(filename).name,
            clean_title=cleaned.title,
            expanded_title=expanded,
            series_name=series_name,
            date=cleaned.date,
            league_id=league_id,
            tag=cleaned.tag,
        )
        LOGGER.debug(
            render_fields_block(
                "Resolution Query",
                {
                    "Filename": query.filename,
                    "Series": series_name,
                    "Clean Title": query.clean_title,
                    "Expanded Title": query.expanded_title,
                    "Date": query.date,
                    "League ID": league_id,
                    "Tag": query.tag,
                },
            )
        )
        return query

    def resolve(
        self,
        filename: str,
        series_name: Optional[str] = None,
        *,
        league_id: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ResolutionResult:
        query: Optional[ResolutionQuery] = None
        try:
            query = self.build_query(filename, series_name, league_id, cancel=cancel)
            return self.matcher.match(query, cancel)
        except OperationCancelled:
            LOGGER.info("Resolution of %s cancelled", filename)
            return ResolutionResult.cancelled_for(query)

    def resolve_episode(
        self,
        filename: str,
        series_name: Optional[str] = None,
        *,
        league_id: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[EpisodeMetadata]:
        result = self.resolve(filename, series_name, league_id=league_id, cancel=cancel)
        if not result.found or result.event is None:
            return None
        return build_episode_metadata(result.event, result.query.tag if result.query else None)

    def resolve_many(
        self,
        filenames: Sequence[str],
        series_name: Optional[str] = None,
        *,
        league_id: Optional[str] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cancel: Optional[CancellationToken] = None,
    ) -> List[ResolutionResult]:
        """Resolve ``filenames`` concurrently; results keep the input order."""
        if not filenames:
            return []
        if league_id is None and series_name:
            try:
                league_id = self.leagues.resolve_league_id(series_name, cancel)
            except OperationCancelled:
                return [ResolutionResult.cancelled_for() for _ in filenames]

        workers = max(1, min(max_workers, len(filenames)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="matchday") as executor:
            futures = [
                executor.submit(self.resolve, filename, series_name, league_id=league_id, cancel=cancel)
                for filename in filenames
            ]
            return [future.result() for future in futures]

    def search_series(
        self, name: str, cancel: Optional[CancellationToken] = None
    ) -> List[RemoteSearchResult]:
        try:
            leagues = self.client.search_leagues(name, cancel)
        except SportsDBError as exc:
            LOGGER.warning("League search for %r failed: %s", name, exc)
            return []
        return league_search_results(leagues)

    def search_episodes(
        self, name: str, cancel: Optional[CancellationToken] = None
    ) -> List[RemoteSearchResult]:
        try:
            events = self.client.search_events(name, cancel)
        except SportsDBError as exc:
            LOGGER.warning("Event search for %r failed: %s", name, exc)
            return []
        return event_search_results(events)

    def get_series_metadata(
        self,
        name: str,
        league_id: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[SeriesMetadata]:
        league_id = league_id or self.leagues.resolve_league_id(name, cancel)
        if not league_id:
            return None
        try:
            league = self.client.get_league(league_id, cancel)
        except SportsDBError as exc:
            LOGGER.warning("League lookup for %s failed: %s", league_id, exc)
            return None
        if league is None:
            return None
        return build_series_metadata(league)

    def get_event_images(
        self, event_id: str, cancel: Optional[CancellationToken] = None
    ) -> List[RemoteImage]:
        check_cancelled(cancel)
        try:
            event = self.client.get_event(event_id, cancel)
        except SportsDBError as exc:
            LOGGER.warning("Event lookup for %s failed: %s", event_id, exc)
            return []
        return event_images(event) if event is not None else []


__all__ = ["DEFAULT_MAX_WORKERS", "EventResolver"]
