"""Event selection for a resolution query.

The matcher walks an ordered list of tiers and stops at the first one that
returns a candidate:

1. direct search: free-text search, canonical title equality
2. team swap: the same search with the two sides reversed
3. day listing: events on ``date``, ``date + 1`` and ``date - 1``

A tier that hits an upstream error logs it and yields nothing, so the next
tier still runs. Cancellation is never swallowed.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from .abbreviations import split_matchup
from .cancellation import CancellationToken, check_cancelled
from .logging_utils import render_fields_block
from .models import MatchPath, ResolutionQuery, ResolutionResult
from .sportsdb.client import SportsDBClient, SportsDBError
from .sportsdb.models import Event, Team
from .utils import normalize_token

LOGGER = logging.getLogger(__name__)

# Offsets tried by the day-listing tier, in order.
DAY_OFFSETS: tuple[int, ...] = (0, 1, -1)
DATE_WINDOW_DAYS = 1


@dataclass(frozen=True, slots=True)
class Candidate:
    event: Event
    path: MatchPath


@dataclass(slots=True)
class MatchContext:
    """State scoped to a single :meth:`EventMatcher.match` call."""

    query: ResolutionQuery
    cancel: Optional[CancellationToken] = None
    teams: dict[str, Optional[Team]] = field(default_factory=dict)


Tier = Callable[[MatchContext], Optional[Candidate]]


def _league_allows(event: Event, league_id: Optional[str]) -> bool:
    # Events without a league id cannot be filtered and are kept.
    if not league_id or not event.league_id:
        return True
    return event.league_id == league_id


def _within_days(event: Event, target: dt.date, days: int) -> bool:
    if event.date is None:
        return False
    return abs((event.date - target).days) <= days


def select_exact_match(
    events: Sequence[Event],
    text: str,
    *,
    league_id: Optional[str] = None,
    date: Optional[dt.date] = None,
) -> tuple[Optional[Event], Optional[str]]:
    """Pick the first event whose canonical title equals ``text``.

    Returns the event and a variant label: ``"any"`` without a date,
    ``"exact"`` for a same-day match and ``"window"`` for one within a day
    either side. ``(None, None)`` when nothing qualifies.
    """
    target = normalize_token(text)
    if not target:
        return None, None
    candidates = [
        event
        for event in events
        if normalize_token(event.title) == target and _league_allows(event, league_id)
    ]
    if not candidates:
        return None, None
    if date is None:
        return candidates[0], "any"
    for event in candidates:
        if event.date == date:
            return event, "exact"
    for event in candidates:
        if _within_days(event, date, DATE_WINDOW_DAYS):
            return event, "window"
    return None, None


def _is_prefix(part: str, name: Optional[str]) -> bool:
    if not part or not name:
        return False
    return name.casefold().startswith(part.casefold())


class EventMatcher:
    """Select at most one event for a :class:`ResolutionQuery`."""

    def __init__(self, client: SportsDBClient) -> None:
        self._client = client

    @property
    def tiers(self) -> list[Tier]:
        return [self._direct_search, self._team_swap, self._day_listing]

    def match(self, query: ResolutionQuery, cancel: Optional[CancellationToken] = None) -> ResolutionResult:
        """Run the tiers for ``query`` and return the first match, or ``not_found``.

        Raises:
            OperationCancelled: If ``cancel`` is set before or during a remote call
        """
        context = MatchContext(query=query, cancel=cancel)
        for tier in self.tiers:
            check_cancelled(cancel)
            candidate = tier(context)
            if candidate is not None:
                LOGGER.info(
                    render_fields_block(
                        "Event Matched",
                        {
                            "Filename": query.filename,
                            "Query": query.expanded_title,
                            "Event": candidate.event.title,
                            "Event ID": candidate.event.id,
                            "Event Date": candidate.event.date,
                            "Path": candidate.path.value,
                        },
                    )
                )
                return ResolutionResult.matched(query, candidate.event, candidate.path)

        LOGGER.info(
            render_fields_block(
                "No Event Matched",
                {
                    "Filename": query.filename,
                    "Query": query.expanded_title,
                    "Date": query.date,
                    "League ID": query.league_id,
                },
            )
        )
        return ResolutionResult.not_found(query)

    # Upstream calls

    def _search(self, context: MatchContext, text: str) -> list[Event]:
        try:
            return self._client.search_events(text, context.cancel)
        except SportsDBError as exc:
            LOGGER.warning("Event search for %r failed: %s", text, exc)
            return []

    def _events_on_day(self, context: MatchContext, day: dt.date) -> list[Event]:
        try:
            return self._client.events_on_day(day, context.query.league_id, context.cancel)
        except SportsDBError as exc:
            LOGGER.warning("Event listing for %s failed: %s", day.isoformat(), exc)
            return []

    def _team(self, context: MatchContext, team_id: Optional[str]) -> Optional[Team]:
        if not team_id:
            return None
        if team_id in context.teams:
            return context.teams[team_id]
        try:
            team = self._client.get_team(team_id, context.cancel)
        except SportsDBError as exc:
            LOGGER.warning("Team lookup for %s failed: %s", team_id, exc)
            team = None
        context.teams[team_id] = team
        return team

    # Tiers

    def _search_titles(
        self,
        context: MatchContext,
        titles: Sequence[str],
        exact_path: MatchPath,
        window_path: MatchPath,
    ) -> Optional[Candidate]:
        query = context.query
        for text in titles:
            events = self._search(context, text)
            if not events:
                continue
            event, variant = select_exact_match(events, text, league_id=query.league_id, date=query.date)
            if event is None:
                continue
            if variant == "any":
                return Candidate(event, MatchPath.DIRECT)
            return Candidate(event, exact_path if variant == "exact" else window_path)
        return None

    def _direct_search(self, context: MatchContext) -> Optional[Candidate]:
        return self._search_titles(
            context,
            context.query.search_titles,
            MatchPath.DIRECT_EXACT_DATE,
            MatchPath.DIRECT_DATE_WINDOW,
        )

    def _team_swap(self, context: MatchContext) -> Optional[Candidate]:
        if context.query.date is None:
            return None
        swapped: list[str] = []
        for title in context.query.search_titles:
            parts = split_matchup(title)
            if parts is None:
                continue
            text = f"{parts[1]} vs {parts[0]}"
            if text not in swapped:
                swapped.append(text)
        if not swapped:
            return None
        LOGGER.debug("Retrying search with teams swapped: %s", swapped)
        return self._search_titles(
            context,
            swapped,
            MatchPath.TEAM_SWAP_EXACT_DATE,
            MatchPath.TEAM_SWAP_DATE_WINDOW,
        )

    def _day_listing(self, context: MatchContext) -> Optional[Candidate]:
        query = context.query
        if query.date is None:
            return None
        for offset in DAY_OFFSETS:
            day = query.date + dt.timedelta(days=offset)
            events = self._events_on_day(context, day)
            LOGGER.debug("Day listing %s returned %d event(s)", day.isoformat(), len(events))
            if not events:
                continue
            candidate = self._accept_from_day(context, events)
            if candidate is not None:
                return candidate
        return None

    def _accept_from_day(self, context: MatchContext, events: Sequence[Event]) -> Optional[Candidate]:
        query = context.query
        if len(events) == 1 and query.league_id:
            return Candidate(events[0], MatchPath.DAY_SINGLE_EVENT)

        needles = [title.casefold() for title in query.search_titles]
        for event in events:
            title = event.title.casefold()
            if any(needle in title for needle in needles):
                return Candidate(event, MatchPath.DAY_TITLE_CONTAINS)

        matchups: list[tuple[str, str]] = []
        for title in (query.clean_title, query.expanded_title):
            parts = split_matchup(title)
            if parts is not None and parts not in matchups:
                matchups.append(parts)
        if not matchups:
            return None

        for event in events:
            if any(self._parts_prefix_teams(event, parts) for parts in matchups):
                return Candidate(event, MatchPath.DAY_TEAM_PREFIX)

        for event in events:
            check_cancelled(context.cancel)
            if any(self._parts_match_team_records(context, event, parts) for parts in matchups):
                return Candidate(event, MatchPath.DAY_TEAM_RECORD)
        return None

    @staticmethod
    def _parts_prefix_teams(event: Event, parts: tuple[str, str]) -> bool:
        return all(_is_prefix(part, event.home_team) or _is_prefix(part, event.away_team) for part in parts)

    def _parts_match_team_records(self, context: MatchContext, event: Event, parts: tuple[str, str]) -> bool:
        for part in parts:
            if _is_prefix(part, event.home_team) or _is_prefix(part, event.away_team):
                continue
            if not any(
                self._part_matches_team(part, self._team(context, team_id))
                for team_id in (event.home_team_id, event.away_team_id)
            ):
                return False
        return True

    @staticmethod
    def _part_matches_team(part: str, team: Optional[Team]) -> bool:
        if team is None:
            return False
        if team.short_code and team.short_code.casefold() == part.casefold():
            return True
        return _is_prefix(part, team.name)


__all__ = ["Candidate", "EventMatcher", "MatchContext", "select_exact_match"]
