from __future__ import annotations

import datetime as dt
from typing import Any

import pytest

from matchday.cancellation import CancellationToken, check_cancelled
from matchday.sportsdb.client import SportsDBError
from matchday.sportsdb.models import Event, League, Team


def make_event(event_id: str, title: str, **fields: Any) -> Event:
    return Event.model_validate({"id": event_id, "title": title, **fields})


def make_team(team_id: str, name: str, **fields: Any) -> Team:
    return Team.model_validate({"id": team_id, "name": name, **fields})


def make_league(league_id: str, name: str, **fields: Any) -> League:
    return League.model_validate({"id": league_id, "name": name, **fields})


class FakeClient:
    """In-memory stand-in for SportsDBClient that records every call.

    ``failures`` holds call keys (e.g. ``("search", "EDM vs PIT")``) that raise
    :class:`SportsDBError`; ``cancel_on`` holds a key that cancels the token
    passed with that call before answering.
    """

    def __init__(
        self,
        *,
        searches: dict[str, list[Event]] | None = None,
        days: dict[tuple[dt.date, str | None], list[Event]] | None = None,
        teams: dict[str, Team] | None = None,
        league_searches: dict[str, list[League]] | None = None,
        leagues: dict[str, League] | None = None,
        events: dict[str, Event] | None = None,
        failures: set[tuple[Any, ...]] | None = None,
        cancel_on: tuple[Any, ...] | None = None,
    ) -> None:
        self.searches = searches or {}
        self.days = days or {}
        self.teams = teams or {}
        self.league_searches = league_searches or {}
        self.leagues = leagues or {}
        self.events = events or {}
        self.failures = failures or set()
        self.cancel_on = cancel_on
        self.calls: list[tuple[Any, ...]] = []

    def _record(self, key: tuple[Any, ...], cancel: CancellationToken | None) -> None:
        check_cancelled(cancel)
        self.calls.append(key)
        if cancel is not None and key == self.cancel_on:
            cancel.cancel()
            check_cancelled(cancel)
        if key in self.failures:
            raise SportsDBError(f"upstream failure for {key}")

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]

    def search_events(self, text: str, cancel: CancellationToken | None = None) -> list[Event]:
        self._record(("search", text), cancel)
        return list(self.searches.get(text, []))

    def events_on_day(
        self, day: dt.date, league_id: str | None = None, cancel: CancellationToken | None = None
    ) -> list[Event]:
        self._record(("day", day, league_id), cancel)
        return list(self.days.get((day, league_id), []))

    def get_team(self, team_id: str, cancel: CancellationToken | None = None) -> Team | None:
        self._record(("team", team_id), cancel)
        return self.teams.get(team_id)

    def search_leagues(self, text: str, cancel: CancellationToken | None = None) -> list[League]:
        self._record(("league_search", text), cancel)
        return list(self.league_searches.get(text, []))

    def get_league(self, league_id: str, cancel: CancellationToken | None = None) -> League | None:
        self._record(("league", league_id), cancel)
        return self.leagues.get(league_id)

    def get_event(self, event_id: str, cancel: CancellationToken | None = None) -> Event | None:
        self._record(("event", event_id), cancel)
        return self.events.get(event_id)

    def close(self) -> None:
        pass


class FakeLookupStore:
    def __init__(
        self,
        leagues: dict[str, str] | None = None,
        teams: dict[tuple[str, str | None], str] | None = None,
    ) -> None:
        self.leagues = {key.casefold(): value for key, value in (leagues or {}).items()}
        self.teams = {(code.casefold(), league): name for (code, league), name in (teams or {}).items()}
        self.league_calls: list[str] = []
        self.team_calls: list[tuple[str, str | None]] = []

    def find_league_id(self, name: str) -> str | None:
        self.league_calls.append(name)
        return self.leagues.get(name.casefold())

    def find_team_full_name(self, short_code: str, league_id: str | None = None) -> str | None:
        self.team_calls.append((short_code, league_id))
        return self.teams.get((short_code.casefold(), league_id))


@pytest.fixture
def cancel_token() -> CancellationToken:
    return CancellationToken()
