"""League resolution for series/folder names.

A folder name such as ``"NHL"`` or ``"Premier League"`` is mapped to a TheSportsDB league id by trying, in order:

1. user-configured name -> id mappings,
2. the built-in well-known league table,
3. the local lookup store,
4. the remote league search.

The first source that yields an id wins; later sources are never consulted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any

from .cancellation import CancellationToken
from .logging_utils import render_fields_block
from .lookup_store import LookupStore
from .models import LeagueSource, ResolvedLeague
from .sportsdb.client import SportsDBClient, SportsDBError
from .utils import load_yaml_file

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LeagueMapping:
    """A user-defined folder name -> league id mapping."""

    name: str
    league_id: str


@dataclass(frozen=True, slots=True)
class LeagueEntry:
    """A row of the built-in known-league table."""

    league_id: str
    name: str
    sport: str | None = None
    aliases: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


def _league_key(value: str) -> str:
    return value.strip().casefold()


def parse_league_entries(raw: Any, *, field_name: str) -> list[LeagueEntry]:
    """Validate a list of ``{id, name, sport, aliases}`` mappings."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"'{field_name}' must be a list of league definitions")
    entries: list[LeagueEntry] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"'{field_name}[{index}]' must be a mapping")
        league_id = str(item.get("id", "")).strip()
        name = str(item.get("name", "")).strip()
        if not league_id or not name:
            raise ValueError(f"'{field_name}[{index}]' requires non-empty 'id' and 'name'")
        aliases_raw = item.get("aliases") or []
        if not isinstance(aliases_raw, list):
            raise ValueError(f"'{field_name}[{index}].aliases' must be a list")
        sport = item.get("sport")
        entries.append(
            LeagueEntry(
                league_id=league_id,
                name=name,
                sport=str(sport).strip() if sport else None,
                aliases=tuple(str(alias).strip() for alias in aliases_raw if str(alias).strip()),
            )
        )
    return entries


@lru_cache
def load_builtin_leagues() -> tuple[LeagueEntry, ...]:
    """Load the well-known league table shipped with matchday."""
    with resources.as_file(resources.files(__package__) / "data" / "leagues.yaml") as path:
        data = load_yaml_file(path)
    return tuple(parse_league_entries(data.get("leagues"), field_name="leagues"))


def merge_league_entries(base: Sequence[LeagueEntry], overrides: Sequence[LeagueEntry]) -> tuple[LeagueEntry, ...]:
    """Overlay ``overrides`` on ``base``; an override replaces any entry sharing a name or alias."""
    override_keys = {_league_key(name) for entry in overrides for name in entry.names}
    kept = [entry for entry in base if not any(_league_key(name) in override_keys for name in entry.names)]
    return (*overrides, *kept)


class LeagueResolver:
    """Resolve a series/folder name to a league id.

    Each source is a method returning a :class:`ResolvedLeague` or ``None``;
    :meth:`resolve` walks them in priority order and stops at the first hit.
    """

    def __init__(
        self,
        mappings: Sequence[LeagueMapping] = (),
        *,
        builtin: Sequence[LeagueEntry] | None = None,
        lookup_store: LookupStore | None = None,
        client: SportsDBClient | None = None,
    ) -> None:
        self._mappings: dict[str, LeagueMapping] = {}
        for mapping in mappings:
            # Configuration order decides between duplicate names.
            self._mappings.setdefault(_league_key(mapping.name), mapping)

        self._builtin: dict[str, LeagueEntry] = {}
        for entry in load_builtin_leagues() if builtin is None else builtin:
            for name in entry.names:
                self._builtin.setdefault(_league_key(name), entry)

        self._lookup_store = lookup_store
        self._client = client

    @property
    def sources(self) -> list[Callable[[str, CancellationToken | None], ResolvedLeague | None]]:
        return [
            self._from_user_mapping,
            self._from_builtin,
            self._from_lookup_store,
            self._from_remote_search,
        ]

    def resolve(self, name: str | None, cancel: CancellationToken | None = None) -> ResolvedLeague | None:
        """Return the league for ``name``, or None when no source knows it.

        Raises:
            OperationCancelled: If ``cancel`` is set during a remote lookup
        """
        if not name or not name.strip():
            return None
        for source in self.sources:
            resolved = source(name, cancel)
            if resolved is not None:
                LOGGER.debug(
                    render_fields_block(
                        "League Resolved",
                        {"Series": name, "League ID": resolved.league_id, "Source": resolved.source.value},
                    )
                )
                return resolved
        LOGGER.info("No league found for series %r; matching without a league filter", name)
        return None

    def resolve_league_id(self, name: str | None, cancel: CancellationToken | None = None) -> str | None:
        resolved = self.resolve(name, cancel)
        return resolved.league_id if resolved else None

    def _from_user_mapping(self, name: str, cancel: CancellationToken | None) -> ResolvedLeague | None:
        mapping = self._mappings.get(_league_key(name))
        if mapping is None or not mapping.league_id:
            return None
        return ResolvedLeague(league_id=mapping.league_id, source=LeagueSource.USER_MAPPING, name=mapping.name)

    def _from_builtin(self, name: str, cancel: CancellationToken | None) -> ResolvedLeague | None:
        entry = self._builtin.get(_league_key(name))
        if entry is None:
            return None
        return ResolvedLeague(league_id=entry.league_id, source=LeagueSource.BUILTIN, name=entry.name)

    def _from_lookup_store(self, name: str, cancel: CancellationToken | None) -> ResolvedLeague | None:
        if self._lookup_store is None:
            return None
        league_id = self._lookup_store.find_league_id(name.strip())
        if not league_id:
            return None
        return ResolvedLeague(league_id=league_id, source=LeagueSource.LOOKUP_STORE)

    def _from_remote_search(self, name: str, cancel: CancellationToken | None) -> ResolvedLeague | None:
        if self._client is None:
            return None
        try:
            leagues = self._client.search_leagues(name.strip(), cancel)
        except SportsDBError as exc:
            LOGGER.warning("League search for %r failed: %s", name, exc)
            return None
        for league in leagues:
            if league.id:
                return ResolvedLeague(league_id=league.id, source=LeagueSource.REMOTE_SEARCH, name=league.name)
        return None


__all__ = [
    "LeagueEntry",
    "LeagueMapping",
    "LeagueResolver",
    "load_builtin_leagues",
    "merge_league_entries",
    "parse_league_entries",
]
