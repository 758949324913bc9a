from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .sportsdb.models import Event

PROVIDER_NAME = "TheSportsDB"


class LeagueSource(str, Enum):
    USER_MAPPING = "user_mapping"
    BUILTIN = "builtin"
    LOOKUP_STORE = "lookup_store"
    REMOTE_SEARCH = "remote_search"


class MatchStatus(str, Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"


class MatchPath(str, Enum):
    """Which matcher tier (and variant) selected the event."""

    DIRECT = "direct"
    DIRECT_EXACT_DATE = "direct_exact_date"
    DIRECT_DATE_WINDOW = "direct_date_window"
    TEAM_SWAP_EXACT_DATE = "team_swap_exact_date"
    TEAM_SWAP_DATE_WINDOW = "team_swap_date_window"
    DAY_SINGLE_EVENT = "day_single_event"
    DAY_TITLE_CONTAINS = "day_title_contains"
    DAY_TEAM_PREFIX = "day_team_prefix"
    DAY_TEAM_RECORD = "day_team_record"


@dataclass(frozen=True, slots=True)
class ResolvedLeague:
    league_id: str
    source: LeagueSource
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CleanedName:
    """Output of the filename normalizer."""

    title: str
    date: Optional[dt.date] = None
    tag: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolutionQuery:
    """Everything the event matcher needs to know about one file."""

    filename: str
    clean_title: str
    expanded_title: str
    series_name: Optional[str] = None
    date: Optional[dt.date] = None
    league_id: Optional[str] = None
    tag: Optional[str] = None

    @property
    def search_titles(self) -> Tuple[str, ...]:
        """Titles to submit to the search endpoint, most specific first."""
        titles: List[str] = []
        for title in (self.expanded_title, self.clean_title):
            if title and title not in titles:
                titles.append(title)
        return tuple(titles)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    status: MatchStatus
    query: Optional[ResolutionQuery] = None
    event: Optional["Event"] = None
    path: Optional[MatchPath] = None

    @property
    def found(self) -> bool:
        return self.status is MatchStatus.MATCHED and self.event is not None

    @property
    def cancelled(self) -> bool:
        return self.status is MatchStatus.CANCELLED

    @classmethod
    def matched(cls, query: ResolutionQuery, event: "Event", path: MatchPath) -> "ResolutionResult":
        return cls(status=MatchStatus.MATCHED, query=query, event=event, path=path)

    @classmethod
    def not_found(cls, query: Optional[ResolutionQuery] = None) -> "ResolutionResult":
        return cls(status=MatchStatus.NOT_FOUND, query=query)

    @classmethod
    def cancelled_for(cls, query: Optional[ResolutionQuery] = None) -> "ResolutionResult":
        return cls(status=MatchStatus.CANCELLED, query=query)


@dataclass(slots=True)
class RemoteImage:
    url: str
    kind: str  # primary | backdrop
    provider: str = PROVIDER_NAME


@dataclass(slots=True)
class RemoteSearchResult:
    name: str
    provider_ids: Dict[str, str]
    production_year: Optional[int] = None
    premiere_date: Optional[dt.date] = None
    image_url: Optional[str] = None


@dataclass(slots=True)
class EpisodeMetadata:
    title: str
    overview: str
    premiere_date: Optional[dt.date]
    production_year: Optional[int]
    provider_ids: Dict[str, str] = field(default_factory=dict)
    images: List[RemoteImage] = field(default_factory=list)


@dataclass(slots=True)
class SeriesMetadata:
    name: str
    overview: Optional[str]
    production_year: Optional[int]
    homepage_url: Optional[str]
    provider_ids: Dict[str, str] = field(default_factory=dict)
    images: List[RemoteImage] = field(default_factory=list)
