"""Pydantic models for TheSportsDB v1 JSON responses.

TheSportsDB encodes every scalar as a string, uses ``""`` or ``null`` for
missing values and prefixes field names with their type (``idEvent``,
``strEvent``). The models expose plain attribute names, map the upstream names
through aliases and turn the empty-string convention into ``None``.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class SportsDBModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_scalars(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            field = cls.model_fields.get(info.field_name or "")
            if field is not None and field.annotation in (str, str | None):
                return str(value)
        if isinstance(value, str):
            stripped = value.strip()
            if stripped:
                return stripped
            field = cls.model_fields.get(info.field_name or "")
            if field is not None and not field.is_required():
                return None
            return stripped
        return value


def _parse_date(value: Any) -> dt.date | None:
    if value is None or isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


class League(SportsDBModel):
    """A league record (``lookupleague.php`` / ``search_all_leagues.php``)."""

    id: str = Field(validation_alias=AliasChoices("idLeague", "id"))
    name: str = Field(validation_alias=AliasChoices("strLeague", "name"))
    sport: str | None = Field(default=None, validation_alias=AliasChoices("strSport", "sport"))
    alternate_names: str | None = Field(
        default=None, validation_alias=AliasChoices("strLeagueAlternate", "alternate_names")
    )
    description: str | None = Field(default=None, validation_alias=AliasChoices("strDescriptionEN", "description"))
    formed_year: str | None = Field(default=None, validation_alias=AliasChoices("intFormedYear", "formed_year"))
    website: str | None = Field(default=None, validation_alias=AliasChoices("strWebsite", "website"))
    badge_url: str | None = Field(default=None, validation_alias=AliasChoices("strBadge", "badge_url"))
    logo_url: str | None = Field(default=None, validation_alias=AliasChoices("strLogo", "logo_url"))
    poster_url: str | None = Field(default=None, validation_alias=AliasChoices("strPoster", "poster_url"))
    fanart_url: str | None = Field(default=None, validation_alias=AliasChoices("strFanart1", "fanart_url"))


class Team(SportsDBModel):
    """A team record (``lookupteam.php`` / ``searchteams.php``)."""

    id: str = Field(validation_alias=AliasChoices("idTeam", "id"))
    name: str = Field(validation_alias=AliasChoices("strTeam", "name"))
    short_code: str | None = Field(default=None, validation_alias=AliasChoices("strTeamShort", "short_code"))
    alternate_names: str | None = Field(
        default=None, validation_alias=AliasChoices("strTeamAlternate", "strAlternate", "alternate_names")
    )
    league_id: str | None = Field(default=None, validation_alias=AliasChoices("idLeague", "league_id"))
    league_name: str | None = Field(default=None, validation_alias=AliasChoices("strLeague", "league_name"))
    badge_url: str | None = Field(
        default=None, validation_alias=AliasChoices("strBadge", "strTeamBadge", "badge_url")
    )


class Event(SportsDBModel):
    """A single fixture (``searchevents.php`` / ``eventsday.php`` / ``lookupevent.php``)."""

    id: str = Field(validation_alias=AliasChoices("idEvent", "id"))
    title: str = Field(validation_alias=AliasChoices("strEvent", "title"))
    sport: str | None = Field(default=None, validation_alias=AliasChoices("strSport", "sport"))
    league_id: str | None = Field(default=None, validation_alias=AliasChoices("idLeague", "league_id"))
    league_name: str | None = Field(default=None, validation_alias=AliasChoices("strLeague", "league_name"))
    season: str | None = Field(default=None, validation_alias=AliasChoices("strSeason", "season"))
    round: str | None = Field(default=None, validation_alias=AliasChoices("intRound", "round"))
    date: dt.date | None = Field(default=None, validation_alias=AliasChoices("dateEvent", "date"))
    time: str | None = Field(default=None, validation_alias=AliasChoices("strTime", "time"))
    home_team: str | None = Field(default=None, validation_alias=AliasChoices("strHomeTeam", "home_team"))
    away_team: str | None = Field(default=None, validation_alias=AliasChoices("strAwayTeam", "away_team"))
    home_team_id: str | None = Field(default=None, validation_alias=AliasChoices("idHomeTeam", "home_team_id"))
    away_team_id: str | None = Field(default=None, validation_alias=AliasChoices("idAwayTeam", "away_team_id"))
    home_score: str | None = Field(default=None, validation_alias=AliasChoices("intHomeScore", "home_score"))
    away_score: str | None = Field(default=None, validation_alias=AliasChoices("intAwayScore", "away_score"))
    description: str | None = Field(default=None, validation_alias=AliasChoices("strDescriptionEN", "description"))
    thumb_url: str | None = Field(default=None, validation_alias=AliasChoices("strThumb", "thumb_url"))
    poster_url: str | None = Field(default=None, validation_alias=AliasChoices("strPoster", "poster_url"))
    fanart_url: str | None = Field(default=None, validation_alias=AliasChoices("strFanart", "fanart_url"))
    video_url: str | None = Field(default=None, validation_alias=AliasChoices("strVideo", "video_url"))

    @field_validator("date", mode="before")
    @classmethod
    def _parse_event_date(cls, value: Any) -> dt.date | None:
        return _parse_date(value)


def _merge_unique(*groups: list[Any]) -> list[Any]:
    seen: set[str] = set()
    merged: list[Any] = []
    for group in groups:
        for item in group:
            if item.id in seen:
                continue
            seen.add(item.id)
            merged.append(item)
    return merged


class SportsDBPayload(BaseModel):
    """Envelope shared by every v1 endpoint.

    Different endpoints populate different containers, and the league search
    endpoint has used ``countrys``, ``countries`` and ``leagues`` over time.
    Callers read the merged views instead of branching on the container.
    """

    model_config = ConfigDict(extra="ignore")

    countrys: list[League] = Field(default_factory=list)
    countries: list[League] = Field(default_factory=list)
    leagues: list[League] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    event: list[Event] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        # Upstream returns null (or a bare string) for "no results".
        if value is None or isinstance(value, str):
            return []
        return value

    def league_list(self) -> list[League]:
        return _merge_unique(self.countrys, self.countries, self.leagues)

    def event_list(self) -> list[Event]:
        return _merge_unique(self.events, self.event)

    def team_list(self) -> list[Team]:
        return _merge_unique(self.teams)
