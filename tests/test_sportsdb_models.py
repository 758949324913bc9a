"""Tests for TheSportsDB response models."""

from __future__ import annotations

import datetime as dt

import pytest
from pydantic import ValidationError

from matchday.sportsdb.models import Event, League, SportsDBPayload, Team


class TestEvent:
    """Tests for Event parsing."""

    def test_upstream_field_names(self) -> None:
        event = Event.model_validate(
            {
                "idEvent": "2001",
                "strEvent": " Liverpool vs Manchester City ",
                "idLeague": 4328,
                "dateEvent": "2026-02-08",
                "strHomeTeam": "Liverpool",
                "strAwayTeam": "Manchester City",
                "idHomeTeam": "133602",
                "idAwayTeam": "133613",
                "strDescriptionEN": "",
                "strFanart": None,
                "strUnknownField": "ignored",
            }
        )
        assert event.id == "2001"
        assert event.title == "Liverpool vs Manchester City"
        assert event.league_id == "4328"
        assert event.date == dt.date(2026, 2, 8)
        assert event.home_team_id == "133602"
        assert event.description is None
        assert event.fanart_url is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2026-02-08", dt.date(2026, 2, 8)),
            ("2026-02-08 20:00:00", dt.date(2026, 2, 8)),
            ("", None),
            ("0000-00-00", None),
            (None, None),
        ],
    )
    def test_tolerant_date(self, raw, expected) -> None:
        event = Event.model_validate({"idEvent": "1", "strEvent": "A", "dateEvent": raw})
        assert event.date == expected

    def test_id_required(self) -> None:
        with pytest.raises(ValidationError):
            Event.model_validate({"strEvent": "A"})

    def test_frozen(self) -> None:
        event = Event.model_validate({"idEvent": "1", "strEvent": "A"})
        with pytest.raises(ValidationError):
            event.title = "B"


class TestLeagueAndTeam:
    """Tests for League and Team parsing."""

    def test_league_fields(self) -> None:
        league = League.model_validate(
            {
                "idLeague": "4380",
                "strLeague": "NHL",
                "strSport": "Ice Hockey",
                "intFormedYear": 1917,
                "strWebsite": "www.nhl.com",
                "strBadge": "https://example.com/badge.png",
                "strFanart1": "https://example.com/fanart.jpg",
            }
        )
        assert league.formed_year == "1917"
        assert league.website == "www.nhl.com"
        assert league.fanart_url == "https://example.com/fanart.jpg"

    def test_team_fields(self) -> None:
        team = Team.model_validate({"idTeam": 134, "strTeam": "Edmonton Oilers", "strTeamShort": "EDM", "idLeague": "4380"})
        assert team.id == "134"
        assert team.short_code == "EDM"
        assert team.league_id == "4380"


class TestSportsDBPayload:
    """Tests for the response envelope."""

    def test_null_containers(self) -> None:
        payload = SportsDBPayload.model_validate({"events": None, "teams": "", "leagues": None})
        assert payload.event_list() == []
        assert payload.team_list() == []
        assert payload.league_list() == []

    def test_league_containers_merged(self) -> None:
        payload = SportsDBPayload.model_validate(
            {
                "countries": [{"idLeague": "2", "strLeague": "B"}],
                "countrys": [{"idLeague": "1", "strLeague": "A"}, {"idLeague": "2", "strLeague": "B (first)"}],
            }
        )
        assert [(league.id, league.name) for league in payload.league_list()] == [("1", "A"), ("2", "B (first)")]

    def test_event_containers_merged(self) -> None:
        payload = SportsDBPayload.model_validate(
            {
                "events": [{"idEvent": "1", "strEvent": "A"}],
                "event": [{"idEvent": "1", "strEvent": "A"}, {"idEvent": "2", "strEvent": "B"}],
            }
        )
        assert [event.id for event in payload.event_list()] == ["1", "2"]
