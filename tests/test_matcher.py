from __future__ import annotations

import datetime as dt
import logging

import pytest

from conftest import FakeClient, make_event, make_team
from matchday.cancellation import OperationCancelled
from matchday.matcher import EventMatcher, select_exact_match
from matchday.models import MatchPath, MatchStatus, ResolutionQuery
from matchday.utils import normalize_token

NHL = "4380"
EPL = "4328"
DAY = dt.date(2026, 1, 22)


def make_query(
    clean: str,
    expanded: str | None = None,
    *,
    date: dt.date | None = None,
    league_id: str | None = None,
) -> ResolutionQuery:
    return ResolutionQuery(
        filename="file.mkv",
        clean_title=clean,
        expanded_title=expanded or clean,
        date=date,
        league_id=league_id,
    )


class TestCanonicalForm:
    """Tests for the canonical form used by exact matching."""

    def test_punctuation_and_case_ignored(self):
        assert normalize_token("Dallas Stars vs. Boston Bruins!") == normalize_token("dallas stars vs boston bruins")

    def test_select_exact_match_uses_canonical_equality(self):
        event = make_event("1", "Dallas Stars vs. Boston Bruins!")
        assert select_exact_match([event], "dallas stars vs boston bruins") == (event, "any")

    def test_substring_is_not_a_match(self):
        event = make_event("1", "Dallas Stars vs Boston Bruins Highlights")
        assert select_exact_match([event], "Dallas Stars vs Boston Bruins") == (None, None)

    def test_empty_text_never_matches(self):
        assert select_exact_match([make_event("1", "!!")], "...") == (None, None)


class TestSelectExactMatch:
    """Tests for league and date filtering in select_exact_match."""

    def test_league_filter(self):
        other = make_event("1", "Arsenal vs Chelsea", league_id="9999")
        unfiltered = make_event("2", "Arsenal vs Chelsea")
        event, _ = select_exact_match([other, unfiltered], "Arsenal vs Chelsea", league_id=EPL)
        assert event is unfiltered

    def test_exact_date_preferred_over_window(self):
        next_day = make_event("1", "Arsenal vs Chelsea", date="2026-03-15")
        same_day = make_event("2", "Arsenal vs Chelsea", date="2026-03-14")
        event, variant = select_exact_match([next_day, same_day], "Arsenal vs Chelsea", date=dt.date(2026, 3, 14))
        assert event is same_day
        assert variant == "exact"

    def test_one_day_window(self):
        previous_day = make_event("1", "Arsenal vs Chelsea", date="2026-03-13")
        event, variant = select_exact_match([previous_day], "Arsenal vs Chelsea", date=dt.date(2026, 3, 14))
        assert event is previous_day
        assert variant == "window"

    def test_outside_window_rejected(self):
        far = make_event("1", "Arsenal vs Chelsea", date="2026-03-16")
        undated = make_event("2", "Arsenal vs Chelsea")
        assert select_exact_match([far, undated], "Arsenal vs Chelsea", date=dt.date(2026, 3, 14)) == (None, None)


class TestDirectSearch:
    """Tests for the direct search tier."""

    def test_matchup_found_by_direct_search(self):
        event = make_event("2001", "Liverpool vs. Manchester City", date="2026-02-08")
        client = FakeClient(searches={"Liverpool vs Manchester City": [event]})
        query = make_query("Liverpool vs Manchester City", date=dt.date(2026, 2, 8))

        result = EventMatcher(client).match(query)

        assert result.found
        assert result.event is event
        assert result.path is MatchPath.DIRECT_EXACT_DATE
        assert client.calls_of("day") == []

    def test_no_date_direct_path(self):
        event = make_event("2001", "Liverpool vs Everton")
        client = FakeClient(searches={"Liverpool vs Everton": [event]})

        result = EventMatcher(client).match(make_query("Liverpool vs Everton"))

        assert result.path is MatchPath.DIRECT

    def test_expanded_title_searched_first(self):
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", date="2026-01-22")
        client = FakeClient(searches={"Edmonton Oilers vs Pittsburgh Penguins": [event]})
        query = make_query("EDM-PIT", "Edmonton Oilers vs Pittsburgh Penguins", date=DAY, league_id=NHL)

        result = EventMatcher(client).match(query)

        assert result.event is event
        assert client.calls[0] == ("search", "Edmonton Oilers vs Pittsburgh Penguins")
        assert ("search", "EDM-PIT") not in client.calls

    def test_clean_title_searched_when_expanded_fails(self):
        event = make_event("1", "EDM-PIT")
        client = FakeClient(searches={"EDM-PIT": [event]})
        query = make_query("EDM-PIT", "Edmonton Oilers vs Pittsburgh Penguins")

        result = EventMatcher(client).match(query)

        assert result.event is event
        assert [call[1] for call in client.calls_of("search")] == [
            "Edmonton Oilers vs Pittsburgh Penguins",
            "EDM-PIT",
        ]

    def test_undated_query_runs_direct_search_only(self):
        """Without a date neither the swap nor the day listing runs."""
        client = FakeClient()

        result = EventMatcher(client).match(make_query("315 Jones vs Aspinall"))

        assert result.status is MatchStatus.NOT_FOUND
        assert result.event is None
        assert client.calls == [("search", "315 Jones vs Aspinall")]


class TestTeamSwap:
    """Tests for the team-swap tier."""

    def test_swapped_order_found(self):
        event = make_event("1", "Chelsea vs Arsenal", date="2026-03-14")
        client = FakeClient(searches={"Chelsea vs Arsenal": [event]})
        query = make_query("Arsenal vs Chelsea", date=dt.date(2026, 3, 14))

        result = EventMatcher(client).match(query)

        assert result.event is event
        assert result.path is MatchPath.TEAM_SWAP_EXACT_DATE

    def test_swapped_order_within_window(self):
        event = make_event("1", "Chelsea vs Arsenal", date="2026-03-15")
        client = FakeClient(searches={"Chelsea vs Arsenal": [event]})
        query = make_query("Arsenal vs Chelsea", date=dt.date(2026, 3, 14))

        result = EventMatcher(client).match(query)

        assert result.path is MatchPath.TEAM_SWAP_DATE_WINDOW

    def test_no_swap_for_non_matchup(self):
        client = FakeClient()
        EventMatcher(client).match(make_query("315", date=dt.date(2026, 3, 14)))
        assert client.calls_of("search") == [("search", "315")]


class TestDayListing:
    """Tests for the day-listing tier."""

    def test_single_league_event_accepted(self):
        """EDM-PIT does not match by title, but the league played once that day."""
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", date="2026-01-22", league_id=NHL)
        client = FakeClient(days={(DAY, NHL): [event]})
        query = make_query("EDM-PIT", date=DAY, league_id=NHL)

        result = EventMatcher(client).match(query)

        assert result.event is event
        assert result.path is MatchPath.DAY_SINGLE_EVENT

    def test_single_event_needs_league_filter(self):
        event = make_event("1", "Some Other Game", date="2026-01-22")
        client = FakeClient(days={(DAY, None): [event]})

        result = EventMatcher(client).match(make_query("EDM-PIT", date=DAY))

        assert not result.found

    def test_next_day_short_circuits(self):
        """A hit on date+1 means date-1 is never listed."""
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", league_id=NHL)
        next_day = DAY + dt.timedelta(days=1)
        client = FakeClient(days={(next_day, NHL): [event]})

        result = EventMatcher(client).match(make_query("EDM-PIT", date=DAY, league_id=NHL))

        assert result.event is event
        assert client.calls_of("day") == [("day", DAY, NHL), ("day", next_day, NHL)]

    def test_day_order_when_nothing_matches(self):
        client = FakeClient()

        result = EventMatcher(client).match(make_query("EDM-PIT", date=DAY, league_id=NHL))

        assert result.status is MatchStatus.NOT_FOUND
        assert [call[1] for call in client.calls_of("day")] == [
            DAY,
            DAY + dt.timedelta(days=1),
            DAY - dt.timedelta(days=1),
        ]

    def test_title_contains_query(self):
        events = [
            make_event("1", "Calgary Flames vs Vancouver Canucks"),
            make_event("2", "Boston Bruins vs Dallas Stars (Outdoor Classic)"),
        ]
        client = FakeClient(days={(DAY, None): events})

        result = EventMatcher(client).match(make_query("boston bruins vs dallas stars", date=DAY))

        assert result.event is events[1]
        assert result.path is MatchPath.DAY_TITLE_CONTAINS

    def test_team_name_prefixes(self):
        events = [
            make_event("1", "Calgary Flames vs Vancouver Canucks", home_team="Calgary Flames", away_team="Vancouver Canucks"),
            make_event(
                "2",
                "Edmonton Oilers vs Pittsburgh Penguins",
                home_team="Edmonton Oilers",
                away_team="Pittsburgh Penguins",
            ),
        ]
        client = FakeClient(days={(DAY, None): events})

        result = EventMatcher(client).match(make_query("Pittsburgh vs Edmonton", date=DAY))

        assert result.event is events[1]
        assert result.path is MatchPath.DAY_TEAM_PREFIX

    def test_team_records_checked_last(self):
        events = [
            make_event(
                "1",
                "Calgary Flames vs Vancouver Canucks",
                home_team="Calgary Flames",
                away_team="Vancouver Canucks",
                home_team_id="10",
                away_team_id="11",
            ),
            make_event(
                "2",
                "Tampa Bay Lightning vs Vegas Golden Knights",
                home_team="Tampa Bay Lightning",
                away_team="Vegas Golden Knights",
                home_team_id="20",
                away_team_id="21",
            ),
        ]
        teams = {
            "10": make_team("10", "Calgary Flames", short_code="CGY"),
            "11": make_team("11", "Vancouver Canucks", short_code="VAN"),
            "20": make_team("20", "Tampa Bay Lightning", short_code="TBL"),
            "21": make_team("21", "Vegas Golden Knights", short_code="VGK"),
        }
        client = FakeClient(days={(DAY, None): events}, teams=teams)

        result = EventMatcher(client).match(make_query("TBL-VGK", date=DAY))

        assert result.event is events[1]
        assert result.path is MatchPath.DAY_TEAM_RECORD
        team_calls = client.calls_of("team")
        assert len(team_calls) == len(set(team_calls))

    def test_space_separated_codes_checked_against_team_records(self):
        """A dotted release name leaves two bare codes with no separator word."""
        events = [
            make_event(
                "1",
                "Calgary Flames vs Vancouver Canucks",
                home_team="Calgary Flames",
                away_team="Vancouver Canucks",
                home_team_id="10",
                away_team_id="11",
            ),
            make_event(
                "2",
                "Tampa Bay Lightning vs Vegas Golden Knights",
                home_team="Tampa Bay Lightning",
                away_team="Vegas Golden Knights",
                home_team_id="20",
                away_team_id="21",
            ),
        ]
        teams = {
            "10": make_team("10", "Calgary Flames", short_code="CGY"),
            "11": make_team("11", "Vancouver Canucks", short_code="VAN"),
            "20": make_team("20", "Tampa Bay Lightning", short_code="TBL"),
            "21": make_team("21", "Vegas Golden Knights", short_code="VGK"),
        }
        client = FakeClient(days={(DAY, None): events}, teams=teams)

        result = EventMatcher(client).match(make_query("TBL VGK", date=DAY))

        assert result.event is events[1]
        assert result.path is MatchPath.DAY_TEAM_RECORD

    def test_space_separated_names_as_team_prefixes(self):
        events = [
            make_event("1", "Calgary Flames vs Vancouver Canucks", home_team="Calgary Flames", away_team="Vancouver Canucks"),
            make_event("2", "Edmonton Oilers vs Pittsburgh Penguins", home_team="Edmonton Oilers", away_team="Pittsburgh Penguins"),
        ]
        client = FakeClient(days={(DAY, None): events})

        result = EventMatcher(client).match(make_query("Pittsburgh Edmonton", date=DAY))

        assert result.event is events[1]
        assert result.path is MatchPath.DAY_TEAM_PREFIX

    def test_team_records_cached_per_match(self):
        event = make_event(
            "1",
            "Calgary Flames vs Vancouver Canucks",
            home_team="Calgary Flames",
            away_team="Vancouver Canucks",
            home_team_id="10",
            away_team_id="11",
        )
        client = FakeClient(days={(day, None): [event] for day in (DAY, DAY + dt.timedelta(days=1))})

        EventMatcher(client).match(make_query("TBL-VGK", date=DAY))

        assert sorted(client.calls_of("team")) == [("team", "10"), ("team", "11")]


class TestUpstreamFailures:
    """Upstream failures skip a call, never the resolution."""

    def test_search_failure_falls_through_to_day_listing(self, caplog):
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", league_id=NHL)
        client = FakeClient(
            days={(DAY, NHL): [event]},
            failures={("search", "EDM-PIT"), ("search", "PIT vs EDM")},
        )

        with caplog.at_level(logging.WARNING, logger="matchday.matcher"):
            result = EventMatcher(client).match(make_query("EDM-PIT", date=DAY, league_id=NHL))

        assert result.event is event
        assert "Event search for 'EDM-PIT' failed" in caplog.text

    def test_day_failure_moves_to_next_day(self):
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", league_id=NHL)
        next_day = DAY + dt.timedelta(days=1)
        client = FakeClient(days={(next_day, NHL): [event]}, failures={("day", DAY, NHL)})

        result = EventMatcher(client).match(make_query("EDM-PIT", date=DAY, league_id=NHL))

        assert result.event is event

    def test_team_lookup_failure_is_no_match(self):
        event = make_event("1", "A vs B", home_team="Alpha", away_team="Beta", home_team_id="1", away_team_id="2")
        client = FakeClient(
            days={(DAY, None): [event]},
            failures={("team", "1"), ("team", "2")},
        )

        result = EventMatcher(client).match(make_query("XX-YY", date=DAY))

        assert result.status is MatchStatus.NOT_FOUND


class TestCancellation:
    """Cancellation propagates out of the matcher."""

    def test_cancel_during_search(self, cancel_token):
        client = FakeClient(cancel_on=("search", "EDM-PIT"))

        with pytest.raises(OperationCancelled):
            EventMatcher(client).match(make_query("EDM-PIT", date=DAY), cancel_token)

        assert client.calls_of("day") == []

    def test_cancelled_before_start(self, cancel_token):
        cancel_token.cancel()
        client = FakeClient()

        with pytest.raises(OperationCancelled):
            EventMatcher(client).match(make_query("EDM-PIT"), cancel_token)

        assert client.calls == []


class TestIdempotence:
    def test_same_query_same_result(self):
        event = make_event("1", "Edmonton Oilers vs Pittsburgh Penguins", league_id=NHL)
        client = FakeClient(days={(DAY, NHL): [event]})
        matcher = EventMatcher(client)
        query = make_query("EDM-PIT", date=DAY, league_id=NHL)

        first = matcher.match(query)
        second = matcher.match(query)

        assert first == second
