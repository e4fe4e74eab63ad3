"""
Tests for poll time suggestion ranking.
"""

import pytest

from gametime.domain.exceptions import InvalidSlotError
from gametime.domain.models import SuggestionSource, TimeSuggestion
from gametime.domain.suggestions import TimeSuggestionRanker

AFTER = "2026-02-02T12:00:00Z"  # Monday


@pytest.fixture
def ranker():
    return TimeSuggestionRanker()


class TestFormatLabel:
    def test_label_in_display_timezone(self):
        ranker = TimeSuggestionRanker(timezone="Europe/Berlin")

        assert ranker.format_label("2026-02-06T18:00:00Z") == "Friday, Feb 6, 7:00 PM"

    def test_defaults_to_utc(self, ranker):
        assert ranker.timezone == "UTC"
        assert ranker.format_label("2026-02-06T18:00:00Z") == "Friday, Feb 6, 6:00 PM"


class TestRank:
    """Tests for TimeSuggestionRanker.rank."""

    def test_count_descending_then_soonest(self, ranker):
        """Higher counts first; equal counts ordered by date."""
        a = TimeSuggestion(date="2026-02-03T19:00:00Z", label="A", available_count=3)
        c = TimeSuggestion(date="2026-02-04T19:00:00Z", label="C", available_count=5)
        b = TimeSuggestion(date="2026-02-05T19:00:00Z", label="B", available_count=5)

        ranked = ranker.rank([a, b, c])

        assert [s.label for s in ranked] == ["C", "B", "A"]

    def test_ties_compare_instants_not_strings(self, ranker):
        """Dates with different offsets are compared as instants."""
        later = TimeSuggestion(date="2026-02-03T20:00:00Z", label="later", available_count=1)
        earlier = TimeSuggestion(date="2026-02-03T14:00:00-05:00", label="earlier", available_count=1)

        assert [s.label for s in ranker.rank([later, earlier])] == ["earlier", "later"]

    def test_full_ties_keep_input_order(self, ranker):
        first = TimeSuggestion(date="2026-02-03T19:00:00Z", label="first", available_count=2)
        second = TimeSuggestion(date="2026-02-03T19:00:00.000Z", label="second", available_count=2)

        assert [s.label for s in ranker.rank([first, second])] == ["first", "second"]

    def test_empty_input(self, ranker):
        assert ranker.rank([]) == []

    def test_input_is_not_mutated(self, ranker):
        suggestions = [
            TimeSuggestion(date="2026-02-05T19:00:00Z", label="x", available_count=0),
            TimeSuggestion(date="2026-02-03T19:00:00Z", label="y", available_count=0),
        ]

        ranker.rank(suggestions)

        assert [s.label for s in suggestions] == ["x", "y"]


class TestFromWeeklyCounts:
    """Tests for mapping weekly counts onto concrete dates."""

    def test_projects_cells_onto_upcoming_days(self, ranker):
        counts = {(5, 20): 7, (1, 21): 2}

        suggestions = ranker.from_weekly_counts(counts, AFTER, days_ahead=14)

        assert [(s.date, s.available_count) for s in suggestions] == [
            ("2026-02-06T20:00:00Z", 7),
            ("2026-02-13T20:00:00Z", 7),
            ("2026-02-02T21:00:00Z", 2),
            ("2026-02-09T21:00:00Z", 2),
        ]
        assert suggestions[0].label == "Friday, Feb 6, 8:00 PM"

    def test_cells_are_read_in_display_timezone(self):
        ranker = TimeSuggestionRanker(timezone="America/New_York")

        suggestions = ranker.from_weekly_counts({(5, 20): 3}, AFTER, days_ahead=14)

        assert [s.date for s in suggestions] == ["2026-02-07T01:00:00Z", "2026-02-14T01:00:00Z"]
        assert suggestions[0].label == "Friday, Feb 6, 8:00 PM"

    def test_top_n_and_limit(self, ranker):
        counts = {(day, 20): day + 1 for day in range(7)}

        suggestions = ranker.from_weekly_counts(counts, AFTER, days_ahead=14, top_n=2, limit=3)

        assert len(suggestions) == 3
        assert {s.available_count for s in suggestions} <= {7, 6}
        assert suggestions[0].available_count == 7

    def test_past_hour_today_is_skipped(self, ranker):
        """Monday 9 AM has already passed at Monday noon; next Monday is used."""
        suggestions = ranker.from_weekly_counts({(1, 9): 4}, AFTER, days_ahead=7)

        assert [s.date for s in suggestions] == ["2026-02-09T09:00:00Z"]

    def test_empty_counts(self, ranker):
        assert ranker.from_weekly_counts({}, AFTER) == []

    @pytest.mark.parametrize("cell", [(7, 20), (-1, 20), (1, 24), (1, -1)])
    def test_cell_outside_week_raises_error(self, ranker, cell):
        """Counts for a cell that cannot occur are rejected up front."""
        with pytest.raises(InvalidSlotError):
            ranker.from_weekly_counts({(5, 20): 7, cell: 3}, AFTER)


class TestFallback:
    """Tests for evening preset suggestions."""

    def test_evening_presets_for_next_week(self, ranker):
        suggestions = ranker.fallback(AFTER)

        assert len(suggestions) == 28
        assert suggestions[0].date == "2026-02-03T18:00:00Z"
        assert suggestions[-1].date == "2026-02-09T21:00:00Z"
        assert all(s.available_count == 0 for s in suggestions)

    def test_custom_hours(self, ranker):
        suggestions = ranker.fallback(AFTER, evening_hours=[20], days=2)

        assert [s.label for s in suggestions] == ["Tuesday, Feb 3, 8:00 PM", "Wednesday, Feb 4, 8:00 PM"]


class TestSuggest:
    """Tests for source selection."""

    def test_game_interest_source(self, ranker):
        response = ranker.suggest({(5, 20): 7}, AFTER, interested_player_count=9)

        assert response.source is SuggestionSource.GAME_INTEREST
        assert response.interested_player_count == 9
        assert response.suggestions[0].available_count == 7

    def test_fallback_source_when_no_counts(self, ranker):
        response = ranker.suggest({}, AFTER, interested_player_count=9)

        assert response.source is SuggestionSource.FALLBACK
        assert response.interested_player_count == 0
        assert len(response.suggestions) == 28

    def test_to_dict(self, ranker):
        data = ranker.suggest(None, AFTER).to_dict()

        assert data["source"] == "fallback"
        assert data["suggestions"][0]["availableCount"] == 0
