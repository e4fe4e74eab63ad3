"""
Tests for recurring event date generation.
"""

from datetime import datetime, timezone

import pendulum
import pytest

from gametime.domain.recurrence import (
    MAX_RECURRENCE_INSTANCES,
    Frequency,
    count_occurrences,
    generate_recurring_dates,
    to_utc,
)


def _iso(dates):
    return [date.to_iso8601_string() for date in dates]


class TestGenerateRecurringDates:
    """Tests for generate_recurring_dates."""

    def test_weekly_until_is_inclusive(self):
        """A candidate exactly on the until instant is included."""
        dates = generate_recurring_dates("2026-01-05", "weekly", "2026-01-26")

        assert _iso(dates) == [
            "2026-01-05T00:00:00Z",
            "2026-01-12T00:00:00Z",
            "2026-01-19T00:00:00Z",
            "2026-01-26T00:00:00Z",
        ]

    def test_biweekly(self):
        dates = generate_recurring_dates("2026-01-05T19:00:00Z", Frequency.BIWEEKLY, "2026-02-10T00:00:00Z")

        assert _iso(dates) == [
            "2026-01-05T19:00:00Z",
            "2026-01-19T19:00:00Z",
            "2026-02-02T19:00:00Z",
        ]

    def test_monthly_clamps_to_month_end_without_drift(self):
        """Jan 31 goes to Feb 28, then back to Mar 31."""
        dates = generate_recurring_dates("2026-01-31", "monthly", "2026-04-30")

        assert _iso(dates) == [
            "2026-01-31T00:00:00Z",
            "2026-02-28T00:00:00Z",
            "2026-03-31T00:00:00Z",
            "2026-04-30T00:00:00Z",
        ]

    def test_monthly_in_leap_year(self):
        dates = generate_recurring_dates("2028-01-31T18:30:00Z", "monthly", "2028-03-31T18:30:00Z")

        assert [date.to_date_string() for date in dates] == ["2028-01-31", "2028-02-29", "2028-03-31"]
        assert all(date.hour == 18 and date.minute == 30 for date in dates)

    def test_capped_at_max_instances(self):
        """A far-away until produces at most 52 occurrences."""
        dates = generate_recurring_dates("2026-01-01", "weekly", "2028-01-01")

        assert len(dates) == MAX_RECURRENCE_INSTANCES
        assert dates[-1] == pendulum.datetime(2026, 12, 24, tz="UTC")

    def test_until_before_start_returns_start_only(self):
        dates = generate_recurring_dates("2026-02-01", "weekly", "2026-01-01")

        assert _iso(dates) == ["2026-02-01T00:00:00Z"]

    def test_weekly_keeps_utc_time_across_dst(self):
        """Weekly occurrences keep the UTC hour across a DST switch."""
        dates = generate_recurring_dates("2026-03-01T02:00:00Z", "weekly", "2026-03-22T02:00:00Z")

        assert len(dates) == 4
        assert {date.hour for date in dates} == {2}
        assert all(date.timezone_name == "UTC" for date in dates)

    def test_offset_input_is_normalized_to_utc(self):
        dates = generate_recurring_dates("2026-01-05T19:00:00-05:00", "weekly", "2026-01-13")

        assert _iso(dates) == ["2026-01-06T00:00:00Z", "2026-01-13T00:00:00Z"]

    def test_unknown_frequency_raises_error(self):
        with pytest.raises(ValueError):
            generate_recurring_dates("2026-01-05", "daily", "2026-01-26")

    def test_count_matches_generation(self):
        assert count_occurrences("2026-01-05", "weekly", "2026-01-26") == 4
        assert count_occurrences("2026-01-31", "monthly", "2026-04-30") == 4


class TestToUtc:
    """Tests for date input normalization."""

    def test_naive_datetime_is_utc(self):
        result = to_utc(datetime(2026, 1, 5, 12, 0))

        assert result == pendulum.datetime(2026, 1, 5, 12, tz="UTC")

    def test_aware_datetime_is_converted(self):
        result = to_utc(pendulum.datetime(2026, 1, 5, 7, tz="America/New_York"))

        assert result.hour == 12
        assert result.timezone_name == "UTC"

    def test_stdlib_utc_datetime(self):
        result = to_utc(datetime(2026, 1, 5, 12, tzinfo=timezone.utc))

        assert result.to_iso8601_string() == "2026-01-05T12:00:00Z"

    def test_unsupported_type_raises_error(self):
        with pytest.raises(TypeError):
            to_utc(20260105)
