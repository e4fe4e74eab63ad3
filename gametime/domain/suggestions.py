"""
Ranking of candidate start times for event polls.

Aggregation of per-player availability happens on the backend. This module
only turns already-aggregated counts into concrete, labelled and ordered
candidates.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence

import pendulum
from pendulum import DateTime

from .grid import check_cell
from .models import CellKey, SuggestionSource, TimeSuggestion
from .recurrence import DateInput, to_utc

LABEL_FORMAT = "dddd, MMM D, h:mm A"
DEFAULT_EVENING_HOURS = (18, 19, 20, 21)


@dataclass
class SuggestionResponse:
    """Ranked suggestions plus where they came from."""
    source: SuggestionSource
    suggestions: List[TimeSuggestion] = field(default_factory=list)
    interested_player_count: int = 0

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "interestedPlayerCount": self.interested_player_count,
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
        }


def _grid_day_of_week(dt: DateTime) -> int:
    """Day index with 0=Sunday, matching the weekly grid."""
    return dt.isoweekday() % 7


class TimeSuggestionRanker:
    """
    Orders suggestions by available player count, then by soonest date.

    Labels are rendered in ``timezone`` (the community's display timezone),
    UTC when none is given.
    """

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = timezone or "UTC"

    def format_label(self, moment: DateInput) -> str:
        """Human-readable label, e.g. "Friday, Feb 6, 7:00 PM"."""
        return to_utc(moment).in_timezone(self.timezone).format(LABEL_FORMAT)

    def rank(self, suggestions: Iterable[TimeSuggestion]) -> List[TimeSuggestion]:
        """
        Return a new list ordered by count descending, then soonest first.

        The sort is stable, so candidates equal on both keys keep their
        input order. Empty input gives an empty list.
        """
        return sorted(
            suggestions,
            key=lambda suggestion: (-suggestion.available_count, to_utc(suggestion.date)),
        )

    def from_weekly_counts(
        self,
        counts: Mapping[CellKey, int],
        after: DateInput,
        days_ahead: int = 14,
        top_n: int = 21,
        limit: int = 20,
    ) -> List[TimeSuggestion]:
        """
        Map aggregated (day_of_week, hour) counts to concrete upcoming dates.

        The ``top_n`` busiest cells are projected onto every matching day in
        the window (after, after + days_ahead), interpreted in the display
        timezone.

        Args:
            counts: Players available per weekly cell (0=Sunday)
            after: Only strictly later start times are suggested
            days_ahead: Size of the look-ahead window in days
            top_n: How many weekly cells to consider
            limit: Maximum number of suggestions returned

        Returns:
            Ranked suggestions

        Raises:
            InvalidSlotError: If a counted cell lies outside the weekly grid
        """
        for day_of_week, hour in counts:
            check_cell(day_of_week, hour)

        start = to_utc(after).in_timezone(self.timezone)
        window_end = start.add(days=days_ahead)

        ranked_cells = sorted(counts.items(), key=lambda item: -item[1])[:top_n]

        suggestions: List[TimeSuggestion] = []
        for (day_of_week, hour), count in ranked_cells:
            cursor = start.set(hour=hour, minute=0, second=0, microsecond=0)
            while _grid_day_of_week(cursor) != day_of_week or cursor <= start:
                cursor = cursor.add(days=1).set(hour=hour, minute=0, second=0, microsecond=0)

            while cursor < window_end:
                suggestions.append(self._suggestion(cursor, count))
                cursor = cursor.add(weeks=1)

        return self.rank(suggestions)[:limit]

    def fallback(
        self,
        after: DateInput,
        evening_hours: Sequence[int] = DEFAULT_EVENING_HOURS,
        days: int = 7,
    ) -> List[TimeSuggestion]:
        """Generic evening presets for the coming week, all with count 0."""
        start = to_utc(after).in_timezone(self.timezone)

        suggestions: List[TimeSuggestion] = []
        for day_offset in range(days):
            for hour in evening_hours:
                candidate = start.add(days=day_offset + 1).set(hour=hour, minute=0, second=0, microsecond=0)
                if candidate <= start:
                    continue
                suggestions.append(self._suggestion(candidate, 0))

        return self.rank(suggestions)

    def suggest(
        self,
        counts: Optional[Mapping[CellKey, int]],
        after: DateInput,
        interested_player_count: int = 0,
        days_ahead: int = 14,
        top_n: int = 21,
        limit: int = 20,
        evening_hours: Sequence[int] = DEFAULT_EVENING_HOURS,
    ) -> SuggestionResponse:
        """
        Suggest poll times from game interest, falling back to evening presets.
        """
        if counts:
            return SuggestionResponse(
                source=SuggestionSource.GAME_INTEREST,
                suggestions=self.from_weekly_counts(
                    counts, after, days_ahead=days_ahead, top_n=top_n, limit=limit
                ),
                interested_player_count=interested_player_count,
            )

        return SuggestionResponse(
            source=SuggestionSource.FALLBACK,
            suggestions=self.fallback(after, evening_hours=evening_hours),
            interested_player_count=0,
        )

    def _suggestion(self, moment: DateTime, count: int) -> TimeSuggestion:
        return TimeSuggestion(
            date=moment.in_timezone("UTC").to_iso8601_string(),
            label=moment.format(LABEL_FORMAT),
            available_count=count,
        )
