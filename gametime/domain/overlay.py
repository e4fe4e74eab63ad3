"""
Composition of the weekly grid with its overlay layers.

The compositor merges four sources into a single renderable cell matrix:

1. The owner's GridModel (base paint status)
2. Aggregated heatmap counts (annotation only, never replaces the status)
3. Scheduled event blocks (anchored at their first hour)
4. Preview blocks for the event being composed

It also supports the rolling-week view: when "now" is known and next week's
template is supplied, cells that already lie in the past show next week's
data instead, unless the owner repainted them during this session.
"""

import math
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import pendulum

from .exceptions import InvalidHourRangeError
from .grid import GridModel
from .models import (
    DAY_NAMES,
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    CellKey,
    EventBlock,
    HeatmapCell,
    PreviewBlock,
    SlotStatus,
    cell_key,
)

HourRange = Tuple[int, int]

DEFAULT_HOUR_RANGE: HourRange = (0, HOURS_PER_DAY)


def format_hour(hour: int) -> str:
    """Format an hour of day as a 12-hour clock label ("12 AM", "3 PM")."""
    if hour in (0, 24):
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour} AM" if hour < 12 else f"{hour - 12} PM"


def format_cell_tooltip(
    day_of_week: int,
    hour: int,
    status: SlotStatus,
    date_label: Optional[str] = None,
) -> str:
    """
    Describe a cell for hover text.

    Format: Dayname[ M/D] H AM – H AM[ — Status]
    """
    date_part = f" {date_label}" if date_label else ""
    status_part = ""
    if status not in (SlotStatus.INACTIVE, SlotStatus.AVAILABLE):
        status_part = f" — {status.value.capitalize()}"
    return (
        f"{DAY_NAMES[day_of_week]}{date_part} "
        f"{format_hour(hour)} – {format_hour((hour + 1) % 24)}{status_part}"
    )


def validate_hour_range(hour_range: Sequence[int]) -> HourRange:
    """Ensure 0 <= start < end <= 24."""
    try:
        start, end = hour_range
    except (TypeError, ValueError) as exc:
        raise InvalidHourRangeError(f"hour_range must be a (start, end) pair, got {hour_range!r}") from exc

    if not 0 <= start < end <= HOURS_PER_DAY:
        raise InvalidHourRangeError(f"hour_range must satisfy 0 <= start < end <= 24, got {start}-{end}")
    return int(start), int(end)


def smart_hour_range(
    anchor_hour: int,
    selected_hour: Optional[int] = None,
    heatmap: Optional[Iterable[HeatmapCell]] = None,
) -> HourRange:
    """
    Visible range for compact grids: start one hour before the earliest
    interesting hour, never later than 6 AM, and always run to midnight.
    """
    min_hour = anchor_hour
    if selected_hour is not None:
        min_hour = min(min_hour, selected_hour)
    heatmap_hours = [cell.hour for cell in heatmap or ()]
    if heatmap_hours:
        min_hour = min(min_hour, min(heatmap_hours))
    return max(0, min(min_hour - 1, 6)), HOURS_PER_DAY


def is_past_cell(
    day_of_week: int,
    hour: int,
    today_index: Optional[int],
    current_hour: Optional[float],
) -> bool:
    """Whether a cell of this week lies before "now". Unknown now means never."""
    if today_index is None or current_hour is None:
        return False
    return day_of_week < today_index or (day_of_week == today_index and hour < math.floor(current_hour))


def week_date_labels(week_start: str, offset_days: int = 0) -> List[str]:
    """
    Build "M/D" labels for the seven days of a week.

    ``week_start`` may be a date ("2026-02-08") or a full ISO datetime; only
    the date portion is used so no timezone shift is applied.
    """
    base = pendulum.parse(week_start.split("T")[0]).add(days=offset_days)
    labels = []
    for offset in range(DAYS_PER_WEEK):
        day = base.add(days=offset)
        labels.append(f"{day.month}/{day.day}")
    return labels


@dataclass(frozen=True)
class HeatmapAnnotation:
    """Aggregate availability attached to a cell."""
    available: int
    total: int

    @property
    def tooltip(self) -> str:
        return f"{self.available} of {self.total} players available"

    @property
    def intensity(self) -> float:
        """Share of players available, 0.0 - 1.0."""
        if self.total == 0:
            return 0.0
        return self.available / self.total


@dataclass(frozen=True)
class CellDescriptor:
    """Everything needed to draw one grid cell."""
    day_of_week: int
    hour: int
    status: SlotStatus
    tooltip: str
    heatmap: Optional[HeatmapAnnotation] = None
    event: Optional[EventBlock] = None
    preview: Optional[PreviewBlock] = None
    preview_content_suppressed: bool = False
    covered_by_event: bool = False
    is_today: bool = False
    is_past: bool = False
    date_label: Optional[str] = None
    visual_group: str = "inactive"
    merge_above: bool = False
    merge_below: bool = False

    @property
    def key(self) -> CellKey:
        return cell_key(self.day_of_week, self.hour)

    @property
    def shows_preview_border(self) -> bool:
        return self.preview is not None

    @property
    def shows_preview_content(self) -> bool:
        return self.preview is not None and not self.preview_content_suppressed


@dataclass(frozen=True)
class CompositeGrid:
    """The composed 7-day matrix restricted to the visible hour range."""
    hour_range: HourRange
    cells: Dict[CellKey, CellDescriptor]
    today_index: Optional[int] = None
    day_labels: Optional[Tuple[str, ...]] = None

    @property
    def hours(self) -> List[int]:
        start, end = self.hour_range
        return list(range(start, end))

    def cell(self, day_of_week: int, hour: int) -> CellDescriptor:
        """Look up a rendered cell. Cells outside the hour range raise KeyError."""
        return self.cells[cell_key(day_of_week, hour)]

    def rows(self) -> Iterator[Tuple[int, List[CellDescriptor]]]:
        """Yield (hour, [cell for Sunday..Saturday]) in display order."""
        for hour in self.hours:
            yield hour, [self.cells[cell_key(day, hour)] for day in range(DAYS_PER_WEEK)]

    def event_anchors(self) -> List[CellDescriptor]:
        return [cell for cell in self.cells.values() if cell.event is not None]

    def preview_anchors(self) -> List[CellDescriptor]:
        return [cell for cell in self.cells.values() if cell.preview is not None]


def _visual_group(status: SlotStatus, covered_by_event: bool) -> str:
    """Cells sharing a group in the same column are drawn as one merged run."""
    if status is SlotStatus.COMMITTED and covered_by_event:
        return "committed-overlay"
    return status.value


class OverlayCompositor:
    """
    Builds ``CompositeGrid`` instances for a fixed visible hour range.

    Cells outside the range are not produced. A block is anchored only when
    its start hour is visible; blocks running past the range end are kept
    as they are.
    """

    def __init__(self, hour_range: Sequence[int] = DEFAULT_HOUR_RANGE):
        self.hour_range = validate_hour_range(hour_range)

    def compose(
        self,
        grid: GridModel,
        heatmap: Optional[Iterable[HeatmapCell]] = None,
        events: Optional[Iterable[EventBlock]] = None,
        previews: Optional[Iterable[PreviewBlock]] = None,
        today_index: Optional[int] = None,
        current_hour: Optional[float] = None,
        next_week: Optional[GridModel] = None,
        next_week_events: Optional[Iterable[EventBlock]] = None,
        dirty_cells: AbstractSet[CellKey] = frozenset(),
        week_start: Optional[str] = None,
    ) -> CompositeGrid:
        """
        Compose every visible cell.

        Args:
            grid: The owner's weekly template
            heatmap: Pre-aggregated counts, one per cell at most
            events: Scheduled event blocks in the viewer's local grid
            previews: Candidate blocks for the event being composed
            today_index: Day of week for today (0=Sunday)
            current_hour: Fractional hour of "now" (15.5 = 3:30 PM)
            next_week: Next week's template for the rolling view
            next_week_events: Next week's events for the rolling view
            dirty_cells: Cells repainted this session (keep this week's status)
            week_start: ISO date of the displayed week's Sunday

        Returns:
            CompositeGrid covering the visible hour range
        """
        start, end = self.hour_range
        hours = range(start, end)

        heatmap_map: Dict[CellKey, HeatmapAnnotation] = {}
        for cell in heatmap or ():
            heatmap_map[cell.key] = HeatmapAnnotation(cell.available_count, cell.total_count)

        display_events = self._events_for_display(
            list(events or ()),
            None if next_week_events is None else list(next_week_events),
            today_index,
            current_hour,
        )

        covered = set()
        event_anchors: Dict[CellKey, EventBlock] = {}
        for event in display_events:
            for hour in range(event.start_hour, event.end_hour):
                covered.add(cell_key(event.day_of_week, hour))
            if start <= event.start_hour < end:
                event_anchors.setdefault(event.anchor, event)

        preview_anchors: Dict[CellKey, PreviewBlock] = {}
        for preview in previews or ():
            if start <= preview.start_hour < end:
                preview_anchors.setdefault(preview.anchor, preview)

        rolling = next_week is not None and today_index is not None and current_hour is not None
        day_labels = week_date_labels(week_start) if week_start else None
        next_labels = week_date_labels(week_start, offset_days=7) if week_start and rolling else None

        def is_past(day: int, hour: int) -> bool:
            return is_past_cell(day, hour, today_index, current_hour)

        statuses: Dict[CellKey, SlotStatus] = {}
        for day in range(DAYS_PER_WEEK):
            for hour in hours:
                key = cell_key(day, hour)
                if rolling and is_past(day, hour) and key not in dirty_cells:
                    statuses[key] = next_week.status(day, hour)
                else:
                    statuses[key] = grid.status(day, hour)

        groups = {key: _visual_group(status, key in covered) for key, status in statuses.items()}

        cells: Dict[CellKey, CellDescriptor] = {}
        for day in range(DAYS_PER_WEEK):
            for hour in hours:
                key = cell_key(day, hour)
                status = statuses[key]
                past = is_past(day, hour)

                date_label = None
                if next_labels is not None and past:
                    date_label = next_labels[day]
                elif day_labels is not None:
                    date_label = day_labels[day]

                annotation = heatmap_map.get(key)
                if annotation is not None:
                    tooltip = annotation.tooltip
                else:
                    tooltip = format_cell_tooltip(day, hour, status, date_label)

                event = event_anchors.get(key)
                preview = preview_anchors.get(key)
                group = groups[key]

                cells[key] = CellDescriptor(
                    day_of_week=day,
                    hour=hour,
                    status=status,
                    tooltip=tooltip,
                    heatmap=annotation,
                    event=event,
                    preview=preview,
                    preview_content_suppressed=event is not None and preview is not None,
                    covered_by_event=key in covered,
                    is_today=today_index == day,
                    is_past=past,
                    date_label=date_label,
                    visual_group=group,
                    merge_above=groups.get(cell_key(day, hour - 1)) == group,
                    merge_below=groups.get(cell_key(day, hour + 1)) == group,
                )

        return CompositeGrid(
            hour_range=self.hour_range,
            cells=cells,
            today_index=today_index,
            day_labels=tuple(day_labels) if day_labels else None,
        )

    @staticmethod
    def _events_for_display(
        events: List[EventBlock],
        next_week_events: Optional[List[EventBlock]],
        today_index: Optional[int],
        current_hour: Optional[float],
    ) -> List[EventBlock]:
        """
        Pick which events fill the grid.

        In the rolling view, this week's events on fully past days (or ended
        before the current hour today) are replaced by next week's.
        """
        if next_week_events is None or today_index is None:
            return events

        now_hour = math.floor(current_hour) if current_hour is not None else None

        def has_passed(event: EventBlock) -> bool:
            if event.day_of_week < today_index:
                return True
            return event.day_of_week == today_index and now_hour is not None and event.end_hour <= now_hour

        result = [event for event in events if not has_passed(event)]
        result.extend(event for event in next_week_events if has_passed(event))
        return result
