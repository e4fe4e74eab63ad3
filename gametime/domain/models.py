"""
Domain models for the weekly game time grid.

Every record here mirrors one shape exchanged with the backend. The
``from_dict`` / ``to_dict`` helpers translate between the camelCase wire
format and Python attributes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .exceptions import InvalidBlockError, InvalidHeatmapCellError

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24

# 0=Sunday, 6=Saturday
DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

CellKey = Tuple[int, int]


def cell_key(day_of_week: int, hour: int) -> CellKey:
    """Identity key of a grid cell."""
    return (day_of_week, hour)


class SlotStatus(str, Enum):
    """Status of one (day, hour) cell in a weekly template."""
    INACTIVE = "inactive"
    AVAILABLE = "available"
    COMMITTED = "committed"
    BLOCKED = "blocked"
    FREED = "freed"

    @property
    def is_paintable(self) -> bool:
        """Committed and blocked cells cannot be edited directly."""
        return self not in (SlotStatus.COMMITTED, SlotStatus.BLOCKED)


@dataclass(frozen=True)
class Slot:
    """
    One persisted cell of a user's weekly availability template.

    Range checking happens when slots are loaded into a ``GridModel``.
    """
    day_of_week: int  # 0=Sunday, 6=Saturday
    hour: int
    status: SlotStatus = SlotStatus.AVAILABLE

    @property
    def key(self) -> CellKey:
        return cell_key(self.day_of_week, self.hour)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slot":
        return cls(
            day_of_week=int(data["dayOfWeek"]),
            hour=int(data["hour"]),
            status=SlotStatus(data.get("status", SlotStatus.AVAILABLE.value)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "hour": self.hour,
            "status": self.status.value,
        }


def _validate_span(kind: str, day_of_week: int, start_hour: int, end_hour: int) -> None:
    if not 0 <= day_of_week < DAYS_PER_WEEK:
        raise InvalidBlockError(f"{kind} day_of_week must be between 0 and 6, got {day_of_week}")
    if not 0 <= start_hour < end_hour <= HOURS_PER_DAY:
        raise InvalidBlockError(
            f"{kind} hours must satisfy 0 <= start < end <= 24, got {start_hour}-{end_hour}"
        )


@dataclass(frozen=True)
class EventBlock:
    """
    Footprint of a scheduled event occurrence on the weekly grid.

    The block is anchored at (day_of_week, start_hour) and visually spans
    up to end_hour. Day and hours are already in the viewer's local grid.
    """
    event_id: int
    title: str
    day_of_week: int
    start_hour: int
    end_hour: int
    game_slug: Optional[str] = None
    game_name: Optional[str] = None
    cover_url: Optional[str] = None
    signup_id: Optional[int] = None
    confirmation_status: Optional[str] = None
    description: Optional[str] = None
    creator_username: Optional[str] = None

    def __post_init__(self):
        _validate_span("EventBlock", self.day_of_week, self.start_hour, self.end_hour)

    @property
    def anchor(self) -> CellKey:
        return cell_key(self.day_of_week, self.start_hour)

    @property
    def span_hours(self) -> int:
        return self.end_hour - self.start_hour

    def covers(self, day_of_week: int, hour: int) -> bool:
        """Check whether the block's span includes a cell."""
        return day_of_week == self.day_of_week and self.start_hour <= hour < self.end_hour

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventBlock":
        return cls(
            event_id=data["eventId"],
            title=data["title"],
            day_of_week=int(data["dayOfWeek"]),
            start_hour=int(data["startHour"]),
            end_hour=int(data["endHour"]),
            game_slug=data.get("gameSlug"),
            game_name=data.get("gameName"),
            cover_url=data.get("coverUrl"),
            signup_id=data.get("signupId"),
            confirmation_status=data.get("confirmationStatus"),
            description=data.get("description"),
            creator_username=data.get("creatorUsername"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eventId": self.event_id,
            "title": self.title,
            "gameSlug": self.game_slug,
            "gameName": self.game_name,
            "coverUrl": self.cover_url,
            "signupId": self.signup_id,
            "confirmationStatus": self.confirmation_status,
            "dayOfWeek": self.day_of_week,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
        }


@dataclass(frozen=True)
class PreviewBlock:
    """
    Ephemeral candidate time drawn while an event is being composed.

    Never persisted. ``variant`` is "current" for the draft being edited and
    "selected" for an option the user has picked.
    """
    day_of_week: int
    start_hour: int
    end_hour: int
    label: Optional[str] = None
    title: Optional[str] = None
    game_name: Optional[str] = None
    game_slug: Optional[str] = None
    variant: str = "current"

    def __post_init__(self):
        _validate_span("PreviewBlock", self.day_of_week, self.start_hour, self.end_hour)
        if self.variant not in ("current", "selected"):
            raise InvalidBlockError(f"Unknown preview variant: {self.variant}")

    @property
    def anchor(self) -> CellKey:
        return cell_key(self.day_of_week, self.start_hour)

    @property
    def span_hours(self) -> int:
        return self.end_hour - self.start_hour


@dataclass(frozen=True)
class HeatmapCell:
    """Pre-aggregated availability counts for one cell."""
    day_of_week: int
    hour: int
    available_count: int
    total_count: int

    def __post_init__(self):
        if not 0 <= self.day_of_week < DAYS_PER_WEEK or not 0 <= self.hour < HOURS_PER_DAY:
            raise InvalidHeatmapCellError(
                f"Heatmap cell ({self.day_of_week}, {self.hour}) is outside the weekly grid"
            )
        if not 0 <= self.available_count <= self.total_count:
            raise InvalidHeatmapCellError(
                f"Heatmap counts must satisfy 0 <= available <= total, "
                f"got {self.available_count} of {self.total_count}"
            )

    @property
    def key(self) -> CellKey:
        return cell_key(self.day_of_week, self.hour)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeatmapCell":
        return cls(
            day_of_week=int(data["dayOfWeek"]),
            hour=int(data["hour"]),
            available_count=int(data["availableCount"]),
            total_count=int(data["totalCount"]),
        )


@dataclass(frozen=True)
class PollOption:
    """
    One candidate start time offered to voters.

    Two options are the same option only if their ``date`` strings match
    exactly; equal instants written differently are distinct.
    """
    date: str
    label: str

    def to_dict(self) -> Dict[str, str]:
        return {"date": self.date, "label": self.label}


class SuggestionSource(str, Enum):
    """Where a list of time suggestions came from."""
    FALLBACK = "fallback"
    GAME_INTEREST = "game-interest"


@dataclass(frozen=True)
class TimeSuggestion:
    """A candidate start time with the number of players available then."""
    date: str
    label: str
    available_count: int = 0

    def to_poll_option(self) -> PollOption:
        return PollOption(date=self.date, label=self.label)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "label": self.label,
            "availableCount": self.available_count,
        }
