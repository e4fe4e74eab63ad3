"""
Explicit state for the forms that own a grid or a poll.

Each state is an immutable dataclass. It only changes through the named
reducer functions in this module, and each of them returns a new state.
A UI binding keeps a reference to the latest state and swaps it on every
action.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

import pendulum
from pendulum import DateTime
from pendulum.parsing.exceptions import ParserError

from ..domain.exceptions import FormValidationError
from ..domain.models import HOURS_PER_DAY, PollOption, PreviewBlock, Slot, SlotStatus
from ..domain.recurrence import Frequency, count_occurrences
from ..domain.suggestions import LABEL_FORMAT

logger = logging.getLogger(__name__)

MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 9
CUSTOM_LABEL_FORMAT = f"{LABEL_FORMAT} zz"


# ---------------------------------------------------------------------------
# Availability template
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AvailabilityFormState:
    """The owner's weekly template while it is being edited."""
    slots: Tuple[Slot, ...] = ()
    dirty: bool = False


def replace_slots(state: AvailabilityFormState, slots: Iterable[Slot]) -> AvailabilityFormState:
    """Take a paint emission wholesale. Inactive entries are dropped."""
    kept = tuple(slot for slot in slots if SlotStatus(slot.status) is not SlotStatus.INACTIVE)
    return replace(state, slots=kept, dirty=True)


def mark_saved(state: AvailabilityFormState) -> AvailabilityFormState:
    return replace(state, dirty=False)


# ---------------------------------------------------------------------------
# Event plan (community poll)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlanFormState:
    """Poll-based event plan being drafted."""
    title: str = ""
    duration_minutes: int = 120
    selected_time_slots: Tuple[PollOption, ...] = ()
    custom_date: str = ""
    custom_time: str = ""
    errors: Dict[str, str] = field(default_factory=dict)


def _clear_error(errors: Dict[str, str], name: str) -> Dict[str, str]:
    if name not in errors:
        return errors
    cleared = dict(errors)
    cleared[name] = ""
    return cleared


def set_title(state: PlanFormState, title: str) -> PlanFormState:
    return replace(state, title=title, errors=_clear_error(state.errors, "title"))


def set_duration(state: PlanFormState, duration_minutes: int) -> PlanFormState:
    return replace(state, duration_minutes=duration_minutes, errors=_clear_error(state.errors, "duration"))


def add_time_slot(state: PlanFormState, option: PollOption) -> PlanFormState:
    """
    Select a poll option.

    Ignored when the poll is full or an option with the identical date
    string is already selected.
    """
    if len(state.selected_time_slots) >= MAX_POLL_OPTIONS:
        return state
    if any(selected.date == option.date for selected in state.selected_time_slots):
        return state
    return replace(
        state,
        selected_time_slots=state.selected_time_slots + (option,),
        errors=_clear_error(state.errors, "timeSlots"),
    )


def remove_time_slot(state: PlanFormState, date: str) -> PlanFormState:
    return replace(
        state,
        selected_time_slots=tuple(option for option in state.selected_time_slots if option.date != date),
    )


def set_custom_date(state: PlanFormState, custom_date: str) -> PlanFormState:
    return replace(state, custom_date=custom_date)


def set_custom_time(state: PlanFormState, custom_time: str) -> PlanFormState:
    return replace(state, custom_time=custom_time)


def add_custom_time(state: PlanFormState, timezone: Optional[str] = None) -> PlanFormState:
    """
    Turn the custom date/time inputs into a poll option.

    The inputs are read as wall-clock time in the community timezone (UTC
    when none is configured). Incomplete or unparseable input leaves the
    state untouched.
    """
    if not state.custom_date or not state.custom_time:
        return state

    tz = timezone or "UTC"
    try:
        moment = pendulum.parse(f"{state.custom_date}T{state.custom_time}", tz=tz)
    except (ParserError, ValueError):
        logger.debug("Ignoring unparseable custom time %s %s", state.custom_date, state.custom_time)
        return state

    if not isinstance(moment, DateTime):
        return state

    option = PollOption(
        date=moment.in_timezone("UTC").to_iso8601_string(),
        label=moment.in_timezone(tz).format(CUSTOM_LABEL_FORMAT),
    )
    updated = add_time_slot(state, option)
    return replace(updated, custom_date="", custom_time="")


def validate_plan(state: PlanFormState) -> Dict[str, str]:
    """Collect field errors; an empty dict means the plan can be submitted."""
    errors: Dict[str, str] = {}
    if not state.title.strip():
        errors["title"] = "Title is required"
    if len(state.selected_time_slots) < MIN_POLL_OPTIONS:
        errors["timeSlots"] = f"Select at least {MIN_POLL_OPTIONS} time options"
    if len(state.selected_time_slots) > MAX_POLL_OPTIONS:
        errors["timeSlots"] = f"Maximum {MAX_POLL_OPTIONS} time options"
    if state.duration_minutes <= 0:
        errors["duration"] = "Duration must be greater than 0"
    return errors


def submit_plan(state: PlanFormState) -> PlanFormState:
    """Run validation and store the resulting errors on the state."""
    return replace(state, errors=validate_plan(state))


def build_poll_options(state: PlanFormState) -> List[PollOption]:
    """
    The ``pollOptions`` payload for event plan creation.

    Raises:
        FormValidationError: If the plan does not validate
    """
    errors = validate_plan(state)
    if errors:
        raise FormValidationError(errors)
    return list(state.selected_time_slots)


# ---------------------------------------------------------------------------
# Recurring event creation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecurrenceFormState:
    """Start time and repeat rule of an event being created."""
    start: Optional[str] = None
    frequency: Optional[Frequency] = None
    until: Optional[str] = None


def set_start(state: RecurrenceFormState, start: Optional[str]) -> RecurrenceFormState:
    return replace(state, start=start)


def set_frequency(state: RecurrenceFormState, frequency: Optional[str]) -> RecurrenceFormState:
    return replace(state, frequency=Frequency(frequency) if frequency else None)


def set_until(state: RecurrenceFormState, until: Optional[str]) -> RecurrenceFormState:
    return replace(state, until=until)


def preview_occurrence_count(state: RecurrenceFormState) -> int:
    """
    How many events will be created, shown to the user before submitting.

    Raises:
        FormValidationError: If the start, or the end date of a repeat, is missing
    """
    if not state.start:
        raise FormValidationError({"start": "Start time is required"})
    if state.frequency is None:
        return 1
    if not state.until:
        raise FormValidationError({"until": "An end date is required for repeating events"})
    return count_occurrences(state.start, state.frequency, state.until)


# ---------------------------------------------------------------------------
# Grid previews
# ---------------------------------------------------------------------------


def draft_preview_block(
    start: str,
    duration_minutes: int,
    timezone: Optional[str] = None,
    title: Optional[str] = None,
    game_name: Optional[str] = None,
    game_slug: Optional[str] = None,
) -> PreviewBlock:
    """
    Place the event being drafted on the viewer's weekly grid.

    The block covers every hour the event touches and is cut at midnight.
    """
    local = pendulum.parse(start, tz="UTC").in_timezone(timezone or "UTC")
    end_hour = min(HOURS_PER_DAY, local.hour + math.ceil((local.minute + duration_minutes) / 60))
    return PreviewBlock(
        day_of_week=local.isoweekday() % 7,
        start_hour=local.hour,
        end_hour=max(end_hour, local.hour + 1),
        label="This Event",
        title=title,
        game_name=game_name,
        game_slug=game_slug,
    )


def selection_preview_block(
    day_of_week: int,
    hour: int,
    duration_hours: int,
    title: Optional[str] = None,
    game_name: Optional[str] = None,
    game_slug: Optional[str] = None,
) -> PreviewBlock:
    """Preview for a new time picked by clicking a cell (rescheduling)."""
    return PreviewBlock(
        day_of_week=day_of_week,
        start_hour=hour,
        end_hour=max(hour + 1, min(HOURS_PER_DAY, hour + duration_hours)),
        label="New Time",
        variant="selected",
        title=title,
        game_name=game_name,
        game_slug=game_slug,
    )
