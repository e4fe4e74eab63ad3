"""
Domain layer - Pure grid and scheduling logic without I/O.
"""

from .exceptions import (
    FormValidationError,
    GameTimeAPIError,
    GameTimeError,
    InvalidBlockError,
    InvalidHeatmapCellError,
    InvalidHourRangeError,
    InvalidSlotError,
)
from .grid import GridModel
from .models import (
    EventBlock,
    HeatmapCell,
    PollOption,
    PreviewBlock,
    Slot,
    SlotStatus,
    SuggestionSource,
    TimeSuggestion,
)
from .overlay import CellDescriptor, CompositeGrid, HeatmapAnnotation, OverlayCompositor
from .paint import PaintController, PaintMode, PaintState
from .recurrence import MAX_RECURRENCE_INSTANCES, Frequency, count_occurrences, generate_recurring_dates
from .suggestions import SuggestionResponse, TimeSuggestionRanker

__all__ = [
    "CellDescriptor",
    "CompositeGrid",
    "EventBlock",
    "FormValidationError",
    "Frequency",
    "GameTimeAPIError",
    "GameTimeError",
    "GridModel",
    "HeatmapAnnotation",
    "HeatmapCell",
    "InvalidBlockError",
    "InvalidHeatmapCellError",
    "InvalidHourRangeError",
    "InvalidSlotError",
    "MAX_RECURRENCE_INSTANCES",
    "OverlayCompositor",
    "PaintController",
    "PaintMode",
    "PaintState",
    "PollOption",
    "PreviewBlock",
    "Slot",
    "SlotStatus",
    "SuggestionResponse",
    "SuggestionSource",
    "TimeSuggestion",
    "TimeSuggestionRanker",
    "count_occurrences",
    "generate_recurring_dates",
]
