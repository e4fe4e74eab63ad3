"""
Domain-specific exception hierarchy for the game time engine.
"""

from typing import Dict


class GameTimeError(Exception):
    """Base class for all application-level errors."""


class InvalidSlotError(GameTimeError, ValueError):
    """Raised when a slot lies outside the 7 x 24 weekly grid."""


class InvalidBlockError(GameTimeError, ValueError):
    """Raised when an event or preview block has an impossible hour span."""


class InvalidHeatmapCellError(GameTimeError, ValueError):
    """Raised when a heatmap cell carries inconsistent counts."""


class InvalidHourRangeError(GameTimeError, ValueError):
    """Raised when a visible hour range is not within 0..24."""


class FormValidationError(GameTimeError):
    """Raised when an owning form is submitted in an invalid state."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(summary or "Form is invalid")


class GameTimeAPIError(GameTimeError):
    """Raised when collaborator data cannot be fetched or parsed."""
