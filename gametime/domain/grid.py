"""
Canonical (day-of-week, hour) -> status mapping for one owner's week.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping

from .exceptions import InvalidSlotError
from .models import DAYS_PER_WEEK, HOURS_PER_DAY, CellKey, Slot, SlotStatus, cell_key


def check_cell(day_of_week: int, hour: int) -> None:
    """Raise InvalidSlotError unless the cell lies in the 7 x 24 week."""
    if not 0 <= day_of_week < DAYS_PER_WEEK:
        raise InvalidSlotError(f"day_of_week must be between 0 and 6, got {day_of_week}")
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidSlotError(f"hour must be between 0 and 23, got {hour}")


class GridModel:
    """
    Immutable sparse weekly grid.

    Only non-inactive cells are stored; absence means ``inactive``. When the
    input holds the same cell twice, the last slot wins.
    """

    def __init__(self, slots: Iterable[Slot] = ()):
        statuses: Dict[CellKey, SlotStatus] = {}

        for slot in slots:
            check_cell(slot.day_of_week, slot.hour)
            status = SlotStatus(slot.status)
            if status is SlotStatus.INACTIVE:
                statuses.pop(slot.key, None)
            else:
                statuses[slot.key] = status

        self._statuses = statuses

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> "GridModel":
        """Build a grid from wire-format slot records."""
        return cls(Slot.from_dict(record) for record in records)

    @classmethod
    def _from_mapping(cls, statuses: Mapping[CellKey, SlotStatus]) -> "GridModel":
        grid = cls.__new__(cls)
        grid._statuses = dict(statuses)
        return grid

    def status(self, day_of_week: int, hour: int) -> SlotStatus:
        """Status of a cell, ``inactive`` when nothing is stored."""
        check_cell(day_of_week, hour)
        return self._statuses.get(cell_key(day_of_week, hour), SlotStatus.INACTIVE)

    def is_paintable(self, day_of_week: int, hour: int) -> bool:
        return self.status(day_of_week, hour).is_paintable

    def with_status(self, day_of_week: int, hour: int, status: SlotStatus) -> "GridModel":
        """Return a copy of this grid with one cell changed."""
        check_cell(day_of_week, hour)
        statuses = dict(self._statuses)
        key = cell_key(day_of_week, hour)
        if status is SlotStatus.INACTIVE:
            statuses.pop(key, None)
        else:
            statuses[key] = status
        return GridModel._from_mapping(statuses)

    def to_slots(self) -> List[Slot]:
        """The weekly template: every non-inactive slot, ordered by day then hour."""
        return [
            Slot(day_of_week=day, hour=hour, status=status)
            for (day, hour), status in sorted(self._statuses.items())
        ]

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.to_slots())

    def __len__(self) -> int:
        return len(self._statuses)

    def __contains__(self, key: object) -> bool:
        return key in self._statuses

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridModel):
            return NotImplemented
        return self._statuses == other._statuses

    def __repr__(self) -> str:
        return f"GridModel({len(self._statuses)} slots)"
