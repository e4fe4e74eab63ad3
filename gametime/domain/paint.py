"""
Drag-to-paint interaction state machine for the availability grid.

The controller turns pointer events into grid mutations. It has two states:

    IDLE --pointer_down(paintable)--> PAINTING(mode)
    PAINTING --pointer_enter(cell)--> PAINTING (cell forced to mode's target)
    PAINTING --pointer_up--> IDLE

The mode is chosen once, from the status of the cell where the drag starts.
Cells entered later are forced to that mode's target status instead of being
toggled individually.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional, Set

from .grid import GridModel
from .models import CellKey, Slot, SlotStatus, cell_key
from .overlay import is_past_cell

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[List[Slot]], None]


class PaintState(str, Enum):
    IDLE = "idle"
    PAINTING = "painting"


class PaintMode(str, Enum):
    PAINT = "paint"
    ERASE = "erase"

    @property
    def target_status(self) -> SlotStatus:
        return SlotStatus.AVAILABLE if self is PaintMode.PAINT else SlotStatus.INACTIVE


class PaintController:
    """
    Translates pointer events into whole-template emissions.

    Each mutation produces the complete list of non-inactive slots, returned
    from the transition method and passed to ``on_change``. Callers replace
    their state with it wholesale.

    In the rolling-week view (``next_week`` plus a known "now"), past cells
    that were not repainted show next week's status. Locks and the drag
    mode follow that displayed status, while writes always go to ``grid``.
    """

    def __init__(
        self,
        grid: GridModel,
        on_change: Optional[ChangeCallback] = None,
        read_only: bool = False,
        next_week: Optional[GridModel] = None,
        today_index: Optional[int] = None,
        current_hour: Optional[float] = None,
    ):
        self._grid = grid
        self.next_week = next_week
        self.today_index = today_index
        self.current_hour = current_hour
        self._on_change = on_change
        self.read_only = read_only
        self.state = PaintState.IDLE
        self.mode: Optional[PaintMode] = None
        self.dirty_cells: Set[CellKey] = set()

    @property
    def grid(self) -> GridModel:
        return self._grid

    @property
    def is_interactive(self) -> bool:
        return not self.read_only

    def load(self, grid: GridModel) -> None:
        """Replace the grid, e.g. after the owning form saved or reloaded."""
        self._grid = grid

    def displayed_status(self, day_of_week: int, hour: int) -> SlotStatus:
        """Status the user sees for a cell, next week's for untouched past cells."""
        if (
            self.next_week is not None
            and is_past_cell(day_of_week, hour, self.today_index, self.current_hour)
            and cell_key(day_of_week, hour) not in self.dirty_cells
        ):
            return self.next_week.status(day_of_week, hour)
        return self._grid.status(day_of_week, hour)

    def pointer_down(self, day_of_week: int, hour: int) -> Optional[List[Slot]]:
        """
        Start a drag on a cell.

        A stray PAINTING state left behind by a lost pointer_up is simply
        re-anchored here.

        Returns:
            The emitted slot list, or None when the cell is not paintable
        """
        if self.read_only:
            return None

        current = self.displayed_status(day_of_week, hour)
        if not current.is_paintable:
            logger.debug("Ignoring pointer down on %s cell (%s, %s)", current.value, day_of_week, hour)
            return None

        self.mode = PaintMode.ERASE if current is SlotStatus.AVAILABLE else PaintMode.PAINT
        self.state = PaintState.PAINTING
        return self._apply(day_of_week, hour)

    def pointer_enter(self, day_of_week: int, hour: int) -> Optional[List[Slot]]:
        """Continue a drag into another cell."""
        if self.read_only or self.state is not PaintState.PAINTING:
            return None

        if not self.displayed_status(day_of_week, hour).is_paintable:
            return None

        return self._apply(day_of_week, hour)

    def pointer_up(self) -> None:
        """Finish the drag. The final state was already emitted."""
        self.state = PaintState.IDLE
        self.mode = None

    def _apply(self, day_of_week: int, hour: int) -> List[Slot]:
        self._grid = self._grid.with_status(day_of_week, hour, self.mode.target_status)
        self.dirty_cells.add(cell_key(day_of_week, hour))

        slots = self._grid.to_slots()
        if self._on_change is not None:
            self._on_change(slots)
        return slots
