"""
Tests for the drag-to-paint controller.
"""

import pytest

from gametime.domain.grid import GridModel
from gametime.domain.models import Slot, SlotStatus
from gametime.domain.paint import PaintController, PaintMode, PaintState


@pytest.fixture
def emissions():
    """Collects every slot list passed to on_change."""
    return []


@pytest.fixture
def locked_grid():
    """Grid with one committed and one blocked cell on Tuesday evening."""
    return GridModel([
        Slot(2, 19, SlotStatus.COMMITTED),
        Slot(2, 20, SlotStatus.BLOCKED),
    ])


class TestPointerDown:
    """Tests for starting a drag."""

    def test_paint_on_inactive_cell(self, emissions):
        """Pressing an inactive cell starts painting and emits the template."""
        controller = PaintController(GridModel(), on_change=emissions.append)

        result = controller.pointer_down(1, 10)

        assert result == [Slot(1, 10)]
        assert emissions == [[Slot(1, 10)]]
        assert controller.state is PaintState.PAINTING
        assert controller.mode is PaintMode.PAINT

    def test_erase_on_available_cell(self):
        """Pressing an available cell starts erasing."""
        controller = PaintController(GridModel([Slot(1, 10), Slot(1, 11)]))

        result = controller.pointer_down(1, 10)

        assert result == [Slot(1, 11)]
        assert controller.mode is PaintMode.ERASE

    def test_freed_cell_is_painted_available(self):
        """A freed cell starts a paint drag and becomes available."""
        controller = PaintController(GridModel([Slot(5, 22, SlotStatus.FREED)]))

        result = controller.pointer_down(5, 22)

        assert controller.mode is PaintMode.PAINT
        assert result == [Slot(5, 22, SlotStatus.AVAILABLE)]

    def test_toggle_twice_is_idempotent(self, emissions):
        """Down/up on the same cell twice restores the original grid."""
        original = GridModel([Slot(4, 8)])
        controller = PaintController(original, on_change=emissions.append)

        controller.pointer_down(0, 12)
        controller.pointer_up()
        controller.pointer_down(0, 12)
        controller.pointer_up()

        assert controller.grid == original
        assert emissions[-1] == original.to_slots()

    @pytest.mark.parametrize("day, hour", [(2, 19), (2, 20)])
    def test_locked_cells_are_ignored(self, locked_grid, emissions, day, hour):
        """Committed and blocked cells never start a drag."""
        controller = PaintController(locked_grid, on_change=emissions.append)

        assert controller.pointer_down(day, hour) is None
        assert controller.state is PaintState.IDLE
        assert controller.grid == locked_grid
        assert emissions == []

    def test_read_only_ignores_everything(self, emissions):
        controller = PaintController(GridModel(), on_change=emissions.append, read_only=True)

        assert controller.pointer_down(1, 1) is None
        assert controller.pointer_enter(1, 2) is None
        assert controller.state is PaintState.IDLE
        assert not controller.is_interactive
        assert emissions == []

    def test_stray_painting_state_is_reanchored(self):
        """A lost pointer_up does not stop the next drag from choosing its own mode."""
        controller = PaintController(GridModel([Slot(6, 14)]))

        controller.pointer_down(0, 9)
        assert controller.mode is PaintMode.PAINT

        controller.pointer_down(6, 14)

        assert controller.state is PaintState.PAINTING
        assert controller.mode is PaintMode.ERASE
        assert controller.grid.status(6, 14) is SlotStatus.INACTIVE


class TestDrag:
    """Tests for dragging across cells."""

    def test_drag_emits_once_per_cell(self, emissions):
        """Dragging over N paintable cells produces N emissions."""
        controller = PaintController(GridModel([Slot(0, 5)]), on_change=emissions.append)

        controller.pointer_down(1, 10)
        controller.pointer_enter(1, 11)
        controller.pointer_enter(1, 12)
        controller.pointer_up()

        assert len(emissions) == 3
        assert emissions[-1] == [Slot(0, 5), Slot(1, 10), Slot(1, 11), Slot(1, 12)]
        assert controller.state is PaintState.IDLE
        assert controller.mode is None

    def test_erase_forces_cells_inactive(self, emissions):
        """Erase mode forces every entered cell to inactive, never toggling."""
        grid = GridModel([Slot(2, 8), Slot(2, 10)])
        controller = PaintController(grid, on_change=emissions.append)

        controller.pointer_down(2, 8)
        controller.pointer_enter(2, 9)
        controller.pointer_enter(2, 10)
        controller.pointer_up()

        assert controller.grid.to_slots() == []
        assert controller.grid.status(2, 9) is SlotStatus.INACTIVE
        assert len(emissions) == 3

    def test_paint_forces_already_available_cell(self, emissions):
        """Entering a cell that already matches still emits and keeps it."""
        controller = PaintController(GridModel([Slot(3, 11)]), on_change=emissions.append)

        controller.pointer_down(3, 10)
        result = controller.pointer_enter(3, 11)

        assert result == [Slot(3, 10), Slot(3, 11)]
        assert len(emissions) == 2

    def test_drag_skips_locked_cells(self, locked_grid, emissions):
        """Locked cells in the drag path are left alone."""
        controller = PaintController(locked_grid, on_change=emissions.append)

        controller.pointer_down(2, 18)
        assert controller.pointer_enter(2, 19) is None
        assert controller.pointer_enter(2, 20) is None
        controller.pointer_enter(2, 21)
        controller.pointer_up()

        assert len(emissions) == 2
        assert controller.grid.status(2, 19) is SlotStatus.COMMITTED
        assert controller.grid.status(2, 20) is SlotStatus.BLOCKED
        assert controller.grid.status(2, 21) is SlotStatus.AVAILABLE

    def test_enter_without_drag_is_ignored(self, emissions):
        controller = PaintController(GridModel(), on_change=emissions.append)

        assert controller.pointer_enter(1, 1) is None
        assert emissions == []

    def test_dirty_cells_track_painted_cells(self):
        controller = PaintController(GridModel())

        controller.pointer_down(4, 1)
        controller.pointer_enter(4, 2)
        controller.pointer_up()

        assert controller.dirty_cells == {(4, 1), (4, 2)}

    def test_load_replaces_grid(self):
        controller = PaintController(GridModel())
        replacement = GridModel([Slot(1, 1)])

        controller.load(replacement)

        assert controller.grid is replacement


class TestRollingWeek:
    """Tests for painting while past cells show next week."""

    @pytest.fixture
    def controller(self, emissions):
        """Wednesday 3:30 PM; next week has a committed Monday evening."""
        this_week = GridModel([Slot(1, 20), Slot(4, 20, SlotStatus.BLOCKED)])
        next_week = GridModel([
            Slot(1, 20, SlotStatus.COMMITTED),
            Slot(1, 21, SlotStatus.BLOCKED),
            Slot(2, 9),
        ])
        return PaintController(
            this_week,
            on_change=emissions.append,
            next_week=next_week,
            today_index=3,
            current_hour=15.5,
        )

    def test_past_cell_locked_by_next_week(self, controller, emissions):
        """A past cell displayed as committed cannot start a drag."""
        assert controller.displayed_status(1, 20) is SlotStatus.COMMITTED
        assert controller.pointer_down(1, 20) is None
        assert controller.state is PaintState.IDLE
        assert emissions == []

    def test_drag_skips_past_cell_locked_by_next_week(self, controller, emissions):
        controller.pointer_down(1, 22)

        assert controller.pointer_enter(1, 21) is None
        assert len(emissions) == 1
        assert controller.grid.status(1, 21) is SlotStatus.INACTIVE

    def test_mode_follows_displayed_status(self, controller):
        """Next week's available cell starts an erase drag."""
        controller.pointer_down(2, 9)

        assert controller.mode is PaintMode.ERASE
        assert controller.grid.status(2, 9) is SlotStatus.INACTIVE

    def test_future_cells_use_this_week(self, controller):
        assert controller.displayed_status(4, 20) is SlotStatus.BLOCKED
        assert controller.pointer_down(4, 20) is None
        assert controller.displayed_status(3, 16) is SlotStatus.INACTIVE

    def test_repainted_past_cell_shows_this_week(self, controller):
        controller.pointer_down(2, 10)
        controller.pointer_up()

        assert controller.displayed_status(2, 10) is SlotStatus.AVAILABLE
