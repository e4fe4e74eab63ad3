"""
Application services for loading, composing and saving game time grids.

The service fetches already-resolved records through a client adapter and
hands them to the pure domain components. The client is typed as a protocol,
so the real HTTP adapter and the mock one are interchangeable and tests can
pass a stub.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..domain.grid import GridModel
from ..domain.models import CellKey, EventBlock, HeatmapCell, PreviewBlock, Slot, SlotStatus
from ..domain.overlay import CompositeGrid, OverlayCompositor
from ..domain.recurrence import DateInput
from ..domain.suggestions import DEFAULT_EVENING_HOURS, SuggestionResponse, TimeSuggestionRanker

logger = logging.getLogger(__name__)


class GameTimeClientProtocol(Protocol):
    """Protocol describing the backend operations the service needs."""

    async def get_template(self, week_start: Optional[str] = None) -> List[Slot]:
        """Return the owner's weekly template slots."""

    async def get_week(self, week_start: Optional[str] = None) -> Tuple[List[Slot], List[EventBlock]]:
        """Return template slots and local-grid event blocks from one snapshot."""

    async def get_heatmap(self, context_id: int) -> List[HeatmapCell]:
        """Return aggregated availability for an event or game context."""

    async def save_template(self, slots: Sequence[Slot]) -> List[Slot]:
        """Replace the stored template with ``slots``."""

    async def get_interest(self, game_id: int) -> Tuple[Dict[CellKey, int], int]:
        """Return per-cell counts of a game's interested players and how many there are."""


class GameTimeService:
    """
    Orchestrates collaborator data retrieval and grid composition.
    """

    def __init__(
        self,
        client: GameTimeClientProtocol,
        compositor: Optional[OverlayCompositor] = None,
        ranker: Optional[TimeSuggestionRanker] = None,
    ) -> None:
        self._client = client
        self._compositor = compositor or OverlayCompositor()
        self._ranker = ranker or TimeSuggestionRanker()

    async def load_template(self, week_start: Optional[str] = None) -> GridModel:
        """Fetch the owner's template into a GridModel."""
        slots = await self._client.get_template(week_start)
        return GridModel(slots)

    async def load_grid(
        self,
        *,
        week_start: Optional[str] = None,
        heatmap_context: Optional[int] = None,
        previews: Iterable[PreviewBlock] = (),
        today_index: Optional[int] = None,
        current_hour: Optional[float] = None,
    ) -> CompositeGrid:
        """
        Fetch template, events and (optionally) heatmap and compose the grid.
        """
        slots, events = await self._client.get_week(week_start)
        grid = GridModel(slots)

        heatmap: Optional[List[HeatmapCell]] = None
        if heatmap_context is not None:
            heatmap = await self._client.get_heatmap(heatmap_context)

        logger.debug(
            "Composing grid with %d slots, %d events, %d heatmap cells",
            len(grid),
            len(events),
            len(heatmap or []),
        )

        return self._compositor.compose(
            grid,
            heatmap=heatmap,
            events=events,
            previews=list(previews),
            today_index=today_index,
            current_hour=current_hour,
            week_start=week_start,
        )

    async def save_template(self, slots: Iterable[Slot]) -> GridModel:
        """
        Persist the full template.

        The slot list is normalized through a GridModel first, so the
        backend always receives a complete replacement set without inactive
        or duplicate entries.
        """
        normalized = GridModel(slots).to_slots()
        saved = await self._client.save_template(normalized)
        logger.info("Saved game time template with %d slots", len(normalized))
        return GridModel(slot for slot in saved if slot.status is not SlotStatus.INACTIVE)

    async def suggest_times(
        self,
        *,
        after: DateInput,
        game_id: Optional[int] = None,
        days_ahead: int = 14,
        top_n: int = 21,
        limit: int = 20,
        evening_hours: Sequence[int] = DEFAULT_EVENING_HOURS,
    ) -> SuggestionResponse:
        """Rank poll candidates from game interest, or fall back to presets."""
        counts: Dict[CellKey, int] = {}
        interested = 0

        if game_id is not None:
            counts, interested = await self._client.get_interest(game_id)

        return self._ranker.suggest(
            counts,
            after,
            interested_player_count=interested,
            days_ahead=days_ahead,
            top_n=top_n,
            limit=limit,
            evening_hours=evening_hours,
        )
