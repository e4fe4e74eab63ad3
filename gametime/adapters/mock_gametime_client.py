"""
Mock game time backend for running the CLI and tests without a server.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..domain.models import CellKey, EventBlock, HeatmapCell, Slot, cell_key


class MockGameTimeClient:
    """
    Mock client that serves records from mock_gametime_data.json.

    Saved templates are kept in memory, so a save followed by a load
    returns what was saved.
    """

    def __init__(self, data_file: Optional[Path] = None):
        """
        Initialize the mock client.

        Args:
            data_file: Optional path to a JSON fixture; defaults to the bundled one
        """
        self.data_file = data_file or Path(__file__).parent / "mock_gametime_data.json"
        self._load_data()

    def _load_data(self):
        """Load mock records from the JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                data: Dict[str, Any] = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            data = {}

        self.slots = [Slot.from_dict(record) for record in data.get("slots", [])]
        self.events = [EventBlock.from_dict(record) for record in data.get("events", [])]
        self.heatmaps = {
            int(context_id): [HeatmapCell.from_dict(record) for record in cells]
            for context_id, cells in data.get("heatmaps", {}).items()
        }
        self.interest = data.get("interest", {})

    async def get_template(self, week_start: Optional[str] = None) -> List[Slot]:
        return list(self.slots)

    async def get_week(self, week_start: Optional[str] = None) -> Tuple[List[Slot], List[EventBlock]]:
        return list(self.slots), list(self.events)

    async def get_heatmap(self, context_id: int) -> List[HeatmapCell]:
        return list(self.heatmaps.get(context_id, []))

    async def save_template(self, slots: Sequence[Slot]) -> List[Slot]:
        self.slots = list(slots)
        return list(self.slots)

    async def get_interest(self, game_id: int) -> Tuple[Dict[CellKey, int], int]:
        game = self.interest.get(str(game_id), {})
        counts = {
            cell_key(int(record["dayOfWeek"]), int(record["hour"])): int(record["count"])
            for record in game.get("cells", [])
        }
        return counts, int(game.get("interestedPlayerCount", 0))
