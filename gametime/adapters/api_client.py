"""
HTTP client for the community backend's game time endpoints.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from ..domain.exceptions import GameTimeAPIError, GameTimeError
from ..domain.grid import check_cell
from ..domain.models import CellKey, EventBlock, HeatmapCell, Slot, cell_key

logger = logging.getLogger(__name__)


class GameTimeApiClient:
    """
    Client for the backend's game time, heatmap and interest endpoints.

    Responses are wrapped as ``{"data": ...}``. Requests are blocking and run
    in a worker thread so the client satisfies the async service protocol.
    """

    def __init__(self, base_url: str, access_token: Optional[str] = None, timeout: float = 30):
        """
        Initialize the API client.

        Args:
            base_url: Root URL of the backend API, e.g. https://raids.example.com/api
            access_token: Bearer token of the signed-in user
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise GameTimeAPIError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise GameTimeAPIError(f"{method} {path} returned invalid JSON: {e}") from e

        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def fetch_game_time(self, week_start: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch the signed-in user's game time for a week.

        Response format:
        {
            "data": {
                "slots": [{"dayOfWeek": 5, "hour": 20, "status": "available"}],
                "events": [{"eventId": 7, "title": "...", "dayOfWeek": 5, ...}],
                "weekStart": "2026-02-08T00:00:00.000Z"
            }
        }
        """
        params = {"week": week_start} if week_start else None
        data = self._request("GET", "/users/me/game-time", params=params)
        if not isinstance(data, dict):
            raise GameTimeAPIError("Game time response must be an object")
        return data

    async def get_template(self, week_start: Optional[str] = None) -> List[Slot]:
        data = await asyncio.to_thread(self.fetch_game_time, week_start)
        return self._parse_records(data.get("slots", []), Slot.from_dict, "slot")

    async def get_week(self, week_start: Optional[str] = None) -> Tuple[List[Slot], List[EventBlock]]:
        """Template slots and event blocks from a single game time response."""
        data = await asyncio.to_thread(self.fetch_game_time, week_start)
        slots = self._parse_records(data.get("slots", []), Slot.from_dict, "slot")
        events = self._parse_records(data.get("events", []), EventBlock.from_dict, "event block")
        return slots, events

    async def get_heatmap(self, context_id: int) -> List[HeatmapCell]:
        data = await asyncio.to_thread(self._request, "GET", f"/events/{context_id}/game-time/heatmap")
        cells = data.get("cells", []) if isinstance(data, dict) else data
        return self._parse_records(cells, HeatmapCell.from_dict, "heatmap cell")

    async def save_template(self, slots: Sequence[Slot]) -> List[Slot]:
        payload = {"slots": [slot.to_dict() for slot in slots]}
        data = await asyncio.to_thread(self._request, "PUT", "/users/me/game-time", json=payload)
        saved = data.get("slots", []) if isinstance(data, dict) else []
        return self._parse_records(saved, Slot.from_dict, "slot")

    async def get_interest(self, game_id: int) -> Tuple[Dict[CellKey, int], int]:
        """
        Weekly availability of a game's interested players.

        Response format:
        {
            "data": {
                "cells": [{"dayOfWeek": 5, "hour": 20, "count": 7}],
                "interestedPlayerCount": 9
            }
        }

        Returns:
            (counts per (day_of_week, hour) cell, interested player count)
        """
        data = await asyncio.to_thread(self._request, "GET", f"/games/{game_id}/interest/game-time")
        if not isinstance(data, dict):
            raise GameTimeAPIError("Game interest response must be an object")

        counts: Dict[CellKey, int] = {}
        for record in data.get("cells", []):
            try:
                day_of_week, hour = int(record["dayOfWeek"]), int(record["hour"])
                check_cell(day_of_week, hour)
                counts[cell_key(day_of_week, hour)] = int(record["count"])
            except (KeyError, TypeError, ValueError) as e:
                raise GameTimeAPIError(f"Invalid interest cell {record!r}: {e}") from e

        try:
            interested = int(data.get("interestedPlayerCount", 0))
        except (TypeError, ValueError) as e:
            raise GameTimeAPIError(f"Invalid interested player count: {e}") from e
        return counts, interested

    @staticmethod
    def _parse_records(records, parser, kind: str) -> list:
        """
        Parse wire records into domain objects.

        A malformed record fails the whole call: dropping it silently would
        desynchronize the grid from what is stored.
        """
        parsed = []
        for record in records:
            try:
                parsed.append(parser(record))
            except (KeyError, TypeError) as e:
                raise GameTimeAPIError(f"Invalid {kind} record {record!r}: {e}") from e
            except GameTimeError:
                raise
            except ValueError as e:
                raise GameTimeAPIError(f"Invalid {kind} record {record!r}: {e}") from e
        return parsed
