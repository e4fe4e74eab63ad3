"""
Adapters layer - Backend integrations (community API, mock data).
"""

from .api_client import GameTimeApiClient
from .mock_gametime_client import MockGameTimeClient

__all__ = ["GameTimeApiClient", "MockGameTimeClient"]
