"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .gametime_service import GameTimeClientProtocol, GameTimeService

__all__ = ["GameTimeClientProtocol", "GameTimeService"]
