# koromo/__init__.py
"""
Match history lookup for amae-koromo mahjong statistics.

Resolves a player name, walks the full record history and rebuilds
per-match placements.
"""

from .errors import (
    KoromoError,
    PlayerNotFoundError,
    HistoryRetrievalError,
    UpstreamTransportError,
    UpstreamContractError,
    HistoryTruncatedError,
)
from .game_types import GameRuleset, GameCategory, GameType, classify
from .models import GameMatch, PlayerResult

__all__ = [
    'KoromoError',
    'PlayerNotFoundError',
    'HistoryRetrievalError',
    'UpstreamTransportError',
    'UpstreamContractError',
    'HistoryTruncatedError',
    'GameRuleset',
    'GameCategory',
    'GameType',
    'classify',
    'GameMatch',
    'PlayerResult',
]
