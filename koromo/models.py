# koromo/models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from .game_types import GameType


@dataclass(frozen=True)
class PlayerResult:
    name: str
    final_score: int


@dataclass(frozen=True)
class GameMatch:
    """One finished match seen from the looked-up player's seat.

    ``player_results`` is in placement order, not upstream order.
    """

    player_rank: int
    start_time: datetime
    duration_minutes: int
    game_type: GameType
    pt_change: int
    player_results: Tuple[PlayerResult, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_rank": self.player_rank,
            "start_time": self.start_time.isoformat(),
            "duration_minutes": self.duration_minutes,
            "game_type": str(self.game_type),
            "mode_id": self.game_type.mode_id,
            "pt_change": self.pt_change,
            "player_results": [
                {"name": result.name, "final_score": result.final_score}
                for result in self.player_results
            ],
        }
