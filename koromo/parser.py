# koromo/parser.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from .errors import UpstreamContractError
from .game_types import classify
from .models import GameMatch, PlayerResult


class MatchRecordParser:
    """Turn raw ``player_records`` pages into ranked matches.

    Parsing is fail-fast: the first malformed record raises
    ``UpstreamContractError`` and nothing from the page is returned.
    """

    @staticmethod
    def _require(record: Dict[str, Any], key: str, where: str) -> Any:
        if key not in record or record[key] is None:
            raise UpstreamContractError(f"{where}: missing field '{key}'")
        return record[key]

    @classmethod
    def _require_int(cls, record: Dict[str, Any], key: str, where: str) -> int:
        value = cls._require(record, key, where)
        if isinstance(value, bool):
            raise UpstreamContractError(f"{where}: field '{key}' is not an integer: {value!r}")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if not isinstance(value, int):
            raise UpstreamContractError(f"{where}: field '{key}' is not an integer: {value!r}")
        return value

    @classmethod
    def _require_str(cls, record: Dict[str, Any], key: str, where: str) -> str:
        value = cls._require(record, key, where)
        if not isinstance(value, str):
            raise UpstreamContractError(f"{where}: field '{key}' is not a string: {value!r}")
        return value

    def parse_participants(self, record: Dict[str, Any], where: str) -> List[Tuple[int, str, int, int]]:
        """Return (account id, nickname, final score, point change) per seat, upstream order."""
        players = self._require(record, "players", where)
        if not isinstance(players, list) or not players:
            raise UpstreamContractError(f"{where}: 'players' is not a non-empty list")

        out: List[Tuple[int, str, int, int]] = []
        for seat, player in enumerate(players):
            seat_where = f"{where}, player {seat}"
            if not isinstance(player, dict):
                raise UpstreamContractError(f"{seat_where}: not an object")
            out.append(
                (
                    self._require_int(player, "accountId", seat_where),
                    self._require_str(player, "nickname", seat_where),
                    self._require_int(player, "score", seat_where),
                    self._require_int(player, "gradingScore", seat_where),
                )
            )
        return out

    @staticmethod
    def rank_participants(participants: List[Tuple[int, str, int, int]]) -> List[Tuple[int, str, int, int]]:
        # sorted() is stable: equal point changes keep upstream seat order
        return sorted(participants, key=lambda p: p[3], reverse=True)

    def parse_record(self, record: Any, target_player_id: int, index: int = 0) -> GameMatch:
        where = f"record {index}"
        if not isinstance(record, dict):
            raise UpstreamContractError(f"{where}: not an object")

        ranked = self.rank_participants(self.parse_participants(record, where))

        target = next(
            ((rank, p) for rank, p in enumerate(ranked, 1) if p[0] == target_player_id),
            None,
        )
        if target is None:
            raise UpstreamContractError(
                f"{where}: player {target_player_id} is not among the participants"
            )
        player_rank, target_row = target

        raw_start = self._require_int(record, "startTime", where)
        raw_end = self._require_int(record, "endTime", where)
        try:
            start_time = datetime.fromtimestamp(raw_start, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise UpstreamContractError(f"{where}: bad startTime {raw_start}: {exc}") from exc

        return GameMatch(
            player_rank=player_rank,
            start_time=start_time,
            duration_minutes=(raw_end - raw_start) // 60,
            game_type=classify(self._require_int(record, "modeId", where)),
            pt_change=target_row[3],
            player_results=tuple(PlayerResult(name=name, final_score=score) for _, name, score, _ in ranked),
        )

    def parse(self, raw_page: Any, target_player_id: int) -> List[GameMatch]:
        if not isinstance(raw_page, list):
            raise UpstreamContractError(f"Records page is not a list: {type(raw_page).__name__}")
        return [self.parse_record(record, target_player_id, index) for index, record in enumerate(raw_page)]
