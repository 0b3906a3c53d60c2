# tests/helpers.py

from typing import Any, Dict, List, Optional

from koromo.api_client import FLOOR_EPOCH_SECONDS
from koromo.errors import PlayerNotFoundError, UpstreamTransportError

TARGET_ID = 42
BASE_TIME = 1_700_000_000


def make_player(account_id: int, nickname: str, score: int, grading: int) -> Dict[str, Any]:
    return {"accountId": account_id, "nickname": nickname, "score": score, "gradingScore": grading}


def make_record(players: List[Dict[str, Any]], start: int, end: Optional[int] = None,
                mode_id: int = 12) -> Dict[str, Any]:
    """Build one raw player_records entry; default is a 4P Jade hanchan lasting 40 minutes."""
    return {
        "_id": f"match-{start}",
        "players": players,
        "startTime": start,
        "endTime": end if end is not None else start + 2400,
        "modeId": mode_id,
    }


def four_player_record(start: int, target_grading: int = 45, mode_id: int = 12) -> Dict[str, Any]:
    return make_record(
        [
            make_player(1001, "Akagi", 31000, 75),
            make_player(TARGET_ID, "Saki", 27000, target_grading),
            make_player(1002, "Nodoka", 24000, -15),
            make_player(1003, "Koromo", 18000, -105),
        ],
        start,
        mode_id=mode_id,
    )


def build_history(count: int, newest: int = BASE_TIME, step: int = 1) -> List[Dict[str, Any]]:
    """``count`` records, newest first, ``step`` seconds apart."""
    return [four_player_record(newest - i * step) for i in range(count)]


class FakeUpstream:
    """In-memory stand-in for the records endpoint.

    Serves records whose start time is at or before the cursor, newest
    first, and remembers every cursor it was asked for.
    """

    def __init__(self, records: List[Dict[str, Any]], players: Optional[Dict[str, int]] = None,
                 respect_floor: bool = True, fail_on_call: Optional[int] = None):
        self.records = sorted(records, key=lambda r: r["startTime"], reverse=True)
        self.players = players if players is not None else {"Saki": TARGET_ID}
        self.respect_floor = respect_floor
        self.fail_on_call = fail_on_call
        self.cursors: List[int] = []
        self.pages: List[List[Dict[str, Any]]] = []

    def find_player_id(self, name, rule):
        if name not in self.players:
            raise PlayerNotFoundError(f"No player found with name: {name}")
        return self.players[name]

    def get_player_records(self, player_id, rule, cursor, limit=500):
        self.cursors.append(cursor)
        if self.fail_on_call is not None and len(self.cursors) == self.fail_on_call:
            raise UpstreamTransportError("connection reset")
        page = [
            r for r in self.records
            if r["startTime"] <= cursor
            and (not self.respect_floor or r["startTime"] >= FLOOR_EPOCH_SECONDS)
        ][:limit]
        self.pages.append(page)
        return page
