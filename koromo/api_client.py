# koromo/api_client.py

from __future__ import annotations

import json
import logging
import time
from http.client import HTTPException
from typing import Any, List
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from .errors import PlayerNotFoundError, UpstreamContractError, UpstreamTransportError
from .game_types import GameRuleset

logger = logging.getLogger(__name__)

# 2010-01-01T00:00:00Z, passed verbatim as the lower bound of every records query
FLOOR_TIMESTAMP = 1262304000000
FLOOR_EPOCH_SECONDS = FLOOR_TIMESTAMP // 1000


class KoromoAPIClient:
    HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(self, timeout_seconds: int = 20, rate_limit_sleep_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds
        self.rate_limit_sleep_seconds = rate_limit_sleep_seconds

    def _get_json(self, url: str, retry_429: bool = True) -> Any:
        req = Request(url, headers=self.HEADERS, method="GET")
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read()
        except HTTPError as exc:
            if exc.code == 429 and retry_429:
                logger.warning("Rate limited by upstream, retrying once in %ss", self.rate_limit_sleep_seconds)
                time.sleep(self.rate_limit_sleep_seconds)
                return self._get_json(url, retry_429=False)
            raise UpstreamTransportError(f"HTTP {exc.code} from {url}", status_code=exc.code) from exc
        except (URLError, HTTPException, OSError) as exc:
            raise UpstreamTransportError(f"Request to {url} failed: {exc}") from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise UpstreamContractError(f"Invalid JSON from {url}: {exc}") from exc

    @staticmethod
    def search_url(name: str, rule: GameRuleset) -> str:
        return f"{rule.api_base_url}/search_player/{quote(name, safe='')}?{urlencode({'tag': 'all'})}"

    @staticmethod
    def records_url(player_id: int, rule: GameRuleset, cursor: int, limit: int) -> str:
        query = urlencode(
            {"limit": limit, "mode": rule.mode_query, "descending": "true"},
            safe=",",
        )
        return f"{rule.api_base_url}/player_records/{player_id}/{cursor}/{FLOOR_TIMESTAMP}?{query}"

    def find_player_id(self, name: str, rule: GameRuleset) -> int:
        """Resolve a display name to the first matching upstream account id."""
        payload = self._get_json(self.search_url(name, rule))
        if not isinstance(payload, list):
            raise UpstreamContractError(f"Player search did not return a list for {name!r}")
        if not payload:
            raise PlayerNotFoundError(f"No player found with name: {name}")

        first = payload[0]
        player_id = first.get("id") if isinstance(first, dict) else None
        if isinstance(player_id, bool) or not isinstance(player_id, int):
            raise UpstreamContractError(f"Player search result has no valid id: {first!r}")
        logger.debug("Resolved %s (%s) to player id %s", name, rule.label, player_id)
        return player_id

    def get_player_records(self, player_id: int, rule: GameRuleset, cursor: int, limit: int = 500) -> List[Any]:
        """Fetch one page of records starting at ``cursor`` and going back, newest first."""
        payload = self._get_json(self.records_url(player_id, rule, cursor, limit))
        if not isinstance(payload, list):
            raise UpstreamContractError(f"Player records for {player_id} did not return a list")
        return payload
