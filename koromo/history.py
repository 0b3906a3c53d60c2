# koromo/history.py

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .api_client import FLOOR_EPOCH_SECONDS, KoromoAPIClient
from .config import DEFAULT_PAGE_SIZE
from .errors import HistoryTruncatedError
from .game_types import GameRuleset
from .models import GameMatch
from .parser import MatchRecordParser

logger = logging.getLogger(__name__)

FLOOR_DATETIME = datetime.fromtimestamp(FLOOR_EPOCH_SECONDS, tz=timezone.utc)


class HistoryPaginator:
    """Walk a player's records from now back to the floor, one page at a time.

    The upstream only offers a time window query, so the end of the history is
    inferred from an empty page or a short page. The cursor is an inclusive
    upper bound. After a full page the oldest second on it is dropped and
    becomes the next cursor, so every kept match is strictly newer than the
    next request and a second split across two pages is fetched whole.
    """

    def __init__(
        self,
        client: KoromoAPIClient,
        parser: Optional[MatchRecordParser] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be positive or None")
        self.client = client
        self.parser = parser or MatchRecordParser()
        self.page_size = page_size
        self.max_pages = max_pages
        self.clock = clock

    def fetch_all(self, player_id: int, rule: GameRuleset) -> List[GameMatch]:
        matches: List[GameMatch] = []
        cursor = int(self.clock())
        pages_fetched = 0

        while True:
            if self.max_pages is not None and pages_fetched >= self.max_pages:
                logger.warning(
                    "Stopping history for %s (%s) at page cap %s with %s matches",
                    player_id, rule.label, self.max_pages, len(matches),
                )
                raise HistoryTruncatedError(matches, pages_fetched)

            logger.debug("Fetching records for %s (%s) at or before %s", player_id, rule.label, cursor)
            raw_page = self.client.get_player_records(player_id, rule, cursor, limit=self.page_size)
            pages_fetched += 1
            page = self.parser.parse(raw_page, player_id)

            if not page:
                break

            in_range = [m for m in page if m.start_time >= FLOOR_DATETIME]
            if len(in_range) < len(page):
                logger.warning(
                    "Dropped %s records older than %s for %s",
                    len(page) - len(in_range), FLOOR_DATETIME.isoformat(), player_id,
                )
                matches.extend(in_range)
                break

            if len(raw_page) < self.page_size:
                matches.extend(page)
                break

            # a full page may end partway through a second: drop that second and refetch it whole
            last_start = page[-1].start_time
            keep = len(page)
            while keep > 0 and page[keep - 1].start_time == last_start:
                keep -= 1
            if keep == 0:
                # the whole page is one second, step past it
                cursor = int(last_start.timestamp()) - 1
                matches.extend(page)
            else:
                cursor = int(last_start.timestamp())
                matches.extend(page[:keep])

        logger.info(
            "Fetched %s matches for %s (%s) in %s pages",
            len(matches), player_id, rule.label, pages_fetched,
        )
        return matches


def lookup_history(name: str, rule: GameRuleset, client: KoromoAPIClient, paginator: HistoryPaginator) -> List[GameMatch]:
    """Resolve ``name`` and return its full history, newest first."""
    player_id = client.find_player_id(name, rule)
    return paginator.fetch_all(player_id, rule)
