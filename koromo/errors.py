# koromo/errors.py

from __future__ import annotations

from typing import List, Optional


class KoromoError(Exception):
    """Base class for lookup failures."""


class PlayerNotFoundError(KoromoError):
    """Raised when a display name resolves to no upstream player."""


class HistoryRetrievalError(KoromoError):
    """Raised when the match history could not be retrieved."""


class UpstreamTransportError(HistoryRetrievalError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamContractError(HistoryRetrievalError):
    """Raised when an upstream response does not have the expected shape."""


class HistoryTruncatedError(KoromoError):
    """Raised when the page cap stops pagination before the history ends.

    ``matches`` holds everything gathered up to the cap, newest first.
    """

    def __init__(self, matches: List, pages: int) -> None:
        super().__init__(f"History truncated after {pages} pages ({len(matches)} matches)")
        self.matches = matches
        self.pages = pages
