# koromo/config.py

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_PAGE_SIZE = 500
DEFAULT_MAX_PAGES = 100


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = str(env.get(key, "") or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    timeout_seconds: int = 20
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: Optional[int] = DEFAULT_MAX_PAGES
    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        max_pages = _env_int(env, "KOROMO_MAX_PAGES", DEFAULT_MAX_PAGES)
        if max_pages < 0:
            raise ValueError(f"KOROMO_MAX_PAGES must be 0 (unbounded) or positive, got {max_pages}")
        return cls(
            timeout_seconds=_env_int(env, "KOROMO_TIMEOUT_SECONDS", 20),
            page_size=_env_int(env, "KOROMO_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            # 0 disables the cap
            max_pages=max_pages if max_pages > 0 else None,
            host=env.get("KOROMO_HOST", "127.0.0.1") or "127.0.0.1",
            port=_env_int(env, "KOROMO_PORT", 3000),
        )
