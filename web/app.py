from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
import asyncio
import logging

from koromo.api_client import KoromoAPIClient
from koromo.config import Settings
from koromo.errors import HistoryTruncatedError, KoromoError, PlayerNotFoundError
from koromo.game_types import GameRuleset
from koromo.history import HistoryPaginator, lookup_history
from koromo.render import render_history_html, render_message_html

logger = logging.getLogger(__name__)

settings = Settings.from_env()
api_client = KoromoAPIClient(timeout_seconds=settings.timeout_seconds)
paginator = HistoryPaginator(
    api_client,
    page_size=settings.page_size,
    max_pages=settings.max_pages,
)

app = FastAPI()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _load_history(player_name: str, rule: GameRuleset) -> tuple[list, bool]:
    """Return (matches, truncated); other lookup errors propagate."""
    try:
        return lookup_history(player_name, rule, api_client, paginator), False
    except HistoryTruncatedError as e:
        return e.matches, True


async def _player_stats_page(player_name: str, rule: GameRuleset) -> HTMLResponse:
    try:
        matches, truncated = await asyncio.to_thread(_load_history, player_name, rule)
    except PlayerNotFoundError:
        return HTMLResponse(
            content=render_message_html("Player not found", f"No {rule.label} player named {player_name}."),
            status_code=404,
        )
    except KoromoError:
        logger.exception("History lookup failed for %s (%s)", player_name, rule.label)
        return HTMLResponse(
            content=render_message_html("Lookup failed", "Could not load the match history. Try again later."),
            status_code=500,
        )

    return HTMLResponse(
        content=render_history_html(player_name, rule, matches, truncated=truncated),
        headers=NO_CACHE_HEADERS,
    )


@app.get("/search/3p/{name}")
async def search_3p(name: str) -> HTMLResponse:
    return await _player_stats_page(name, GameRuleset.THREE_PLAYER)


@app.get("/search/4p/{name}")
async def search_4p(name: str) -> HTMLResponse:
    return await _player_stats_page(name, GameRuleset.FOUR_PLAYER)


@app.get("/api/history/{rule_slug}/{name}")
async def history_json(rule_slug: str, name: str) -> dict:
    try:
        rule = GameRuleset.from_slug(rule_slug)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown ruleset: {rule_slug}")

    try:
        matches, truncated = await asyncio.to_thread(_load_history, name, rule)
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except KoromoError as e:
        logger.exception("History lookup failed for %s (%s)", name, rule.label)
        raise HTTPException(status_code=500, detail=f"Failed to load match history: {str(e)}")

    return {
        "player_name": name,
        "rule": rule.value,
        "truncated": truncated,
        "count": len(matches),
        "matches": [m.to_dict() for m in matches],
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("Starting koromo lookup server...")
    print(f"Open http://{settings.host}:{settings.port}/search/4p/<name> in your browser")
    uvicorn.run(app, host=settings.host, port=settings.port)
