# main.py

import argparse
import logging

from koromo.api_client import KoromoAPIClient
from koromo.config import Settings
from koromo.errors import HistoryTruncatedError, KoromoError, PlayerNotFoundError
from koromo.game_types import GameRuleset
from koromo.history import HistoryPaginator, lookup_history
from koromo.render import format_history_lines

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_FAILURE = 2


def _safe_print(message: str) -> None:
    """Print with a fallback for terminals that cannot encode player names."""
    try:
        print(message)
    except UnicodeEncodeError:
        print(message.encode("ascii", "replace").decode("ascii"))


def _page_cap(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("must be 0 (unbounded) or a positive page count")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="amae-koromo match history lookup")
    sub = parser.add_subparsers(dest="command", required=True)

    history = sub.add_parser("history", help="Print a player's full ranked history")
    history.add_argument("name", help="Player display name")
    history.add_argument("--rule", choices=[r.value for r in GameRuleset], default="4p")
    history.add_argument("--max-pages", type=_page_cap, default=None, help="Page cap (0 = unbounded)")
    history.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def run_history(args: argparse.Namespace, settings: Settings) -> int:
    rule = GameRuleset.from_slug(args.rule)
    max_pages = settings.max_pages
    if args.max_pages is not None:
        max_pages = args.max_pages if args.max_pages > 0 else None

    client = KoromoAPIClient(timeout_seconds=settings.timeout_seconds)
    paginator = HistoryPaginator(client, page_size=settings.page_size, max_pages=max_pages)

    truncated = False
    try:
        matches = lookup_history(args.name, rule, client, paginator)
    except PlayerNotFoundError:
        _safe_print(f"No {rule.label} player named {args.name}")
        return EXIT_NOT_FOUND
    except HistoryTruncatedError as e:
        matches, truncated = e.matches, True
    except KoromoError as e:
        logger.debug("Lookup failed", exc_info=True)
        _safe_print(f"[ERROR] Could not load history: {e}")
        return EXIT_FAILURE

    for line in format_history_lines(args.name, rule, matches):
        _safe_print(line)
    if truncated:
        _safe_print("[WARN] History truncated at the page cap")
    return EXIT_OK


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    settings = Settings.from_env()
    if args.command == "history":
        return run_history(args, settings)
    return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
