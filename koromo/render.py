# koromo/render.py

from __future__ import annotations

from html import escape
from typing import List, Sequence

from .game_types import GameRuleset
from .models import GameMatch

PAGE_STYLE = """
body { font-family: system-ui, sans-serif; margin: 2rem; color: #222; }
table { border-collapse: collapse; width: 100%; }
th, td { padding: 0.35rem 0.6rem; border-bottom: 1px solid #ddd; text-align: left; }
.rank-1 { color: #b8860b; font-weight: bold; }
.gain { color: #2e7d32; }
.loss { color: #c62828; }
.notice { background: #fff3cd; padding: 0.6rem; border: 1px solid #ffe08a; }
"""


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title><style>{PAGE_STYLE}</style></head>"
        f"<body>{body}</body></html>"
    )


def format_pt_change(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def _match_row(match: GameMatch) -> str:
    players = ", ".join(
        f"{escape(result.name)} ({result.final_score})" for result in match.player_results
    )
    pt_class = "gain" if match.pt_change > 0 else "loss" if match.pt_change < 0 else ""
    return (
        "<tr>"
        f"<td class=\"rank-{match.player_rank}\">{match.player_rank}</td>"
        f"<td>{match.start_time.strftime('%Y-%m-%d %H:%M')} UTC</td>"
        f"<td>{match.duration_minutes} min</td>"
        f"<td>{escape(str(match.game_type))}</td>"
        f"<td class=\"{pt_class}\">{format_pt_change(match.pt_change)}</td>"
        f"<td>{players}</td>"
        "</tr>"
    )


def render_history_html(
    player_name: str,
    rule: GameRuleset,
    matches: Sequence[GameMatch],
    truncated: bool = False,
) -> str:
    title = f"{player_name} - {rule.label} match history"
    parts = [f"<h1>{escape(player_name)}</h1>", f"<p>{rule.label} ranked history: {len(matches)} matches</p>"]
    if truncated:
        parts.append(
            "<p class=\"notice\">History truncated: only the most recent pages were loaded.</p>"
        )
    if matches:
        parts.append(
            "<table><thead><tr>"
            "<th>Rank</th><th>Start</th><th>Duration</th><th>Room</th><th>Pt</th><th>Players</th>"
            "</tr></thead><tbody>"
        )
        parts.extend(_match_row(match) for match in matches)
        parts.append("</tbody></table>")
    else:
        parts.append("<p>No ranked matches found.</p>")
    return _page(title, "".join(parts))


def render_message_html(title: str, message: str) -> str:
    return _page(title, f"<h1>{escape(title)}</h1><p>{escape(message)}</p>")


def format_history_lines(player_name: str, rule: GameRuleset, matches: Sequence[GameMatch]) -> List[str]:
    """Plain text table for terminal output."""
    lines = [
        "=" * 72,
        f"{player_name} - {rule.label} ({len(matches)} matches)",
        "=" * 72,
    ]
    for match in matches:
        players = " / ".join(f"{r.name} {r.final_score}" for r in match.player_results)
        lines.append(
            f"#{match.player_rank}  {match.start_time.strftime('%Y-%m-%d %H:%M')}  "
            f"{match.duration_minutes:>3}m  {str(match.game_type):<14} "
            f"{format_pt_change(match.pt_change):>6}  {players}"
        )
    return lines
