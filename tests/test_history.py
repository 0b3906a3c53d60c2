# tests/test_history.py

from collections import Counter

import pytest

from koromo.api_client import FLOOR_EPOCH_SECONDS
from koromo.errors import HistoryTruncatedError, PlayerNotFoundError, UpstreamContractError, UpstreamTransportError
from koromo.game_types import GameRuleset
from koromo.history import FLOOR_DATETIME, HistoryPaginator, lookup_history
from tests.helpers import (
    BASE_TIME,
    TARGET_ID,
    FakeUpstream,
    build_history,
    four_player_record,
    make_player,
    make_record,
)

RULE = GameRuleset.FOUR_PLAYER


def _paginator(upstream, **kwargs):
    return HistoryPaginator(upstream, clock=lambda: BASE_TIME + 60, **kwargs)


def _starts(matches):
    return [int(m.start_time.timestamp()) for m in matches]


@pytest.mark.parametrize("count", [0, 1, 499, 500, 501, 1000, 1234])
def test_fetch_all_returns_every_match_once(count):
    upstream = FakeUpstream(build_history(count))
    matches = _paginator(upstream).fetch_all(TARGET_ID, RULE)

    starts = _starts(matches)
    assert len(matches) == count
    assert len(set(starts)) == count
    assert starts == sorted(starts, reverse=True)


def test_shared_second_across_page_boundary_is_fetched():
    records = build_history(500)
    # records 499 and 500 start in the same second
    records.append(four_player_record(records[-1]["startTime"], target_grading=-30))
    upstream = FakeUpstream(records)
    matches = _paginator(upstream).fetch_all(TARGET_ID, RULE)

    assert len(matches) == 501
    assert Counter(_starts(matches)) == Counter(r["startTime"] for r in records)
    assert sorted(m.pt_change for m in matches[-2:]) == [-30, 45]


def test_adjacent_page_boundary_is_not_skipped():
    # page one ends at t, the rest of the history starts at t - 1
    upstream = FakeUpstream(build_history(600, step=1))
    matches = _paginator(upstream).fetch_all(TARGET_ID, RULE)

    assert len(matches) == 600
    assert len(set(_starts(matches))) == 600


def test_full_last_page_refetches_its_oldest_second():
    upstream = FakeUpstream(build_history(1000))
    matches = _paginator(upstream).fetch_all(TARGET_ID, RULE)
    assert len(matches) == 1000
    assert [len(p) for p in upstream.pages] == [500, 500, 2]


def test_short_page_stops_without_another_request():
    upstream = FakeUpstream(build_history(730))
    _paginator(upstream).fetch_all(TARGET_ID, RULE)
    assert [len(p) for p in upstream.pages] == [500, 231]


def test_cursor_moves_strictly_backwards():
    upstream = FakeUpstream(build_history(1600, step=37))
    _paginator(upstream).fetch_all(TARGET_ID, RULE)

    assert upstream.cursors[0] == BASE_TIME + 60
    assert upstream.cursors == sorted(set(upstream.cursors), reverse=True)
    for i in range(1, len(upstream.cursors)):
        refetched = {r["startTime"] for r in upstream.pages[i]}
        kept = [
            r["startTime"] for page in upstream.pages[:i] for r in page
            if r["startTime"] not in refetched
        ]
        assert upstream.cursors[i] < min(kept)


def test_cursor_is_oldest_second_of_full_page():
    upstream = FakeUpstream(build_history(700, step=10))
    _paginator(upstream).fetch_all(TARGET_ID, RULE)
    assert upstream.cursors[1] == upstream.pages[0][-1]["startTime"]


def test_page_of_one_second_steps_past_it():
    records = [four_player_record(BASE_TIME) for _ in range(10)] + build_history(3, newest=BASE_TIME - 5)
    upstream = FakeUpstream(records)
    matches = _paginator(upstream, page_size=10).fetch_all(TARGET_ID, RULE)

    assert upstream.cursors[1] == BASE_TIME - 1
    assert len(matches) == 13


def test_custom_page_size():
    upstream = FakeUpstream(build_history(25))
    matches = _paginator(upstream, page_size=10).fetch_all(TARGET_ID, RULE)
    assert len(matches) == 25
    assert [len(p) for p in upstream.pages] == [10, 10, 7]


def test_floor_respected_when_upstream_ignores_it():
    records = [
        four_player_record(FLOOR_EPOCH_SECONDS + 200),
        four_player_record(FLOOR_EPOCH_SECONDS + 100),
        four_player_record(FLOOR_EPOCH_SECONDS),
        four_player_record(FLOOR_EPOCH_SECONDS - 100),
        four_player_record(FLOOR_EPOCH_SECONDS - 200),
    ]
    upstream = FakeUpstream(records, respect_floor=False)
    matches = _paginator(upstream).fetch_all(TARGET_ID, RULE)

    assert len(matches) == 3
    assert all(m.start_time >= FLOOR_DATETIME for m in matches)
    assert FLOOR_DATETIME.isoformat() == "2010-01-01T00:00:00+00:00"


def test_end_to_end_two_records():
    records = [
        make_record([make_player(TARGET_ID, "Saki", 35000, 10), make_player(7, "Hisa", 15000, -10)], BASE_TIME, mode_id=9),
        make_record([make_player(7, "Hisa", 30000, 5), make_player(TARGET_ID, "Saki", 20000, -5)], BASE_TIME - 3600, mode_id=9),
    ]
    upstream = FakeUpstream(records)
    matches = lookup_history("Saki", RULE, upstream, _paginator(upstream))

    assert len(matches) == 2
    assert [m.player_rank for m in matches] == [1, 2]
    assert [m.pt_change for m in matches] == [10, -5]
    assert len(upstream.cursors) == 1


def test_lookup_unknown_player():
    upstream = FakeUpstream(build_history(3))
    with pytest.raises(PlayerNotFoundError):
        lookup_history("Nobody", RULE, upstream, _paginator(upstream))
    assert upstream.cursors == []


def test_page_cap_raises_truncated_with_partial_history():
    upstream = FakeUpstream(build_history(1200))
    with pytest.raises(HistoryTruncatedError) as exc_info:
        _paginator(upstream, max_pages=2).fetch_all(TARGET_ID, RULE)

    # each full page holds back its oldest second for the next request
    assert exc_info.value.pages == 2
    assert len(exc_info.value.matches) == 998
    assert len(upstream.cursors) == 2


def test_page_cap_not_hit_when_history_ends_first():
    upstream = FakeUpstream(build_history(700))
    matches = _paginator(upstream, max_pages=2).fetch_all(TARGET_ID, RULE)
    assert len(matches) == 700


def test_transport_failure_aborts_whole_history():
    upstream = FakeUpstream(build_history(1200), fail_on_call=2)
    with pytest.raises(UpstreamTransportError):
        _paginator(upstream).fetch_all(TARGET_ID, RULE)


def test_contract_failure_propagates_unchanged():
    records = build_history(3)
    records[1]["modeId"] = 99
    upstream = FakeUpstream(records)
    with pytest.raises(UpstreamContractError, match="Invalid mode id"):
        _paginator(upstream).fetch_all(TARGET_ID, RULE)


@pytest.mark.parametrize("kwargs", [{"page_size": 0}, {"max_pages": 0}])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        HistoryPaginator(FakeUpstream([]), **kwargs)
