from __future__ import annotations

import pytest

from blamegame.engine.content_provider import StaticListProvider
from blamegame.engine.errors import GameError, InsufficientPlayersError, InvalidTargetError
from blamegame.games.nameblame.blame_engine import BlameChainEngine
from blamegame.models.game_config import GameAction
from blamegame.models.player import Player


def _players(*names):
    return [Player(id=name.lower(), name=name) for name in names]


@pytest.fixture
def engine(items_factory):
    e = BlameChainEngine(StaticListProvider(items_factory(10)))
    e.start(_players("A", "B", "C"))
    return e


def _blame(engine, target):
    engine.select_target(target)
    engine.advance()


def test_two_players_cannot_start(items_factory):
    e = BlameChainEngine(StaticListProvider(items_factory(3)))
    with pytest.raises(InsufficientPlayersError) as excinfo:
        e.start(_players("A", "B"))
    assert excinfo.value.minimum == 3
    assert not e.started
    assert e.allowed_actions() == frozenset()


def test_blame_moves_to_reveal_and_logs(engine):
    entry = engine.select_target("B")

    assert engine.phase == "reveal"
    assert entry.from_player == "A"
    assert entry.to_player == "B"
    assert entry.question == "Question 0"
    assert engine.current_blamer == "A"
    assert engine.current_blamed == "B"
    assert engine.blame_count("B") == 1
    assert engine.allowed_actions() == frozenset({GameAction.ADVANCE})


def test_turn_passes_to_blamed_player(engine):
    engine.select_target("B")
    assert engine.advance() is True

    assert engine.phase == "selecting"
    assert engine.active_player.name == "B"
    assert engine.current_blamed is None

    with pytest.raises(InvalidTargetError):
        engine.select_target("B")
    assert len(engine.blame_log) == 1

    engine.select_target("C")
    assert engine.current_blamer == "B"


def test_active_player_may_target_anyone_else(engine):
    _blame(engine, "B")
    engine.select_target("A")
    assert engine.current_blamed == "A"


def test_self_blame_leaves_state_unchanged(engine):
    with pytest.raises(InvalidTargetError) as excinfo:
        engine.select_target("a")
    assert excinfo.value.reason
    assert engine.phase == "selecting"
    assert engine.blame_log == []
    assert engine.blame_stats == {}


def test_target_outside_roster_is_invalid(engine):
    with pytest.raises(InvalidTargetError):
        engine.select_target("Zoe")
    assert engine.blame_log == []


def test_target_matches_id_or_name_case_insensitively(engine):
    engine.select_target("c")
    assert engine.current_blamed == "C"


def test_most_blamed_returns_every_tied_name(engine):
    # A→B, B→A, A→B, B→A, A→C
    for target in ("B", "A", "B", "A", "C"):
        _blame(engine, target)

    assert engine.blame_stats == {"A": 2, "B": 2, "C": 1}
    assert engine.most_blamed() == (["A", "B"], 2)


def test_most_blamed_is_empty_before_any_blame(engine):
    assert engine.most_blamed() == ([], 0)


def test_score_and_streak_follow_the_blamed_player(engine):
    _blame(engine, "B")
    _blame(engine, "C")
    engine.select_target("B")

    scores = {p.name: (p.score, p.streak) for p in engine.stable_player_order}
    assert scores == {"A": (0, 0), "B": (2, 1), "C": (1, 0)}


def test_advance_reports_exhausted_content(items_factory):
    e = BlameChainEngine(StaticListProvider(items_factory(1)))
    e.start(_players("A", "B", "C"))
    e.select_target("B")
    assert e.advance() is False
    assert e.active_player.name == "B"


def test_actions_outside_sub_state_raise(engine):
    with pytest.raises(GameError):
        engine.advance()
    engine.select_target("B")
    with pytest.raises(GameError):
        engine.select_target("C")


def test_new_game_resets_stats_and_log(engine):
    _blame(engine, "B")
    engine.new_game()
    assert engine.blame_stats == {}
    assert engine.blame_log == []
    assert not engine.started


def test_start_freezes_player_order(engine):
    roster = _players("A", "B", "C")
    e = BlameChainEngine()
    e.start(roster)
    roster.append(Player(id="d", name="D"))
    assert [p.name for p in e.stable_player_order] == ["A", "B", "C"]


def test_summary_reports_rounds_and_log(engine):
    _blame(engine, "C")
    summary = engine.summary()
    assert summary["rounds_played"] == 1
    assert summary["most_blamed"] == {"names": ["C"], "count": 1}
    assert summary["log"][0]["from"] == "A"
    assert summary["log"][0]["to"] == "C"


def test_select_target_without_player_order_is_a_game_error(items_factory):
    e = BlameChainEngine(StaticListProvider(items_factory(2)))
    e.started = True
    with pytest.raises(GameError):
        e.select_target("B")
    assert e.blame_log == []
