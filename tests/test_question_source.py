from __future__ import annotations

import pytest

from blamegame.engine.errors import ConfigError
from blamegame.games.nameblame.module import MODULE_DIR
from blamegame.models.content import ContentItem
from blamegame.models.game_config import GameSettings
from blamegame.services.question_source import (
    FALLBACK_QUESTION,
    QuestionListProvider,
    filter_questions,
    load_question_pool,
)


def _pool():
    return [
        ContentItem(id=f"{cat}-{i}", text=f"{cat} {i}", category_id=cat)
        for cat in ("a", "b", "c", "d")
        for i in range(5)
    ]


def test_packaged_pool_is_flattened_with_categories():
    pool = load_question_pool(MODULE_DIR / "questions.json")
    assert len(pool) >= 30
    assert all(item.category_id and item.category_name for item in pool)


def test_filter_picks_categories_and_caps_per_category():
    settings = GameSettings(categories_per_game=2, questions_per_category=3)
    selected = filter_questions(_pool(), settings, seed=1)
    assert len(selected) == 6
    assert len({item.category_id for item in selected}) == 2


def test_filter_caps_total():
    settings = GameSettings(categories_per_game=4, questions_per_category=5, max_questions_total=7)
    assert len(filter_questions(_pool(), settings, seed=3)) == 7


def test_filter_is_reproducible_with_seed():
    settings = GameSettings(categories_per_game=3, questions_per_category=4)
    first = [i.id for i in filter_questions(_pool(), settings, seed=42)]
    second = [i.id for i in filter_questions(_pool(), settings, seed=42)]
    assert first == second


def test_explicit_category_selection():
    settings = GameSettings(shuffle_questions=False)
    selected = filter_questions(_pool(), settings, selected_category_ids=["c", "zz"])
    assert [i.id for i in selected] == [f"c-{i}" for i in range(5)]


def test_empty_result_falls_back_to_single_question():
    assert filter_questions([], GameSettings(), seed=0) == [FALLBACK_QUESTION]


def test_missing_pool_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_question_pool(tmp_path / "questions.json")


def test_provider_lists_pool_categories_in_file_order():
    provider = QuestionListProvider(_pool(), GameSettings(categories_per_game=1), seed=5)
    assert [c["id"] for c in provider.categories()] == ["a", "b", "c", "d"]
    assert all(c["count"] == 5 for c in provider.categories())
    assert provider.selected_category_ids is None


def test_provider_category_selection_rebuilds_in_place():
    settings = GameSettings(categories_per_game=1, questions_per_category=5, shuffle_questions=False)
    provider = QuestionListProvider(_pool(), settings, seed=5)
    provider.next()

    total = provider.select_categories(["b", "d"])
    assert total == 10
    assert provider.progress().index == 0
    assert {i.category_id for i in provider.items} == {"b", "d"}
    assert provider.selected_category_ids == ["b", "d"]

    # liste vide: retour au tirage automatique
    assert provider.select_categories([]) == 5
    assert provider.selected_category_ids is None
