from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import pytest

from blamegame.engine.content_provider import StaticListProvider
from blamegame.engine.modules import GameModule
from blamegame.engine.session import GameSession
from blamegame.games.nameblame.module import MODULE_DIR, NameBlameModule
from blamegame.models.content import ContentItem
from blamegame.models.game_config import GameConfig
from blamegame.services.session_store import clear_sessions


class ToyModule(GameModule):
    """Module minimal piloté par les tests (contrôleurs et contenu injectés)."""

    def __init__(self, config: GameConfig, controllers: Callable[[], dict], items: Iterable = ()):
        super().__init__(config)
        self._controllers = controllers
        self._items = list(items)
        self.load_calls = 0

    def phase_controllers(self):
        return self._controllers()

    async def load_content(self, ctx, *, seed: Optional[int] = None):
        self.load_calls += 1
        await asyncio.sleep(0)
        return StaticListProvider(self._items)


def make_config(phases: List[dict], **extra) -> GameConfig:
    return GameConfig.model_validate({"id": extra.pop("id", "toy"), "phases": phases, **extra})


def make_items(count: int) -> List[ContentItem]:
    return [ContentItem(id=f"q{i}", text=f"Question {i}", category_id="cat") for i in range(count)]


@pytest.fixture
def toy_module():
    return ToyModule


@pytest.fixture
def recorder():
    """Collecte les événements publiés (forme wire) d'un bus."""

    class _Recorder:
        def __init__(self):
            self.events: List[dict] = []

        def attach(self, bus):
            return bus.subscribe("*", lambda event: self.events.append(event.to_wire()))

        def types(self) -> List[str]:
            return [e["type"] for e in self.events]

        def clear(self):
            self.events.clear()

    return _Recorder()


def write_module_dir(
    root: Path,
    *,
    questions: int = 5,
    game_mode: str = "nameblame",
) -> Path:
    """Copie le game.json embarqué avec un pool de `questions` questions dans une seule catégorie."""
    root.mkdir(parents=True, exist_ok=True)
    config = json.loads((MODULE_DIR / "game.json").read_text(encoding="utf-8"))
    config["gameSettings"] = {
        "categoriesPerGame": 1,
        "questionsPerCategory": 50,
        "maxQuestionsTotal": 100,
        "shuffleQuestions": False,
        "shuffleCategories": False,
        "gameMode": game_mode,
    }
    config["contentProvider"]["shuffle"] = False
    (root / "game.json").write_text(json.dumps(config), encoding="utf-8")
    pool = {
        "categories": [
            {
                "id": "test",
                "name": "Test",
                "emoji": "🧪",
                "questions": [{"id": f"t{i}", "text": f"Test question {i}"} for i in range(questions)],
            }
        ]
    }
    (root / "questions.json").write_text(json.dumps(pool), encoding="utf-8")
    return root


@pytest.fixture
def nameblame_session(tmp_path):
    """Fabrique de sessions NameBlame initialisées sur un pool de test."""

    def _factory(questions: int = 5, game_mode: str = "nameblame") -> GameSession:
        module_dir = write_module_dir(tmp_path / f"{game_mode}-{questions}", questions=questions, game_mode=game_mode)
        session = GameSession(NameBlameModule.from_directory(module_dir), seed=7)
        asyncio.run(session.init())
        return session

    return _factory


@pytest.fixture(autouse=True)
def _clean_sessions():
    yield
    clear_sessions()


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def items_factory():
    return make_items
