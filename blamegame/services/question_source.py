"""
Service: question_source.py
Rôle:
- Charger le pool de questions d'un module (JSON) et le filtrer selon les réglages de jeu.

Format attendu (questions.json):
{"categories": [{"id": "...", "name": "...", "emoji": "...",
                 "questions": [{"id": "...", "text": "..."}]}]}

Filtrage (reproductible si `seed` est fourni):
1) regroupe par catégorie,
2) choisit `categories_per_game` catégories (tirage aléatoire si `shuffle_categories`),
3) prend au plus `questions_per_category` questions par catégorie,
4) plafonne à `max_questions_total`,
5) mélange final si `shuffle_questions`.

Si le filtrage ne laisse rien, une question de secours unique est renvoyée: une partie
ne démarre jamais sur un pool vide par accident de contenu.

`QuestionListProvider` conserve le pool complet pour permettre la sélection manuelle
de catégories avant le démarrage de la partie.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from blamegame.engine.content_provider import StaticListProvider
from blamegame.engine.errors import ConfigError
from blamegame.models.content import ContentItem
from blamegame.models.game_config import GameSettings
from .io_utils import JSONDecodeError, read_json_strict

logger = logging.getLogger(__name__)

FALLBACK_QUESTION = ContentItem(
    id="fallback-1",
    text="Who would handle this situation best?",
    category_id="fallback",
    category_name="Fallback",
    category_emoji="❓",
)


def load_question_pool(path: Path) -> List[ContentItem]:
    """Lit le fichier et aplatit les catégories en une liste d'items enrichis."""
    try:
        raw = read_json_strict(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"question pool not found at {path}") from exc
    except JSONDecodeError as exc:
        raise ConfigError(f"{path} is not valid JSON ({exc})") from exc

    items: List[ContentItem] = []
    for category in (raw or {}).get("categories", []):
        cid = category.get("id")
        for index, question in enumerate(category.get("questions", [])):
            data: Dict[str, Any] = {
                "id": question.get("id") or f"{cid}-{index}",
                "text": question.get("text", ""),
                "category_id": cid,
                "category_name": category.get("name") or cid,
                "category_emoji": category.get("emoji"),
            }
            try:
                items.append(ContentItem.model_validate(data))
            except ValidationError:
                logger.warning("Skipping malformed question", extra={"category_id": cid, "index": index})
    return items


def filter_questions(
    pool: List[ContentItem],
    game_settings: GameSettings,
    *,
    seed: Optional[int] = None,
    selected_category_ids: Optional[List[str]] = None,
) -> List[ContentItem]:
    rng = random.Random(seed)

    by_category: Dict[str, List[ContentItem]] = {}
    for item in pool:
        by_category.setdefault(item.category_id or "uncategorized", []).append(item)

    available = list(by_category.keys())
    if selected_category_ids:
        chosen = [cid for cid in selected_category_ids if cid in by_category]
    else:
        count = min(game_settings.categories_per_game, len(available))
        chosen = rng.sample(available, count) if game_settings.shuffle_categories else available[:count]

    selected: List[ContentItem] = []
    for cid in chosen:
        questions = list(by_category[cid])
        if game_settings.shuffle_questions:
            rng.shuffle(questions)
        selected.extend(questions[: game_settings.questions_per_category])

    if len(selected) > game_settings.max_questions_total:
        if game_settings.shuffle_questions:
            rng.shuffle(selected)
        selected = selected[: game_settings.max_questions_total]

    if game_settings.shuffle_questions:
        rng.shuffle(selected)

    logger.info(
        "Question filtering complete",
        extra={"questions": len(selected), "categories": len(chosen)},
    )
    if not selected:
        logger.error("No questions remaining after filtering, using fallback")
        return [FALLBACK_QUESTION]
    return selected


class QuestionListProvider(StaticListProvider[ContentItem]):
    """
    Provider de questions qui garde le pool complet de la session: la sélection
    manuelle de catégories (écran de setup) refiltre le pool sans relire le fichier.
    Le provider est reconstruit EN PLACE: les références détenues par l'état métier
    restent valides.
    """

    def __init__(
        self,
        pool: List[ContentItem],
        game_settings: GameSettings,
        *,
        shuffle: bool = False,
        seed: Optional[int] = None,
    ) -> None:
        self.pool = list(pool)
        self.game_settings = game_settings
        self.shuffle = shuffle
        self.seed = seed
        self.selected_category_ids: Optional[List[str]] = None
        super().__init__(filter_questions(self.pool, game_settings, seed=seed), shuffle=shuffle, seed=seed)

    def categories(self) -> List[Dict[str, Any]]:
        """Catégories disponibles dans le pool (ordre du fichier) avec leur nombre de questions."""
        found: Dict[str, Dict[str, Any]] = {}
        for item in self.pool:
            cid = item.category_id or "uncategorized"
            entry = found.setdefault(
                cid, {"id": cid, "name": item.category_name or cid, "emoji": item.category_emoji, "count": 0}
            )
            entry["count"] += 1
        return list(found.values())

    def select_categories(self, category_ids: Optional[List[str]]) -> int:
        """Refiltre le pool sur `category_ids` (None/vide = tirage auto); retourne le total."""
        self.selected_category_ids = list(category_ids) if category_ids else None
        items = filter_questions(
            self.pool,
            self.game_settings,
            seed=self.seed,
            selected_category_ids=self.selected_category_ids,
        )
        self.initialize(items, shuffle=self.shuffle, seed=self.seed)
        return self.progress().total
