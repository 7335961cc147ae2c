"""
NameBlame: module.py
Rôle:
- Brancher le jeu NameBlame sur le moteur: config `game.json`, contrôleurs de phase,
  chargement asynchrone du pool de questions et état métier (roster + moteur blame).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from blamegame.engine.content_provider import ContentProvider
from blamegame.engine.errors import ConfigError
from blamegame.engine.modules import GameModule
from blamegame.engine.phases import PhaseControllerMap
from blamegame.models.game_config import GameConfig
from blamegame.services.config_loader import CONFIG_FILENAME, load_game_config
from blamegame.services.question_source import QuestionListProvider, load_question_pool

from .blame_engine import BlameChainEngine
from .phases import build_controllers
from .roster import PlayerRoster

if TYPE_CHECKING:
    from blamegame.engine.session import ModuleContext

logger = logging.getLogger(__name__)

MODULE_DIR = Path(__file__).resolve().parent


@dataclass
class NameBlameState:
    """État métier d'une session NameBlame (dans `ctx.domain`)."""
    roster: PlayerRoster
    engine: BlameChainEngine


class NameBlameModule(GameModule):
    def __init__(self, config: GameConfig, *, base_dir: Optional[Path] = None) -> None:
        super().__init__(config)
        self.base_dir = base_dir or MODULE_DIR

    @classmethod
    def from_directory(cls, base_dir: Optional[Path] = None) -> "NameBlameModule":
        root = base_dir or MODULE_DIR
        return cls(load_game_config(path=root / CONFIG_FILENAME), base_dir=root)

    def phase_controllers(self) -> PhaseControllerMap:
        return build_controllers()

    async def load_content(self, ctx: "ModuleContext", *, seed: Optional[int] = None) -> ContentProvider:
        source = self.config.content_provider.source
        if self.config.content_provider.type != "static" or not source:
            raise ConfigError(f"Module {self.id!r}: unsupported content provider {self.config.content_provider!r}")
        pool = await asyncio.to_thread(load_question_pool, self.base_dir / source)
        provider = QuestionListProvider(
            pool, self.config.game_settings, shuffle=self.config.content_provider.shuffle, seed=seed
        )
        logger.info(
            "Question pool ready",
            extra={"module_id": self.id, "pool": len(pool), "selected": provider.progress().total},
        )
        return provider

    def create_domain(self, ctx: "ModuleContext") -> NameBlameState:
        return NameBlameState(
            roster=PlayerRoster(max_players=self.config.max_players),
            engine=BlameChainEngine(ctx.content),
        )

    def describe(self, ctx: "ModuleContext") -> Dict[str, Any]:
        state: NameBlameState = ctx.domain
        content = ctx.content
        return {
            "game_mode": self.config.game_settings.game_mode,
            "categories": content.categories() if isinstance(content, QuestionListProvider) else [],
            "selected_categories": getattr(content, "selected_category_ids", None),
            "players": [p.model_dump() for p in state.roster.players],
            "roster_locked": state.roster.locked,
            "blame": state.engine.state(),
        }
