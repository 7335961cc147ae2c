"""
Engine: modules.py
Rôle:
- Interface `GameModule` (config + contrôleurs + chargement asynchrone du contenu).
- Registre `ModuleRegistry` qui valide chaque module AVANT qu'il puisse être utilisé:
  toute incohérence (phase sans contrôleur, cible GOTO inconnue, id dupliqué) lève
  `ConfigError` à l'enregistrement, jamais au moment d'un dispatch.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from blamegame.engine.content_provider import ContentProvider
from blamegame.engine.errors import ConfigError
from blamegame.engine.phases import PhaseControllerMap
from blamegame.models.game_config import GameConfig

if TYPE_CHECKING:
    from blamegame.engine.session import ModuleContext

logger = logging.getLogger(__name__)


class GameModule(ABC):
    """Un jeu branché sur le moteur: phases déclarées + comportement."""

    def __init__(self, config: GameConfig) -> None:
        self.config = config

    @property
    def id(self) -> str:
        return self.config.id

    @abstractmethod
    def phase_controllers(self) -> PhaseControllerMap:
        """Retourne une map NEUVE phase_id → contrôleur (une par session)."""

    @abstractmethod
    async def load_content(self, ctx: "ModuleContext", *, seed: Optional[int] = None) -> ContentProvider:
        """Construit le provider de contenu de la session (seule frontière async)."""

    def create_domain(self, ctx: "ModuleContext") -> Any:
        """État métier propre au module (None par défaut)."""
        return None

    def describe(self, ctx: "ModuleContext") -> Dict[str, Any]:
        """Snapshot lecture seule de l'état métier pour les renderers."""
        return {}

    def screen_for(self, phase_id: str) -> Optional[str]:
        phase = self.config.phase(phase_id)
        if phase is None:
            return None
        return self.config.screens.get(phase.screen_id, phase.screen_id)

    def validate(self) -> None:
        """Vérifie la couverture des contrôleurs et les cibles GOTO déclarées."""
        controllers = self.phase_controllers()
        declared = set(self.config.phase_ids)
        missing = [pid for pid in self.config.phase_ids if pid not in controllers]
        if missing:
            raise ConfigError(f"Module {self.id!r}: no controller for phases {missing}")
        extra = sorted(set(controllers) - declared)
        if extra:
            raise ConfigError(f"Module {self.id!r}: controllers for undeclared phases {extra}")
        for pid, controller in controllers.items():
            unknown = sorted(set(controller.targets) - declared)
            if unknown:
                raise ConfigError(
                    f"Module {self.id!r}: controller for {pid!r} targets undeclared phases {unknown}"
                )


class ModuleRegistry:
    """Registre des modules validés (id → module)."""

    def __init__(self) -> None:
        self._modules: Dict[str, GameModule] = {}

    def register(self, module: GameModule) -> GameModule:
        if module.id in self._modules:
            raise ConfigError(f"Module with id {module.id!r} already registered")
        module.validate()
        self._modules[module.id] = module
        logger.info("Module registered", extra={"module_id": module.id, "phases": module.config.phase_ids})
        return module

    def get(self, module_id: str) -> Optional[GameModule]:
        return self._modules.get(module_id)

    def list(self) -> List[GameModule]:
        return list(self._modules.values())

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules
