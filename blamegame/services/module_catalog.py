"""
Service: module_catalog.py
Rôle:
- Construire le registre des modules de jeu disponibles (découverte des `game.json`
  sous `settings.MODULES_DIR` + classe Python associée à chaque id).
- Exposer `get_registry()` (instance unique, construite au premier appel).

Remarque:
- Un `game.json` dont l'id n'a pas d'implémentation connue est ignoré (log warning);
  une implémentation incohérente avec sa config fait échouer la construction
  (`ConfigError`), jamais un dispatch.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Type

from blamegame.engine.modules import GameModule, ModuleRegistry
from blamegame.games.nameblame.module import NameBlameModule
from .config_loader import modules_dir, discover_game_configs

logger = logging.getLogger(__name__)

MODULE_TYPES: Dict[str, Type[GameModule]] = {
    "nameblame": NameBlameModule,
}

_REGISTRY: Optional[ModuleRegistry] = None


def build_registry(base_dir: Optional[Path] = None) -> ModuleRegistry:
    root = base_dir or modules_dir()
    registry = ModuleRegistry()
    for config in discover_game_configs(root):
        module_cls = MODULE_TYPES.get(config.id)
        if module_cls is None:
            logger.warning("No implementation for game config", extra={"module_id": config.id})
            continue
        registry.register(module_cls(config, base_dir=root / config.id))
    return registry


def get_registry() -> ModuleRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = build_registry()
    return _REGISTRY


def reset_registry() -> None:
    """Force une reconstruction au prochain `get_registry()` (tests)."""
    global _REGISTRY
    _REGISTRY = None
