from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from blamegame.config.settings import settings
from blamegame.engine.errors import ConfigError
from blamegame.models.game_config import GameConfig
from .io_utils import JSONDecodeError, read_json_strict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "game.json"


def modules_dir() -> Path:
    return Path(str(settings.MODULES_DIR)).expanduser().resolve()


def get_config_path(module_id: str, base_dir: Optional[Path] = None) -> Path:
    """Path of `<MODULES_DIR>/<module_id>/game.json` (may not exist)."""
    return (base_dir or modules_dir()) / module_id / CONFIG_FILENAME


def parse_game_config(raw: Any, *, origin: str = "<memory>") -> GameConfig:
    """
    Validate a raw config document.
    Raises ConfigError if the structure does not match the schema.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"{origin} must contain a JSON object at the root.")
    try:
        return GameConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"{origin} does not match the expected schema: {exc}") from exc


def load_game_config(module_id: Optional[str] = None, path: Optional[Path] = None) -> GameConfig:
    """
    Load a module config as a typed, frozen model.
    Raises ConfigError if the file is missing or invalid.
    """
    config_path = path or get_config_path(module_id or settings.DEFAULT_MODULE)
    try:
        raw = read_json_strict(config_path)
    except FileNotFoundError as exc:
        raise ConfigError(f"game.json not found at {config_path}") from exc
    except JSONDecodeError as exc:
        raise ConfigError(f"{config_path} is not valid JSON ({exc})") from exc

    config = parse_game_config(raw, origin=str(config_path))
    if module_id and config.id != module_id:
        raise ConfigError(f"{config_path} declares id {config.id!r}, expected {module_id!r}")
    logger.debug("Loaded game config", extra={"module_id": config.id, "path": str(config_path)})
    return config


def discover_game_configs(base_dir: Optional[Path] = None) -> List[GameConfig]:
    """
    Scan every `<dir>/game.json` under the modules directory.
    Invalid configs are logged and skipped so one broken module cannot hide the others.
    """
    root = base_dir or modules_dir()
    if not root.exists():
        return []
    results: List[GameConfig] = []
    for candidate in sorted(root.glob(f"*/{CONFIG_FILENAME}")):
        try:
            results.append(load_game_config(path=candidate))
        except ConfigError:
            logger.error("Invalid game config skipped", exc_info=True, extra={"path": str(candidate)})
    return results


def config_summary(config: GameConfig) -> Dict[str, Any]:
    return {
        "id": config.id,
        "title": config.title,
        "description": config.description,
        "version": config.version,
        "min_players": config.min_players,
        "max_players": config.max_players,
        "game_mode": config.game_settings.game_mode,
    }
