"""
Module routes/modules.py
Rôle:
- Lister les modules de jeu enregistrés (sélecteur de jeux côté front).
"""
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from blamegame.services.config_loader import config_summary
from blamegame.services.module_catalog import get_registry

router = APIRouter(prefix="/modules", tags=["modules"])


@router.get("")
async def list_modules() -> List[Dict[str, Any]]:
    return [config_summary(m.config) for m in get_registry().list()]


@router.get("/{module_id}")
async def module_detail(module_id: str) -> Dict[str, Any]:
    """Config complète (phases, écrans) telle que chargée depuis `game.json`."""
    module = get_registry().get(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail=f"Unknown module '{module_id}'")
    return module.config.model_dump(mode="json", by_alias=True)
