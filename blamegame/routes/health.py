"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + nombre de modules/sessions chargés).
"""
from fastapi import APIRouter

from blamegame.config.settings import settings
from blamegame.services.module_catalog import get_registry
from blamegame.services.session_store import list_session_ids

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service configuré."""
    return {
        "ok": True,
        "service": settings.APP_NAME,
        "modules": len(get_registry().list()),
        "sessions": len(list_session_ids()),
    }
