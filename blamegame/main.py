"""
Application FastAPI : point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Monte tous les routeurs (REST + WebSocket),
- Configure le logging et charge le registre des modules au démarrage.

Notes
-----
- Les importations des routeurs sont explicites pour éviter les surprises d'auto-discovery.
- Garder `settings.ALLOWED_ORIGINS` en phase avec les URLs du front.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blamegame.config.settings import settings
from blamegame.routes.health import router as health_router
from blamegame.routes.modules import router as modules_router
from blamegame.routes.session import router as session_router
from blamegame.routes.websocket import router as ws_router
from blamegame.services.module_catalog import get_registry
from blamegame.services.session_store import clear_sessions

logger = logging.getLogger(__name__)

# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(health_router)
app.include_router(modules_router)
app.include_router(session_router)
app.include_router(ws_router)                  # WebSocket endpoint (/ws/session/{id})


@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne."""
    return {"ok": True, "service": settings.APP_NAME}


# --- Hooks de cycle de vie ---
@app.on_event("startup")
async def startup():
    """
    Au démarrage:
    - configure le logger racine au niveau `LOG_LEVEL`,
    - construit le registre des modules (une config invalide fait échouer le boot).
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    registry = get_registry()
    logger.info("Modules loaded", extra={"modules": [m.id for m in registry.list()]})


@app.on_event("shutdown")
async def shutdown():
    clear_sessions()
