"""
Routes de gestion de session (routeur UI → moteur de phases).

Objectifs :
- Création de sessions (module + graine) et lecture de leur état courant.
- Envoi des actions UI au dispatcher (`POST /session/{id}/dispatch`).
- Changement de module (reset complet) et résumé de la partie blame.

Mapping des erreurs typées :
- ConfigError → 500, NotReadyError → 409, InsufficientPlayersError → 409,
  RosterError → 400, InvalidTargetError → 400 (appel direct hors dispatcher).
- Une action refusée par le garde n'est PAS une erreur HTTP: la réponse contient
  l'état inchangé et `result == "STAY"`; l'événement part sur le WebSocket.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel, Field

from blamegame.engine.errors import (
    ConfigError,
    GameError,
    InsufficientPlayersError,
    InvalidTargetError,
    NotReadyError,
    RosterError,
)
from blamegame.engine.session import GameSession
from blamegame.services.session_store import drop_session, get_session, open_session, switch_module
from blamegame.services.ws_manager import WS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


# ---------------------------------------------------------------------------
# Modèles Pydantic
# ---------------------------------------------------------------------------
class SessionCreatePayload(BaseModel):
    module_id: Optional[str] = Field(None, description="Module de jeu (défaut: settings.DEFAULT_MODULE)")
    session_id: Optional[str] = Field(None, description="Identifiant imposé (sinon auto)")
    seed: Optional[int] = Field(None, description="Graine du mélange de contenu")
    player_id: Optional[str] = None
    room_id: Optional[str] = None


class SessionStateResponse(BaseModel):
    session_id: str
    module_id: str
    ready: bool
    phase_id: str
    screen: Optional[str] = None
    allowed_actions: List[str]
    progress: Dict[str, int]
    current_item: Optional[Dict[str, Any]] = None
    module: Dict[str, Any] = Field(default_factory=dict)


class DispatchPayload(BaseModel):
    action: str = Field(..., min_length=1, description="ADVANCE | BACK | SELECT_TARGET | REVEAL | RESTART | CUSTOM")
    payload: Optional[Dict[str, Any]] = None


class DispatchResponse(BaseModel):
    result: str
    target: Optional[str] = None
    state: SessionStateResponse


class ModuleSwitchPayload(BaseModel):
    module_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Helpers internes
# ---------------------------------------------------------------------------
def _require_session(session_id: str) -> GameSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return session


def _state(session: GameSession) -> SessionStateResponse:
    return SessionStateResponse(**session.snapshot())


def _http_error(exc: GameError) -> HTTPException:
    if isinstance(exc, (NotReadyError, InsufficientPlayersError)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, RosterError):
        detail: Any = {"message": str(exc), "details": exc.details} if exc.details else str(exc)
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, InvalidTargetError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ConfigError):
        logger.error("Configuration error during dispatch", exc_info=exc)
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.post("", response_model=SessionStateResponse)
async def create_session(
    payload: SessionCreatePayload = Body(default_factory=SessionCreatePayload),
) -> SessionStateResponse:
    """Crée une session, attend le chargement du contenu puis renvoie son état initial."""
    try:
        session = await open_session(
            payload.module_id,
            session_id=payload.session_id,
            seed=payload.seed,
            player_id=payload.player_id,
            room_id=payload.room_id,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown module '{payload.module_id}'")
    except GameError as exc:
        raise _http_error(exc)
    return _state(session)


@router.get("/{session_id}/state", response_model=SessionStateResponse)
async def session_state(session_id: str) -> SessionStateResponse:
    """Phase, écran, actions autorisées, progression et snapshot métier."""
    return _state(_require_session(session_id))


@router.post("/{session_id}/dispatch", response_model=DispatchResponse)
async def dispatch_action(session_id: str, payload: DispatchPayload) -> DispatchResponse:
    session = _require_session(session_id)
    try:
        result = session.dispatch(payload.action, payload.payload)
    except GameError as exc:
        raise _http_error(exc)
    return DispatchResponse(result=result.kind, target=result.phase_id, state=_state(session))


@router.post("/{session_id}/module", response_model=SessionStateResponse)
async def change_module(session_id: str, payload: ModuleSwitchPayload) -> SessionStateResponse:
    """Remplace le module actif: contexte, bus, contenu et état métier repartent de zéro."""
    _require_session(session_id)
    try:
        session = await switch_module(session_id, payload.module_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown module '{payload.module_id}'")
    except GameError as exc:
        raise _http_error(exc)
    return _state(session)


@router.get("/{session_id}/blame/summary")
async def blame_summary(session_id: str) -> Dict[str, Any]:
    session = _require_session(session_id)
    engine = getattr(session.context.domain, "engine", None)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Module '{session.module.id}' has no blame state")
    return {"session_id": session_id, **engine.summary()}


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> Dict[str, Any]:
    """Retire la session du registre et ferme les sockets qui la suivaient."""
    if not drop_session(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    closed = await WS.close_session(session_id)
    logger.info("Session deleted", extra={"session_id": session_id, "closed_sockets": closed})
    return {"ok": True, "session_id": session_id}
