"""
Session store registry
======================

Registre mémoire des `GameSession` actives (une par `session_id`, un module actif par
session). Les instances vivent le temps du process: aucune persistance disque.

- `open_session()` construit la session, attend `init()` puis l'enregistre: une session
  visible dans le registre est toujours prête.
- `switch_module()` remplace la session entière (contexte, bus, contenu, état métier);
  l'ancienne n'est fermée qu'une fois la nouvelle initialisée.
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, List, Optional

from blamegame.config.settings import settings
from blamegame.engine.session import GameSession
from .module_catalog import get_registry
from .ws_manager import attach_session

logger = logging.getLogger(__name__)

_SESSIONS: Dict[str, GameSession] = {}
_LOCK = RLock()


def build_session(
    module_id: Optional[str] = None,
    *,
    session_id: Optional[str] = None,
    seed: Optional[int] = None,
    player_id: Optional[str] = None,
    room_id: Optional[str] = None,
) -> GameSession:
    """Instancie une session (non initialisée). KeyError si le module est inconnu."""
    mid = module_id or settings.DEFAULT_MODULE
    module = get_registry().get(mid)
    if module is None:
        raise KeyError(mid)
    return GameSession(module, session_id=session_id, seed=seed, player_id=player_id, room_id=room_id)


def _store(session: GameSession) -> None:
    with _LOCK:
        previous = _SESSIONS.get(session.session_id)
        _SESSIONS[session.session_id] = session
    if previous is not None and previous is not session:
        previous.close()
    attach_session(session)


async def open_session(
    module_id: Optional[str] = None,
    *,
    session_id: Optional[str] = None,
    seed: Optional[int] = None,
    player_id: Optional[str] = None,
    room_id: Optional[str] = None,
) -> GameSession:
    session = build_session(module_id, session_id=session_id, seed=seed, player_id=player_id, room_id=room_id)
    await session.init()
    _store(session)
    logger.info("Session opened", extra={"session_id": session.session_id, "module_id": session.module.id})
    return session


def get_session(session_id: str) -> Optional[GameSession]:
    with _LOCK:
        return _SESSIONS.get(session_id)


async def switch_module(session_id: str, module_id: str) -> GameSession:
    """
    Bascule une session existante sur un autre module (reset complet).
    KeyError si la session ou le module est inconnu.
    """
    current = get_session(session_id)
    if current is None:
        raise KeyError(session_id)
    fresh = build_session(
        module_id,
        session_id=session_id,
        seed=current.seed,
        player_id=current.context.player_id,
        room_id=current.context.room_id,
    )
    await fresh.init()
    _store(fresh)
    logger.info(
        "Session module switched",
        extra={"session_id": session_id, "from_module": current.module.id, "to_module": module_id},
    )
    return fresh


def drop_session(session_id: str) -> bool:
    """Retire et ferme la session; False si elle n'existait pas."""
    with _LOCK:
        session = _SESSIONS.pop(session_id, None)
    if session is None:
        return False
    session.close()
    return True


def list_session_ids() -> List[str]:
    with _LOCK:
        return list(_SESSIONS.keys())


def clear_sessions() -> None:
    """Ferme toutes les sessions (tests, arrêt de l'app)."""
    with _LOCK:
        sessions = list(_SESSIONS.values())
        _SESSIONS.clear()
    for session in sessions:
        session.close()
