"""
Service: ws_manager.py
- Mapping session_id -> sockets ET socket -> session_id (ws_to_session).
- Snapshots immuables pour éviter "set changed size during iteration".
- Pont bus → WebSocket: chaque événement publié sur le bus d'une session est poussé
  aux sockets abonnées à cette session (`{"type": "event", "payload": ...}`).
- Le bus reste synchrone: les envois sont planifiés sur la loop (via `_run_async`).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, Set, TYPE_CHECKING

import anyio
from starlette.websockets import WebSocket

from blamegame.engine.event_bus import WILDCARD
from .io_utils import dumps

if TYPE_CHECKING:
    from blamegame.engine.session import GameSession

logger = logging.getLogger(__name__)


@dataclass
class WSManager:
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    # session_id -> set(WebSocket)
    clients_by_session: Dict[str, Set[WebSocket]] = field(default_factory=dict)
    # reverse map: socket -> session_id
    ws_to_session: Dict[WebSocket, str] = field(default_factory=dict)

    async def connect(self, ws: WebSocket, session_id: str) -> None:
        """Accepte la connexion WS et l'associe à la session."""
        await ws.accept()
        with self._lock:
            self.clients_by_session.setdefault(session_id, set()).add(ws)
            self.ws_to_session[ws] = session_id

    def _unlink(self, ws: WebSocket) -> None:
        with self._lock:
            sid = self.ws_to_session.pop(ws, None)
            if sid:
                bucket = self.clients_by_session.get(sid)
                if bucket and ws in bucket:
                    bucket.discard(ws)
                    if not bucket:
                        self.clients_by_session.pop(sid, None)

    async def disconnect(self, ws: WebSocket) -> None:
        """Ferme proprement la connexion et nettoie les registres."""
        self._unlink(ws)
        try:
            await ws.close()
        except RuntimeError:
            # socket déjà fermée côté client
            pass

    async def _send_json_one(self, ws: WebSocket, payload: Any) -> bool:
        """Envoie à un WS; renvoie True si succès, sinon False (et retire le WS mort)."""
        try:
            await ws.send_text(dumps(payload))
            return True
        except Exception:
            logger.debug("Dropping dead websocket", exc_info=True)
            self._unlink(ws)
            return False

    async def send_json(self, ws: WebSocket, payload: Any) -> bool:
        return await self._send_json_one(ws, payload)

    def _snapshot_session(self, session_id: str) -> list[WebSocket]:
        with self._lock:
            return list(self.clients_by_session.get(session_id, set()))

    def has_clients(self, session_id: str) -> bool:
        with self._lock:
            return bool(self.clients_by_session.get(session_id))

    async def broadcast_session(self, session_id: str, payload: Any) -> int:
        conns = self._snapshot_session(session_id)
        success = 0
        for ws in conns:
            if await self._send_json_one(ws, payload):
                success += 1
        logger.debug("Broadcast to session", extra={"session_id": session_id, "sent": success, "total": len(conns)})
        return success

    async def broadcast_type(self, session_id: str, event_type: str, payload: Any) -> int:
        return await self.broadcast_session(session_id, {"type": event_type, "payload": payload})

    async def close_session(self, session_id: str) -> int:
        """Ferme toutes les sockets d'une session."""
        conns = self._snapshot_session(session_id)
        for ws in conns:
            await self.disconnect(ws)
        return len(conns)


WS = WSManager()

# références fortes sur les envois planifiés (sinon collectables en vol)
_BACKGROUND: Set[asyncio.Task] = set()

# =====================================================
# PONT SYNC -> ASYNC (handlers du bus, routes sync)
# =====================================================

def _run_async(coro):
    """
    Exécute une coroutine depuis un contexte potentiellement synchrone.
    - Essaie anyio.from_thread.run si on est dans un worker anyio (run_in_threadpool).
    - Sinon, planifie sur la loop courante si elle tourne, ou crée une loop.
    """
    async def _runner():
        return await coro

    try:
        return anyio.from_thread.run(_runner)
    except RuntimeError:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            task = loop.create_task(_runner())  # fire-and-forget
            _BACKGROUND.add(task)
            task.add_done_callback(_BACKGROUND.discard)
            return None
        return asyncio.run(_runner())

def ws_broadcast_type_safe(session_id: str, event_type: str, payload: dict):
    """Wrapper synchrone: broadcast typé aux sockets d'une session."""
    if not WS.has_clients(session_id):
        return
    _run_async(WS.broadcast_type(session_id, event_type, payload))

def attach_session(session: "GameSession"):
    """Abonne le pont WS au bus de la session; retourne la fonction de désabonnement."""
    sid = session.session_id

    def _forward(event) -> None:
        ws_broadcast_type_safe(sid, "event", event.to_wire())

    return session.event_bus.subscribe(WILDCARD, _forward)
