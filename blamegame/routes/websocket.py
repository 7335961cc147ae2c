"""
WebSocket endpoints.

- /ws/session/{session_id} : flux des renderers pour une session.
  1) envoie le snapshot courant (type=snapshot),
  2) relaie ensuite chaque événement publié sur le bus (type=event, payload wire),
  3) répond aux pings (type=pong) et renvoie un snapshot frais sur demande (type=state).
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from blamegame.services.io_utils import JSONDecodeError, loads
from blamegame.services.session_store import get_session
from blamegame.services.ws_manager import WS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/session/{session_id}")
async def websocket_session_stream(ws: WebSocket, session_id: str):
    session = get_session(session_id)
    if session is None:
        await ws.accept()
        await ws.close(code=4404, reason="unknown session")
        return

    await WS.connect(ws, session_id)
    await WS.send_json(ws, {"type": "snapshot", "session_id": session_id, "payload": session.snapshot()})
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = loads(raw)
            except JSONDecodeError:
                # Message non JSON -> ignore
                continue

            mtype = msg.get("type") if isinstance(msg, dict) else None
            if mtype == "ping":
                await WS.send_json(ws, {"type": "pong"})
            elif mtype == "state":
                current = get_session(session_id)
                if current is not None:
                    await WS.send_json(ws, {"type": "snapshot", "session_id": session_id, "payload": current.snapshot()})
            else:
                await WS.send_json(ws, {"type": "ack", "received": msg})
    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected", extra={"session_id": session_id})
    finally:
        await WS.disconnect(ws)
