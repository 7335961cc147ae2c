"""
Engine: event_bus.py
Rôle:
- Hub publish/subscribe synchrone pour les notifications de cycle de vie (phases,
  actions refusées, contenu, fin de module).

Garanties:
- Livraison synchrone, dans l'ordre d'abonnement, aux handlers du `event.type` puis aux
  handlers joker (`"*"`).
- Un handler qui lève est isolé (exception journalisée) et ne bloque pas les suivants.
- La liste des handlers est figée (snapshot) avant l'itération: un abonnement pendant un
  publish en cours ne reçoit pas l'événement courant.
- Mono-processus, aucun transport.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List

from blamegame.models.events import EVENT_TYPES, GameEvent

logger = logging.getLogger(__name__)

WILDCARD = "*"

Handler = Callable[[GameEvent], None]
Unsubscribe = Callable[[], None]


class EventBus:
    """Bus d'événements propre à une session (jamais partagé entre sessions)."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event_type: str, handler: Handler) -> Unsubscribe:
        """Abonne `handler` au canal `event_type` et retourne la fonction de désabonnement."""
        if event_type != WILDCARD and event_type not in EVENT_TYPES:
            logger.warning("Subscribing to unknown event type", extra={"event_type": event_type})
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler %s to '%s'", handler, event_type)

        def _unsubscribe() -> None:
            bucket = self._handlers.get(event_type)
            if not bucket or handler not in bucket:
                return
            bucket.remove(handler)
            if not bucket:
                del self._handlers[event_type]

        return _unsubscribe

    def publish(self, event: GameEvent) -> None:
        handlers = list(self._handlers.get(event.type, ())) + list(self._handlers.get(WILDCARD, ()))
        if not handlers:
            logger.debug("Publishing '%s' with no subscribers", event.type)
            return
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Event handler failed",
                    extra={"event_type": event.type, "handler": repr(handler)},
                )

    def clear(self) -> None:
        """Retire tous les handlers (reset de session, tests)."""
        self._handlers.clear()

    def count(self) -> int:
        return sum(len(bucket) for bucket in self._handlers.values())
