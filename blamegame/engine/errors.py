"""
Engine errors
=============

Taxonomie des échecs typés du moteur de phases.

- `ConfigError`: configuration incohérente (fatal, détecté à l'enregistrement du module).
- `NotReadyError`: dispatch avant la fin de `init()` (récupérable).
- `InvalidTargetError`: auto-accusation ou cible hors roster (récupérable, état inchangé).
- `InsufficientPlayersError`: démarrage du mode blame sous `MIN_PLAYERS` (bloque le départ).
- `RosterError`: nom de joueur invalide, doublon, roster plein ou verrouillé.

Une action refusée par le garde du dispatcher n'est PAS une exception : c'est un
événement `ACTION/REJECTED` publié sur le bus, l'appel retourne normalement.
"""
from __future__ import annotations

from typing import Optional, Sequence


class GameError(RuntimeError):
    """Base commune des erreurs du moteur."""


class ConfigError(GameError):
    """Raised when a module configuration or its controllers are inconsistent."""


class NotReadyError(GameError):
    """Raised when an action is dispatched before the session finished `init()`."""

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id
        label = f" (session={session_id})" if session_id else ""
        super().__init__(f"Session not initialized{label}; await init() before dispatching.")


class InvalidTargetError(GameError):
    """Raised when a blame targets the active player or a name outside the roster."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Invalid blame target {target!r}: {reason}")


class InsufficientPlayersError(GameError):
    """Raised when the blame game is started with fewer than the required players."""

    def __init__(self, count: int, minimum: int) -> None:
        self.count = count
        self.minimum = minimum
        super().__init__(f"At least {minimum} players are required (got {count}).")


class RosterError(GameError):
    """Raised when a roster mutation is refused (bad name, duplicate, full, locked)."""

    def __init__(self, message: str, *, details: Optional[Sequence[str]] = None) -> None:
        self.details = list(details or [])
        super().__init__(message)
