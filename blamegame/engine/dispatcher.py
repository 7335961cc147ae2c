"""
Engine: dispatcher.py
Rôle:
- Fonction centrale (phase courante, action, payload) → phase suivante.
- Applique le garde `allowedActions` avant tout appel au contrôleur.
- Publie les événements de cycle de vie sur le bus de la session.

Séquence d'un dispatch:
1) session prête ? sinon `NotReadyError`.
2) garde: action déclarée pour la phase ET acceptée par le contrôleur, sinon
   `ACTION/REJECTED` (un seul événement) et STAY, sans toucher à l'état.
3) `transition(action, payload, ctx)` → STAY | GOTO(id) | COMPLETE.
4) GOTO: `PHASE/EXIT{old}` → `on_exit` → changement d'id → `on_enter` → `PHASE/ENTER{new}`.
5) COMPLETE: `MODULE/COMPLETE`, l'id de phase ne change pas.

Réentrance:
- un contrôleur peut rappeler `ctx.dispatch` depuis `on_enter`/`transition`; la profondeur
  d'appels imbriqués et les GOTO sont comptés par appel externe et bornés par
  `max_hops` (`ConfigError` au-delà).
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from blamegame.config.settings import settings
from blamegame.engine.errors import ConfigError, NotReadyError
from blamegame.engine.phases import STAY, PhaseControllerMap, Transition
from blamegame.models.events import ActionRejected, ModuleComplete, PhaseEnter, PhaseExit
from blamegame.models.game_config import GameAction, GameConfig

if TYPE_CHECKING:
    from blamegame.engine.session import ModuleContext

logger = logging.getLogger(__name__)


def parse_action(action: Union[GameAction, str]) -> Optional[GameAction]:
    """Normalise une action (enum ou chaîne) ; None si hors vocabulaire."""
    if isinstance(action, GameAction):
        return action
    try:
        return GameAction(str(action).strip().upper())
    except ValueError:
        return None


def _payload_ok(action: GameAction, payload: Any) -> bool:
    if action is GameAction.SELECT_TARGET:
        if not isinstance(payload, Mapping):
            return False
        target = payload.get("target")
        return isinstance(target, str) and bool(target.strip())
    return True


class Dispatcher:
    def __init__(
        self,
        config: GameConfig,
        controllers: PhaseControllerMap,
        ctx: "ModuleContext",
        *,
        get_phase_id: Callable[[], str],
        set_phase_id: Callable[[str], None],
        is_ready: Callable[[], bool] = lambda: True,
        max_hops: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config = config
        self.controllers = controllers
        self.ctx = ctx
        self._get_phase_id = get_phase_id
        self._set_phase_id = set_phase_id
        self._is_ready = is_ready
        self.max_hops = max_hops if max_hops is not None else settings.MAX_TRANSITION_HOPS
        self.session_id = session_id
        self._depth = 0
        self._hops = 0

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------
    def dispatch(self, action: Union[GameAction, str], payload: Any = None) -> Transition:
        if not self._is_ready():
            raise NotReadyError(self.session_id)

        self._depth += 1
        if self._depth == 1:
            self._hops = 0
        try:
            if self._depth > self.max_hops:
                raise ConfigError(
                    f"Nested dispatch exceeded {self.max_hops} levels (controller re-dispatching in a loop)"
                )
            return self._dispatch(action, payload)
        finally:
            self._depth -= 1

    # ------------------------------------------------------------------
    # Internes
    # ------------------------------------------------------------------
    def _dispatch(self, raw_action: Union[GameAction, str], payload: Any) -> Transition:
        phase_id = self._get_phase_id()
        phase = self.config.phase(phase_id)
        controller = self.controllers.get(phase_id)
        if phase is None or controller is None:
            # impossible après validation du module
            raise ConfigError(f"No controller registered for phase {phase_id!r}")

        action = parse_action(raw_action)
        if (
            action is None
            or action not in phase.allowed_actions
            or not _payload_ok(action, payload)
            or not controller.accepts(action, self.ctx)
        ):
            return self.reject(phase_id, raw_action)

        result = controller.transition(action, payload, self.ctx)
        logger.debug(
            "Transition resolved",
            extra={"session_id": self.session_id, "phase_id": phase_id, "action": action.value, "result": result.kind},
        )
        if result.kind == "GOTO":
            self._goto(result.phase_id)
        elif result.kind == "COMPLETE":
            self.ctx.event_bus.publish(ModuleComplete())
        return result

    def reject(self, phase_id: str, raw_action: Union[GameAction, str]) -> Transition:
        """Publie `ACTION/REJECTED` et laisse l'état intact."""
        label = raw_action.value if isinstance(raw_action, GameAction) else str(raw_action)
        logger.info(
            "Action rejected",
            extra={"session_id": self.session_id, "phase_id": phase_id, "action": label},
        )
        self.ctx.event_bus.publish(ActionRejected(phase_id=phase_id, action=label))
        return STAY

    def _goto(self, target: Optional[str]) -> None:
        if not target or not self.config.has_phase(target):
            raise ConfigError(f"GOTO target {target!r} is not a declared phase")
        self._hops += 1
        if self._hops > self.max_hops:
            raise ConfigError(
                f"Transition chain exceeded {self.max_hops} hops (possible auto-advance loop)"
            )

        old = self._get_phase_id()
        bus = self.ctx.event_bus
        bus.publish(PhaseExit(phase_id=old))
        self.controllers[old].on_exit(self.ctx)
        self._set_phase_id(target)
        logger.info("Phase changed", extra={"session_id": self.session_id, "from_phase": old, "to_phase": target})
        self.controllers[target].on_enter(self.ctx)
        bus.publish(PhaseEnter(phase_id=target))
