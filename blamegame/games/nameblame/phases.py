"""
NameBlame: phases.py
Rôle:
- Contrôleurs des quatre phases du module (intro → setup → play → summary).

Déroulé:
- intro   + ADVANCE        → setup (mode nameblame) ou play (mode classic)
- setup   + CUSTOM         → add_player / remove_player / select_categories (reste sur place)
- setup   + BACK           → intro
- setup   + ADVANCE        → démarre la partie (roster figé) → play
- play    + SELECT_TARGET  → accusation (sous-état reveal)
- play    + ADVANCE        → question suivante, ou summary si le contenu est épuisé
- summary + RESTART        → intro (curseur, stats et roster réinitialisés)
- summary + ADVANCE        → COMPLETE (retour au sélecteur de jeux côté hôte)
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from blamegame.engine.errors import InvalidTargetError
from blamegame.engine.phases import COMPLETE, STAY, PhaseController, PhaseControllerMap, Transition, goto
from blamegame.models.events import ActionRejected, ContentNext
from blamegame.models.game_config import GameAction

if TYPE_CHECKING:
    from blamegame.engine.session import ModuleContext

logger = logging.getLogger(__name__)


def _is_blame_mode(ctx: "ModuleContext") -> bool:
    return ctx.config.game_settings.game_mode == "nameblame"


def _next_or_summary(ctx: "ModuleContext", moved: bool) -> Transition:
    if not moved:
        return goto("summary")
    ctx.event_bus.publish(ContentNext(index=ctx.content.progress().index))
    return STAY


class IntroController(PhaseController):
    targets = frozenset({"setup", "play"})

    def transition(self, action: GameAction, payload: Any, ctx: "ModuleContext") -> Transition:
        if action is GameAction.ADVANCE:
            return goto("setup" if _is_blame_mode(ctx) else "play")
        return STAY


class SetupController(PhaseController):
    targets = frozenset({"intro", "play"})

    def on_enter(self, ctx: "ModuleContext") -> None:
        ctx.domain.roster.unlock()

    def transition(self, action: GameAction, payload: Any, ctx: "ModuleContext") -> Transition:
        if action is GameAction.BACK:
            return goto("intro")
        if action is GameAction.ADVANCE:
            # InsufficientPlayersError remonte à l'appelant, aucune transition
            ctx.domain.engine.start(ctx.domain.roster.players)
            ctx.domain.roster.lock()
            return goto("play")
        if action is GameAction.CUSTOM:
            return self._setup_command(payload, ctx)
        return STAY

    def _setup_command(self, payload: Any, ctx: "ModuleContext") -> Transition:
        command = payload.get("command") if isinstance(payload, Mapping) else None
        roster = ctx.domain.roster
        if command == "add_player":
            roster.add(payload.get("name"))
        elif command == "remove_player":
            roster.remove(str(payload.get("player_id", "")))
        elif command == "select_categories" and self._category_ids_ok(payload, ctx):
            total = ctx.content.select_categories(payload.get("category_ids"))
            logger.info("Categories selected", extra={"category_ids": payload.get("category_ids"), "questions": total})
        else:
            logger.info("Setup command rejected", extra={"command": command})
            ctx.event_bus.publish(ActionRejected(phase_id="setup", action=GameAction.CUSTOM.value))
        return STAY

    @staticmethod
    def _category_ids_ok(payload: Mapping, ctx: "ModuleContext") -> bool:
        ids = payload.get("category_ids")
        if not hasattr(ctx.content, "select_categories"):
            return False
        return ids is None or (isinstance(ids, list) and all(isinstance(i, str) for i in ids))


class PlayController(PhaseController):
    targets = frozenset({"summary"})

    def accepts(self, action: GameAction, ctx: "ModuleContext") -> bool:
        if not _is_blame_mode(ctx):
            return action is GameAction.ADVANCE
        return action in ctx.domain.engine.allowed_actions()

    def transition(self, action: GameAction, payload: Any, ctx: "ModuleContext") -> Transition:
        if not _is_blame_mode(ctx):
            return _next_or_summary(ctx, ctx.content.next())

        engine = ctx.domain.engine
        if action is GameAction.SELECT_TARGET:
            try:
                engine.select_target(payload["target"])
            except InvalidTargetError as exc:
                logger.info("Blame refused", extra={"target": exc.target, "reason": exc.reason})
                ctx.event_bus.publish(ActionRejected(phase_id="play", action=action.value))
            return STAY
        if action is GameAction.ADVANCE:
            return _next_or_summary(ctx, engine.advance())
        return STAY


class SummaryController(PhaseController):
    targets = frozenset({"intro"})

    def transition(self, action: GameAction, payload: Any, ctx: "ModuleContext") -> Transition:
        if action is GameAction.RESTART:
            ctx.content.reset()
            ctx.domain.engine.new_game()
            ctx.domain.roster.unlock()
            return goto("intro")
        if action is GameAction.ADVANCE:
            return COMPLETE
        return STAY


def build_controllers() -> PhaseControllerMap:
    return {
        "intro": IntroController(),
        "setup": SetupController(),
        "play": PlayController(),
        "summary": SummaryController(),
    }
