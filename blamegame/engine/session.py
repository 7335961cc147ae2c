"""
Engine: session.py
Rôle:
- `ModuleContext`: paquet (config, dispatch, bus, identifiants, contenu, état métier)
  transmis aux contrôleurs et aux moteurs métier.
- `GameSession`: routeur côté hôte. Détient l'id de phase courant, câble le dispatcher,
  exécute `init()` (chargement du contenu) et expose des accesseurs lecture seule.

Notes:
- Aucun état global: tout ce qui est mutable (phase, curseur de contenu, état blame)
  appartient à UNE session et n'est muté que dans la pile d'appel d'un `dispatch()`.
- `init()` est la seule frontière asynchrone; des appels concurrents partagent la même
  tâche en vol. Un échec laisse la session non prête (tout ou rien).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from blamegame.config.settings import settings
from blamegame.engine.content_provider import ContentProvider, Progress
from blamegame.engine.dispatcher import Dispatcher
from blamegame.engine.errors import ConfigError
from blamegame.engine.event_bus import EventBus
from blamegame.engine.modules import GameModule
from blamegame.engine.phases import Transition
from blamegame.models.events import PhaseEnter
from blamegame.models.game_config import GameConfig, PhaseConfig

logger = logging.getLogger(__name__)

DispatchFn = Callable[..., Transition]


@dataclass
class ModuleContext:
    config: GameConfig
    event_bus: EventBus
    player_id: Optional[str] = None
    room_id: Optional[str] = None
    # rempli par GameSession.init()
    content: Optional[ContentProvider] = None
    domain: Any = None
    _dispatch: Optional[DispatchFn] = field(default=None, init=False, repr=False)

    def bind_dispatch(self, fn: DispatchFn) -> None:
        if self._dispatch is not None:
            raise ConfigError("dispatch is already bound for this context")
        self._dispatch = fn

    def dispatch(self, action: Any, payload: Any = None) -> Transition:
        if self._dispatch is None:
            raise ConfigError("dispatch is not wired yet")
        return self._dispatch(action, payload)


class GameSession:
    def __init__(
        self,
        module: GameModule,
        *,
        session_id: Optional[str] = None,
        player_id: Optional[str] = None,
        room_id: Optional[str] = None,
        seed: Optional[int] = None,
        max_hops: Optional[int] = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.module = module
        self.seed = seed if seed is not None else settings.CONTENT_SEED
        self.event_bus = EventBus()
        self.context = ModuleContext(
            config=module.config,
            event_bus=self.event_bus,
            player_id=player_id,
            room_id=room_id,
        )
        self.controllers = module.phase_controllers()
        self._phase_id = module.config.initial_phase_id
        self._ready = False
        self._init_task: Optional[asyncio.Future] = None
        self.dispatcher = Dispatcher(
            module.config,
            self.controllers,
            self.context,
            get_phase_id=lambda: self._phase_id,
            set_phase_id=self._set_phase_id,
            is_ready=lambda: self._ready,
            max_hops=max_hops,
            session_id=self.session_id,
        )
        self.context.bind_dispatch(self.dispatcher.dispatch)

    # ------------------------------------------------------------------
    # Cycle de vie
    # ------------------------------------------------------------------
    @property
    def ready(self) -> bool:
        return self._ready

    async def init(self) -> None:
        """Charge le contenu; les appels qui se chevauchent attendent la même tâche."""
        if self._ready:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._run_init())
        task = self._init_task
        try:
            await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _run_init(self) -> None:
        logger.info("Session init start", extra={"session_id": self.session_id, "module_id": self.module.id})
        provider = await self.module.load_content(self.context, seed=self.seed)
        # le domaine lit ctx.content: le provider doit être posé avant create_domain
        self.context.content = provider
        try:
            self.context.domain = self.module.create_domain(self.context)
            # prêt avant on_enter: un on_enter peut lui-même dispatcher
            self._ready = True
            initial = self._phase_id
            self.controllers[initial].on_enter(self.context)
        except Exception:
            # tout ou rien
            self._ready = False
            self.context.content = None
            self.context.domain = None
            raise
        logger.info(
            "Session ready",
            extra={"session_id": self.session_id, "content_total": provider.progress().total},
        )
        self.event_bus.publish(PhaseEnter(phase_id=initial))

    def close(self) -> None:
        """Détache tous les abonnés (fin de session / changement de module)."""
        self.event_bus.clear()

    # ------------------------------------------------------------------
    # Dispatch + accesseurs
    # ------------------------------------------------------------------
    def dispatch(self, action: Any, payload: Any = None) -> Transition:
        return self.dispatcher.dispatch(action, payload)

    def _set_phase_id(self, phase_id: str) -> None:
        self._phase_id = phase_id

    @property
    def current_phase_id(self) -> str:
        return self._phase_id

    @property
    def current_phase(self) -> PhaseConfig:
        phase = self.module.config.phase(self._phase_id)
        if phase is None:
            raise ConfigError(f"Current phase {self._phase_id!r} is not declared")
        return phase

    @property
    def screen(self) -> Optional[str]:
        return self.module.screen_for(self._phase_id)

    def allowed_actions(self) -> List[str]:
        """Actions acceptées MAINTENANT (déclarées et non refusées par le sous-état)."""
        if not self._ready:
            return []
        controller = self.controllers[self._phase_id]
        return sorted(
            a.value for a in self.current_phase.allowed_actions if controller.accepts(a, self.context)
        )

    def progress(self) -> Progress:
        if self.context.content is None:
            return Progress(index=0, total=0)
        return self.context.content.progress()

    def current_item(self) -> Any:
        if self.context.content is None:
            return None
        return self.context.content.current()

    def snapshot(self) -> Dict[str, Any]:
        item = self.current_item()
        return {
            "session_id": self.session_id,
            "module_id": self.module.id,
            "ready": self._ready,
            "phase_id": self._phase_id,
            "screen": self.screen,
            "allowed_actions": self.allowed_actions(),
            "progress": self.progress().as_dict(),
            "current_item": item.model_dump(by_alias=True) if hasattr(item, "model_dump") else item,
            "module": self.module.describe(self.context) if self._ready else {},
        }
