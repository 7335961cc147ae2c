from __future__ import annotations

import asyncio

import pytest

from blamegame.engine.errors import ConfigError, NotReadyError
from blamegame.engine.modules import ModuleRegistry
from blamegame.engine.phases import COMPLETE, STAY, PhaseController, goto
from blamegame.engine.session import GameSession
from blamegame.models.game_config import GameAction

PHASES = [
    {"id": "a", "screenId": "a", "allowedActions": ["ADVANCE"]},
    {"id": "b", "screenId": "b", "allowedActions": ["ADVANCE", "BACK"]},
]


class Tracing(PhaseController):
    """Contrôleur qui trace ses hooks dans une liste partagée."""

    def __init__(self, name, log, routes=None):
        self.name = name
        self.log = log
        self.routes = routes or {}
        self.calls = 0

    def transition(self, action, payload, ctx):
        self.calls += 1
        return self.routes.get(action, STAY)

    def on_enter(self, ctx):
        self.log.append(f"on_enter:{self.name}")

    def on_exit(self, ctx):
        self.log.append(f"on_exit:{self.name}")


@pytest.fixture
def traced(toy_module, config_factory):
    log = []
    controllers = {}

    def _build():
        controllers["a"] = Tracing("a", log, {GameAction.ADVANCE: goto("b")})
        controllers["b"] = Tracing("b", log, {GameAction.ADVANCE: COMPLETE, GameAction.BACK: goto("a")})
        return dict(controllers)

    module = toy_module(config_factory(PHASES), _build)
    session = GameSession(module)
    session.event_bus.subscribe("*", lambda e: log.append(e.type))
    asyncio.run(session.init())
    log.clear()
    return session, log, controllers


def test_dispatch_before_init_raises(toy_module, config_factory):
    module = toy_module(config_factory(PHASES), lambda: {"a": PhaseController(), "b": PhaseController()})
    session = GameSession(module)
    with pytest.raises(NotReadyError):
        session.dispatch(GameAction.ADVANCE)
    assert session.allowed_actions() == []


def test_goto_publishes_exit_hooks_then_enter(traced):
    session, log, _ = traced
    result = session.dispatch("ADVANCE")

    assert result == goto("b")
    assert session.current_phase_id == "b"
    assert log == ["PHASE/EXIT", "on_exit:a", "on_enter:b", "PHASE/ENTER"]


def test_disallowed_action_is_rejected_without_calling_controller(traced):
    session, log, controllers = traced
    result = session.dispatch(GameAction.BACK)

    assert result == STAY
    assert session.current_phase_id == "a"
    assert log == ["ACTION/REJECTED"]
    assert controllers["a"].calls == 0


def test_unknown_action_name_is_rejected(traced):
    session, log, _ = traced
    assert session.dispatch("JUMP") == STAY
    assert log == ["ACTION/REJECTED"]
    assert session.current_phase_id == "a"


def test_complete_keeps_phase_and_publishes(traced):
    session, log, _ = traced
    session.dispatch("ADVANCE")
    log.clear()

    assert session.dispatch("advance") == COMPLETE
    assert session.current_phase_id == "b"
    assert log == ["MODULE/COMPLETE"]


def test_goto_to_undeclared_phase_raises_before_state_change(toy_module, config_factory):
    class Rogue(PhaseController):
        def transition(self, action, payload, ctx):
            return goto("nowhere")

    module = toy_module(config_factory(PHASES), lambda: {"a": Rogue(), "b": PhaseController()})
    session = GameSession(module)
    asyncio.run(session.init())
    types = []
    session.event_bus.subscribe("*", lambda e: types.append(e.type))

    with pytest.raises(ConfigError):
        session.dispatch("ADVANCE")
    assert session.current_phase_id == "a"
    assert types == []


def test_auto_advance_chain_within_bound(toy_module, config_factory):
    phases = PHASES + [{"id": "c", "screenId": "c", "allowedActions": []}]

    class Hop(PhaseController):
        targets = frozenset({"b", "c"})

        def __init__(self, target, auto=False):
            self.target = target
            self.auto = auto

        def transition(self, action, payload, ctx):
            return goto(self.target)

        def on_enter(self, ctx):
            if self.auto:
                ctx.dispatch(GameAction.ADVANCE)

    module = toy_module(
        config_factory(phases),
        lambda: {"a": Hop("b"), "b": Hop("c", auto=True), "c": PhaseController()},
    )
    session = GameSession(module, max_hops=2)
    asyncio.run(session.init())

    session.dispatch("ADVANCE")
    assert session.current_phase_id == "c"


def test_runaway_auto_advance_hits_hop_bound(toy_module, config_factory):
    class Loop(PhaseController):
        targets = frozenset({"b"})

        def transition(self, action, payload, ctx):
            return goto("b")

    class SelfLoop(Loop):
        def on_enter(self, ctx):
            ctx.dispatch(GameAction.ADVANCE)

    module = toy_module(config_factory(PHASES), lambda: {"a": Loop(), "b": SelfLoop()})
    session = GameSession(module, max_hops=10)
    asyncio.run(session.init())

    with pytest.raises(ConfigError):
        session.dispatch("ADVANCE")


def test_transition_redispatching_itself_hits_depth_bound(toy_module, config_factory):
    class Echo(PhaseController):
        def transition(self, action, payload, ctx):
            return ctx.dispatch(action, payload)

    module = toy_module(config_factory(PHASES), lambda: {"a": Echo(), "b": PhaseController()})
    session = GameSession(module, max_hops=5)
    asyncio.run(session.init())

    with pytest.raises(ConfigError):
        session.dispatch("ADVANCE")
    assert session.dispatcher._depth == 0
    assert session.current_phase_id == "a"

    # la profondeur est bien relâchée: un dispatch refusé reste un simple STAY
    assert session.dispatch("BACK") == STAY


def test_registration_requires_full_controller_coverage(toy_module, config_factory):
    registry = ModuleRegistry()
    with pytest.raises(ConfigError):
        registry.register(toy_module(config_factory(PHASES), lambda: {"a": PhaseController()}))
    assert "toy" not in registry


def test_registration_rejects_controllers_for_undeclared_phases(toy_module, config_factory):
    registry = ModuleRegistry()
    controllers = lambda: {"a": PhaseController(), "b": PhaseController(), "z": PhaseController()}
    with pytest.raises(ConfigError):
        registry.register(toy_module(config_factory(PHASES), controllers))


def test_registration_checks_declared_goto_targets(toy_module, config_factory):
    class Wanderer(PhaseController):
        targets = frozenset({"missing"})

    registry = ModuleRegistry()
    with pytest.raises(ConfigError):
        registry.register(toy_module(config_factory(PHASES), lambda: {"a": Wanderer(), "b": PhaseController()}))


def test_duplicate_module_id_is_rejected(toy_module, config_factory):
    registry = ModuleRegistry()
    controllers = lambda: {"a": PhaseController(), "b": PhaseController()}
    registry.register(toy_module(config_factory(PHASES), controllers))
    with pytest.raises(ConfigError):
        registry.register(toy_module(config_factory(PHASES), controllers))
    assert [m.id for m in registry.list()] == ["toy"]
