from __future__ import annotations

import logging

from blamegame.engine.event_bus import EventBus
from blamegame.models.events import ContentNext, PhaseEnter, PhaseExit


def test_publish_delivers_in_subscription_order_then_wildcard():
    bus = EventBus()
    calls = []
    bus.subscribe("*", lambda e: calls.append(("wild", e.type)))
    bus.subscribe("PHASE/ENTER", lambda e: calls.append(("first", e.phase_id)))
    bus.subscribe("PHASE/ENTER", lambda e: calls.append(("second", e.phase_id)))
    bus.subscribe("PHASE/EXIT", lambda e: calls.append(("exit", e.phase_id)))

    bus.publish(PhaseEnter(phase_id="intro"))

    assert calls == [("first", "intro"), ("second", "intro"), ("wild", "PHASE/ENTER")]


def test_raising_handler_is_isolated_and_logged(caplog):
    bus = EventBus()
    seen = []

    def boom(event):
        raise ValueError("renderer crashed")

    bus.subscribe("CONTENT/NEXT", boom)
    bus.subscribe("CONTENT/NEXT", lambda e: seen.append(e.index))

    with caplog.at_level(logging.ERROR):
        bus.publish(ContentNext(index=3))

    assert seen == [3]
    assert any("Event handler failed" in r.message for r in caplog.records)


def test_unsubscribe_is_idempotent():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe("PHASE/EXIT", seen.append)
    assert bus.count() == 1

    unsubscribe()
    unsubscribe()
    bus.publish(PhaseExit(phase_id="setup"))

    assert seen == []
    assert bus.count() == 0


def test_subscribe_during_publish_misses_current_event():
    bus = EventBus()
    late = []

    def subscriber(event):
        bus.subscribe("PHASE/ENTER", late.append)

    bus.subscribe("PHASE/ENTER", subscriber)
    bus.publish(PhaseEnter(phase_id="play"))
    assert late == []

    bus.publish(PhaseEnter(phase_id="summary"))
    assert [e.phase_id for e in late] == ["summary"]


def test_clear_removes_every_handler():
    bus = EventBus()
    bus.subscribe("PHASE/ENTER", lambda e: None)
    bus.subscribe("*", lambda e: None)
    bus.clear()
    assert bus.count() == 0
