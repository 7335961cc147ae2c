"""
Models / events.py
Rôle:
- Définir l'union fermée des événements publiés par le moteur (seule surface observable
  pour les renderers).

Notes:
- `type` est un `Literal` par classe: l'union est discriminée sur ce champ, ce qui
  interdit les payloads « duck-typed ».
- Chaque événement ne porte QUE ses champs déclarés; les renderers relisent l'état via
  les accesseurs (`progress()`, snapshot de session), jamais via l'événement.
- Sérialisation wire en camelCase (`phaseId`) via `to_wire()`.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

PHASE_ENTER = "PHASE/ENTER"
PHASE_EXIT = "PHASE/EXIT"
ACTION_REJECTED = "ACTION/REJECTED"
MODULE_COMPLETE = "MODULE/COMPLETE"
CONTENT_NEXT = "CONTENT/NEXT"

EVENT_TYPES = (PHASE_ENTER, PHASE_EXIT, ACTION_REJECTED, MODULE_COMPLETE, CONTENT_NEXT)


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PhaseEnter(_Event):
    type: Literal["PHASE/ENTER"] = PHASE_ENTER
    phase_id: str = Field(..., alias="phaseId")


class PhaseExit(_Event):
    type: Literal["PHASE/EXIT"] = PHASE_EXIT
    phase_id: str = Field(..., alias="phaseId")


class ActionRejected(_Event):
    type: Literal["ACTION/REJECTED"] = ACTION_REJECTED
    phase_id: str = Field(..., alias="phaseId")
    action: str


class ModuleComplete(_Event):
    type: Literal["MODULE/COMPLETE"] = MODULE_COMPLETE


class ContentNext(_Event):
    type: Literal["CONTENT/NEXT"] = CONTENT_NEXT
    index: int = Field(..., ge=0)


GameEvent = Annotated[
    Union[PhaseEnter, PhaseExit, ActionRejected, ModuleComplete, ContentNext],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(GameEvent)


def parse_event(data: Dict[str, Any]) -> GameEvent:
    """Reconstruit un événement typé depuis sa forme wire (tests, replays)."""
    return _EVENT_ADAPTER.validate_python(data)
