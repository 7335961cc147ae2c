"""
Engine: phases.py
Rôle:
- Contrat des contrôleurs de phase et résultats de transition (STAY / GOTO / COMPLETE).

Contrat d'un contrôleur:
- `transition(action, payload, ctx)` → `Transition` (obligatoire).
- `on_enter(ctx)` / `on_exit(ctx)` (optionnels) appelés par le dispatcher lors d'un GOTO.
- `accepts(action, ctx)` (optionnel) restreint encore les actions autorisées selon un
  sous-état (ex: phase blame `selecting`/`reveal`); un refus est traité par le garde du
  dispatcher exactement comme une action non déclarée.
- `targets`: ids de phases que le contrôleur peut viser via GOTO (vérifiés à
  l'enregistrement du module).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Dict, FrozenSet, Literal, Optional

from blamegame.models.game_config import GameAction

if TYPE_CHECKING:
    from blamegame.engine.session import ModuleContext


@dataclass(frozen=True)
class Transition:
    kind: Literal["STAY", "GOTO", "COMPLETE"]
    phase_id: Optional[str] = None


STAY = Transition("STAY")
COMPLETE = Transition("COMPLETE")


def goto(phase_id: str) -> Transition:
    return Transition("GOTO", phase_id)


class PhaseController:
    """Base des contrôleurs: reste sur place par défaut."""

    targets: ClassVar[FrozenSet[str]] = frozenset()

    def transition(self, action: GameAction, payload: Any, ctx: "ModuleContext") -> Transition:
        return STAY

    def accepts(self, action: GameAction, ctx: "ModuleContext") -> bool:
        return True

    def on_enter(self, ctx: "ModuleContext") -> None:
        return None

    def on_exit(self, ctx: "ModuleContext") -> None:
        return None


PhaseControllerMap = Dict[str, PhaseController]
