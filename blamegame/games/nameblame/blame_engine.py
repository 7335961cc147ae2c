"""
NameBlame: blame_engine.py
Rôle:
- Sous-machine d'état du mode « blame » (phase `play`): qui accuse qui, à quel tour.

États:
- `selecting`: le joueur actif choisit une cible (SELECT_TARGET).
- `reveal`: l'accusation est affichée; ADVANCE passe la main à l'accusé.

Invariants:
- l'ordre des joueurs est figé au démarrage (`stable_player_order`), le roster ne peut
  plus bouger pendant la partie;
- `active_player_index` désigne toujours un joueur de cet ordre;
- le joueur actif ne peut jamais s'accuser lui-même;
- `blame_stats` ne fait que croître, seul `new_game()` le remet à zéro.

Le moteur ne connaît ni le dispatcher ni le bus: il lève des erreurs typées et laisse
le contrôleur de phase décider quoi publier.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from blamegame.engine.content_provider import ContentProvider
from blamegame.engine.errors import GameError, InsufficientPlayersError, InvalidTargetError
from blamegame.models.game_config import GameAction
from blamegame.models.player import BlameLogEntry, Player

logger = logging.getLogger(__name__)

MIN_PLAYERS = 3

BlamePhase = Literal["selecting", "reveal"]

ALLOWED: Dict[str, frozenset] = {
    "selecting": frozenset({GameAction.SELECT_TARGET}),
    "reveal": frozenset({GameAction.ADVANCE}),
}


class BlameChainEngine:
    def __init__(self, content: Optional[ContentProvider] = None) -> None:
        self.content = content
        self.stable_player_order: List[Player] = []
        self.phase: BlamePhase = "selecting"
        self.active_player_index = 0
        self.current_blamer: Optional[str] = None
        self.current_blamed: Optional[str] = None
        self.current_question: Optional[str] = None
        self.blame_log: List[BlameLogEntry] = []
        self.blame_stats: Dict[str, int] = {}
        self.started = False

    # ------------------------------------------------------------------
    # Cycle de partie
    # ------------------------------------------------------------------
    def start(self, players: Iterable[Player]) -> None:
        """Fige l'ordre des joueurs et ouvre le premier tour."""
        order = [p.model_copy() for p in players]
        if len(order) < MIN_PLAYERS:
            raise InsufficientPlayersError(len(order), MIN_PLAYERS)
        self.stable_player_order = order
        self.active_player_index = 0
        self.phase = "selecting"
        self._clear_turn()
        self.started = True
        logger.info("Blame game started", extra={"players": [p.name for p in order]})

    def new_game(self) -> None:
        """Remise à zéro complète (journal, stats, ordre)."""
        self.stable_player_order = []
        self.active_player_index = 0
        self.phase = "selecting"
        self._clear_turn()
        self.blame_log = []
        self.blame_stats = {}
        self.started = False

    def _clear_turn(self) -> None:
        self.current_blamer = None
        self.current_blamed = None
        self.current_question = None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    @property
    def active_player(self) -> Optional[Player]:
        if not self.stable_player_order:
            return None
        return self.stable_player_order[self.active_player_index]

    def allowed_actions(self) -> frozenset:
        if not self.started:
            return frozenset()
        return ALLOWED[self.phase]

    def resolve_player(self, key: str) -> Optional[Player]:
        """Id exact ou nom (insensible à la casse)."""
        needle = key.strip().lower()
        for p in self.stable_player_order:
            if p.id == key or p.name.lower() == needle:
                return p
        return None

    def select_target(self, target: str) -> BlameLogEntry:
        """
        `selecting` → `reveal`: enregistre l'accusation du joueur actif contre `target`.
        Lève InvalidTargetError (auto-accusation, hors roster); l'état est alors inchangé.
        """
        if not self.started or self.phase != "selecting":
            raise GameError("SELECT_TARGET is only valid while selecting")
        blamer = self.active_player
        if blamer is None:
            raise GameError("No active player in the blame order")
        blamed = self.resolve_player(target)
        if blamed is None:
            raise InvalidTargetError(target, "not in the roster")
        if blamed.id == blamer.id:
            raise InvalidTargetError(target, "players cannot blame themselves")

        item = self.content.current() if self.content is not None else None
        question = getattr(item, "text", None) or ""
        entry = BlameLogEntry(from_player=blamer.name, to_player=blamed.name, question=question)
        self.blame_log.append(entry)
        self.blame_stats[blamed.name] = self.blame_stats.get(blamed.name, 0) + 1
        for p in self.stable_player_order:
            if p.id == blamed.id:
                p.score += 1
                p.streak += 1
            else:
                p.streak = 0

        self.current_blamer = blamer.name
        self.current_blamed = blamed.name
        self.current_question = question
        self.phase = "reveal"
        logger.info("Blame recorded", extra={"from_player": blamer.name, "to_player": blamed.name})
        return entry

    def advance(self) -> bool:
        """
        `reveal` → `selecting`: la main passe à l'accusé, puis le contenu avance.
        Retourne False quand le contenu est épuisé (le contrôleur bascule alors en résumé).
        """
        if not self.started or self.phase != "reveal":
            raise GameError("ADVANCE is only valid after a blame was revealed")
        blamed = self.resolve_player(self.current_blamed or "")
        if blamed is not None:
            self.active_player_index = next(
                i for i, p in enumerate(self.stable_player_order) if p.id == blamed.id
            )
        self._clear_turn()
        self.phase = "selecting"
        return self.content.next() if self.content is not None else False

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------
    def blame_count(self, name: str) -> int:
        return self.blame_stats.get(name, 0)

    def most_blamed(self) -> Tuple[List[str], int]:
        """Tous les noms ex æquo au maximum + ce maximum (([], 0) si personne)."""
        if not self.blame_stats:
            return [], 0
        top = max(self.blame_stats.values())
        names = [p.name for p in self.stable_player_order if self.blame_stats.get(p.name) == top]
        # stats d'une partie précédente sur un joueur retiré
        names += sorted(n for n, c in self.blame_stats.items() if c == top and n not in names)
        return names, top

    def summary(self) -> Dict[str, Any]:
        names, count = self.most_blamed()
        return {
            "rounds_played": len(self.blame_log),
            "blame_stats": dict(self.blame_stats),
            "most_blamed": {"names": names, "count": count},
            "players": [p.model_dump() for p in self.stable_player_order],
            "log": [e.model_dump(mode="json", by_alias=True) for e in self.blame_log],
        }

    def state(self) -> Dict[str, Any]:
        active = self.active_player
        return {
            "started": self.started,
            "phase": self.phase,
            "active_player_index": self.active_player_index,
            "active_player": active.name if active else None,
            "current_blamer": self.current_blamer,
            "current_blamed": self.current_blamed,
            "current_question": self.current_question,
            "player_order": [p.name for p in self.stable_player_order],
        }
