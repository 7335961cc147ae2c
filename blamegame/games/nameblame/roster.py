"""
NameBlame: roster.py
Rôle:
- Gérer la liste des joueurs saisis à l'écran de setup avant le démarrage d'une partie.

Règles:
- nom nettoyé (strip), non vide, 20 caractères max,
- unicité insensible à la casse,
- au plus `max_players` joueurs,
- roster verrouillé pendant une partie (les mutations lèvent `RosterError`).
"""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import uuid4

from blamegame.engine.errors import RosterError
from blamegame.models.player import Player

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20


class PlayerRoster:
    def __init__(self, max_players: int = 10) -> None:
        self.max_players = max_players
        self._players: List[Player] = []
        self.locked = False

    @property
    def players(self) -> List[Player]:
        return list(self._players)

    def names(self) -> List[str]:
        return [p.name for p in self._players]

    def __len__(self) -> int:
        return len(self._players)

    def validate_name(self, raw: object) -> str:
        """Retourne le nom nettoyé ou lève RosterError."""
        name = raw.strip() if isinstance(raw, str) else ""
        if not name:
            raise RosterError("Player name cannot be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise RosterError(f"Player name must be at most {MAX_NAME_LENGTH} characters")
        if self.find(name) is not None:
            raise RosterError(f"Player name {name!r} is already taken")
        return name

    def add(self, raw_name: object) -> Player:
        if self.locked:
            raise RosterError("Roster is locked while a game is running")
        if len(self._players) >= self.max_players:
            raise RosterError(f"Roster is full ({self.max_players} players max)")
        name = self.validate_name(raw_name)
        player = Player(id=uuid4().hex[:8], name=name)
        self._players.append(player)
        logger.info("Player added", extra={"player_id": player.id, "player_name": name})
        return player

    def remove(self, player_id: str) -> Player:
        if self.locked:
            raise RosterError("Roster is locked while a game is running")
        for i, p in enumerate(self._players):
            if p.id == player_id:
                logger.info("Player removed", extra={"player_id": player_id})
                return self._players.pop(i)
        raise RosterError(f"Unknown player id {player_id!r}")

    def find(self, key: str) -> Optional[Player]:
        """Recherche par id exact ou par nom (insensible à la casse)."""
        needle = key.strip().lower()
        for p in self._players:
            if p.id == key or p.name.lower() == needle:
                return p
        return None

    def lock(self) -> None:
        self.locked = True

    def unlock(self) -> None:
        self.locked = False
