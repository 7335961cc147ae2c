"""
Models / player.py
Rôle:
- Définir la structure d'un joueur et d'une entrée du journal d'accusations.

Champs (Player):
- id: identifiant unique du joueur (stable pour la session).
- name: nom affiché (unique, insensible à la casse, dans un roster).
- score: nombre total d'accusations reçues pendant la partie.
- streak: accusations reçues consécutivement (remis à 0 quand un autre est accusé).

Champs (BlameLogEntry):
- from/to: noms de l'accusateur et de l'accusé.
- question: texte de la question au moment de l'accusation.
- timestamp: horodatage UTC.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class Player(BaseModel):
    """Profil joueur (identité figée, compteurs mutables)."""
    id: str
    name: str
    score: int = 0
    streak: int = 0


class BlameLogEntry(BaseModel):
    """Entrée append-only du journal, jamais modifiée après création."""
    from_player: str = Field(..., alias="from")
    to_player: str = Field(..., alias="to")
    question: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True, populate_by_name=True)
