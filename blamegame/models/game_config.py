"""
Models / game_config.py
Rôle:
- Définir le schéma typé d'un `game.json` (phases, écrans, provider de contenu, réglages).
- Valider la cohérence structurelle à la construction (phases non vides, ids uniques,
  écrans référencés, bornes joueurs).

Notes:
- Les clés du document sont en camelCase (format partagé avec le front); les attributs
  Python restent en snake_case via des alias.
- Le modèle est figé (`frozen=True`): une config est créée une fois au chargement du
  module puis jamais modifiée.
- La couverture des contrôleurs (un contrôleur par phase) est vérifiée plus tard, à
  l'enregistrement du module, car elle dépend du code et non du document.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GameAction(str, Enum):
    """Vocabulaire fermé des intentions envoyées par la couche UI."""

    ADVANCE = "ADVANCE"
    BACK = "BACK"
    SELECT_TARGET = "SELECT_TARGET"
    REVEAL = "REVEAL"
    RESTART = "RESTART"
    CUSTOM = "CUSTOM"


_CAMEL = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class PhaseConfig(BaseModel):
    id: str = Field(..., min_length=1)
    screen_id: str = Field(..., min_length=1, alias="screenId")
    allowed_actions: FrozenSet[GameAction] = Field(default_factory=frozenset, alias="allowedActions")

    model_config = _CAMEL


class ContentProviderConfig(BaseModel):
    type: str = "static"
    source: Optional[str] = None
    shuffle: bool = False

    model_config = _CAMEL


class GameSettings(BaseModel):
    """Réglages de gameplay (sélection du contenu, mode de jeu)."""

    categories_per_game: int = Field(5, ge=1, le=20, alias="categoriesPerGame")
    questions_per_category: int = Field(10, ge=1, le=50, alias="questionsPerCategory")
    max_questions_total: int = Field(50, ge=1, le=100, alias="maxQuestionsTotal")
    shuffle_questions: bool = Field(True, alias="shuffleQuestions")
    shuffle_categories: bool = Field(True, alias="shuffleCategories")
    game_mode: Literal["classic", "nameblame"] = Field("nameblame", alias="gameMode")

    model_config = _CAMEL

    @field_validator("game_mode", mode="before")
    @classmethod
    def _lower_mode(cls, value):
        # le front historique envoie "nameBlame"
        return value.lower() if isinstance(value, str) else value


class GameConfig(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    version: str = "1.0"
    min_players: int = Field(1, ge=1, alias="minPlayers")
    max_players: int = Field(10, ge=1, alias="maxPlayers")
    phases: List[PhaseConfig]
    screens: Dict[str, str] = Field(default_factory=dict)
    content_provider: ContentProviderConfig = Field(
        default_factory=ContentProviderConfig, alias="contentProvider"
    )
    game_settings: GameSettings = Field(default_factory=GameSettings, alias="gameSettings")

    model_config = _CAMEL

    @model_validator(mode="after")
    def _check_structure(self) -> "GameConfig":
        if not self.phases:
            raise ValueError("phases must declare at least one phase")
        seen: set[str] = set()
        duplicates: list[str] = []
        for phase in self.phases:
            if phase.id in seen:
                duplicates.append(phase.id)
            seen.add(phase.id)
        if duplicates:
            raise ValueError(f"duplicate phase ids: {sorted(set(duplicates))}")
        if self.screens:
            missing = [p.screen_id for p in self.phases if p.screen_id not in self.screens]
            if missing:
                raise ValueError(f"phases reference undeclared screens: {missing}")
        if self.min_players > self.max_players:
            raise ValueError("minPlayers must be <= maxPlayers")
        return self

    # ------------------------------------------------------------------
    # Helpers de lecture
    # ------------------------------------------------------------------
    @property
    def initial_phase_id(self) -> str:
        return self.phases[0].id

    @property
    def phase_ids(self) -> List[str]:
        return [p.id for p in self.phases]

    def phase(self, phase_id: str) -> Optional[PhaseConfig]:
        for p in self.phases:
            if p.id == phase_id:
                return p
        return None

    def has_phase(self, phase_id: str) -> bool:
        return self.phase(phase_id) is not None
