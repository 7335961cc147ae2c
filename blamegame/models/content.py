"""
Models / content.py
Rôle:
- Structure minimale d'un élément de contenu (question) consommé par le moteur.

Champs:
- id: identité stable de l'élément.
- text: texte affichable.
- category_*: métadonnées optionnelles de catégorie (nom, emoji) pour l'UI.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentItem(BaseModel):
    """Élément immuable une fois chargé."""
    id: str = Field(..., min_length=1)
    text: str
    category_id: Optional[str] = Field(None, alias="categoryId")
    category_name: Optional[str] = Field(None, alias="categoryName")
    category_emoji: Optional[str] = Field(None, alias="categoryEmoji")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
