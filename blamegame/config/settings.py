"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du moteur de phases et de l'hôte HTTP (nom, chemin des modules,
  module par défaut, garde-fous du dispatcher, niveau de log).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from blamegame.config.settings import settings`.

Notes
-----
- `MODULES_DIR` contient un sous-dossier par module de jeu (`<id>/game.json`).
- `MAX_TRANSITION_HOPS` borne les chaînes de GOTO déclenchées par un seul appel
  externe à `dispatch` (auto-advance depuis un `on_enter`).
- `CONTENT_SEED` rend le mélange des questions reproductible (tests, démos).

Exemples de `.env`
------------------
APP_NAME="Blamegame Core (Staging)"
DEFAULT_MODULE="nameblame"
MAX_TRANSITION_HOPS=10
CONTENT_SEED=42
LOG_LEVEL="DEBUG"
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
import os


_PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Blamegame Core"

    # Données embarquées des modules (game.json, pools de questions)
    # Un sous-dossier par module: <MODULES_DIR>/<module_id>/game.json
    MODULES_DIR: str = os.path.join(_PACKAGE_DIR, "games")

    # Module actif à la création d'une session si aucun n'est précisé
    DEFAULT_MODULE: str = "nameblame"

    # Nombre max de transitions GOTO par appel externe à dispatch
    MAX_TRANSITION_HOPS: int = 10

    # Graine RNG du mélange de contenu (None = aléatoire)
    CONTENT_SEED: Optional[int] = None

    # Niveau du logger racine (configuré au démarrage de l'app)
    LOG_LEVEL: str = "INFO"

    # Origines autorisées pour le front (CORS)
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
