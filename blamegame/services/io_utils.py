"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json_strict(Path)  → Any (lève FileNotFoundError / orjson.JSONDecodeError)
- loads(str|bytes) / dumps(Any) → (dé)sérialisation des messages WebSocket

Attention:
- orjson lit des bytes; on ouvre en mode binaire.
- Le moteur ne persiste rien entre sessions: seules des lectures sont exposées ici.
"""
import orjson as json
from pathlib import Path
from typing import Any

JSONDecodeError = json.JSONDecodeError


def read_json_strict(path: Path) -> Any:
    """Lit un fichier JSON et propage les erreurs (fichier absent, JSON invalide)."""
    with path.open("rb") as f:
        return json.loads(f.read())


def dumps(data: Any) -> str:
    """Sérialise en texte JSON compact (envois WebSocket)."""
    return json.dumps(data).decode("utf-8")


def loads(data) -> Any:
    """Désérialise un message texte/bytes (lève JSONDecodeError)."""
    return json.loads(data)
