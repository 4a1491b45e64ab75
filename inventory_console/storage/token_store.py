"""
Storage - Token Store

Stockage du token par origine backend.

FileTokenStore écrit un document JSON unique, une entrée par origine
(scheme://host[:port]), le token étant rangé sous une clé connue:

    {
        "https://inventory.example.com": {"token": "eyJhbGciOi..."}
    }
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from .interfaces import ITokenStore


class TokenStoreError(Exception):
    """Erreur de stockage du token."""

    pass


def origin_of(url: str) -> str:
    """
    Extrait l'origine (scheme://host[:port]) d'une URL.

    Raises:
        TokenStoreError: Si l'URL n'a ni schéma ni hôte
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise TokenStoreError(f"URL sans origine: {url}")
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


class MemoryTokenStore(ITokenStore):
    """Stockage en mémoire, durée de vie du processus."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token or None

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        if not token:
            raise TokenStoreError("Token vide")
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(ITokenStore):
    """
    Stockage durable du token, cloisonné par origine.

    Un fichier absent ou illisible équivaut à l'absence de token.

    Example:
        store = FileTokenStore("~/.inventory_console/credentials.json",
                               "https://inventory.example.com/api")
        store.set(token)
        store.get()  # même token au prochain lancement
    """

    def __init__(self, path: str, url: str, key: str = "token") -> None:
        """
        Args:
            path: Fichier JSON de stockage
            url: URL du backend (seule l'origine est retenue)
            key: Clé du token dans l'entrée de l'origine
        """
        if not key:
            raise TokenStoreError("Clé de stockage vide")

        self._path = Path(path).expanduser()
        self._origin = origin_of(url)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def origin(self) -> str:
        return self._origin

    def get(self) -> Optional[str]:
        entry = self._read().get(self._origin)
        if not isinstance(entry, dict):
            return None

        token = entry.get(self._key)
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        if not token:
            raise TokenStoreError("Token vide")

        document = self._read()
        entry = document.get(self._origin)
        if not isinstance(entry, dict):
            entry = {}
        entry[self._key] = token
        document[self._origin] = entry
        self._write(document)

    def clear(self) -> None:
        document = self._read()
        entry = document.get(self._origin)
        if not isinstance(entry, dict) or self._key not in entry:
            return

        del entry[self._key]
        if entry:
            document[self._origin] = entry
        else:
            del document[self._origin]
        self._write(document)

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            # Fichier corrompu: considéré comme vide, réécrit au prochain set
            return {}

        return document if isinstance(document, dict) else {}

    def _write(self, document: Dict[str, Any]) -> None:
        """Écriture atomique (fichier temporaire + remplacement)."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".credentials-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, sort_keys=True)
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise TokenStoreError(f"Écriture impossible dans {self._path}: {e}")
