"""
Inventory Console - Core Interfaces
Contrats et modèles partagés: configuration client et validation de formulaires.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator

from ..logging.structured_logger import InvalidLogLevelError, parse_level


DEFAULT_BASE_URL = "https://inventory-management-backend-six-iota.vercel.app/api"
DEFAULT_TOKEN_PATH = "~/.inventory_console/credentials.json"


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class ValidationError(BaseModel):
    """Erreur de validation d'un champ de formulaire."""

    rule_id: str
    message: str
    field: str
    value: Optional[str] = None


class ValidationResult(BaseModel):
    """Résultat de validation d'un formulaire."""

    valid: bool
    errors: list[ValidationError] = []
    checked_at: datetime

    @property
    def first_message(self) -> Optional[str]:
        """Premier message bloquant, affichable tel quel."""
        return self.errors[0].message if self.errors else None


class ClientSettings(BaseModel):
    """
    Configuration du client.

    Attributes:
        base_url: URL de base de l'API (sans slash final)
        token_path: Fichier de stockage du token (par origine)
        storage_key: Clé sous laquelle le token est stocké
        connection_timeout: Timeout connexion en secondes
        request_timeout: Timeout requête en secondes
        endpoint_timeouts: Timeout requête spécifique par chemin d'API
        log_level: Niveau minimum de log
    """

    base_url: str = DEFAULT_BASE_URL
    token_path: str = DEFAULT_TOKEN_PATH
    storage_key: str = "token"
    connection_timeout: float = 10.0
    request_timeout: float = 30.0
    endpoint_timeouts: Dict[str, float] = {}
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL: {value}")
        return value.rstrip("/")

    @field_validator("storage_key")
    @classmethod
    def _check_storage_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("storage_key cannot be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        try:
            return parse_level(value).value
        except InvalidLogLevelError as e:
            raise ValueError(str(e))

    @property
    def token_file(self) -> Path:
        return Path(self.token_path).expanduser()


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IConfigLoader(ABC):
    """Charge la configuration du client."""

    @abstractmethod
    def load(self) -> ClientSettings:
        """
        Charge et valide la configuration.

        Raises:
            ConfigError: Si fichier illisible ou valeurs invalides
        """
        pass


class IFormValidator(ABC):
    """Valide les formulaires saisis côté client."""

    @abstractmethod
    def validate(self, form: Dict[str, Any]) -> ValidationResult:
        """
        Valide un formulaire contre TOUTES les règles.
        Retourne TOUTES les erreurs (pas fail-fast).
        """
        pass

    @abstractmethod
    def validate_rule(self, rule_id: str, form: Dict[str, Any]) -> Optional[ValidationError]:
        """Valide UNE règle spécifique."""
        pass
