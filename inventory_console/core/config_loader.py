"""
Inventory Console - Config Loader Implementation
Charge la configuration depuis un fichier YAML et l'environnement.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from .interfaces import ClientSettings, IConfigLoader


class ConfigError(Exception):
    """Erreur de configuration."""

    pass


ENV_OVERRIDES = {
    "INVENTORY_API_URL": "base_url",
    "INVENTORY_TOKEN_PATH": "token_path",
    "INVENTORY_LOG_LEVEL": "log_level",
}


class ConfigLoader(IConfigLoader):
    """
    Chargement de la configuration client.

    Format YAML attendu (toutes les sections sont optionnelles):

        api:
          base_url: https://inventory.example.com/api
          timeouts:
            connection: 5
            request: 20
            endpoints:
              /analytics/stock-aging: 30
        storage:
          token_path: ~/.inventory_console/credentials.json
          key: token
        logging:
          level: INFO

    Les variables d'environnement INVENTORY_API_URL, INVENTORY_TOKEN_PATH et
    INVENTORY_LOG_LEVEL priment sur le fichier.
    """

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_path = Path(config_path) if config_path else None
        self._environ = os.environ if environ is None else environ

    def load(self) -> ClientSettings:
        """
        Charge la configuration.

        Returns:
            ClientSettings validés

        Raises:
            ConfigError: Si YAML invalide ou valeurs hors contraintes
        """
        raw: Dict[str, Any] = {}
        if self.config_path is not None and self.config_path.exists():
            raw = self._read_yaml(self.config_path)

        values = self._flatten(raw)

        for env_name, setting in ENV_OVERRIDES.items():
            env_value = self._environ.get(env_name)
            if env_value:
                values[setting] = env_value

        try:
            return ClientSettings(**values)
        except PydanticValidationError as e:
            raise ConfigError(f"Configuration invalide: {e}")

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Erreur de parsing YAML: {e}")
        except OSError as e:
            raise ConfigError(f"Erreur de lecture fichier: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError("Configuration doit être un objet YAML")
        return config

    def _flatten(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Convertit les sections YAML en champs de ClientSettings."""
        values: Dict[str, Any] = {}

        api = self._section(config, "api")
        if "base_url" in api:
            values["base_url"] = api["base_url"]

        timeouts = api.get("timeouts") or {}
        if not isinstance(timeouts, dict):
            raise ConfigError("api.timeouts doit être un objet")
        if "connection" in timeouts:
            values["connection_timeout"] = timeouts["connection"]
        if "request" in timeouts:
            values["request_timeout"] = timeouts["request"]
        if "endpoints" in timeouts:
            values["endpoint_timeouts"] = timeouts["endpoints"] or {}

        storage = self._section(config, "storage")
        if "token_path" in storage:
            values["token_path"] = storage["token_path"]
        if "key" in storage:
            values["storage_key"] = storage["key"]

        logging_section = self._section(config, "logging")
        if "level" in logging_section:
            values["log_level"] = logging_section["level"]

        return values

    def _section(self, config: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"{name} doit être un objet")
        return section
