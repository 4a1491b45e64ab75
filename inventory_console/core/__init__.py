"""
Core

Configuration du client et validation des formulaires.
"""

from .interfaces import (
    # Models
    ClientSettings,
    ValidationError,
    ValidationResult,
    # Interfaces
    IConfigLoader,
    IFormValidator,
)
from .config_loader import ConfigLoader, ConfigError
from .form_validator import FormValidator, FormValidationError

__all__ = [
    # Models
    "ClientSettings",
    "ValidationError",
    "ValidationResult",
    # Interfaces
    "IConfigLoader",
    "IFormValidator",
    # Implementations
    "ConfigLoader",
    "FormValidator",
    # Exceptions
    "ConfigError",
    "FormValidationError",
]
