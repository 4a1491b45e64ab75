"""
Logging

Logging structuré du client:
- Format JSON, une entrée par ligne
- Champs obligatoires: timestamp, level, correlation_id, user_id, message
- Timestamp ISO 8601 UTC
- Niveaux: DEBUG, INFO, WARN, ERROR, CRITICAL
- Mots de passe, tokens et en-têtes Authorization masqués
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
    ISensitiveMasker,
)
from .sensitive_masker import (
    SensitiveMasker,
)
from .structured_logger import (
    StructuredLogger,
    ContextualLogger,
    parse_level,
    # Exceptions
    MissingRequiredFieldError,
    InvalidLogLevelError,
)

__all__ = [
    # Enums
    "LogLevel",
    # Dataclasses
    "LogEntry",
    "LogConfig",
    # Interfaces
    "IStructuredLogger",
    "ISensitiveMasker",
    # Implementations
    "SensitiveMasker",
    "StructuredLogger",
    "ContextualLogger",
    "parse_level",
    # Exceptions
    "MissingRequiredFieldError",
    "InvalidLogLevelError",
]
