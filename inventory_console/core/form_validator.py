"""
Inventory Console - Form Validator Implementation
Vérifications côté client des formulaires avant envoi au backend.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from .interfaces import IFormValidator, ValidationError, ValidationResult


MIN_PASSWORD_LENGTH = 6

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FormValidationError(Exception):
    """Formulaire refusé avant envoi."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        super().__init__(result.first_message or "Formulaire invalide")


class FormValidator(IFormValidator):
    """Validation du formulaire d'inscription."""

    REQUIRED_FIELDS: List[str] = ["name", "email", "password"]

    def __init__(self):
        self._validators = {
            "required_fields": self._validate_required_fields,
            "email_format": self._validate_email_format,
            "password_length": self._validate_password_length,
            "password_confirmation": self._validate_password_confirmation,
            "known_role": self._validate_known_role,
        }

    def validate(self, form: Dict[str, Any]) -> ValidationResult:
        """
        Valide un formulaire contre TOUTES les règles.
        Retourne TOUTES les erreurs (pas fail-fast).
        """
        errors = []

        for rule_id in self._validators:
            error = self.validate_rule(rule_id, form)
            if error:
                errors.append(error)

        return ValidationResult(valid=len(errors) == 0, errors=errors, checked_at=datetime.now())

    def validate_registration(self, form: Dict[str, Any]) -> ValidationResult:
        return self.validate(form)

    def validate_rule(self, rule_id: str, form: Dict[str, Any]) -> Optional[ValidationError]:
        """Valide UNE règle spécifique."""
        if rule_id not in self._validators:
            return ValidationError(
                rule_id=rule_id,
                message=f"Règle inconnue: {rule_id}",
                field="form",
            )

        return self._validators[rule_id](form)

    @staticmethod
    def registration_payload(form: Dict[str, Any]) -> Dict[str, Any]:
        """Corps envoyé au backend: le formulaire sans confirmPassword."""
        return {key: value for key, value in form.items() if key != "confirmPassword"}

    def _validate_required_fields(self, form: Dict[str, Any]) -> Optional[ValidationError]:
        for field_name in self.REQUIRED_FIELDS:
            value = form.get(field_name)
            if value is None or not str(value).strip():
                return ValidationError(
                    rule_id="required_fields",
                    message=f"{field_name.capitalize()} is required",
                    field=field_name,
                )
        return None

    def _validate_email_format(self, form: Dict[str, Any]) -> Optional[ValidationError]:
        email = form.get("email")
        if not email:
            return None  # couvert par required_fields

        if not EMAIL_PATTERN.match(str(email).strip()):
            return ValidationError(
                rule_id="email_format",
                message="Please enter a valid email address",
                field="email",
                value=str(email),
            )
        return None

    def _validate_password_length(self, form: Dict[str, Any]) -> Optional[ValidationError]:
        password = form.get("password") or ""
        if password and len(password) < MIN_PASSWORD_LENGTH:
            return ValidationError(
                rule_id="password_length",
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        return None

    def _validate_password_confirmation(self, form: Dict[str, Any]) -> Optional[ValidationError]:
        if form.get("password") != form.get("confirmPassword"):
            return ValidationError(
                rule_id="password_confirmation",
                message="Passwords do not match",
                field="confirmPassword",
            )
        return None

    def _validate_known_role(self, form: Dict[str, Any]) -> Optional[ValidationError]:
        # Import local: auth dépend de core au chargement
        from ..auth.interfaces import Role

        role = form.get("role")
        if role is None or role == "":
            return None

        if Role.parse(role) is None:
            return ValidationError(
                rule_id="known_role",
                message=f"Unknown role: {role}",
                field="role",
                value=str(role),
            )
        return None
