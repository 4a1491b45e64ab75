"""
Views - Labels

Libellés d'affichage des valeurs backend (catégories, unités, rôles,
types de transaction). Une valeur inconnue est rendue telle quelle.
"""

from typing import Any, Tuple

Choice = Tuple[str, str]

CATEGORIES: Tuple[Choice, ...] = (
    ("tiles", "Tiles"),
    ("laminates", "Laminates"),
    ("lighting", "Lighting"),
    ("hardware", "Hardware"),
    ("other", "Other"),
)

UNITS: Tuple[Choice, ...] = (
    ("pcs", "Pieces"),
    ("box", "Box"),
    ("sqft", "Square Feet"),
    ("kg", "Kilograms"),
    ("meter", "Meters"),
)

ROLES: Tuple[Choice, ...] = (
    ("owner", "Owner"),
    ("manager", "Manager"),
    ("staff", "Staff"),
)

TRANSACTION_TYPES: Tuple[Choice, ...] = (
    ("IN", "Stock In"),
    ("OUT", "Stock Out"),
)


def _label(choices: Tuple[Choice, ...], value: Any) -> Any:
    for choice_value, label in choices:
        if choice_value == value:
            return label
    return value


def get_category_label(value: Any) -> Any:
    return _label(CATEGORIES, value)


def get_unit_label(value: Any) -> Any:
    return _label(UNITS, value)


def get_role_label(value: Any) -> Any:
    return _label(ROLES, value)


def get_transaction_type_label(value: Any) -> Any:
    return _label(TRANSACTION_TYPES, value)
