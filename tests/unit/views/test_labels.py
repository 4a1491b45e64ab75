"""
Tests unitaires Views - Labels
"""

import pytest

from inventory_console.views import (
    get_category_label,
    get_role_label,
    get_transaction_type_label,
    get_unit_label,
)


@pytest.mark.parametrize(
    "lookup,value,label",
    [
        (get_category_label, "tiles", "Tiles"),
        (get_unit_label, "sqft", "Square Feet"),
        (get_role_label, "manager", "Manager"),
        (get_transaction_type_label, "OUT", "Stock Out"),
    ],
)
def test_known_values(lookup, value, label):
    assert lookup(value) == label


@pytest.mark.parametrize(
    "lookup", [get_category_label, get_unit_label, get_role_label, get_transaction_type_label]
)
def test_unknown_value_rendered_raw(lookup):
    assert lookup("mystery") == "mystery"
    assert lookup(None) is None
