"""
Tests unitaires Logging - Sensitive Masker
"""

import pytest

from inventory_console.logging import ISensitiveMasker, SensitiveMasker


MASK = ISensitiveMasker.MASK_VALUE


class TestSensitiveKeys:
    """Détection des clés sensibles."""

    @pytest.mark.parametrize(
        "key",
        ["password", "confirmPassword", "token", "Authorization", "api_secret", "Set-Cookie"],
    )
    def test_sensitive_keys(self, key) -> None:
        """Clés contenant un pattern sensible (casse ignorée)."""
        assert SensitiveMasker().is_sensitive_key(key) is True

    @pytest.mark.parametrize("key", ["email", "name", "skuId", "warehouse", ""])
    def test_regular_keys(self, key) -> None:
        assert SensitiveMasker().is_sensitive_key(key) is False


class TestMask:
    """Masquage récursif."""

    def test_mask_flat(self) -> None:
        masked = SensitiveMasker().mask({"email": "a@b.co", "password": "secret123"})
        assert masked == {"email": "a@b.co", "password": MASK}

    def test_mask_nested(self) -> None:
        """Réponse de login: data.token masqué."""
        payload = {"success": True, "data": {"token": "eyJ", "user": {"name": "Asha"}}}

        masked = SensitiveMasker().mask(payload)

        assert masked["data"]["token"] == MASK
        assert masked["data"]["user"] == {"name": "Asha"}

    def test_mask_list_of_dicts(self) -> None:
        masked = SensitiveMasker().mask({"headers": [{"authorization": "Bearer x"}, "plain"]})
        assert masked["headers"] == [{"authorization": MASK}, "plain"]

    def test_original_untouched(self) -> None:
        """Le dictionnaire source n'est pas modifié."""
        data = {"password": "secret123"}
        SensitiveMasker().mask(data)
        assert data["password"] == "secret123"

    def test_non_dict_returned_as_is(self) -> None:
        assert SensitiveMasker().mask("plain") == "plain"


class TestPatterns:
    """Patterns personnalisés."""

    def test_additional_patterns(self) -> None:
        masker = SensitiveMasker(additional_patterns=["PIN"])
        assert masker.is_sensitive_key("user_pin") is True

    def test_add_pattern(self) -> None:
        masker = SensitiveMasker()
        masker.add_pattern("otp")

        assert "otp" in masker.patterns
        assert masker.mask({"otp_code": "1234"}) == {"otp_code": MASK}

    def test_add_empty_pattern_rejected(self) -> None:
        with pytest.raises(ValueError):
            SensitiveMasker().add_pattern("  ")
