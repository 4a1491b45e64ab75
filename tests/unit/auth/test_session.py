"""
Tests unitaires Auth - Session (document utilisateur)
"""

import dataclasses

import pytest

from conftest import user_document
from inventory_console.auth import AuthState, Role, Session, SessionSnapshot


class TestFromUser:
    def test_backend_document(self):
        session = Session.from_user(
            user_document("manager", "u-1", assignedWarehouse="w-1", createdAt="2024-01-01")
        )

        assert session.user_id == "u-1"
        assert session.role == "manager"
        assert session.email == "manager@example.com"
        assert session.assigned_warehouse == "w-1"
        assert session.is_active is True
        assert session.extra == {"createdAt": "2024-01-01"}

    def test_id_alias(self):
        assert Session.from_user({"id": "u-2", "role": "staff"}).user_id == "u-2"

    def test_unknown_role_kept_raw(self):
        """Rôle inconnu conservé tel quel (refusé par les prédicats)."""
        session = Session.from_user(user_document("contractor"))
        assert session.role == "contractor"
        assert Role.parse(session.role) is None

    @pytest.mark.parametrize("document", [None, "u-1", {}, {"name": "No id"}])
    def test_invalid_document(self, document):
        with pytest.raises(ValueError):
            Session.from_user(document)

    def test_frozen(self):
        session = Session.from_user(user_document())
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.role = "staff"


class TestMerge:
    def test_merge_backend_fields(self):
        session = Session.from_user(user_document("staff"))

        merged = session.merge({"name": "New Name", "assignedWarehouse": "w-9", "phone": "123"})

        assert merged.name == "New Name"
        assert merged.assigned_warehouse == "w-9"
        assert merged.extra["phone"] == "123"
        assert session.name == "Staff User"

    def test_to_user_round_trip(self):
        document = user_document("owner", createdAt="2024-01-01")
        assert Session.from_user(document).to_user() == document


class TestSnapshot:
    def test_flags(self):
        session = Session.from_user(user_document())

        assert SessionSnapshot(AuthState.AUTHENTICATED, session, 3).is_authenticated is True
        assert SessionSnapshot(AuthState.CHECKING, None, 1).is_loading is True
        assert SessionSnapshot(AuthState.UNKNOWN, None, 0).is_loading is True
        assert SessionSnapshot(AuthState.ANONYMOUS, None, 2).is_authenticated is False
