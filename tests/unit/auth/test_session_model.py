"""
Tests unitaires Auth - SessionModel

Vérification de démarrage, connexion, déconnexion, prédicats et
résolution des opérations concurrentes (la dernière démarrée l'emporte).
"""

import asyncio
import json

import httpx
import pytest

from conftest import ok, user_document
from inventory_console.auth import AuthState, ISessionModel, Role, SessionModel
from inventory_console.client import ApiClient, ApiError, NetworkError
from inventory_console.logging import LogLevel


@pytest.fixture
def session(api, logger):
    return SessionModel(api, logger=logger)


def login_payload(role: str = "owner", token: str = "tok-login", user_id: str = "u-owner"):
    return ok({"token": token, "user": user_document(role, user_id)})


def warn_messages(logger):
    return [entry.message for entry in logger.get_entries_by_level(LogLevel.WARN)]


async def wait_until(predicate) -> None:
    """Laisse tourner la boucle jusqu'à ce que predicate() soit vrai."""
    for _ in range(1000):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never reached")


class Gate:
    """Handler async retenu jusqu'à release()."""

    def __init__(self, status: int = 200, json_body=None) -> None:
        self._event = asyncio.Event()
        self._status = status
        self._json = json_body

    def release(self) -> None:
        self._event.set()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        await self._event.wait()
        return httpx.Response(self._status, json=self._json)


# ══════════════════════════════════════════════════════════════════════════════
# TESTS VÉRIFICATION DE DÉMARRAGE
# ══════════════════════════════════════════════════════════════════════════════


class TestCheckAuth:
    def test_initial_state(self, session):
        assert isinstance(session, ISessionModel)
        assert session.state == AuthState.UNKNOWN
        assert session.is_loading is True
        assert session.user is None
        assert session.version == 0

    @pytest.mark.asyncio
    async def test_no_token_anonymous_without_request(self, session, backend):
        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert session.is_loading is False
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_valid_profile_authenticated(self, session, backend, token_store):
        token_store.set("tok-stored")
        backend.on("GET", "/users/profile", json=ok(user_document("manager", "u-7")))

        snapshot = await session.check_auth()

        assert snapshot.is_authenticated is True
        assert session.user.user_id == "u-7"
        assert session.user.role == "manager"
        assert backend.requests[0].headers["Authorization"] == "Bearer tok-stored"
        assert token_store.get() == "tok-stored"

    @pytest.mark.asyncio
    async def test_rejected_token_purged(self, session, backend, token_store, logger):
        """Échec backend: token purgé, ANONYMOUS, aucune exception."""
        token_store.set("tok-expired")
        backend.on("GET", "/users/profile", json={"success": False, "message": "Token expired"}, status=401)

        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert token_store.get() is None
        assert "Profile check failed" in warn_messages(logger)

    @pytest.mark.asyncio
    async def test_success_false_treated_as_failure(self, session, backend, token_store):
        token_store.set("tok")
        backend.on("GET", "/users/profile", json={"success": False, "message": "User disabled"})

        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_network_error_purges_token(self, session, backend, token_store, logger):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        token_store.set("tok")
        backend.on("GET", "/users/profile", handler=unreachable)

        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert token_store.get() is None
        assert "Profile check failed" in warn_messages(logger)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["null", "[]", '"ok"'])
    async def test_non_object_profile_purges_token(self, session, backend, token_store, logger, body):
        """Corps de profil non objet: échec non fatal, token purgé."""
        token_store.set("tok")
        backend.on(
            "GET",
            "/users/profile",
            handler=lambda request: httpx.Response(
                200, content=body.encode(), headers={"Content-Type": "application/json"}
            ),
        )

        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert token_store.get() is None
        assert "Profile check failed" in warn_messages(logger)

    @pytest.mark.asyncio
    async def test_profile_without_user(self, session, backend, token_store, logger):
        token_store.set("tok")
        backend.on("GET", "/users/profile", json=ok(None))

        snapshot = await session.check_auth()

        assert snapshot.state == AuthState.ANONYMOUS
        assert token_store.get() is None
        assert "Profile check returned an invalid user" in warn_messages(logger)


# ══════════════════════════════════════════════════════════════════════════════
# TESTS CONNEXION / INSCRIPTION / DÉCONNEXION
# ══════════════════════════════════════════════════════════════════════════════


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success(self, session, backend, token_store):
        backend.on("POST", "/users/login", json=login_payload("staff", "tok-staff", "u-3"))

        snapshot = await session.login("staff@example.com", "secret")

        assert snapshot.is_authenticated is True
        assert session.user.role == "staff"
        assert token_store.get() == "tok-staff"
        assert json.loads(backend.requests[0].content) == {
            "email": "staff@example.com",
            "password": "secret",
        }

    @pytest.mark.asyncio
    async def test_login_rejected_state_unchanged(self, session, backend, token_store):
        backend.on("POST", "/users/login", json={"success": False, "message": "Invalid credentials"}, status=401)
        await session.check_auth()
        version = session.version

        with pytest.raises(ApiError) as exc:
            await session.login("owner@example.com", "wrong")

        assert str(exc.value) == "Invalid credentials"
        assert exc.value.status_code == 401
        assert session.state == AuthState.ANONYMOUS
        assert session.version == version
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_login_network_error(self, session, backend):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.on("POST", "/users/login", handler=unreachable)

        with pytest.raises(NetworkError):
            await session.login("owner@example.com", "secret")

        assert session.state == AuthState.UNKNOWN

    @pytest.mark.asyncio
    async def test_login_without_user(self, session, backend, token_store):
        """Réponse sans utilisateur: échec générique, token non conservé."""
        backend.on("POST", "/users/login", json=ok({"token": "tok-orphan"}))

        with pytest.raises(ApiError) as exc:
            await session.login("owner@example.com", "secret")

        assert str(exc.value) == ApiClient.FALLBACK_MESSAGE
        assert session.is_authenticated is False
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_login_without_token_rejected(self, session, backend, token_store):
        """Réponse sans token: échec générique, aucune session ouverte."""
        backend.on("POST", "/users/login", json=ok({"user": user_document("staff", "u-b")}))

        with pytest.raises(ApiError) as exc:
            await session.login("staff@example.com", "secret")

        assert str(exc.value) == ApiClient.FALLBACK_MESSAGE
        assert session.is_authenticated is False
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_login_without_token_keeps_previous_session(self, session, backend, token_store):
        """Le token de la session courante n'est jamais prêté à un autre utilisateur."""
        backend.on("POST", "/users/login", json=login_payload("owner", "tok-a", "u-a"))
        await session.login("a@example.com", "secret")

        backend.on("POST", "/users/login", json=ok({"user": user_document("staff", "u-b")}))
        with pytest.raises(ApiError):
            await session.login("b@example.com", "secret")

        assert session.user.user_id == "u-a"
        assert session.user.role == "owner"
        assert token_store.get() == "tok-a"

    @pytest.mark.asyncio
    async def test_register(self, session, backend, token_store):
        backend.on("POST", "/users/register", json=login_payload("staff", "tok-new", "u-new"))

        snapshot = await session.register(
            {"name": "New", "email": "new@example.com", "password": "secret", "role": "staff"}
        )

        assert snapshot.is_authenticated is True
        assert session.user.user_id == "u-new"
        assert token_store.get() == "tok-new"
        assert json.loads(backend.requests[0].content)["role"] == "staff"

    @pytest.mark.asyncio
    async def test_logout(self, session, backend, token_store):
        backend.on("POST", "/users/login", json=login_payload())
        await session.login("owner@example.com", "secret")

        snapshot = session.logout()

        assert snapshot.state == AuthState.ANONYMOUS
        assert session.user is None
        assert token_store.get() is None
        assert backend.paths == ["POST /users/login"]

    @pytest.mark.asyncio
    async def test_logger_tracks_current_user(self, session, backend, logger):
        backend.on("POST", "/users/login", json=login_payload(user_id="u-42"))

        await session.login("owner@example.com", "secret")
        assert logger.info("after login").user_id == "u-42"

        session.logout()
        assert logger.info("after logout").user_id == "anonymous"


# ══════════════════════════════════════════════════════════════════════════════
# TESTS MISE À JOUR UTILISATEUR
# ══════════════════════════════════════════════════════════════════════════════


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_merge_fields(self, session, backend):
        backend.on("POST", "/users/login", json=login_payload("staff"))
        await session.login("staff@example.com", "secret")

        updated = session.update_user({"name": "Renamed", "assignedWarehouse": "w-2"})

        assert updated.name == "Renamed"
        assert session.user.assigned_warehouse == "w-2"
        assert session.user.role == "staff"
        assert session.is_authenticated is True

    def test_noop_when_anonymous(self, session):
        assert session.update_user({"name": "Ghost"}) is None
        assert session.user is None


# ══════════════════════════════════════════════════════════════════════════════
# TESTS PRÉDICATS
# ══════════════════════════════════════════════════════════════════════════════


class TestPredicates:
    async def _login_as(self, session, backend, role):
        backend.on("POST", "/users/login", json=login_payload(role))
        await session.login(f"{role}@example.com", "secret")

    @pytest.mark.asyncio
    async def test_staff_cannot_view_analytics(self, session, backend):
        await self._login_as(session, backend, "staff")
        assert session.has_permission("canViewAnalytics") is False

    @pytest.mark.asyncio
    async def test_manager_can_view_analytics(self, session, backend):
        await self._login_as(session, backend, "manager")
        assert session.has_permission("canViewAnalytics") is True
        assert session.has_permission("canDeleteSKUs") is False

    @pytest.mark.asyncio
    async def test_unknown_role_has_no_capability(self, session, backend):
        await self._login_as(session, backend, "contractor")

        assert session.is_authenticated is True
        assert not any(session.permissions.values())
        assert session.has_role(["owner", "manager", "staff"]) is False
        assert session.has_role("contractor") is True
        assert session.has_role(["owner", "contractor"]) is True

    @pytest.mark.asyncio
    async def test_has_role(self, session, backend):
        await self._login_as(session, backend, "manager")

        assert session.has_role("manager") is True
        assert session.has_role(Role.MANAGER) is True
        assert session.has_role(["owner", "manager"]) is True
        assert session.has_role("owner") is False
        assert session.has_role([]) is False

    def test_anonymous_has_nothing(self, session):
        assert session.has_permission("canViewAllPages") is False
        assert session.has_role(["owner", "manager", "staff"]) is False


# ══════════════════════════════════════════════════════════════════════════════
# TESTS OBSERVATEURS
# ══════════════════════════════════════════════════════════════════════════════


class TestListeners:
    @pytest.mark.asyncio
    async def test_transitions_notified(self, session, backend, token_store):
        seen = []
        session.subscribe(seen.append)
        token_store.set("tok")
        backend.on("GET", "/users/profile", json=ok(user_document()))

        await session.check_auth()
        session.logout()

        assert [s.state for s in seen] == [
            AuthState.CHECKING,
            AuthState.AUTHENTICATED,
            AuthState.ANONYMOUS,
        ]
        assert [s.version for s in seen] == [1, 1, 2]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, session):
        seen = []
        session.subscribe(seen.append)

        assert session.unsubscribe(seen.append) is True
        assert session.unsubscribe(seen.append) is False

        await session.check_auth()
        assert seen == []


# ══════════════════════════════════════════════════════════════════════════════
# TESTS CONCURRENCE
# ══════════════════════════════════════════════════════════════════════════════


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_logout_during_check_wins(self, session, backend, token_store):
        """Un profil arrivé après logout ne ressuscite pas la session."""
        gate = Gate(json_body=ok(user_document()))
        backend.on("GET", "/users/profile", handler=gate)
        token_store.set("tok")

        task = asyncio.create_task(session.check_auth())
        await wait_until(lambda: backend.requests)
        assert session.state == AuthState.CHECKING

        session.logout()
        gate.release()
        await task

        assert session.state == AuthState.ANONYMOUS
        assert session.user is None
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_stale_login_after_logout_drops_token(self, session, backend, token_store):
        gate = Gate(json_body=login_payload(token="tok-late"))
        backend.on("POST", "/users/login", handler=gate)

        task = asyncio.create_task(session.login("owner@example.com", "secret"))
        await wait_until(lambda: backend.requests)

        session.logout()
        gate.release()
        snapshot = await task

        assert snapshot.state == AuthState.ANONYMOUS
        assert session.is_authenticated is False
        assert token_store.get() is None

    @pytest.mark.asyncio
    async def test_stale_check_failure_keeps_new_token(self, session, backend, token_store):
        """Échec tardif de la vérification: le token d'une connexion ultérieure est conservé."""
        gate = Gate(status=401, json_body={"success": False, "message": "Token expired"})
        backend.on("GET", "/users/profile", handler=gate)
        backend.on("POST", "/users/login", json=login_payload("manager", "tok-fresh"))
        token_store.set("tok-old")

        task = asyncio.create_task(session.check_auth())
        await wait_until(lambda: backend.requests)

        await session.login("manager@example.com", "secret")
        gate.release()
        await task

        assert session.state == AuthState.AUTHENTICATED
        assert session.user.role == "manager"
        assert token_store.get() == "tok-fresh"

    @pytest.mark.asyncio
    async def test_stale_login_restores_current_credential(self, session, backend, token_store):
        """Connexion périmée: le token de la session appliquée est restauré."""
        slow = Gate(json_body=login_payload("staff", "tok-slow", "u-slow"))

        def login_route(request):
            if json.loads(request.content)["email"] == "slow@example.com":
                return slow(request)
            return httpx.Response(200, json=login_payload("owner", "tok-fast", "u-fast"))

        backend.on("POST", "/users/login", handler=login_route)

        first = asyncio.create_task(session.login("slow@example.com", "secret"))
        await wait_until(lambda: backend.requests)

        await session.login("fast@example.com", "secret")
        slow.release()
        await first

        assert session.user.user_id == "u-fast"
        assert token_store.get() == "tok-fast"
