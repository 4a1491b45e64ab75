"""
Tests d'intégration - Console assemblée

Démarrage, navigation gardée, vues filtrées par rôle et déconnexion,
à travers create_console() et un backend simulé.
"""

import json

import pytest

from conftest import BASE_URL, ok, user_document
from inventory_console.app import create_console
from inventory_console.auth import AuthState
from inventory_console.core import ClientSettings
from inventory_console.storage import MemoryTokenStore


@pytest.fixture
def lines():
    return []


@pytest.fixture
def console_factory(backend, lines):
    def factory(token=None, initial_path="/", log_level="INFO"):
        store = MemoryTokenStore()
        if token:
            store.set(token)
        console = create_console(
            settings=ClientSettings(base_url=BASE_URL, log_level=log_level),
            token_store=store,
            transport=backend.transport,
            output_handler=lines.append,
            initial_path=initial_path,
        )
        return console

    return factory


class TestStartup:
    @pytest.mark.asyncio
    async def test_stored_token_restores_session(self, console_factory, backend):
        backend.on("GET", "/users/profile", json=ok(user_document("manager", "u-m")))
        console = console_factory(token="tok", initial_path="/analytics")

        assert console.navigator.location is None

        await console.start()

        assert console.session.state == AuthState.AUTHENTICATED
        assert console.navigator.location == "/analytics"
        await console.aclose()

    @pytest.mark.asyncio
    async def test_no_token_lands_on_login(self, console_factory, backend):
        console = console_factory()

        await console.start()

        assert console.navigator.location == "/login"
        assert backend.requests == []
        await console.aclose()

    @pytest.mark.asyncio
    async def test_expired_token_lands_on_login(self, console_factory, backend, lines):
        backend.on("GET", "/users/profile", json={"success": False, "message": "Token expired"}, status=401)
        console = console_factory(token="tok-expired", initial_path="/inventory")

        await console.start()

        assert console.navigator.location == "/login"
        assert console.token_store.get() is None
        warnings = [json.loads(line) for line in lines if json.loads(line)["level"] == "WARN"]
        assert any(entry["message"] == "Profile check failed" for entry in warnings)
        await console.aclose()


class TestStaffJourney:
    @pytest.mark.asyncio
    async def test_login_browse_logout(self, console_factory, backend):
        backend.on("POST", "/users/login", json=ok({"token": "tok-staff", "user": user_document("staff", "u-s")}))
        backend.on("GET", "/analytics/dashboard", json=ok({"totalSkus": 3}))
        console = console_factory()
        await console.start()

        await console.session.login("staff@example.com", "secret")
        assert console.navigator.location == "/dashboard"
        assert [e.path for e in console.gate.navigation()] == [
            "/dashboard",
            "/inventory",
            "/transactions",
            "/alerts",
        ]

        dashboard = await console.view("/dashboard").load()
        assert dashboard.data["dashboard"] == {"totalSkus": 3}
        assert backend.requests[-1].headers["Authorization"] == "Bearer tok-staff"

        denied = await console.view("/users").load()
        assert denied.error == "Access denied. Only owners can manage users."

        console.navigator.navigate("/inventory")
        console.session.logout()

        assert console.navigator.location == "/login"
        assert console.token_store.get() is None
        await console.aclose()


class TestLogging:
    @pytest.mark.asyncio
    async def test_credentials_never_logged(self, console_factory, backend, lines):
        backend.on("POST", "/users/login", json=ok({"token": "tok-secret", "user": user_document("owner")}))
        console = console_factory(log_level="DEBUG")
        await console.start()

        await console.session.login("owner@example.com", "hunter22")

        output = "\n".join(lines)
        assert "hunter22" not in output
        assert any(json.loads(line)["user_id"] == "u-owner" for line in lines)
        await console.aclose()

    def test_log_level_from_settings(self, console_factory):
        console = console_factory(log_level="WARNING")
        assert console.logger.debug("hidden") is None
        assert console.logger.info("hidden") is None
        assert console.logger.warn("shown") is not None

