"""
Inventory Console - Pytest Configuration
Fixtures partagées: configuration, token store et backend simulé (httpx.MockTransport).
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from inventory_console.client import ApiClient
from inventory_console.core import ClientSettings
from inventory_console.logging import LogConfig, LogLevel, StructuredLogger
from inventory_console.storage import MemoryTokenStore


BASE_URL = "https://inventory.test/api"
API_PREFIX = "/api"

Handler = Callable[[httpx.Request], Any]


def user_document(role: str = "owner", user_id: str = "u-owner", **fields: Any) -> Dict[str, Any]:
    """Document utilisateur tel que renvoyé par le backend."""
    document = {
        "_id": user_id,
        "name": f"{role.capitalize()} User",
        "email": f"{role}@example.com",
        "role": role,
        "assignedWarehouse": None,
        "isActive": True,
    }
    document.update(fields)
    return document


def ok(data: Any = None, **extra: Any) -> Dict[str, Any]:
    """Enveloppe de succès du backend."""
    payload = {"success": True, "data": data}
    payload.update(extra)
    return payload


class FakeBackend:
    """
    Backend simulé: routes (méthode, chemin) → réponse.

    Chaque requête reçue est enregistrée; une route absente répond 404.
    Un handler peut être async (attente contrôlée par le test).
    """

    def __init__(self) -> None:
        self._routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        handler: Optional[Handler] = None,
    ) -> "FakeBackend":
        if handler is None:

            def handler(request: httpx.Request, _json=json, _status=status) -> httpx.Response:
                return httpx.Response(_status, json=_json)

        self._routes[(method.upper(), path)] = handler
        return self

    def handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        path = request.url.path[len(API_PREFIX):]
        handler = self._routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"success": False, "message": f"Route {path} not found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def paths(self) -> List[str]:
        return [f"{r.method} {r.url.path[len(API_PREFIX):]}" for r in self.requests]


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url=BASE_URL)


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def logger() -> StructuredLogger:
    """Logger capturant toutes les entrées, DEBUG compris."""
    return StructuredLogger("tests", config=LogConfig(min_level=LogLevel.DEBUG))


@pytest.fixture
def api(settings, token_store, backend, logger) -> ApiClient:
    return ApiClient(settings, token_store, logger=logger, transport=backend.transport)
