"""
Client - API Client

Passerelle HTTP vers le backend d'inventaire.

Chaque opération logique (login, liste des SKU, mise à jour de stock...)
est une fine surcouche de request() qui fixe chemin, méthode et encodage
de la query string pour un endpoint. Le token est joint en
"Authorization: Bearer <token>" dès qu'il est présent dans le store.
"""

import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

import httpx

from ..core.interfaces import ClientSettings
from ..logging.structured_logger import StructuredLogger
from ..storage.interfaces import ITokenStore
from .interfaces import IApiClient
from .timeout_manager import TimeoutManager


class ClientError(Exception):
    """Erreur de base du client HTTP."""

    pass


class ApiError(ClientError):
    """
    Le backend a répondu par un échec (statut non-2xx ou success=false).

    Attributes:
        message: Message du backend, ou message générique
        status_code: Statut HTTP
        payload: Corps décodé, si disponible
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None) -> None:
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class NetworkError(ClientError):
    """La requête n'a pas abouti (connexion, DNS, timeout...)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def compact_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Retire les filtres vides (None, "", 0, False) avant encodage."""
    return {key: value for key, value in (params or {}).items() if value}


def encode_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    Encode un mapping plat en query string.

    Les booléens sont rendus en minuscules ("true"/"false").
    """
    if not params:
        return ""

    normalized = []
    for key, value in params.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value is None:
            value = ""
        normalized.append((key, value))
    return urlencode(normalized)


_UNDECODABLE = object()


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _loggable_body(body: Any) -> Dict[str, Any]:
    """Corps journalisable: mapping (masqué par le logger) ou taille seule."""
    if body is None:
        return {}
    if isinstance(body, Mapping):
        return {"body": dict(body)}
    if isinstance(body, (bytes, str)):
        return {"body_length": len(body)}
    return {"body_type": type(body).__name__}


class ApiClient(IApiClient):
    """
    Client HTTP asynchrone authentifié.

    Example:
        async with ApiClient(settings, FileTokenStore(...)) as api:
            await api.login("owner@example.com", "secret")
            skus = await api.get_skus({"category": "tiles"})
    """

    FALLBACK_MESSAGE: str = "Something went wrong"

    def __init__(
        self,
        settings: ClientSettings,
        token_store: ITokenStore,
        logger: Optional[StructuredLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_manager: Optional[TimeoutManager] = None,
    ) -> None:
        """
        Args:
            settings: Configuration client (URL de base, timeouts)
            token_store: Stockage du bearer token
            logger: Logger structuré
            transport: Transport httpx (injection pour tests)
            timeout_manager: Gestion des timeouts (défaut: depuis settings)
        """
        self._settings = settings
        self._tokens = token_store
        self._logger = logger or StructuredLogger("inventory_console.client")
        self._timeouts = timeout_manager or TimeoutManager.from_settings(settings)
        self._http = httpx.AsyncClient(transport=transport, timeout=self._timeouts.to_httpx())

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Libère les connexions HTTP."""
        await self._http.aclose()

    # ══════════════════════════════════════════════════════════════════════
    # TOKEN
    # ══════════════════════════════════════════════════════════════════════

    def get_token(self) -> Optional[str]:
        return self._tokens.get()

    def set_token(self, token: str) -> None:
        self._tokens.set(token)

    def remove_token(self) -> None:
        self._tokens.clear()

    # ══════════════════════════════════════════════════════════════════════
    # REQUEST
    # ══════════════════════════════════════════════════════════════════════

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = f"{self._settings.base_url}{path}"
        query = encode_query(params)
        return f"{url}?{query}" if query else url

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Émet une requête et retourne le corps JSON décodé.

        Processus:
            1. Construit l'URL (base + chemin + query string)
            2. Joint Content-Type JSON et Authorization si token présent
            3. Sérialise le corps en JSON
            4. Normalise l'échec: ApiError (réponse) ou NetworkError (transport)

        Raises:
            ApiError: Statut non-2xx, corps non objet JSON ou success=false
            NetworkError: Requête non aboutie
        """
        method = method.upper()
        url = self.build_url(path, params)

        request_headers: Dict[str, str] = {"Content-Type": "application/json"}
        token = self._tokens.get()
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if headers:
            request_headers.update(headers)

        content: Optional[bytes] = None
        if body is not None:
            if isinstance(body, bytes):
                content = body
            elif isinstance(body, str):
                content = body.encode("utf-8")
            else:
                content = json.dumps(body).encode("utf-8")

        log = self._logger.with_context()
        log.debug("API request", method=method, path=path, params=dict(params or {}), **_loggable_body(body))

        try:
            response = await self._http.request(
                method,
                url,
                content=content,
                headers=request_headers,
                timeout=self._timeouts.to_httpx(path),
            )
        except httpx.TimeoutException as e:
            log.error("API request timed out", method=method, path=path)
            raise NetworkError(f"Request to {path} timed out", e)
        except httpx.RequestError as e:
            log.error("API request failed", method=method, path=path, error=str(e))
            raise NetworkError(f"Network error: {e}", e)

        payload = self._decode(response)

        if not response.is_success:
            message = self._message_of(payload)
            log.warn("API error response", method=method, path=path, status=response.status_code, backend_message=message)
            raise ApiError(message, response.status_code, None if payload is _UNDECODABLE else payload)

        if not isinstance(payload, dict):
            log.warn("API response is not a JSON object", method=method, path=path, status=response.status_code)
            raise ApiError(self.FALLBACK_MESSAGE, response.status_code)

        if payload.get("success") is False:
            message = self._message_of(payload)
            log.warn("API reported failure", method=method, path=path, status=response.status_code, backend_message=message)
            raise ApiError(message, response.status_code, payload)

        log.debug("API response", method=method, path=path, status=response.status_code)
        return payload

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return _UNDECODABLE

    def _message_of(self, payload: Any) -> str:
        if isinstance(payload, dict):
            message = payload.get("message")
            if isinstance(message, str) and message:
                return message
        return self.FALLBACK_MESSAGE

    async def _authenticate(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.request(path, method="POST", body=body)
        data = response.get("data") or {}
        token = data.get("token") if isinstance(data, dict) else None
        if response.get("success") and token:
            self.set_token(token)
        return response

    # ══════════════════════════════════════════════════════════════════════
    # AUTH / USERS
    # ══════════════════════════════════════════════════════════════════════

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authentifie et enregistre le token renvoyé."""
        return await self._authenticate("/users/login", {"email": email, "password": password})

    async def register(self, user_data: Mapping[str, Any]) -> Dict[str, Any]:
        """Crée un compte et enregistre le token renvoyé."""
        return await self._authenticate("/users/register", dict(user_data))

    async def get_profile(self) -> Dict[str, Any]:
        return await self.request("/users/profile")

    async def update_profile(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request("/users/profile", method="PUT", body=dict(data))

    async def get_users(self) -> Dict[str, Any]:
        return await self.request("/users")

    async def update_user_role(self, user_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request(f"/users/{_segment(user_id)}/role", method="PUT", body=dict(data))

    def logout(self) -> None:
        """Oublie le token; aucun appel backend."""
        self.remove_token()

    # ══════════════════════════════════════════════════════════════════════
    # WAREHOUSES
    # ══════════════════════════════════════════════════════════════════════

    async def get_warehouses(self) -> Dict[str, Any]:
        return await self.request("/warehouses")

    async def get_warehouse(self, warehouse_id: str) -> Dict[str, Any]:
        return await self.request(f"/warehouses/{_segment(warehouse_id)}")

    async def create_warehouse(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request("/warehouses", method="POST", body=dict(data))

    async def update_warehouse(self, warehouse_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request(f"/warehouses/{_segment(warehouse_id)}", method="PUT", body=dict(data))

    async def delete_warehouse(self, warehouse_id: str) -> Dict[str, Any]:
        return await self.request(f"/warehouses/{_segment(warehouse_id)}", method="DELETE")

    # ══════════════════════════════════════════════════════════════════════
    # SKU
    # ══════════════════════════════════════════════════════════════════════

    async def get_skus(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/sku", params=params)

    async def get_sku(self, sku_id: str) -> Dict[str, Any]:
        return await self.request(f"/sku/{_segment(sku_id)}")

    async def create_sku(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request("/sku", method="POST", body=dict(data))

    async def update_sku(self, sku_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request(f"/sku/{_segment(sku_id)}", method="PUT", body=dict(data))

    async def delete_sku(self, sku_id: str) -> Dict[str, Any]:
        return await self.request(f"/sku/{_segment(sku_id)}", method="DELETE")

    # ══════════════════════════════════════════════════════════════════════
    # INVENTORY
    # ══════════════════════════════════════════════════════════════════════

    async def get_inventory(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/inventory", params=params)

    async def get_inventory_summary(self) -> Dict[str, Any]:
        return await self.request("/inventory/summary")

    async def get_inventory_by_sku(self, sku_id: str) -> Dict[str, Any]:
        return await self.request(f"/inventory/sku/{_segment(sku_id)}")

    async def update_stock(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Mouvement de stock (type IN/OUT, quantité, motif)."""
        return await self.request("/inventory/update", method="POST", body=dict(data))

    async def set_inventory(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Fixe la quantité absolue d'un SKU dans un entrepôt."""
        return await self.request("/inventory/set", method="POST", body=dict(data))

    # ══════════════════════════════════════════════════════════════════════
    # TRANSACTIONS
    # ══════════════════════════════════════════════════════════════════════

    async def get_transactions(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/transactions", params=params)

    async def get_transactions_by_sku(
        self, sku_id: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.request(f"/transactions/sku/{_segment(sku_id)}", params=params)

    # ══════════════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════════════

    async def get_alerts(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/alerts", params=params)

    async def get_low_stock_alerts(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/alerts/low-stock", params=params)

    async def get_dead_stock_alerts(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/alerts/dead-stock", params=params)

    # ══════════════════════════════════════════════════════════════════════
    # ANALYTICS
    # ══════════════════════════════════════════════════════════════════════

    async def get_dashboard(self) -> Dict[str, Any]:
        return await self.request("/analytics/dashboard")

    async def get_sku_performance(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/analytics/sku-performance", params=params)

    async def get_inventory_value(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/analytics/inventory-value", params=params)

    async def get_stock_aging(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("/analytics/stock-aging", params=params)

    async def health_check(self) -> Dict[str, Any]:
        return await self.request("/health")

