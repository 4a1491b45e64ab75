"""
Views - Pages

Contrôleurs des vues du tableau de bord d'inventaire.

Chaque vue:
- vérifie l'accès avant toute requête (refus rendu dans ViewState.error)
- charge ses collections, en parallèle quand elles sont indépendantes
- vérifie la capacité requise avant chaque action privilégiée
"""

import asyncio
from typing import Any, Dict, Mapping, Optional

from ..auth.interfaces import Capability, Role, SessionSnapshot
from ..auth.permissions import PermissionDeniedError
from ..auth.session_model import SessionModel
from ..client.api_client import ApiClient, ClientError, compact_params
from ..client.interfaces import ApiResponse
from ..core.form_validator import FormValidationError, FormValidator
from ..logging.structured_logger import StructuredLogger
from .gate import ViewGate
from .interfaces import IView, ViewState
from .labels import TRANSACTION_TYPES


def _data(payload: Mapping[str, Any], default: Any = None) -> Any:
    data = ApiResponse.from_payload(payload).data
    return default if data is None else data


class BaseView(IView):
    """
    Socle commun: contrôle d'accès, chargement et journalisation.

    Les sous-classes fixent path et implémentent _fetch().
    """

    path: str = ""
    default_filters: Dict[str, Any] = {}

    def __init__(
        self,
        api: ApiClient,
        session: SessionModel,
        gate: Optional[ViewGate] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._api = api
        self._session = session
        self._gate = gate or ViewGate(session)
        self._logger = logger or StructuredLogger("inventory_console.views")

    async def load(self, **filters: Any) -> ViewState:
        message = self._gate.denial_message(self.path)
        if message is not None:
            self._logger.info("View access denied", path=self.path)
            return ViewState(error=message)

        params = compact_params({**self.default_filters, **filters})
        try:
            return await self._fetch(params)
        except ClientError as e:
            self._logger.warn("View load failed", path=self.path, error=str(e))
            return ViewState(error=str(e))

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        raise NotImplementedError

    def _require_access(self) -> None:
        self._gate.require_access(self.path)

    @staticmethod
    def _paginated(payload: Mapping[str, Any]) -> ViewState:
        response = ApiResponse.from_payload(payload)
        return ViewState(pagination=response.pagination)


class DashboardView(BaseView):
    path = "/dashboard"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        response = await self._api.get_dashboard()
        return ViewState(data={"dashboard": _data(response, {})})


class InventoryView(BaseView):
    """Stock par entrepôt; entrée/sortie pour tous, fixation pour owner/manager."""

    path = "/inventory"
    SKU_OPTIONS_LIMIT = 100

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        inventory, warehouses, skus = await asyncio.gather(
            self._api.get_inventory(params),
            self._api.get_warehouses(),
            self._api.get_skus({"limit": self.SKU_OPTIONS_LIMIT}),
        )
        state = self._paginated(inventory)
        state.data = {
            "inventory": _data(inventory, []),
            "warehouses": _data(warehouses, []),
            "skus": _data(skus, []),
        }
        return state

    async def update_stock(
        self,
        sku_id: str,
        warehouse: str,
        transaction_type: str,
        quantity: Any,
        reason: str = "",
    ) -> Dict[str, Any]:
        """
        Mouvement de stock (IN / OUT).

        Raises:
            ViewAccessDeniedError: Session absente
            ValueError: Type inconnu ou quantité non entière positive
        """
        self._require_access()
        if transaction_type not in dict(TRANSACTION_TYPES):
            raise ValueError(f"Unknown transaction type: {transaction_type}")
        return await self._api.update_stock(
            {
                "skuId": sku_id,
                "warehouse": warehouse,
                "type": transaction_type,
                "quantity": _positive_int(quantity),
                "reason": reason,
            }
        )

    async def set_inventory(
        self, sku_id: str, warehouse: str, quantity: Any, reason: str = ""
    ) -> Dict[str, Any]:
        """
        Fixe la quantité en stock.

        Raises:
            PermissionDeniedError: Sans canSetInventory
        """
        self._gate.require_permission(Capability.SET_INVENTORY)
        return await self._api.set_inventory(
            {
                "skuId": sku_id,
                "warehouse": warehouse,
                "quantity": _non_negative_int(quantity),
                "reason": reason,
            }
        )


class SkuView(BaseView):
    path = "/sku"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        response = await self._api.get_skus(params)
        state = self._paginated(response)
        state.data = {"skus": _data(response, [])}
        return state

    async def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._gate.require_permission(Capability.MANAGE_SKUS)
        return await self._api.create_sku(data)

    async def update(self, sku_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._gate.require_permission(Capability.MANAGE_SKUS)
        return await self._api.update_sku(sku_id, data)

    async def delete(self, sku_id: str) -> Dict[str, Any]:
        self._gate.require_permission(Capability.DELETE_SKUS)
        return await self._api.delete_sku(sku_id)


class WarehousesView(BaseView):
    path = "/warehouses"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        response = await self._api.get_warehouses()
        return ViewState(data={"warehouses": _data(response, [])})

    async def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._gate.require_permission(Capability.MANAGE_WAREHOUSES)
        return await self._api.create_warehouse(data)

    async def update(self, warehouse_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._gate.require_permission(Capability.MANAGE_WAREHOUSES)
        return await self._api.update_warehouse(warehouse_id, data)

    async def delete(self, warehouse_id: str) -> Dict[str, Any]:
        self._gate.require_permission(Capability.MANAGE_WAREHOUSES)
        return await self._api.delete_warehouse(warehouse_id)


class TransactionsView(BaseView):
    path = "/transactions"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        transactions, warehouses = await asyncio.gather(
            self._api.get_transactions(params),
            self._api.get_warehouses(),
        )
        state = self._paginated(transactions)
        state.data = {
            "transactions": _data(transactions, []),
            "warehouses": _data(warehouses, []),
        }
        return state


class AlertsView(BaseView):
    path = "/alerts"
    default_filters = {"days": 30}

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        low_stock, dead_stock, warehouses = await asyncio.gather(
            self._api.get_low_stock_alerts(params),
            self._api.get_dead_stock_alerts(params),
            self._api.get_warehouses(),
        )
        return ViewState(
            data={
                "low_stock": _data(low_stock, []),
                "dead_stock": _data(dead_stock, []),
                "warehouses": _data(warehouses, []),
            }
        )


class AnalyticsView(BaseView):
    path = "/analytics"
    default_filters = {"days": 30}

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        performance, value, aging, warehouses = await asyncio.gather(
            self._api.get_sku_performance(params),
            self._api.get_inventory_value(params),
            self._api.get_stock_aging(params),
            self._api.get_warehouses(),
        )
        return ViewState(
            data={
                "sku_performance": _data(performance, []),
                "inventory_value": _data(value, {}),
                "stock_aging": _data(aging, []),
                "warehouses": _data(warehouses, []),
            }
        )


class UsersView(BaseView):
    path = "/users"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        response = await self._api.get_users()
        return ViewState(data={"users": _data(response, [])})

    async def change_role(self, user_id: str, role: str, is_active: bool = True) -> Dict[str, Any]:
        """
        Change le rôle d'un utilisateur.

        Raises:
            PermissionDeniedError: Sans canManageUsers, ou sur son propre compte
            ValueError: Rôle inconnu
        """
        self._gate.require_permission(Capability.MANAGE_USERS)
        current = self._session.user
        if current is not None and current.user_id == user_id:
            raise PermissionDeniedError(
                Capability.MANAGE_USERS, current.role, reason="cannot change own role"
            )
        if Role.parse(role) is None:
            raise ValueError(f"Unknown role: {role}")
        return await self._api.update_user_role(user_id, {"role": role, "isActive": is_active})


class ProfileView(BaseView):
    path = "/profile"

    async def _fetch(self, params: Dict[str, Any]) -> ViewState:
        profile, warehouses = await asyncio.gather(
            self._api.get_profile(),
            self._api.get_warehouses(),
        )
        return ViewState(
            data={"profile": _data(profile, {}), "warehouses": _data(warehouses, [])}
        )

    async def save(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Enregistre le profil puis met à jour la session avec la réponse.

        Raises:
            ViewAccessDeniedError: Session absente
            ApiError: Refus du backend (session inchangée)
        """
        self._require_access()
        response = await self._api.update_profile(data)
        profile = _data(response, {})
        if isinstance(profile, Mapping):
            self._session.update_user(profile)
        return response


class RegisterView(BaseView):
    """Vue publique: formulaire d'inscription."""

    path = "/register"

    def __init__(
        self,
        api: ApiClient,
        session: SessionModel,
        gate: Optional[ViewGate] = None,
        logger: Optional[StructuredLogger] = None,
        validator: Optional[FormValidator] = None,
    ) -> None:
        super().__init__(api, session, gate, logger)
        self._validator = validator or FormValidator()

    async def load(self, **filters: Any) -> ViewState:
        # Liste des entrepôts facultative, souvent refusée sans session
        try:
            response = await self._api.get_warehouses()
        except ClientError as e:
            self._logger.debug("Warehouses unavailable for registration", error=str(e))
            return ViewState(data={"warehouses": []})
        return ViewState(data={"warehouses": _data(response, [])})

    async def submit(self, form: Mapping[str, Any]) -> SessionSnapshot:
        """
        Valide le formulaire puis inscrit et connecte l'utilisateur.

        Raises:
            FormValidationError: Formulaire invalide (aucune requête émise)
            ApiError: Refus du backend
            NetworkError: Backend injoignable
        """
        form = dict(form)
        result = self._validator.validate_registration(form)
        if not result.valid:
            raise FormValidationError(result)
        return await self._session.register(FormValidator.registration_payload(form))


def _positive_int(value: Any) -> int:
    quantity = _non_negative_int(value)
    if quantity == 0:
        raise ValueError("Quantity must be positive")
    return quantity


def _non_negative_int(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid quantity: {value!r}")
    if quantity < 0:
        raise ValueError("Quantity cannot be negative")
    return quantity
