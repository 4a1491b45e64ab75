"""
Views

Contrôleurs des vues filtrées par rôle et capacité:
- Accès vérifié avant toute requête
- Actions privilégiées refusées sans la capacité requise
- Libellés d'affichage des valeurs backend
"""

from .interfaces import (
    # Data classes
    ViewState,
    # Interfaces
    IView,
)
from .gate import (
    VIEW_POLICIES,
    ViewPolicy,
    ViewGate,
    # Exceptions
    ViewAccessDeniedError,
)
from .pages import (
    BaseView,
    DashboardView,
    InventoryView,
    SkuView,
    WarehousesView,
    TransactionsView,
    AlertsView,
    AnalyticsView,
    UsersView,
    ProfileView,
    RegisterView,
)
from .labels import (
    CATEGORIES,
    UNITS,
    ROLES,
    TRANSACTION_TYPES,
    get_category_label,
    get_unit_label,
    get_role_label,
    get_transaction_type_label,
)

__all__ = [
    # Data classes
    "ViewState",
    "ViewPolicy",
    # Interfaces
    "IView",
    # Implementations
    "VIEW_POLICIES",
    "ViewGate",
    "BaseView",
    "DashboardView",
    "InventoryView",
    "SkuView",
    "WarehousesView",
    "TransactionsView",
    "AlertsView",
    "AnalyticsView",
    "UsersView",
    "ProfileView",
    "RegisterView",
    # Labels
    "CATEGORIES",
    "UNITS",
    "ROLES",
    "TRANSACTION_TYPES",
    "get_category_label",
    "get_unit_label",
    "get_role_label",
    "get_transaction_type_label",
    # Exceptions
    "ViewAccessDeniedError",
]
