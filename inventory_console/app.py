"""
Inventory Console - Assemblage

Construit l'ensemble client: logger, token store, client HTTP, session,
garde de navigation et vues, partageant un même logger structuré.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import httpx

from .auth.session_model import SessionModel
from .client.api_client import ApiClient
from .core.config_loader import ConfigLoader
from .core.interfaces import ClientSettings
from .logging.interfaces import LogConfig
from .logging.structured_logger import StructuredLogger, parse_level
from .routing.route_guard import Navigator, RouteGuard
from .storage.interfaces import ITokenStore
from .storage.token_store import FileTokenStore
from .views.gate import ViewGate
from .views.pages import (
    AlertsView,
    AnalyticsView,
    BaseView,
    DashboardView,
    InventoryView,
    ProfileView,
    RegisterView,
    SkuView,
    TransactionsView,
    UsersView,
    WarehousesView,
)


VIEW_CLASSES = (
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


@dataclass
class Console:
    """Composants assemblés d'une console."""

    settings: ClientSettings
    logger: StructuredLogger
    token_store: ITokenStore
    api: ApiClient
    session: SessionModel
    guard: RouteGuard
    navigator: Navigator
    gate: ViewGate
    views: Dict[str, BaseView] = field(default_factory=dict)

    def view(self, path: str) -> BaseView:
        """
        Raises:
            KeyError: Aucune vue pour ce chemin
        """
        return self.views[path]

    async def start(self) -> None:
        """Vérification de démarrage de la session."""
        await self.session.check_auth()

    async def aclose(self) -> None:
        self.navigator.close()
        await self.api.aclose()


def create_console(
    settings: Optional[ClientSettings] = None,
    token_store: Optional[ITokenStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    output_handler: Optional[Callable[[str], None]] = None,
    initial_path: str = "/",
) -> Console:
    """
    Assemble une console.

    Args:
        settings: Configuration (défaut: ConfigLoader().load())
        token_store: Stockage du token (défaut: fichier settings.token_file)
        transport: Transport httpx (injection pour tests)
        output_handler: Sortie des lignes de log JSON
        initial_path: Vue demandée au lancement

    Raises:
        ConfigError: Configuration invalide
    """
    settings = settings or ConfigLoader().load()
    logger = StructuredLogger(
        "inventory_console",
        config=LogConfig(min_level=parse_level(settings.log_level)),
        output_handler=output_handler,
    )
    if token_store is None:
        token_store = FileTokenStore(str(settings.token_file), settings.base_url, settings.storage_key)

    api = ApiClient(settings, token_store, logger=logger, transport=transport)
    session = SessionModel(api, logger=logger)
    guard = RouteGuard(session, logger=logger)
    navigator = Navigator(guard, initial_path=initial_path)
    gate = ViewGate(session)

    views = {cls.path: cls(api, session, gate, logger) for cls in VIEW_CLASSES}
    logger.debug("Console assembled", base_url=settings.base_url, views=sorted(views))

    return Console(
        settings=settings,
        logger=logger,
        token_store=token_store,
        api=api,
        session=session,
        guard=guard,
        navigator=navigator,
        gate=gate,
        views=views,
    )
