"""
Routing - Route Guard

Garde évaluée avant l'entrée dans une vue:
- Session en cours de vérification → LOADING (aucune vue rendue)
- Anonyme sur une vue protégée → redirection vers /login
- Authentifié sur /login ou /register → redirection vers /dashboard

Navigator applique la garde à chaque navigation et la réévalue à chaque
transition de session: un logout évince la vue protégée courante.
"""

from typing import Callable, Iterable, List, Optional

from ..auth.interfaces import SessionSnapshot
from ..auth.session_model import SessionModel
from ..logging.structured_logger import StructuredLogger
from .interfaces import (
    HOME_PATH,
    LOGIN_PATH,
    PUBLIC_PATHS,
    GuardAction,
    GuardDecision,
    IRouteGuard,
)


class NavigationLoopError(Exception):
    """Chaîne de redirections sans fin."""

    def __init__(self, path: str, hops: int) -> None:
        self.path = path
        self.hops = hops
        super().__init__(f"Too many redirects from {path} ({hops})")


def normalize_path(path: str) -> str:
    """"/inventory/?x=1" → "/inventory"; chaîne vide → "/"."""
    path = (path or "").strip().split("?", 1)[0].split("#", 1)[0]
    return "/" + path.strip("/")


class RouteGuard(IRouteGuard):
    """
    Garde de navigation.

    Example:
        guard = RouteGuard(session)
        decision = guard.evaluate("/inventory")
        if decision.is_redirect:
            navigate(decision.target)
    """

    def __init__(
        self,
        session: SessionModel,
        public_paths: Iterable[str] = PUBLIC_PATHS,
        login_path: str = LOGIN_PATH,
        home_path: str = HOME_PATH,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._session = session
        self._public_paths = frozenset(normalize_path(p) for p in public_paths)
        self._login_path = normalize_path(login_path)
        self._home_path = normalize_path(home_path)
        self._logger = logger or StructuredLogger("inventory_console.routing")

        if self._login_path not in self._public_paths:
            raise ValueError(f"Login path {self._login_path} must be public")

    @property
    def session(self) -> SessionModel:
        return self._session

    def is_public(self, path: str) -> bool:
        return normalize_path(path) in self._public_paths

    def evaluate(self, path: str) -> GuardDecision:
        path = normalize_path(path)

        if self._session.is_loading:
            return GuardDecision(GuardAction.LOADING, path, reason="session is being checked")

        authenticated = self._session.is_authenticated

        if path == "/":
            target = self._home_path if authenticated else self._login_path
            return self._redirect(path, target, "root")

        if self.is_public(path):
            if authenticated:
                return self._redirect(path, self._home_path, "already authenticated")
            return GuardDecision(GuardAction.ALLOW, path)

        if not authenticated:
            return self._redirect(path, self._login_path, "authentication required")

        return GuardDecision(GuardAction.ALLOW, path)

    def _redirect(self, path: str, target: str, reason: str) -> GuardDecision:
        self._logger.debug("Route redirect", path=path, target=target, reason=reason)
        return GuardDecision(GuardAction.REDIRECT, path, target=target, reason=reason)


NavigationListener = Callable[[Optional[str], GuardDecision], None]


class Navigator:
    """
    Emplacement courant, toujours validé par la garde.

    Tant que la session est en vérification, la vue demandée reste en
    attente (location None) et est résolue à la transition suivante.

    Example:
        navigator = Navigator(guard)
        navigator.navigate("/inventory")   # LOADING
        await session.check_auth()         # → "/inventory" ou "/login"
        navigator.location
    """

    MAX_REDIRECTS: int = 5

    def __init__(self, guard: RouteGuard, initial_path: str = "/") -> None:
        self._guard = guard
        self._requested = normalize_path(initial_path)
        self._location: Optional[str] = None
        self._decision: Optional[GuardDecision] = None
        self._listeners: List[NavigationListener] = []

        self._guard.session.subscribe(self._on_session_change)

    @property
    def location(self) -> Optional[str]:
        """Vue montée, None tant qu'aucune n'est autorisée."""
        return self._location

    @property
    def requested(self) -> str:
        return self._requested

    @property
    def decision(self) -> Optional[GuardDecision]:
        return self._decision

    def subscribe(self, listener: NavigationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: NavigationListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def navigate(self, path: str) -> GuardDecision:
        """
        Demande l'entrée dans une vue.

        Returns:
            Décision finale (ALLOW ou LOADING) après redirections

        Raises:
            NavigationLoopError: Plus de MAX_REDIRECTS redirections
        """
        self._requested = normalize_path(path)
        return self._resolve()

    def close(self) -> None:
        """Cesse de suivre la session."""
        self._guard.session.unsubscribe(self._on_session_change)

    def _on_session_change(self, snapshot: SessionSnapshot) -> None:
        self._resolve()

    def _resolve(self) -> GuardDecision:
        path = self._requested
        decision = self._guard.evaluate(path)
        hops = 0
        while decision.is_redirect:
            hops += 1
            if hops > self.MAX_REDIRECTS:
                raise NavigationLoopError(self._requested, hops)
            path = decision.target
            decision = self._guard.evaluate(path)

        if decision.action == GuardAction.LOADING:
            location = None
        else:
            # Redirection = remplacement de l'entrée demandée
            self._requested = path
            location = path

        changed = location != self._location or self._decision is None or (
            decision.action != self._decision.action
        )
        self._location = location
        self._decision = decision

        if changed:
            for listener in list(self._listeners):
                listener(location, decision)
        return decision
