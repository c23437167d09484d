"""
Session context shared by the gateway and the stores.

The login flow itself lives outside the sync core; it calls ``begin`` after
a successful login and ``clear`` on logout or expiry. The gateway reads the
token on every request and reports 401/403 responses back through
``report_unauthorized`` so the auth collaborator can decide what to do.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from InventoryConsole.core.logging import get_logger

logger = get_logger(__name__)

UnauthorizedListener = Callable[[int], None]


@dataclass(frozen=True)
class Viewer:
    """The signed-in user as seen by the console."""
    id: Any
    name: str = ""
    email: str = ""
    roles: Tuple[str, ...] = field(default_factory=tuple)


class SessionContext:
    """Holds the bearer token and viewer identity for one signed-in session."""

    def __init__(self, token: Optional[str] = None, viewer: Optional[Viewer] = None):
        self._token = token
        self._viewer = viewer
        self._unauthorized_listeners: List[UnauthorizedListener] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def viewer(self) -> Optional[Viewer]:
        return self._viewer

    @property
    def viewer_id(self) -> Any:
        return self._viewer.id if self._viewer else None

    @property
    def is_authenticated(self) -> bool:
        """Check if session has valid credentials."""
        return bool(self._token) and self._viewer is not None

    def is_authorized(self, *roles: str) -> bool:
        """True when signed in and holding at least one of ``roles`` (any role if none given)."""
        if not self.is_authenticated:
            return False
        if not roles:
            return True
        return any(role in self._viewer.roles for role in roles)

    def begin(self, token: str, viewer: Viewer) -> None:
        """Start a session after login."""
        self._token = token
        self._viewer = viewer
        logger.info("Session started for viewer %s", viewer.id)

    def clear(self) -> None:
        """End the session on logout or token expiry."""
        if self._viewer is not None:
            logger.info("Session cleared for viewer %s", self._viewer.id)
        self._token = None
        self._viewer = None

    def auth_headers(self) -> dict:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    def add_unauthorized_listener(self, listener: UnauthorizedListener) -> Callable[[], None]:
        """Register a callback for 401/403 responses; returns a function that removes it."""
        self._unauthorized_listeners.append(listener)

        def remove() -> None:
            if listener in self._unauthorized_listeners:
                self._unauthorized_listeners.remove(listener)
        return remove

    def report_unauthorized(self, status: int) -> None:
        """Tell the auth collaborator the server rejected our credentials."""
        logger.warning("Server rejected credentials with status %d", status)
        for listener in list(self._unauthorized_listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Unauthorized listener failed")
