"""Abstract data service the client core depends on."""

import logging
from abc import ABC, abstractmethod
from enum import Enum as PyEnum
from typing import Any, Callable

from ledger_dashboard.core.exceptions import AuthError
from ledger_dashboard.schemas.business_schemas import BusinessMembership
from ledger_dashboard.schemas.invoice_schemas import InvoiceSummary
from ledger_dashboard.schemas.session_schemas import AuthResponse, Session

logger = logging.getLogger(__name__)


class AuthChangeEvent(str, PyEnum):
    """Kinds of session change a data service reports"""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


SessionChangeCallback = Callable[[AuthChangeEvent, Session | None], None]
Unsubscribe = Callable[[], None]


class DataService(ABC):
    """
    Authentication provider plus data store, as seen by the client core.

    Auth calls report failures as values (AuthResponse.error / AuthError);
    queries raise DataServiceError. Session change callbacks are invoked
    synchronously, in registration order, in the order changes happen.
    """

    def __init__(self) -> None:
        self._session_listeners: list[SessionChangeCallback] = []

    def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        """
        Register a session change callback.

        Returns:
            Callable that removes the callback again
        """
        self._session_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._session_listeners:
                self._session_listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthChangeEvent, session: Session | None) -> None:
        logger.debug(f"Session change: {event.value}")
        for callback in list(self._session_listeners):
            try:
                callback(event, session)
            except Exception:
                logger.exception(f"Session change listener failed on {event.value}")

    @abstractmethod
    async def get_current_session(self) -> Session | None:
        """Session restored or started earlier, if any"""

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        """Password sign-in; emits SIGNED_IN on success"""

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthResponse:
        """Account creation; emits SIGNED_IN when a session is started"""

    @abstractmethod
    async def sign_out(self) -> AuthError | None:
        """End the session; emits SIGNED_OUT on success"""

    @abstractmethod
    async def query_active_memberships(self, user_id: str) -> list[BusinessMembership]:
        """
        Active memberships of a user, in server order.

        Raises:
            DataServiceError: If the query fails
        """

    @abstractmethod
    async def query_recent_invoices(
        self, business_id: str, limit: int = 10
    ) -> list[InvoiceSummary]:
        """
        Most recently created invoices of a business, newest first.

        Raises:
            DataServiceError: If the query fails
        """
