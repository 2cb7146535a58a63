"""Authentication and business-membership state for one client."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum as PyEnum
from typing import Any, Callable, Coroutine

from ledger_dashboard.client.data_service import AuthChangeEvent, DataService, Unsubscribe
from ledger_dashboard.core.exceptions import (
    AuthError,
    DataServiceError,
    MembershipResolutionError,
)
from ledger_dashboard.schemas.business_schemas import BusinessMembership, BusinessSummary
from ledger_dashboard.schemas.session_schemas import AuthResponse, AuthResult, Identity, Session

logger = logging.getLogger(__name__)

StateListener = Callable[["SessionManager"], None]
ActiveBusinessHandler = Callable[[str | None], None]


class SessionState(str, PyEnum):
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionManager:
    """
    Single source of truth for who is signed in and which business is active.

    Reactive fields (read them after a listener fires):
        state, loading, identity, memberships, active_business, error

    Memberships are only ever populated through the session change path,
    so sign-in, sign-up and a restored session all go through
    _handle_session_change. Every identity change invalidates in-flight
    membership resolutions; their results are dropped when they complete.
    """

    def __init__(self, data_service: DataService) -> None:
        self._data_service = data_service

        self.state = SessionState.INITIALIZING
        self.loading = True
        self.identity: Identity | None = None
        self.memberships: list[BusinessMembership] = []
        self.active_business: BusinessMembership | None = None
        self.error: MembershipResolutionError | None = None

        # Bumped on identity change and on every resolution start; a
        # resolution applies only if the token is unchanged when it finishes.
        self._resolution_token = 0
        self._resolution_for: str | None = None

        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []
        self._active_handlers: list[ActiveBusinessHandler] = []
        self._unsubscribe: Unsubscribe | None = None

    @property
    def active_business_id(self) -> str | None:
        return self.active_business.business_id if self.active_business else None

    # --- lifecycle ------------------------------------------------------

    async def initialize(self) -> None:
        """
        Subscribe to session changes and restore any existing session.

        A change notification that lands while the initial lookup is in
        flight is newer than the lookup, so the lookup result is ignored.
        """
        if self._unsubscribe is None:
            self._unsubscribe = self._data_service.on_session_change(self._handle_session_change)

        session = await self._data_service.get_current_session()
        if self.state is not SessionState.INITIALIZING:
            return

        if session is None:
            self.state = SessionState.UNAUTHENTICATED
            self.loading = False
            self._notify()
        else:
            self._set_identity(session.user)

    async def close(self) -> None:
        """Stop listening to the data service and cancel in-flight resolutions"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait until no membership resolution is in flight"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- observers ------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Unsubscribe:
        """Call ``listener(manager)`` after every state mutation"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_active_business_changed(self, handler: ActiveBusinessHandler) -> Unsubscribe:
        """Call ``handler(business_id | None)`` synchronously whenever the active business changes"""
        self._active_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._active_handlers:
                self._active_handlers.remove(handler)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _notify_active_business(self) -> None:
        business_id = self.active_business_id
        for handler in list(self._active_handlers):
            handler(business_id)

    # --- actions --------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """
        Sign in with email and password.

        State is updated by the SIGNED_IN notification, not here.
        """
        response = await self._data_service.sign_in_with_password(email, password)
        return self._to_result(response, "Sign-in")

    async def sign_up(
        self, email: str, password: str, profile_data: dict[str, Any] | None = None
    ) -> AuthResult:
        """Create an account. Same contract as sign_in."""
        response = await self._data_service.sign_up(email, password, profile_data or {})
        return self._to_result(response, "Sign-up")

    async def sign_out(self) -> AuthError | None:
        """
        Sign out and clear identity, memberships and active business at once.

        Clearing does not wait for the SIGNED_OUT notification.
        """
        error = await self._data_service.sign_out()
        if error is not None:
            logger.warning(f"Sign-out failed: {error.message}")
            return error
        self._clear()
        return None

    def switch_business(self, business: BusinessMembership | BusinessSummary | str) -> bool:
        """
        Make a business from the current membership set active.

        Args:
            business: Membership, business summary, or business id

        Returns:
            True if the business is now active, False if it is not a
            current membership (active business left unchanged)
        """
        business_id = business if isinstance(business, str) else business.id
        match = next((m for m in self.memberships if m.business_id == business_id), None)
        if match is None:
            logger.warning(f"Ignoring switch to business {business_id}: not a current membership")
            return False

        if self.active_business_id == business_id:
            return True

        self.active_business = match
        self._notify()
        self._notify_active_business()
        return True

    async def reload_memberships(self) -> None:
        """Resolve memberships again for the current identity"""
        if self.identity is None:
            return
        await self._start_resolution()

    # --- session change handling ---------------------------------------

    def _handle_session_change(self, event: AuthChangeEvent, session: Session | None) -> None:
        logger.debug(f"Handling {event.value}")
        if session is None:
            self._clear()
        else:
            self._set_identity(session.user)

    def _set_identity(self, identity: Identity) -> None:
        changed = self.identity is None or self.identity.id != identity.id
        had_active = self.active_business is not None

        if changed:
            self._resolution_token += 1
            self._resolution_for = None
            self.memberships = []
            self.active_business = None
            self.error = None

        self.identity = identity
        self.state = SessionState.AUTHENTICATED
        self.loading = False

        if self._resolution_for != identity.id:
            self._start_resolution()

        self._notify()
        if changed and had_active:
            self._notify_active_business()

    def _clear(self) -> None:
        if self.state is SessionState.UNAUTHENTICATED and self.identity is None:
            return

        had_active = self.active_business is not None
        self._resolution_token += 1
        self._resolution_for = None

        self.identity = None
        self.memberships = []
        self.active_business = None
        self.error = None
        self.state = SessionState.UNAUTHENTICATED
        self.loading = False

        self._notify()
        if had_active:
            self._notify_active_business()

    def _start_resolution(self) -> asyncio.Task:
        self._resolution_token += 1
        self._resolution_for = self.identity.id
        return self._spawn(self._resolve_memberships(self.identity.id, self._resolution_token))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _resolve_memberships(self, user_id: str, token: int) -> None:
        try:
            memberships = await self._data_service.query_active_memberships(user_id)
        except DataServiceError as e:
            if token != self._resolution_token:
                return
            # Unresolved again, so the next notification for this identity retries.
            self._resolution_for = None
            self.error = MembershipResolutionError(user_id, e)
            logger.error(str(self.error))
            self._notify()
            return

        if token != self._resolution_token:
            logger.debug(f"Discarding memberships resolved for superseded identity {user_id}")
            return

        previous_id = self.active_business_id
        self.memberships = list(memberships)
        self.error = None

        # Keep the active business if it is still a member, else fall back
        # to the first membership in server order.
        current = next((m for m in self.memberships if m.business_id == previous_id), None)
        self.active_business = current or (self.memberships[0] if self.memberships else None)

        self._notify()
        if self.active_business_id != previous_id:
            self._notify_active_business()

    def _to_result(self, response: AuthResponse, action: str) -> AuthResult:
        if response.error is not None:
            logger.info(f"{action} failed: {response.error.kind.value}")
            return AuthResult(error=response.error)
        return AuthResult(identity=response.session.user if response.session else None)
