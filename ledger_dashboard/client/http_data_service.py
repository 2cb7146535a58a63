"""DataService backed by the ledger dashboard HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ledger_dashboard.client.data_service import AuthChangeEvent, DataService
from ledger_dashboard.config import settings
from ledger_dashboard.core.exceptions import AuthError, AuthErrorKind, DataServiceError
from ledger_dashboard.schemas.business_schemas import BusinessMembership
from ledger_dashboard.schemas.invoice_schemas import InvoiceSummary
from ledger_dashboard.schemas.session_schemas import AuthResponse, Session

logger = logging.getLogger(__name__)

_AUTH_ERROR_KINDS = {
    400: AuthErrorKind.INVALID_REQUEST,
    401: AuthErrorKind.INVALID_CREDENTIALS,
    409: AuthErrorKind.EMAIL_TAKEN,
    422: AuthErrorKind.INVALID_REQUEST,
    429: AuthErrorKind.RATE_LIMITED,
}


def _detail(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return resp.text[:200]
    if isinstance(detail, list):
        return "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict))
    return str(detail) if detail else resp.text[:200]


def auth_error_from_response(resp: httpx.Response) -> AuthError:
    """Map a failed auth response onto an AuthError"""
    kind = _AUTH_ERROR_KINDS.get(resp.status_code, AuthErrorKind.UNEXPECTED)
    return AuthError(kind, _detail(resp))


class HttpDataService(DataService):
    """
    Talks to the API server with an httpx.AsyncClient.

    The session lives in memory. Pass ``session`` to restore one that was
    persisted by the caller, and ``transport`` to route requests somewhere
    other than the network (e.g. ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        session: Session | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpDataService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- auth -----------------------------------------------------------

    async def get_current_session(self) -> Session | None:
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        return await self._start_session(
            "/api/auth/sign-in", {"email": email, "password": password}
        )

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthResponse:
        return await self._start_session(
            "/api/auth/sign-up",
            {"email": email, "password": password, "metadata": metadata or {}},
        )

    async def refresh_session(self) -> AuthResponse:
        """
        Exchange the current token for a fresh one.

        Emits TOKEN_REFRESHED on success. A 401 means the session is gone
        server side, so it is dropped locally and SIGNED_OUT is emitted.
        """
        if self._session is None:
            return AuthResponse(error=AuthError(AuthErrorKind.INVALID_CREDENTIALS, "Not signed in"))

        try:
            resp = await self._client.post("/api/auth/refresh", headers=self._auth_headers())
        except httpx.HTTPError as e:
            logger.warning(f"Token refresh failed: {e}")
            return AuthResponse(error=AuthError(AuthErrorKind.NETWORK, str(e)))

        if resp.status_code == 401:
            self._session = None
            self._emit(AuthChangeEvent.SIGNED_OUT, None)
            return AuthResponse(error=auth_error_from_response(resp))
        if resp.status_code != 200:
            return AuthResponse(error=auth_error_from_response(resp))

        return self._accept_session(resp, AuthChangeEvent.TOKEN_REFRESHED)

    async def sign_out(self) -> AuthError | None:
        if self._session is None:
            return None

        try:
            resp = await self._client.post("/api/auth/sign-out", headers=self._auth_headers())
        except httpx.HTTPError as e:
            logger.warning(f"Sign-out failed: {e}")
            return AuthError(AuthErrorKind.NETWORK, str(e))

        # 401: token already invalid server side, local sign-out still applies
        if resp.status_code not in (204, 401):
            return auth_error_from_response(resp)

        self._session = None
        self._emit(AuthChangeEvent.SIGNED_OUT, None)
        return None

    async def _start_session(self, path: str, payload: dict[str, Any]) -> AuthResponse:
        try:
            resp = await self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Auth request to {path} failed: {e}")
            return AuthResponse(error=AuthError(AuthErrorKind.NETWORK, str(e)))

        if resp.status_code not in (200, 201):
            return AuthResponse(error=auth_error_from_response(resp))

        return self._accept_session(resp, AuthChangeEvent.SIGNED_IN)

    def _accept_session(self, resp: httpx.Response, event: AuthChangeEvent) -> AuthResponse:
        try:
            session = Session.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed session in response to {resp.request.url.path}: {e}")
            return AuthResponse(error=AuthError(AuthErrorKind.UNEXPECTED, "Malformed session response"))

        self._session = session
        self._emit(event, self._session)
        return AuthResponse(session=self._session)

    # --- queries --------------------------------------------------------

    async def query_active_memberships(self, user_id: str) -> list[BusinessMembership]:
        if self._session is not None and self._session.user.id != user_id:
            raise DataServiceError(f"Session does not belong to user {user_id}")
        rows = await self._get_json("/api/businesses")
        try:
            return [BusinessMembership.model_validate(row) for row in rows]
        except (TypeError, ValidationError) as e:
            raise DataServiceError(f"Malformed membership rows: {e}") from e

    async def query_recent_invoices(
        self, business_id: str, limit: int = 10
    ) -> list[InvoiceSummary]:
        rows = await self._get_json(
            f"/api/businesses/{business_id}/invoices/recent", params={"limit": limit}
        )
        try:
            return [InvoiceSummary.model_validate(row) for row in rows]
        except (TypeError, ValidationError) as e:
            raise DataServiceError(f"Malformed invoice rows: {e}") from e

    def _auth_headers(self) -> dict[str, str]:
        if self._session is None:
            raise DataServiceError("Not signed in")
        return {"Authorization": f"Bearer {self._session.access_token}"}

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params, headers=self._auth_headers())
        except httpx.HTTPError as e:
            raise DataServiceError(f"GET {path} failed: {e}") from e

        if resp.status_code != 200:
            raise DataServiceError(f"GET {path} returned HTTP {resp.status_code}: {_detail(resp)}")
        try:
            return resp.json()
        except ValueError as e:
            raise DataServiceError(f"GET {path} returned a body that is not JSON") from e
