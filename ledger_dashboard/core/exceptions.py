from enum import Enum as PyEnum


class LedgerDashboardException(Exception):
    """Base exception for ledger dashboard"""

    pass


# --- API server -----------------------------------------------------------


class UnauthorizedException(LedgerDashboardException):
    """Raised when JWT validation fails"""

    pass


class ForbiddenException(LedgerDashboardException):
    """Raised when user tries to access a business they are not a member of"""

    pass


class ConflictException(LedgerDashboardException):
    """Raised when a unique resource (e.g. account email) already exists"""

    pass


class RateLimitedException(LedgerDashboardException):
    """Raised when an email is locked out after repeated failed sign-ins"""

    def __init__(self, message: str, retry_after: int):
        self.retry_after = retry_after
        super().__init__(message)


# --- Client core ----------------------------------------------------------


class AuthErrorKind(str, PyEnum):
    """Why an authentication action failed"""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_TAKEN = "email_taken"
    INVALID_REQUEST = "invalid_request"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


class AuthError(LedgerDashboardException):
    """
    Failure of sign-in, sign-up or sign-out.

    Returned as a value to the presentation layer, never raised out of
    SessionManager actions.
    """

    def __init__(self, kind: AuthErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.value.replace("_", " ")
        super().__init__(self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthError):
            return NotImplemented
        return self.kind == other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))

    def __repr__(self) -> str:
        return f"<AuthError(kind={self.kind.value}, message='{self.message}')>"


class DataServiceError(LedgerDashboardException):
    """Raised by DataService queries when the remote service fails"""

    pass


class MembershipResolutionError(LedgerDashboardException):
    """Membership query failed for an authenticated identity"""

    def __init__(self, user_id: str, cause: Exception | None = None):
        self.user_id = user_id
        self.cause = cause
        super().__init__(f"Could not resolve memberships for user {user_id}: {cause}")


class AggregationFetchError(LedgerDashboardException):
    """Invoice fetch failed during a dashboard refresh"""

    def __init__(self, business_id: str, cause: Exception | None = None):
        self.business_id = business_id
        self.cause = cause
        super().__init__(f"Could not load invoices for business {business_id}: {cause}")
