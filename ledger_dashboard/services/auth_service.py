import logging
import time
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from ledger_dashboard.config import settings
from ledger_dashboard.core.exceptions import (
    ConflictException,
    RateLimitedException,
    UnauthorizedException,
)
from ledger_dashboard.core.security import create_access_token, hash_password, verify_password
from ledger_dashboard.models.user import User
from ledger_dashboard.repositories.user_repository import UserRepository
from ledger_dashboard.schemas.session_schemas import Identity, Session, SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)


class LoginThrottle:
    """
    Per-email failed sign-in counter.

    After ``max_attempts`` failures inside ``window_seconds`` the email is
    locked until the oldest failure leaves the window.
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        window_seconds: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts or settings.AUTH_MAX_FAILED_ATTEMPTS
        self.window_seconds = window_seconds or settings.AUTH_LOCKOUT_SECONDS
        self._clock = clock
        self._failures: dict[str, list[float]] = {}

    def _recent(self, email: str) -> list[float]:
        cutoff = self._clock() - self.window_seconds
        recent = [t for t in self._failures.get(email, []) if t > cutoff]
        if recent:
            self._failures[email] = recent
        else:
            self._failures.pop(email, None)
        return recent

    def check(self, email: str) -> None:
        """
        Raises:
            RateLimitedException: If the email is currently locked out
        """
        recent = self._recent(email)
        if len(recent) >= self.max_attempts:
            retry_after = int(recent[0] + self.window_seconds - self._clock()) + 1
            raise RateLimitedException(
                "Too many failed sign-in attempts, try again later", retry_after=retry_after
            )

    def _prune(self) -> None:
        """Forget every email whose newest failure has left the window"""
        cutoff = self._clock() - self.window_seconds
        expired = [email for email, times in self._failures.items() if times[-1] <= cutoff]
        for email in expired:
            del self._failures[email]

    def record_failure(self, email: str) -> None:
        self._prune()
        self._recent(email)
        self._failures.setdefault(email, []).append(self._clock())

    @property
    def tracked_emails(self) -> int:
        return len(self._failures)

    def reset(self, email: str | None = None) -> None:
        if email is None:
            self._failures.clear()
        else:
            self._failures.pop(email, None)


# Process-wide throttle used by the auth routes
login_throttle = LoginThrottle()


class AuthService:
    """Service layer for account creation, sign-in and token refresh"""

    def __init__(self, db: DBSession, throttle: LoginThrottle | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.throttle = throttle or login_throttle

    def sign_up(self, data: SignUpRequest) -> Session:
        """
        Create an account and start a session for it.

        Args:
            data: Email, password and profile metadata (``full_name`` is kept)

        Returns:
            Session for the new user

        Raises:
            ConflictException: If the email is already registered
        """
        email = data.email.strip().lower()
        if self.user_repo.get_by_email(email):
            raise ConflictException(f"Email {email} is already registered")

        user = User(
            email=email,
            password_hash=hash_password(data.password),
            full_name=data.metadata.get("full_name"),
        )
        try:
            user = self.user_repo.create(user)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"Email {email} is already registered")

        logger.info(f"Created user {user.id}")
        return self.issue_session(user)

    def sign_in(self, data: SignInRequest) -> Session:
        """
        Verify email/password and start a session.

        Raises:
            RateLimitedException: If the email is locked out
            UnauthorizedException: If the credentials are wrong
        """
        email = data.email.strip().lower()
        self.throttle.check(email)

        user = self.user_repo.get_by_email(email)
        if user is None or not verify_password(data.password, user.password_hash):
            self.throttle.record_failure(email)
            logger.warning(f"Failed sign-in for {email}")
            raise UnauthorizedException("Invalid email or password")

        self.throttle.reset(email)
        return self.issue_session(user)

    def issue_session(self, user: User) -> Session:
        """Sign a fresh access token for a user"""
        token, expires_at = create_access_token(user.id, user.email)
        return Session(
            access_token=token,
            expires_at=expires_at,
            user=Identity(id=user.id, email=user.email),
        )
