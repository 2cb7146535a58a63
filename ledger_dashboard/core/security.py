import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, UTC

from jose import JWTError, jwt
from ledger_dashboard.config import settings
from ledger_dashboard.core.exceptions import UnauthorizedException

ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 260_000


def hash_password(password: str) -> str:
    """
    Hash a password with a random salt using PBKDF2-SHA256.

    Returns:
        String of the form ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``
    """
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a hash produced by hash_password"""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


def create_access_token(user_id: str, email: str) -> tuple[str, datetime]:
    """
    Issue a signed access token for a user.

    Args:
        user_id: Value for the 'sub' claim
        email: Stored in the 'email' claim so clients can rebuild identity

    Returns:
        Tuple of (encoded token, expiry timestamp)
    """
    now = datetime.now(UTC)
    expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": user_id, "email": email, "exp": expires_at, "iat": now}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM), expires_at


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])

        # Validate expiration (jose checks this automatically)
        exp = payload.get("exp")
        if exp is None:
            raise UnauthorizedException("Token missing expiration")

        user_id: str = payload.get("sub")
        if user_id is None:
            raise UnauthorizedException("Token missing user identifier")

        return payload

    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_id(token: str) -> str:
    """Extract user id from JWT token"""
    payload = decode_jwt(token)
    return payload["sub"]
