from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ledger_dashboard.core.exceptions import AuthError


class Identity(BaseModel):
    """The signed-in user as seen by the client"""

    model_config = {"frozen": True}

    id: str
    email: str


class Session(BaseModel):
    """Access token plus the identity it was issued for"""

    model_config = {"frozen": True}

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: Identity


class SignInRequest(BaseModel):
    """Password sign-in"""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    """Account creation with optional profile data"""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuthResponse(BaseModel):
    """What a DataService auth call produced: a session or an error"""

    model_config = {"arbitrary_types_allowed": True}

    session: Session | None = None
    error: AuthError | None = None


class AuthResult(BaseModel):
    """
    Outcome of SessionManager.sign_in / sign_up.

    ``identity`` may be None with no error when sign-up succeeded but the
    service did not start a session (e.g. email confirmation pending).
    """

    model_config = {"arbitrary_types_allowed": True}

    identity: Identity | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
