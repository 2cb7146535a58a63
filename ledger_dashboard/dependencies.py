from fastapi import Depends, HTTPException, Path, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from ledger_dashboard.core.security import extract_user_id
from ledger_dashboard.core.exceptions import ForbiddenException, UnauthorizedException
from ledger_dashboard.database import get_db
from ledger_dashboard.models.business_context import BusinessContext
from ledger_dashboard.models.user import User
from ledger_dashboard.repositories.business_user_repository import BusinessUserRepository
from ledger_dashboard.repositories.user_repository import UserRepository

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency to validate JWT and load the user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using SECRET_KEY
    3. Load the User named by the 'sub' claim

    Raises:
        HTTPException 401: If token missing, invalid, expired, or user gone
    """
    try:
        if credentials is None:
            raise UnauthorizedException("Not authenticated")

        user_id = extract_user_id(credentials.credentials)
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UnauthorizedException("User no longer exists")

        return user

    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_business_context(
    business_id: str = Path(..., min_length=1),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BusinessContext:
    """
    FastAPI dependency resolving the business named in the path.

    Raises:
        ForbiddenException: If the user has no active membership in it
    """
    membership = BusinessUserRepository(db).get_active_membership(user.id, business_id)
    if membership is None:
        raise ForbiddenException(f"No access to business {business_id}")
    return BusinessContext(user=user, business=membership.business, membership=membership)
