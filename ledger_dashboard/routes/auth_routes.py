from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session as DBSession

from ledger_dashboard.database import get_db
from ledger_dashboard.dependencies import get_current_user
from ledger_dashboard.models.user import User
from ledger_dashboard.schemas.session_schemas import Session, SignInRequest, SignUpRequest
from ledger_dashboard.services.auth_service import AuthService

router = APIRouter()


@router.post("/sign-up", response_model=Session, status_code=status.HTTP_201_CREATED)
async def sign_up(data: SignUpRequest, db: DBSession = Depends(get_db)):
    """
    Create an account and return a session for it.

    - **409** if the email is already registered
    """
    service = AuthService(db)
    return service.sign_up(data)


@router.post("/sign-in", response_model=Session)
async def sign_in(data: SignInRequest, db: DBSession = Depends(get_db)):
    """
    Sign in with email and password.

    - **401** on wrong email or password
    - **429** after too many failed attempts for the email
    """
    service = AuthService(db)
    return service.sign_in(data)


@router.post("/refresh", response_model=Session)
async def refresh(user: User = Depends(get_current_user), db: DBSession = Depends(get_db)):
    """Issue a fresh token for a still-valid bearer token"""
    service = AuthService(db)
    return service.issue_session(user)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(user: User = Depends(get_current_user)):
    """
    Acknowledge sign-out.

    Tokens are stateless; the client drops its session on 204.
    """
    return Response(status_code=status.HTTP_204_NO_CONTENT)
