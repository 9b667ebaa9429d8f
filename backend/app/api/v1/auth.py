"""Authentication routes"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.schemas.user import (
    UserCreate,
    UserLogin,
    RefreshTokenRequest,
    LogoutRequest,
    TokenPayload,
)
from app.schemas.response import APIResponse
from app.services.auth_service import auth_service
from app.api.deps import get_current_user
from app.models.user import User

router = APIRouter()


@router.post("/register", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new account and return its first token pair

    Args:
        user_data: Email, password and optional name
        db: Database session

    Returns:
        Auth session envelope
    """
    session = auth_service.register(db, user_data)
    return APIResponse(code=status.HTTP_201_CREATED, data=session)


@router.post("/login", response_model=APIResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - authenticate user and return a token pair

    Args:
        credentials: Email and password
        db: Database session

    Returns:
        Auth session envelope
    """
    session = auth_service.login(db, credentials.email, credentials.password)
    return APIResponse(code=status.HTTP_200_OK, data=session)


@router.post("/refresh", response_model=APIResponse)
def refresh_token(
    req: RefreshTokenRequest,
    db: Session = Depends(get_db),
):
    """
    Exchange a refresh token for a new token pair

    The presented refresh token is consumed and cannot be used again.
    """
    session = auth_service.refresh(db, req.refresh_token)
    return APIResponse(code=status.HTTP_200_OK, data=session)


@router.post("/logout", response_model=APIResponse)
def logout(
    body: Optional[LogoutRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Logout endpoint - revoke the refresh token if one is supplied

    Args:
        body: Optional refresh token
        current_user: Current authenticated user
        db: Database session

    Returns:
        Success message
    """
    auth_service.logout(db, current_user.id, body.refresh_token if body else None)
    return APIResponse(code=status.HTTP_200_OK, message="Logged out successfully")


@router.get("/verify", response_model=APIResponse)
def verify(
    request: Request,
    current_user: User = Depends(get_current_user)
):
    """Report the identity carried by the access token"""
    payload = TokenPayload(userId=request.state.user_id, email=request.state.user_email)
    return APIResponse(code=status.HTTP_200_OK, message="Token is valid", data=payload)
