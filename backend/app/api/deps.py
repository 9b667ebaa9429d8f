"""API dependencies - authentication and ownership checks"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import MissingTokenError, UserNotFoundError, AuthorizationError
from app.models.user import User
from app.services.auth_service import auth_service
from app.services.user_service import user_service

# HTTP Bearer token scheme; missing headers are reported by get_current_user
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from the bearer access token

    Args:
        request: Incoming request; identity is attached to request.state
        credentials: HTTP Bearer credentials
        db: Database session

    Returns:
        Current user

    Raises:
        MissingTokenError: No or malformed Authorization header
        TokenInvalidError: Token fails verification
        UserNotFoundError: Token outlived its user
    """
    if not credentials or not credentials.credentials:
        raise MissingTokenError()

    identity = auth_service.verify_access_token(credentials.credentials)

    user = user_service.get_user_by_id(db, identity["userId"])
    if not user:
        raise UserNotFoundError()

    request.state.user_id = identity["userId"]
    request.state.user_email = identity["email"]
    return user


def ensure_owner(resource_user_id: str, current_user: User) -> None:
    """Raise AuthorizationError unless the resource belongs to current_user"""
    if resource_user_id != current_user.id:
        raise AuthorizationError("Access denied")
