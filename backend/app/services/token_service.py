"""Refresh token rotation and revocation service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.config import settings
from app.core.database import to_naive_utc
from app.core.exceptions import (
    AuthenticationError,
    InvalidRefreshTokenError,
    RefreshTokenExpiredError,
    TokenInvalidError,
)
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_token,
)
from app.models.security import RefreshToken
from app.models.user import User
from app.schemas.user import AuthUser, TokenResponse
import logging

logger = logging.getLogger(__name__)


class TokenService:
    """Manage the access/refresh token pair lifecycle."""

    @staticmethod
    def _claims(user: User) -> Dict[str, Any]:
        return {"sub": str(user.id), "email": user.email}

    @staticmethod
    def find_refresh_token(db: Session, token: str) -> Optional[RefreshToken]:
        return db.query(RefreshToken).filter(RefreshToken.token == token).first()

    @staticmethod
    def remove_refresh_token(db: Session, token: str) -> int:
        """Delete a refresh token record, returning the number of rows removed."""
        result = db.execute(delete(RefreshToken).where(RefreshToken.token == token))
        db.commit()
        return result.rowcount or 0

    @staticmethod
    def issue_token_pair(db: Session, user: User) -> Tuple[str, str]:
        """Sign a new access/refresh pair and persist the refresh token."""
        claims = TokenService._claims(user)
        access_token = create_access_token(claims)
        refresh_token = create_refresh_token(claims)

        refresh_payload = decode_token(refresh_token) or {}
        exp = refresh_payload.get("exp")
        if not exp:
            raise AuthenticationError("Failed to generate refresh token")

        record = RefreshToken(
            user_id=user.id,
            token=refresh_token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc).replace(tzinfo=None),
        )
        db.add(record)
        db.commit()
        return access_token, refresh_token

    @staticmethod
    def issue_auth_session(db: Session, user: User) -> TokenResponse:
        access_token, refresh_token = TokenService.issue_token_pair(db, user)
        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_in=settings.access_token_expires_in,
            user=AuthUser.model_validate(user),
        )

    @staticmethod
    def rotate_refresh_token(db: Session, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new session.

        The presented token is deleted on every outcome except "not found",
        so it can never be used twice.

        Raises:
            InvalidRefreshTokenError: Unknown, unverifiable or already consumed token
            RefreshTokenExpiredError: Stored expiry is in the past
        """
        record = TokenService.find_refresh_token(db, refresh_token)
        if not record:
            raise InvalidRefreshTokenError()

        owner_id = record.user_id
        expires_at = to_naive_utc(record.expires_at)
        if expires_at < datetime.utcnow():
            TokenService.remove_refresh_token(db, refresh_token)
            logger.info(f"Removed expired refresh token for user {owner_id}")
            raise RefreshTokenExpiredError()

        payload = decode_token(refresh_token)
        user = None
        if payload and payload.get("typ") == REFRESH_TOKEN_TYPE and payload.get("sub"):
            user = db.query(User).filter(User.id == payload["sub"]).first()
        if not user:
            TokenService.remove_refresh_token(db, refresh_token)
            logger.warning(f"Revoked unverifiable refresh token for user {owner_id}")
            raise InvalidRefreshTokenError()

        # Whoever deletes the row owns the rotation; a concurrent caller sees 0 rows.
        if TokenService.remove_refresh_token(db, refresh_token) != 1:
            raise InvalidRefreshTokenError()

        session = TokenService.issue_auth_session(db, user)
        logger.info(f"Rotated refresh token for user {user.id}")
        return session

    @staticmethod
    def revoke_refresh_token(db: Session, refresh_token: str, user_id: Optional[str] = None) -> bool:
        """Delete a refresh token; when user_id is given, only if that user owns it."""
        query = delete(RefreshToken).where(RefreshToken.token == refresh_token)
        if user_id is not None:
            query = query.where(RefreshToken.user_id == user_id)
        result = db.execute(query)
        db.commit()
        return (result.rowcount or 0) > 0

    @staticmethod
    def remove_expired_tokens(db: Session) -> int:
        result = db.execute(delete(RefreshToken).where(RefreshToken.expires_at < datetime.utcnow()))
        db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info(f"Purged {removed} expired refresh tokens")
        return removed

    @staticmethod
    def verify_access_token(token: str) -> Dict[str, str]:
        """
        Verify an access token without touching storage.

        Returns:
            {"userId": ..., "email": ...}

        Raises:
            TokenInvalidError: Bad signature, expired, or not an access token
        """
        payload = decode_access_token(token)
        if not payload or not payload.get("sub"):
            raise TokenInvalidError()
        return {"userId": str(payload["sub"]), "email": payload.get("email", "")}


token_service = TokenService()
