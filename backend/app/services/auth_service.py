"""Authentication service - register, login, refresh, logout"""

from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.schemas.user import TokenResponse, UserCreate
from app.services.token_service import token_service
from app.services.user_service import user_service
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """Credential checks plus the two-token session scheme"""

    @staticmethod
    def register(db: Session, user_data: UserCreate) -> TokenResponse:
        """
        Create an account and open its first session

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        user = user_service.create_user(db, user_data, commit=False)
        try:
            # The token insert commits the user row too; neither persists alone.
            return token_service.issue_auth_session(db, user)
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def login(db: Session, email: str, password: str) -> TokenResponse:
        """
        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        user = user_service.authenticate_user(db, email, password)
        return token_service.issue_auth_session(db, user)

    @staticmethod
    def refresh(db: Session, refresh_token: str) -> TokenResponse:
        return token_service.rotate_refresh_token(db, refresh_token)

    @staticmethod
    def logout(db: Session, user_id: str, refresh_token: Optional[str] = None) -> bool:
        """Revoke the caller's refresh token; missing, unknown or foreign tokens are a no-op."""
        if not refresh_token:
            return False
        revoked = token_service.revoke_refresh_token(db, refresh_token, user_id=user_id)
        if revoked:
            logger.info("Refresh token revoked on logout")
        return revoked

    @staticmethod
    def verify_access_token(token: str) -> Dict[str, str]:
        return token_service.verify_access_token(token)


auth_service = AuthService()
