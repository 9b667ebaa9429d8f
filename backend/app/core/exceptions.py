"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Validation Errors
class ValidationError(BaseAPIException):
    """Missing or malformed input"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class DuplicateEmailError(ValidationError):
    """Email already registered"""
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password; both cases look the same"""
    def __init__(self):
        super().__init__("Invalid email or password")


class MissingTokenError(AuthenticationError):
    """No bearer token on a protected route"""
    def __init__(self):
        super().__init__("Access token required")


class TokenInvalidError(AuthenticationError):
    """Access token is invalid, expired or of the wrong type"""
    def __init__(self):
        super().__init__("Invalid or expired token")


class InvalidRefreshTokenError(AuthenticationError):
    """Refresh token unknown, already consumed or not verifiable"""
    def __init__(self):
        super().__init__("Invalid refresh token")


class RefreshTokenExpiredError(AuthenticationError):
    """Stored refresh token is past its expiry"""
    def __init__(self):
        super().__init__("Refresh token expired")


class UserNotFoundError(AuthenticationError):
    """Token is valid but its user no longer exists"""
    def __init__(self):
        super().__init__("User not found")


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Caller does not own the resource"""
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403)


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)

