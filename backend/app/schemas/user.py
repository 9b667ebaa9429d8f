"""User and authentication schemas"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime


class UserCreate(BaseModel):
    """Registration / user creation schema"""
    email: str = Field(..., min_length=3, max_length=255, pattern=r'^[^@\s]+@[^@\s]+$')
    password: str = Field(..., min_length=1, max_length=128)
    name: Optional[str] = Field(None, max_length=100)

    @field_validator('email')
    @classmethod
    def strip_email(cls, v):
        return v.strip()


class UserLogin(BaseModel):
    """User login schema"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User record without the password digest"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")


class AuthUser(BaseModel):
    """User summary embedded in an auth session"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None


class TokenResponse(BaseModel):
    """Access/refresh token pair issued at register, login and refresh"""
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: AuthUser


class TokenPayload(BaseModel):
    """Identity carried by a verified access token"""
    userId: str
    email: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = None
