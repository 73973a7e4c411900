"""
Pydantic models for user data.

Defines schemas for signing up, logging in and reading user profiles.
Password hashes never leave the service layer.
"""

from typing import Optional

from pydantic import Field

from .base import ApiModel


class UserCreate(ApiModel):
    """Signup payload."""

    email: str = Field(..., examples=["alice@example.com"])
    password: str = Field(..., examples=["correct horse battery"])
    username: str = Field(..., examples=["alice"])


class UserLogin(ApiModel):
    """Login payload.  ``username`` may hold either the username or the email."""

    username: str = Field(..., examples=["alice"])
    password: str = Field(..., examples=["correct horse battery"])


class UserSummary(ApiModel):
    """Public part of a profile, embedded in events and attendee lists."""

    id: str
    name: str
    profile_picture: str


class UserRead(UserSummary):
    email: str
    bio: Optional[str] = None


class Token(ApiModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
