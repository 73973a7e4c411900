"""
Authentication endpoints for API v1.

Signup, login (username or email plus password) and the caller's own
profile.  Login returns a bearer token to send as
``Authorization: Bearer <token>``.
"""

from fastapi import APIRouter, Depends, status

from meetup_api.app.core.security import get_current_user
from meetup_api.app.schemas.user import Token, UserCreate, UserLogin, UserRead
from meetup_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserCreate) -> UserRead:
    """Register a new user.

    Returns 409 if the email or username is already taken and 422 with
    per-field ``errors`` for invalid input.
    """
    return await UserService.create_user(payload)


@router.post("/login", response_model=Token)
async def login(payload: UserLogin) -> Token:
    """Exchange credentials for an access token.

    Any failure yields the same 401 "Invalid credentials" response.
    """
    return await UserService.login(payload.username, payload.password)


@router.get("/me", response_model=UserRead)
async def me(current_user: dict = Depends(get_current_user)) -> UserRead:
    return await UserService.get_user(current_user["user_id"])
