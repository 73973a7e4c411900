"""
Business logic for users: signup, login and profile lookup.

Passwords are hashed with a per-user random salt (see
``core.security.hash_password``) and compared in constant time.  Login
failures are deliberately indistinguishable: an unknown user and a wrong
password raise the same ``AuthenticationError``.
"""

import logging
import sqlite3
from typing import Dict

from ..core.avatar import generate_avatar
from ..core.db import get_connection, new_id, utcnow
from ..core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..core.security import create_access_token, hash_password, verify_password
from ..schemas.user import Token, UserCreate, UserRead

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

USER_COLUMNS = "id, name, email, profile_picture, bio"


def _row_to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        profile_picture=row["profile_picture"],
        bio=row["bio"],
    )


class UserService:
    """Service for user accounts."""

    @staticmethod
    def validate_signup(data: UserCreate) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        email = data.email.strip()
        if not email:
            errors["email"] = "Email is required"
        elif "@" not in email:
            errors["email"] = "Email address is invalid"
        username = data.username.strip()
        if not username:
            errors["username"] = "Username is required"
        elif "@" in username:
            errors["username"] = "Username cannot contain '@'"
        if not data.password:
            errors["password"] = "Password is required"
        elif len(data.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        return errors

    @classmethod
    async def create_user(cls, data: UserCreate, bio: str | None = None) -> UserRead:
        """Register a new user.

        Rejects the signup with ``ConflictError`` when the email or the
        username is already taken; the existing record is not touched.
        The unique constraints on ``users`` back up the pre-check when
        two signups race.
        """
        errors = cls.validate_signup(data)
        if errors:
            raise ValidationError(errors)
        email = data.email.strip().lower()
        username = data.username.strip()
        logger.info("Registering user %s", username)

        conn = get_connection()
        try:
            taken = conn.execute(
                "SELECT 1 FROM users WHERE email IN (?, ?) OR name IN (?, ?)",
                (email, username.lower(), username, email),
            ).fetchone()
            if taken:
                raise ConflictError("Username or email already taken")
            now = utcnow()
            user = UserRead(
                id=new_id(),
                name=username,
                email=email,
                profile_picture=generate_avatar(username),
                bio=bio,
            )
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, password, profile_picture, bio, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user.id,
                        user.name,
                        user.email,
                        hash_password(data.password),
                        user.profile_picture,
                        user.bio,
                        now,
                        now,
                    ),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                raise ConflictError("Username or email already taken") from exc
            logger.info("User %s registered with id %s", username, user.id)
            return user
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, username_or_email: str, password: str) -> UserRead:
        """Check credentials against the stored salted hash.

        A login containing ``@`` is looked up as an email address, anything
        else as a username.
        """
        login = username_or_email.strip()
        if "@" in login:
            query, key = f"SELECT {USER_COLUMNS}, password FROM users WHERE email = ?", login.lower()
        else:
            query, key = f"SELECT {USER_COLUMNS}, password FROM users WHERE name = ?", login
        conn = get_connection()
        try:
            row = conn.execute(query, (key,)).fetchone()
        finally:
            conn.close()
        if not row or not verify_password(password, row["password"]):
            logger.warning("Failed login attempt for %s", login)
            raise AuthenticationError()
        return _row_to_user(row)

    @classmethod
    async def login(cls, username_or_email: str, password: str) -> Token:
        user = await cls.authenticate(username_or_email, password)
        logger.info("User %s logged in", user.name)
        return Token(access_token=create_access_token({"sub": user.id}), user=user)

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"User {user_id} not found")
        return _row_to_user(row)
