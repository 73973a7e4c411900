"""
Security helpers for password hashing and bearer-token authentication.

Tokens follow the JWT layout (``header.payload.signature``, each part
base64url encoded) and are signed with HMAC‑SHA256 using
``settings.secret_key``.  The ``sub`` claim carries the user id and
``exp`` the expiry as a UNIX timestamp.

Passwords are stored as ``<version>.<salt hex>.<hash hex>``:

* ``v2`` – PBKDF2‑HMAC‑SHA256, 100k iterations.  All new hashes.
* ``v1`` – a single HMAC‑MD5 keyed with the salt.  Only verified, never
  produced; kept so older records (and the seed data) still log in.

The identity handed to the service layer is a plain dict with
``user_id``, ``email`` and ``name``.  ``get_current_user`` requires it;
``get_optional_user`` returns ``None`` for anonymous requests.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_connection
from .errors import AuthorizationError

PBKDF2_ITERATIONS = 100_000
CURRENT_HASH_VERSION = "v2"


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, str], expires_delta: Optional[int] = None) -> str:
    """Create a signed token with the given claims.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": "<user id>"}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        ``header.payload.signature``; clients send it as
        ``Authorization: Bearer <token>``.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, str]]:
    """Verify and decode a token.

    Returns the payload if the signature matches and ``exp`` lies in the
    future, otherwise ``None``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, settings.secret_key), actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except ValueError:
        # Malformed base64, UTF‑8 or JSON all derive from ValueError.
        return None
    if not isinstance(data, dict):
        return None
    exp = data.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return data


security = HTTPBearer(auto_error=False)


def _identity_for_token(token: str) -> Dict[str, str]:
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise AuthorizationError("Invalid or expired token")
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id, email, name FROM users WHERE id = ?",
            (payload["sub"],),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        raise AuthorizationError("User no longer exists")
    return {"user_id": row["id"], "email": row["email"], "name": row["name"]}


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Dict[str, str]]:
    """Dependency returning the caller's identity, or ``None`` if anonymous.

    A request that does present a token must present a valid one; a bad
    token is an error rather than a silent downgrade to anonymous.
    """
    if credentials is None:
        return None
    return _identity_for_token(credentials.credentials)


def get_current_user(
    identity: Optional[Dict[str, str]] = Depends(get_optional_user),
) -> Dict[str, str]:
    """Dependency that requires an authenticated caller."""
    if identity is None:
        raise AuthorizationError()
    return identity


def _hmac_md5(password: str, salt_hex: str) -> bytes:
    return hmac.new(salt_hex.encode("utf-8"), password.encode("utf-8"), hashlib.md5).digest()


def _pbkdf2(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)


def hash_password(password: str) -> str:
    """Hash a password with a fresh 16‑byte salt.

    Returns
    -------
    str
        ``v2.<salt hex>.<hash hex>``.
    """
    salt = os.urandom(16)
    return f"{CURRENT_HASH_VERSION}.{salt.hex()}.{_pbkdf2(password, salt).hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored ``version.salt.hash`` string.

    The digest is recomputed with the stored salt and compared in
    constant time.  Unknown versions and malformed strings never match.
    """
    parts = hashed_password.split(".")
    if len(parts) != 3:
        return False
    version, salt_hex, hash_hex = parts
    try:
        stored_hash = bytes.fromhex(hash_hex)
        if version == "v2":
            computed = _pbkdf2(plain_password, bytes.fromhex(salt_hex))
        elif version == "v1":
            # The legacy scheme keys the HMAC with the hex text of the salt.
            computed = _hmac_md5(plain_password, salt_hex)
        else:
            return False
    except ValueError:
        return False
    return hmac.compare_digest(computed, stored_hash)
