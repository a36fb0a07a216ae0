"""
Password hashing and access tokens.

Passwords are stored as bcrypt hashes. Access tokens are HS256 JWTs carrying
the user id (``sub``), email, role and area.
"""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt as pyjwt

from mis_compras.core.errors import AuthenticationError
from mis_compras.server.core.config import settings

# ============================================================
# PASSWORD HASHING
# ============================================================


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed hash stored for the account
        return False


PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%&*"


def generate_password(length: int = 12) -> str:
    """Random password with at least one lowercase letter, uppercase letter and digit."""
    while True:
        candidate = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in candidate)
            and any(c.isupper() for c in candidate)
            and any(c.isdigit() for c in candidate)
        ):
            return candidate


# ============================================================
# JWT
# ============================================================


def token_lifetime_seconds() -> int:
    return settings.auth.expire_hours * 3600


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    area_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an access token for a user.

    Args:
        user_id: Subject of the token
        email: User email
        role: Role name at the time of login
        area_id: User area
        expires_delta: Lifetime override, defaults to JWT_EXPIRE_HOURS

    Returns:
        Encoded JWT
    """
    auth = settings.auth
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "area_id": area_id,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=auth.expire_hours)),
    }
    return pyjwt.encode(payload, auth.secret_key, algorithm=auth.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify and decode an access token.

    Raises:
        AuthenticationError: Token expired, tampered with or missing its subject
    """
    auth = settings.auth
    try:
        payload = pyjwt.decode(token, auth.secret_key, algorithms=[auth.algorithm])
    except pyjwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expired") from exc
    except pyjwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc
    if not payload.get("sub"):
        raise AuthenticationError("Invalid token")
    return payload
