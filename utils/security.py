"""
Password hashing, access tokens and generated identifiers.
"""

import secrets
import time
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

import config
from exceptions.auth import InvalidTokenException, TokenExpiredException
from models.user import UserDTO


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user: UserDTO) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user.id,
        "email": user.email,
        "username": user.username,
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(hours=config.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises:
        TokenExpiredException: the token was valid but has expired
        InvalidTokenException: anything else wrong with the token
    """
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.InvalidTokenError:
        raise InvalidTokenException()


def generate_otp(digits: int) -> str:
    return str(secrets.randbelow(9 * 10 ** (digits - 1)) + 10 ** (digits - 1))


def generate_reference(prefix: str) -> str:
    """ORD/TKT style identifiers: prefix, epoch milliseconds, three random digits."""
    return f"{prefix}{int(time.time() * 1000)}{secrets.randbelow(1000):03d}"
