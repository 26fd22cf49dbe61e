# workforce/utils/security.py
# Password hashing and JWT helpers; no database access in here

import base64
import hashlib
import uuid
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from workforce.config import get_settings
from workforce.database import utcnow
from workforce.exceptions import AuthError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _prehash(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes of its input
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bool(bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8")))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def burn_password_check(password: str) -> None:
    """Spend the same bcrypt time as a real check when there is no user to check against"""
    verify_password(password, _dummy_hash())


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a short-lived access token carrying the user's identity claims"""
    settings = get_settings()
    now = utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(user.id),
        "userId": user.id,
        "email": user.email,
        "role": getattr(user.role, "value", user.role),
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(user, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
    """Sign a refresh token; returns the token and its (naive UTC) expiry"""
    settings = get_settings()
    expire = utcnow() + (expires_delta or timedelta(days=settings.refresh_token_expire_days))
    payload = {
        "userId": user.id,
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
        "exp": expire,
    }
    token = jwt.encode(payload, settings.jwt_refresh_secret, algorithm=settings.jwt_algorithm)
    return token, expire.replace(microsecond=0)


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[get_settings().jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthError("Token expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthError("Invalid token", code="INVALID_TOKEN")

    if payload.get("type") != expected_type or not isinstance(payload.get("userId"), int):
        raise AuthError("Invalid token", code="INVALID_TOKEN")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, get_settings().jwt_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, get_settings().jwt_refresh_secret, REFRESH_TOKEN_TYPE)
