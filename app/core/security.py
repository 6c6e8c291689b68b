"""
Password hashing and JWT helpers.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional
import logging

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError

from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import InvalidTokenError, ExpiredTokenError

logger = logging.getLogger(__name__)


def _prepare_password(password: str) -> bytes:
    """Encode and truncate to bcrypt's 72 byte limit."""
    return password.encode("utf-8")[:72]


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    hashed = bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_prepare_password(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.error("Stored password hash is malformed")
        return False


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None
) -> str:
    """Create a signed access token that expires after the configured window."""
    issued_at = now or utcnow()
    expire = issued_at + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = data.copy()
    to_encode.update({"exp": expire, "iat": issued_at})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry of a token and return its claims.

    Raises ExpiredTokenError for expired tokens and InvalidTokenError for
    anything else that fails verification.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()
