"""
Authentication Module for the SkillSync backend.

Provides:
- Password hashing (bcrypt with unique salts)
- JWT token creation and verification
"""

from datetime import datetime, timedelta
from typing import Optional

from passlib.context import CryptContext
from jose import JWTError, jwt

from .config import settings
from .constants import JWT_ALGORITHM
from .exceptions import AuthenticationError, InvalidCredentialsError

# Password hashing configuration (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with automatic per-user salt generation.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Users imported from the HR system have no hash yet and never verify.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def authenticate(user, password: str):
    """
    Return `user` when `password` matches its hash.

    Raises:
        InvalidCredentialsError: If the user is missing or the password is wrong
    """
    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()
    return user

# =============================================================================
# JWT Token Management
# =============================================================================

def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to embed (e.g., {"sub": user_id})
        expires_minutes: Override for settings.token_expire_minutes

    Returns:
        JWT token string
    """
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else settings.token_expire_minutes
    expire = datetime.utcnow() + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify JWT token.

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError("Invalid token") from e
