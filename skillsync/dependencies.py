"""
Shared Dependencies for the SkillSync backend.

Provides:
- Authentication dependencies (get_current_user, require_access)
- LLM provider and external client instances
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import decode_access_token
from .database import get_db
from .db_models import DBUser
from .exceptions import AuthenticationError, ConfigurationError
from .external_clients import HRSystemClient, MailClient
from .llm_providers import LLMProvider, get_llm_provider

logger = logging.getLogger(__name__)

# =============================================================================
# OAuth2 Scheme
# =============================================================================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")

# =============================================================================
# Service Instances
# =============================================================================

_llm_provider: Optional[LLMProvider] = None
_llm_initialized = False


def get_llm() -> Optional[LLMProvider]:
    """
    Get the configured LLM provider, or None when it cannot be created.

    Every LLM-backed feature has a fallback, so a missing provider is logged
    once and then treated like a failing one.
    """
    global _llm_provider, _llm_initialized
    if not _llm_initialized:
        _llm_initialized = True
        try:
            _llm_provider = get_llm_provider()
            logger.info(f"LLM provider initialized: {type(_llm_provider).__name__}")
        except (ConfigurationError, ValueError) as e:
            logger.warning(f"LLM provider unavailable - features will use fallback: {e}")
            _llm_provider = None
    return _llm_provider


def get_mail_client() -> MailClient:
    return MailClient()


def get_hr_client() -> HRSystemClient:
    return HRSystemClient()

# =============================================================================
# Authentication Dependencies
# =============================================================================

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> DBUser:
    """
    Get current user from JWT token.

    Raises:
        HTTPException 401: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except AuthenticationError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = db.query(DBUser).filter(DBUser.id == user_id).first()
    if user is None:
        raise credentials_exception

    return user


def has_access_flags(user: DBUser, *flags: str) -> bool:
    """True when the user is admin or holds every flag."""
    rights = user.access_rights or {}
    if rights.get("admin"):
        return True
    return all(rights.get(flag) is True for flag in flags)


def require_access(*flags: str) -> Callable:
    """
    Build a dependency that requires the listed access flags.

    Usage:
        @router.get("/admin/users")
        async def list_users(user: DBUser = Depends(require_access("admin"))):
            ...
    """
    async def dependency(current_user: DBUser = Depends(get_current_user)) -> DBUser:
        if not has_access_flags(current_user, *flags):
            logger.warning(f"Access denied for user {current_user.id}: requires {', '.join(flags)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this operation"
            )
        return current_user

    return dependency
