"""
Authentication Router for the SkillSync backend.

Endpoints:
- POST /users - Register new user
- POST /auth/login - Login and get JWT token
- GET /users/me - Current user
- POST /auth/access-validation - Check a user's access flags
"""

import os
import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..access_service import AccessService
from ..auth import authenticate, create_access_token, hash_password
from ..config import settings
from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_current_user, get_llm
from ..exceptions import InvalidCredentialsError, ResourceNotFoundError
from ..llm_providers import LLMProvider
from ..models import AccessValidationRequest, LoginResponse, UserCreate, UserLogin, UserOut

# Initialize logger
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

# Test mode detection
TESTING = os.environ.get('TESTING') == 'true'
REGISTER_RATE_LIMIT = "1000/minute" if TESTING else "3/minute"
LOGIN_RATE_LIMIT = "1000/minute" if TESTING else "5/minute"

# Create router
router = APIRouter(
    prefix="",
    tags=["authentication"],
    responses={401: {"description": "Unauthorized"}},
)


def _find_by_email(db: Session, email: str):
    return db.query(DBUser).filter(func.lower(DBUser.email) == email.strip().lower()).first()

# =============================================================================
# Registration Endpoint
# =============================================================================

@router.post("/users", response_model=UserOut)
@limiter.limit(REGISTER_RATE_LIMIT)
async def create_user(
    request: Request,
    user_create: UserCreate,
    db: Session = Depends(get_db)
) -> UserOut:
    """
    Register new user.

    Employees imported from the HR system already have a row without a
    password; registering with their email claims that row.

    Raises:
        HTTPException 400: If the email is already registered
    """
    existing = _find_by_email(db, user_create.email)

    if existing and existing.hashed_password:
        raise HTTPException(status_code=400, detail="Email already registered")

    if existing:
        existing.hashed_password = hash_password(user_create.password)
        existing.department = existing.department or user_create.department
        existing.position = existing.position or user_create.position
        user = existing
        logger.info(f"Attached password to HR-synced user: {user.email}")
    else:
        user = DBUser(
            email=user_create.email,
            name=user_create.name,
            department=user_create.department,
            position=user_create.position,
            hashed_password=hash_password(user_create.password),
            profile_data={},
        )
        db.add(user)
        logger.info(f"Created user: {user.email}")

    db.commit()
    db.refresh(user)
    return UserOut.model_validate(user)

# =============================================================================
# Login Endpoint
# =============================================================================

async def review_login_activity(llm: LLMProvider, activity: dict) -> None:
    """Ask the LLM to assess a successful login. Result is only logged."""
    try:
        assessment = await llm.generate_content(
            "Analyse this login activity and assess the security risk.",
            str(activity)
        )
        logger.info(f"Login review for {activity['email']}: {assessment[:200]}")
    except Exception as e:
        logger.warning(f"Login review failed for {activity['email']}: {e}")


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    user_login: UserLogin,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
) -> LoginResponse:
    """
    Login and get JWT token.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    try:
        user = authenticate(_find_by_email(db, user_login.email), user_login.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if settings.login_activity_review and llm is not None:
        background_tasks.add_task(review_login_activity, llm, {
            "timestamp": datetime.utcnow().isoformat(),
            "email": user.email,
            "success": True,
            "ip": request.headers.get("x-forwarded-for") or (request.client.host if request.client else None),
        })

    access_token = create_access_token(data={"sub": user.id})
    return LoginResponse(access_token=access_token, user=UserOut.model_validate(user))


@router.get("/users/me", response_model=UserOut)
async def read_current_user(current_user: DBUser = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(current_user)

# =============================================================================
# Access Validation Endpoint
# =============================================================================

@router.post("/auth/access-validation")
async def validate_access(
    body: AccessValidationRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    """
    Check whether a user holds every requested access flag.

    Returns 200 when granted and 403 with `has_access: false` when denied.

    Raises:
        HTTPException 400: If required_access is empty
        HTTPException 404: If the user does not exist
    """
    service = AccessService(db, llm)
    try:
        result = await service.validate(body.user_id, body.required_access)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")

    if not result["has_access"]:
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=result)
    return result
