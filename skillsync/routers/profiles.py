"""
Profiles Router for the SkillSync backend.

Endpoints:
- GET /profiles - Searchable, paginated employee directory
- GET /profiles/{user_id} - One profile
- PUT /profiles/{user_id} - Update a profile
- GET /profiles/{user_id}/career - Career history
- POST /profiles/{user_id}/career/work-history - Add work history entry
- POST /profiles/{user_id}/career/certifications - Add certification
- POST /profiles/{user_id}/career/trainings - Add training
"""

import logging
import math
import uuid
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_current_user, has_access_flags
from ..models import (
    CareerOut,
    CertificationEntry,
    ProfileListResponse,
    ProfileUpdate,
    TrainingEntry,
    UserOut,
    WorkHistoryEntry,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/profiles",
    tags=["profiles"],
    responses={401: {"description": "Unauthorized"}},
)

SORT_COLUMNS = {
    "name": DBUser.name,
    "department": DBUser.department,
    "position": DBUser.position,
    "email": DBUser.email,
}

CAREER_SECTIONS = ("work_history", "certifications", "trainings")


def _get_user_or_404(db: Session, user_id: str) -> DBUser:
    user = db.query(DBUser).filter(DBUser.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _require_self_or_manager(current_user: DBUser, user_id: str) -> None:
    if current_user.id != user_id and not has_access_flags(current_user, "user_management"):
        raise HTTPException(status_code=403, detail="You can only edit your own profile")


def _career(user: DBUser) -> CareerOut:
    career = (user.profile_data or {}).get("career") or {}
    return CareerOut(**{section: career.get(section) or [] for section in CAREER_SECTIONS})

# =============================================================================
# Directory
# =============================================================================

@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    search: Optional[str] = None,
    department: Optional[str] = None,
    sort_field: Literal["name", "department", "position", "email"] = "name",
    sort_direction: Literal["asc", "desc"] = "asc",
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List employees; `search` matches name or email case-insensitively."""
    query = db.query(DBUser)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(DBUser.name.ilike(pattern), DBUser.email.ilike(pattern)))
    if department:
        query = query.filter(DBUser.department == department)

    count = query.count()

    column = SORT_COLUMNS[sort_field]
    order = column.desc() if sort_direction == "desc" else column.asc()
    users = (
        query.order_by(order, DBUser.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    departments = [
        row[0] for row in
        db.query(DBUser.department).filter(DBUser.department.isnot(None)).distinct().order_by(DBUser.department).all()
    ]

    return ProfileListResponse(
        data=[UserOut.model_validate(u) for u in users],
        count=count,
        page=page,
        total_pages=math.ceil(count / page_size),
        departments=departments,
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_profile(
    user_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserOut.model_validate(_get_user_or_404(db, user_id))


@router.put("/{user_id}", response_model=UserOut)
async def update_profile(
    user_id: str,
    update: ProfileUpdate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a profile. Allowed for the owner or users with user_management.

    `profile_data` keys are merged into the stored profile; career history is
    managed through the career endpoints and cannot be replaced here.
    """
    _require_self_or_manager(current_user, user_id)
    user = _get_user_or_404(db, user_id)

    if update.email and update.email.lower() != user.email.lower():
        taken = db.query(DBUser).filter(
            func.lower(DBUser.email) == update.email.lower(), DBUser.id != user.id
        ).first()
        if taken:
            raise HTTPException(status_code=400, detail="Email already registered")
        user.email = update.email

    for field in ("name", "department", "position"):
        value = getattr(update, field)
        if value is not None:
            setattr(user, field, value)

    if update.profile_data is not None:
        incoming = {k: v for k, v in update.profile_data.items() if k != "career"}
        user.profile_data = {**(user.profile_data or {}), **incoming}

    db.commit()
    db.refresh(user)
    logger.info(f"Profile {user.id} updated by {current_user.id}")
    return UserOut.model_validate(user)

# =============================================================================
# Career History
# =============================================================================

@router.get("/{user_id}/career", response_model=CareerOut)
async def get_career(
    user_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _career(_get_user_or_404(db, user_id))


def _append_career_entry(
    db: Session,
    current_user: DBUser,
    user_id: str,
    section: str,
    entry: BaseModel
) -> CareerOut:
    _require_self_or_manager(current_user, user_id)
    user = _get_user_or_404(db, user_id)

    profile = dict(user.profile_data or {})
    career = dict(profile.get("career") or {})
    items = list(career.get(section) or [])
    items.append({
        "id": str(uuid.uuid4()),
        **entry.model_dump(),
        "created_at": datetime.utcnow().isoformat(),
    })
    career[section] = items
    profile["career"] = career
    user.profile_data = profile

    db.commit()
    db.refresh(user)
    logger.info(f"Added {section} entry for user {user.id}")
    return _career(user)


@router.post("/{user_id}/career/work-history", response_model=CareerOut)
async def add_work_history(
    user_id: str,
    entry: WorkHistoryEntry,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _append_career_entry(db, current_user, user_id, "work_history", entry)


@router.post("/{user_id}/career/certifications", response_model=CareerOut)
async def add_certification(
    user_id: str,
    entry: CertificationEntry,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _append_career_entry(db, current_user, user_id, "certifications", entry)


@router.post("/{user_id}/career/trainings", response_model=CareerOut)
async def add_training(
    user_id: str,
    entry: TrainingEntry,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _append_career_entry(db, current_user, user_id, "trainings", entry)
