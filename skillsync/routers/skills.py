"""
Skills Router for the SkillSync backend.

Endpoints:
- GET /skills - Skill catalogue with the caller's own levels
- POST /skills/register - Register or re-rate one of the caller's skills
- PUT /skills/user-skills/{user_skill_id} - Update one of the caller's skills
- GET /skills/search - Find employees by skill
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..constants import MAX_SKILL_LEVEL, MIN_SKILL_LEVEL, SKILL_CATEGORIES
from ..database import get_db
from ..db_models import DBSkill, DBUser, DBUserSkill
from ..dependencies import get_current_user
from ..models import SkillListResponse, SkillOut, SkillRegister, UserSkillUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/skills",
    tags=["skills"],
    responses={401: {"description": "Unauthorized"}},
)


def _skill_out(skill: DBSkill, user_skill: Optional[DBUserSkill]) -> SkillOut:
    if user_skill is None:
        return SkillOut(id=skill.id, name=skill.name, category=skill.category)
    return SkillOut(
        id=skill.id,
        name=skill.name,
        category=skill.category,
        level=user_skill.level,
        years_of_experience=user_skill.years_of_experience,
        user_skill_id=user_skill.id,
        updated_at=user_skill.updated_at,
    )


@router.get("", response_model=SkillListResponse)
async def list_skills(
    category: Optional[str] = None,
    search: Optional[str] = None,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List catalogue skills; unregistered skills report level 0."""
    query = db.query(DBSkill)
    if category:
        query = query.filter(DBSkill.category == category)
    if search:
        query = query.filter(DBSkill.name.ilike(f"%{search.strip()}%"))
    skills = query.order_by(DBSkill.category, DBSkill.name).all()

    mine = {
        us.skill_id: us
        for us in db.query(DBUserSkill).filter(DBUserSkill.user_id == current_user.id).all()
    }

    stored = {row[0] for row in db.query(DBSkill.category).distinct().all()}
    categories = list(SKILL_CATEGORIES) + sorted(stored - set(SKILL_CATEGORIES))

    return SkillListResponse(
        skills=[_skill_out(skill, mine.get(skill.id)) for skill in skills],
        categories=categories,
    )


@router.post("/register", response_model=SkillOut)
async def register_skill(
    body: SkillRegister,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Record the caller's level for a skill.

    An existing skill is reused when its name matches case-insensitively;
    otherwise the skill is added to the catalogue.
    """
    skill = db.query(DBSkill).filter(func.lower(DBSkill.name) == body.skill_name.lower()).first()
    if skill is None:
        skill = DBSkill(name=body.skill_name, category=body.category)
        db.add(skill)
        db.flush()
        logger.info(f"Added skill to catalogue: {skill.name} ({skill.category})")

    user_skill = db.query(DBUserSkill).filter(
        DBUserSkill.user_id == current_user.id,
        DBUserSkill.skill_id == skill.id
    ).first()

    if user_skill is None:
        user_skill = DBUserSkill(user_id=current_user.id, skill_id=skill.id)
        db.add(user_skill)

    user_skill.level = body.level
    user_skill.years_of_experience = body.years_of_experience
    user_skill.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(user_skill)
    return _skill_out(skill, user_skill)


@router.put("/user-skills/{user_skill_id}", response_model=SkillOut)
async def update_user_skill(
    user_skill_id: str,
    body: UserSkillUpdate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_skill = db.query(DBUserSkill).filter(DBUserSkill.id == user_skill_id).first()
    if user_skill is None:
        raise HTTPException(status_code=404, detail="User skill not found")
    if user_skill.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only update your own skills")

    user_skill.level = body.level
    if body.years_of_experience is not None:
        user_skill.years_of_experience = body.years_of_experience
    user_skill.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(user_skill)
    return _skill_out(user_skill.skill, user_skill)


@router.get("/search")
async def search_skill_holders(
    keyword: Optional[str] = None,
    min_level: int = Query(MIN_SKILL_LEVEL, ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL),
    department: Optional[str] = None,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Employees holding a skill whose name contains `keyword` at `min_level` or above."""
    query = (
        db.query(DBUserSkill, DBSkill, DBUser)
        .join(DBSkill, DBSkill.id == DBUserSkill.skill_id)
        .join(DBUser, DBUser.id == DBUserSkill.user_id)
        .filter(DBUserSkill.level >= min_level)
    )
    if keyword:
        query = query.filter(DBSkill.name.ilike(f"%{keyword.strip()}%"))
    if department:
        query = query.filter(DBUser.department == department)

    rows = query.order_by(DBUserSkill.level.desc(), DBUser.name).all()

    return [
        {
            "user": {
                "id": user.id,
                "name": user.name,
                "department": user.department,
                "position": user.position,
            },
            "skill": {"id": skill.id, "name": skill.name, "category": skill.category},
            "level": user_skill.level,
            "years_of_experience": user_skill.years_of_experience,
        }
        for user_skill, skill, user in rows
    ]
