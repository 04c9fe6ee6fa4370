"""
Challenges Router for the SkillSync backend.

Endpoints:
- GET /challenges - List challenges
- POST /challenges - Post a challenge
- GET /challenges/{challenge_id} - One challenge
- PATCH /challenges/{challenge_id}/status - Move a challenge through its statuses
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..db_models import DBChallenge, DBSkill, DBUser
from ..dependencies import get_current_user, has_access_flags
from ..models import ChallengeCreate, ChallengeOut, ChallengeStatus, ChallengeStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/challenges",
    tags=["challenges"],
    responses={401: {"description": "Unauthorized"}},
)


def _challenge_out(challenge: DBChallenge) -> ChallengeOut:
    return ChallengeOut(
        id=challenge.id,
        title=challenge.title,
        description=challenge.description,
        status=challenge.status,
        posted_by=challenge.posted_by,
        poster_name=challenge.poster.name if challenge.poster else None,
        required_skills=challenge.required_skills or [],
        created_at=challenge.created_at,
    )


def _get_challenge_or_404(db: Session, challenge_id: str) -> DBChallenge:
    challenge = db.query(DBChallenge).filter(DBChallenge.id == challenge_id).first()
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")
    return challenge


@router.get("", response_model=List[ChallengeOut])
async def list_challenges(
    status: Optional[ChallengeStatus] = None,
    search: Optional[str] = None,
    sort: Literal["newest", "oldest"] = "newest",
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = db.query(DBChallenge).options(joinedload(DBChallenge.poster))
    if status:
        query = query.filter(DBChallenge.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(DBChallenge.title.ilike(pattern), DBChallenge.description.ilike(pattern)))

    order = DBChallenge.created_at.asc() if sort == "oldest" else DBChallenge.created_at.desc()
    return [_challenge_out(c) for c in query.order_by(order).all()]


@router.post("", response_model=ChallengeOut)
async def create_challenge(
    body: ChallengeCreate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Post a challenge. It starts as not_started."""
    skill_ids = list(dict.fromkeys(body.required_skills))
    if skill_ids:
        known = {row[0] for row in db.query(DBSkill.id).filter(DBSkill.id.in_(skill_ids)).all()}
        unknown = [s for s in skill_ids if s not in known]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown skill ids: {', '.join(unknown)}")

    challenge = DBChallenge(
        title=body.title,
        description=body.description,
        status="not_started",
        posted_by=current_user.id,
        required_skills=skill_ids,
    )
    db.add(challenge)
    db.commit()
    db.refresh(challenge)

    logger.info(f"Challenge {challenge.id} posted by {current_user.id}")
    return _challenge_out(challenge)


@router.get("/{challenge_id}", response_model=ChallengeOut)
async def get_challenge(
    challenge_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _challenge_out(_get_challenge_or_404(db, challenge_id))


@router.patch("/{challenge_id}/status", response_model=ChallengeOut)
async def update_challenge_status(
    challenge_id: str,
    body: ChallengeStatusUpdate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change status. Allowed for the poster or users with challenge_management."""
    challenge = _get_challenge_or_404(db, challenge_id)

    if challenge.posted_by != current_user.id and not has_access_flags(current_user, "challenge_management"):
        raise HTTPException(status_code=403, detail="Only the poster or a challenge manager can change the status")

    challenge.status = body.status
    db.commit()
    db.refresh(challenge)
    return _challenge_out(challenge)
