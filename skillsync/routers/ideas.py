"""
Ideas Router for the SkillSync backend.

Endpoints:
- GET /ideas - List ideas with average evaluation
- POST /ideas - Post an idea
- GET /ideas/{idea_id} - One idea
- POST /ideas/{idea_id}/evaluations - Evaluate an idea
"""

import logging
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..db_models import DBIdea, DBUser
from ..dependencies import get_current_user
from ..models import EvaluationCreate, IdeaCreate, IdeaOut
from ..scoring import average

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/ideas",
    tags=["ideas"],
    responses={401: {"description": "Unauthorized"}},
)


def _idea_out(idea: DBIdea) -> IdeaOut:
    evaluations = idea.evaluation_data or []
    scores = [e["score"] for e in evaluations if isinstance(e.get("score"), (int, float))]
    return IdeaOut(
        id=idea.id,
        title=idea.title,
        description=idea.description,
        posted_by=idea.posted_by,
        poster_name=idea.poster.name if idea.poster else None,
        required_resources=idea.required_resources or {},
        evaluation_data=evaluations,
        evaluation_count=len(evaluations),
        average_score=round(average(scores), 2) if scores else None,
        created_at=idea.created_at,
    )


@router.get("", response_model=List[IdeaOut])
async def list_ideas(
    search: Optional[str] = None,
    sort: Literal["latest", "title", "rating"] = "latest",
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List ideas. `rating` sorts by average score, unrated ideas last."""
    query = db.query(DBIdea).options(joinedload(DBIdea.poster))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(DBIdea.title.ilike(pattern), DBIdea.description.ilike(pattern)))

    if sort == "title":
        query = query.order_by(DBIdea.title.asc())
    else:
        query = query.order_by(DBIdea.created_at.desc())

    ideas = [_idea_out(i) for i in query.all()]
    if sort == "rating":
        ideas.sort(key=lambda i: (i.average_score is None, -(i.average_score or 0)))
    return ideas


@router.post("", response_model=IdeaOut)
async def create_idea(
    body: IdeaCreate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    idea = DBIdea(
        title=body.title,
        description=body.description,
        posted_by=current_user.id,
        required_resources=body.required_resources,
        evaluation_data=[],
    )
    db.add(idea)
    db.commit()
    db.refresh(idea)

    logger.info(f"Idea {idea.id} posted by {current_user.id}")
    return _idea_out(idea)


@router.get("/{idea_id}", response_model=IdeaOut)
async def get_idea(
    idea_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    idea = db.query(DBIdea).filter(DBIdea.id == idea_id).first()
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")
    return _idea_out(idea)


@router.post("/{idea_id}/evaluations", response_model=IdeaOut)
async def evaluate_idea(
    idea_id: str,
    body: EvaluationCreate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Append an evaluation.

    The idea row is locked for the duration of the append so concurrent
    evaluations are never lost.
    """
    idea = db.query(DBIdea).filter(DBIdea.id == idea_id).with_for_update().first()
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")

    evaluations = list(idea.evaluation_data or [])
    evaluations.append({
        "score": body.score,
        "comment": body.comment,
        "evaluated_at": datetime.utcnow().isoformat(),
        "evaluated_by": current_user.id,
    })
    idea.evaluation_data = evaluations

    db.commit()
    db.refresh(idea)

    logger.info(f"Idea {idea.id} evaluated by {current_user.id} (score={body.score})")
    return _idea_out(idea)
