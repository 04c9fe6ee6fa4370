"""
Matching Router for the SkillSync backend.

Endpoints:
- POST /matching/skill-match - Rank employees against a skill keyword
- POST /matching/team-optimization - Propose a project team
"""

import os
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_current_user, get_llm
from ..llm_providers import LLMProvider
from ..matching_service import MatchingService
from ..models import (
    SkillMatchRequest,
    SkillMatchResponse,
    TeamOptimizationRequest,
    TeamOptimizationResponse,
)

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

TESTING = os.environ.get('TESTING') == 'true'
MATCHING_RATE_LIMIT = "1000/minute" if TESTING else "20/minute"

router = APIRouter(
    prefix="/matching",
    tags=["matching"],
    responses={401: {"description": "Unauthorized"}},
)


@router.post("/skill-match", response_model=SkillMatchResponse)
@limiter.limit(MATCHING_RATE_LIMIT)
async def skill_match(
    request: Request,
    body: SkillMatchRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    """
    Score employees against skills matching `skill_keywords`.

    Every scored candidate is stored as a match; the top 10 are returned.
    """
    try:
        return await MatchingService(db, llm).skill_match(
            skill_keywords=body.skill_keywords,
            minimum_level=body.minimum_level,
            search_type=body.search_type,
            department=body.department,
            target_id=body.target_id,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Skill match failed: {e}")
        raise HTTPException(status_code=500, detail="Matching failed")


@router.post("/team-optimization", response_model=TeamOptimizationResponse)
@limiter.limit(MATCHING_RATE_LIMIT)
async def team_optimization(
    request: Request,
    body: TeamOptimizationRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    try:
        return await MatchingService(db, llm).team_optimization(
            project_name=body.project_name,
            required_skills=body.required_skills,
            team_size=body.team_size,
            minimum_level=body.minimum_level,
        )
    except Exception as e:
        logger.error(f"Team optimization failed: {e}")
        raise HTTPException(status_code=500, detail="Team optimization failed")
