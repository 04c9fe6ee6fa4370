"""
Analytics Router for the SkillSync backend.

Endpoints:
- POST /analytics/skill-gap-analysis - Department skill gaps
- POST /analytics/skill-map-aggregate - Radar chart of average levels
- POST /analytics/synergy-analysis - Cross-department synergy
- GET /analytics/talent-utilization - Talent utilization report
"""

import os
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..analytics_service import AnalyticsService
from ..constants import ALL_DEPARTMENTS
from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_current_user, get_llm
from ..llm_providers import LLMProvider
from ..models import SkillGapRequest, SkillMapRequest, SynergyRequest

# Initialize logger
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

TESTING = os.environ.get('TESTING') == 'true'
ANALYTICS_RATE_LIMIT = "1000/minute" if TESTING else "30/minute"

# Create router
router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    responses={401: {"description": "Unauthorized"}},
)


@router.post("/skill-gap-analysis")
@limiter.limit(ANALYTICS_RATE_LIMIT)
async def skill_gap_analysis(
    request: Request,
    body: SkillGapRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    """
    Gap between the target level and the department's average level, per skill.

    Raises:
        HTTPException 500: If the analysis fails
    """
    try:
        return await AnalyticsService(db, llm).skill_gap_analysis(body.department_id)
    except Exception as e:
        logger.error(f"Skill gap analysis failed: {e}")
        raise HTTPException(status_code=500, detail="Skill gap analysis failed")


@router.post("/skill-map-aggregate")
@limiter.limit(ANALYTICS_RATE_LIMIT)
async def skill_map_aggregate(
    request: Request,
    body: SkillMapRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    try:
        return await AnalyticsService(db, llm).skill_map_aggregate(body.department, body.skill_category)
    except Exception as e:
        logger.error(f"Skill map aggregation failed: {e}")
        raise HTTPException(status_code=500, detail="Skill map aggregation failed")


@router.post("/synergy-analysis")
@limiter.limit(ANALYTICS_RATE_LIMIT)
async def synergy_analysis(
    request: Request,
    body: SynergyRequest,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    """Compare the selected period with the equal-length period before it."""
    try:
        return await AnalyticsService(db, llm).synergy_analysis(body.period, body.departments)
    except Exception as e:
        logger.error(f"Synergy analysis failed: {e}")
        raise HTTPException(status_code=500, detail="Synergy analysis failed")


@router.get("/talent-utilization")
@limiter.limit(ANALYTICS_RATE_LIMIT)
async def talent_utilization(
    request: Request,
    department: str = ALL_DEPARTMENTS,
    period: int = Query(6, ge=1, le=24),
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMProvider = Depends(get_llm)
):
    try:
        return await AnalyticsService(db, llm).talent_utilization(department, period)
    except Exception as e:
        logger.error(f"Talent utilization report failed: {e}")
        raise HTTPException(status_code=500, detail="Talent utilization report failed")
