"""
Skill matching and team building.

Scores are computed locally with scoring.calculate_match_score; the LLM only
explains results or proposes an ordering, and both have local fallbacks.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from . import fallbacks
from .constants import MAX_MATCH_RESULTS
from .db_models import DBMatch, DBSkill, DBUser, DBUserSkill
from .llm_providers import LLMProvider, generate_json_with_fallback, generate_with_fallback
from .scoring import calculate_match_score

logger = logging.getLogger(__name__)


def _candidate(user: DBUser, score: int) -> Dict[str, Any]:
    skills = sorted(
        ({"skill_id": us.skill_id, "name": us.skill.name, "level": us.level} for us in user.skills),
        key=lambda s: (-s["level"], s["name"])
    )
    return {
        "user_id": user.id,
        "name": user.name,
        "department": user.department,
        "position": user.position,
        "match_score": score,
        "skills": skills,
    }


def _rank(candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(candidates, key=lambda c: (-c["match_score"], c["name"]))


class MatchingService:
    """Find employees whose skills fit a keyword or a project."""

    def __init__(self, db: Session, llm: Optional[LLMProvider] = None):
        self.db = db
        self.llm = llm

    async def skill_match(
        self,
        skill_keywords: str,
        minimum_level: int = 1,
        search_type: str = "skill",
        department: Optional[str] = None,
        target_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Score every candidate against the skills whose name contains the keyword.

        Persists one Match row per candidate and returns the top results
        with a generated explanation.
        """
        keyword = skill_keywords.strip()
        skills = self.db.query(DBSkill).filter(DBSkill.name.ilike(f"%{keyword}%")).all()

        if not skills:
            logger.info(f"Skill match: no skills match '{keyword}'")
            return {
                "matches": [],
                "explanation": f"No registered skills match '{keyword}'.",
                "fallback_used": False,
            }

        requirements = [(skill.id, minimum_level) for skill in skills]

        user_query = self.db.query(DBUser).options(
            selectinload(DBUser.skills).selectinload(DBUserSkill.skill)
        )
        if department:
            user_query = user_query.filter(DBUser.department == department)
        users = user_query.all()

        candidates = []
        for user in users:
            levels = {us.skill_id: us.level for us in user.skills}
            score = calculate_match_score(levels, requirements)
            candidates.append(_candidate(user, score))
            self.db.add(DBMatch(
                user_id=user.id,
                target_type=search_type,
                target_id=target_id,
                match_score=score,
            ))

        self.db.commit()

        top = _rank(candidates)[:MAX_MATCH_RESULTS]

        prompt = (
            f"Requested skills: {', '.join(s.name for s in skills)} (minimum level {minimum_level})\n"
            f"Top candidates: {json.dumps(top, ensure_ascii=False)}\n\n"
            "Briefly explain why the leading candidates fit the request."
        )
        explanation, fallback_used = await generate_with_fallback(
            self.llm,
            "You are a talent matching expert. Analyse skill set similarity and explain the matching results.",
            prompt,
            fallbacks.MATCH_EXPLANATION,
        )

        logger.info(f"Skill match '{keyword}': {len(candidates)} candidates scored, {len(top)} returned")

        return {
            "matches": top,
            "explanation": explanation,
            "fallback_used": fallback_used,
        }

    async def team_optimization(
        self,
        project_name: str,
        required_skills: List[str],
        team_size: int,
        minimum_level: int = 1
    ) -> Dict[str, Any]:
        """
        Propose a team of at most `team_size` employees holding the required skills.

        The LLM returns an ordering of candidate ids; unknown ids are dropped.
        When it fails, candidates are ranked locally by match score.
        """
        wanted = {name.strip().lower() for name in required_skills if name.strip()}
        skills = self.db.query(DBSkill).filter(func.lower(DBSkill.name).in_(sorted(wanted))).all()
        if not skills:
            return {
                "team": [],
                "rationale": "No registered skills match the project's requirements.",
                "fallback_used": False,
            }

        requirements = [(skill.id, minimum_level) for skill in skills]
        skill_ids = [skill.id for skill in skills]

        holders = select(DBUserSkill.user_id).where(DBUserSkill.skill_id.in_(skill_ids))
        users = (
            self.db.query(DBUser)
            .filter(DBUser.id.in_(holders))
            .options(selectinload(DBUser.skills).selectinload(DBUserSkill.skill))
            .all()
        )

        candidates = _rank([
            _candidate(user, calculate_match_score({us.skill_id: us.level for us in user.skills}, requirements))
            for user in users
        ])
        if not candidates:
            return {
                "team": [],
                "rationale": "No employees hold the required skills.",
                "fallback_used": False,
            }

        by_id = {c["user_id"]: c for c in candidates}

        system_prompt = (
            "You are a staffing expert. Propose the best team for the project below.\n"
            f"- Project name: {project_name}\n"
            f"- Required skills: {', '.join(s.name for s in skills)}\n"
            f"- Team size: {team_size}\n"
            'Respond only with JSON: {"team": [user_id, ...], "rationale": "..."}'
        )

        def valid(value: Any) -> bool:
            ids = value.get("team") if isinstance(value, dict) else value
            return isinstance(ids, list) and any(i in by_id for i in ids if isinstance(i, str))

        proposal, fallback_used = await generate_json_with_fallback(
            self.llm,
            system_prompt,
            json.dumps(candidates, ensure_ascii=False),
            None,
            validate=valid,
        )

        if fallback_used:
            team = candidates[:team_size]
            rationale = fallbacks.TEAM_RATIONALE
        else:
            ids = proposal.get("team") if isinstance(proposal, dict) else proposal
            team = []
            for user_id in ids:
                if isinstance(user_id, str) and user_id in by_id and by_id[user_id] not in team:
                    team.append(by_id[user_id])
            team = team[:team_size]
            rationale = ""
            if isinstance(proposal, dict) and isinstance(proposal.get("rationale"), str):
                rationale = proposal["rationale"]
            rationale = rationale or fallbacks.TEAM_RATIONALE

        logger.info(f"Team optimization '{project_name}': {len(team)} of {len(candidates)} candidates selected")

        return {
            "team": team,
            "rationale": rationale,
            "fallback_used": fallback_used,
        }
