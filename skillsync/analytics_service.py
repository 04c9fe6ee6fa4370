"""
Analytics service for the talent dashboards.

Provides:
- Skill gap analysis per department
- Skill map aggregation (radar chart data)
- Cross-department synergy analysis
- Talent utilization report
"""

import asyncio
import json
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from . import fallbacks
from .constants import ALL_DEPARTMENTS, SYNERGY_PERIOD_DAYS, TARGET_SKILL_LEVEL
from .db_models import DBMatch, DBSkill, DBUser, DBUserSkill
from .llm_providers import (
    LLMProvider,
    generate_json_with_fallback,
    generate_with_fallback,
    is_chart,
)
from .scoring import (
    PRIORITY_ACTIONS,
    PRIORITY_ESTIMATED_TIME,
    activity_score,
    average,
    gap_priority,
    month_starts,
    skill_gap,
    skill_growth,
    utilization_rate,
)

logger = logging.getLogger(__name__)

TRAINING_RESOURCES = [
    "In-house training programme",
    "Online learning platform",
    "Mentoring programme",
]

UNASSIGNED_DEPARTMENT = "Unassigned"


class AnalyticsService:
    """Service for generating talent analytics and insights."""

    def __init__(self, db: Session, llm: Optional[LLMProvider] = None):
        self.db = db
        self.llm = llm

    # =========================================================================
    # Skill Gap
    # =========================================================================

    async def skill_gap_analysis(self, department_id: str) -> Dict[str, Any]:
        """
        Compare a department's average level for every skill against the target level.

        Skills nobody in the department holds count as level 0.

        Args:
            department_id: Department name as stored on users

        Returns:
            Dictionary with gap_analysis, department_summary, recommended_actions,
            ai_recommendations and fallback_used
        """
        skills = self.db.query(DBSkill).order_by(DBSkill.name).all()

        rows = (
            self.db.query(DBUserSkill.skill_id, DBUserSkill.level)
            .join(DBUser, DBUser.id == DBUserSkill.user_id)
            .filter(DBUser.department == department_id)
            .all()
        )
        levels_by_skill: Dict[str, List[int]] = defaultdict(list)
        for skill_id, level in rows:
            levels_by_skill[skill_id].append(level)

        gap_analysis = []
        for skill in skills:
            current = average(levels_by_skill.get(skill.id, []))
            gap = skill_gap(current)
            priority = gap_priority(gap)
            gap_analysis.append({
                "skill_id": skill.id,
                "skill_name": skill.name,
                "category": skill.category,
                "required_level": TARGET_SKILL_LEVEL,
                "current_level": round(current, 2),
                "gap": round(gap, 2),
                "priority": priority,
                "recommended_action": PRIORITY_ACTIONS[priority],
            })

        department_summary = [{
            "department_name": department_id,
            "average_gap": round(average([g["gap"] for g in gap_analysis]), 2),
            "critical_skills": [g["skill_name"] for g in gap_analysis if g["priority"] == "high"],
        }]

        recommended_actions = [
            {
                "skill_id": g["skill_id"],
                "skill_name": g["skill_name"],
                "priority": g["priority"],
                "action": g["recommended_action"],
                "estimated_time": PRIORITY_ESTIMATED_TIME[g["priority"]],
                "resources": list(TRAINING_RESOURCES),
            }
            for g in gap_analysis
        ]

        prompt = (
            "Based on the following skill gap analysis, propose concrete development measures:\n"
            f"{json.dumps(gap_analysis, ensure_ascii=False)}\n\n"
            "Include:\n"
            "- specific training programmes for the high-priority skills\n"
            "- the expected development period\n"
            "- required resources and cost\n"
            "- step-by-step development plan"
        )
        ai_recommendations, fallback_used = await generate_with_fallback(
            self.llm,
            "You are a talent development expert. Propose practical, concrete development measures.",
            prompt,
            fallbacks.SKILL_GAP_RECOMMENDATIONS,
        )

        logger.info(
            f"Skill gap analysis for {department_id}: {len(gap_analysis)} skills, "
            f"{len(department_summary[0]['critical_skills'])} critical"
        )

        return {
            "gap_analysis": gap_analysis,
            "department_summary": department_summary,
            "recommended_actions": recommended_actions,
            "ai_recommendations": ai_recommendations,
            "fallback_used": fallback_used,
        }

    # =========================================================================
    # Skill Map
    # =========================================================================

    async def skill_map_aggregate(
        self,
        department: str = ALL_DEPARTMENTS,
        skill_category: str = ALL_DEPARTMENTS
    ) -> Dict[str, Any]:
        """
        Average skill level per category, for one department or across all of them.

        When no category has data the fixed sample radar dataset is returned instead.
        """
        user_query = self.db.query(DBUser)
        if department != ALL_DEPARTMENTS:
            user_query = user_query.filter(DBUser.department == department)
        users = user_query.all()

        skill_query = self.db.query(DBSkill)
        if skill_category != ALL_DEPARTMENTS:
            skill_query = skill_query.filter(DBSkill.category == skill_category)
        skills = {s.id: s for s in skill_query.all()}

        user_ids = [u.id for u in users]
        user_skills = []
        if user_ids:
            user_skills = self.db.query(DBUserSkill).filter(DBUserSkill.user_id.in_(user_ids)).all()

        # department -> category -> [levels]
        department_data: Dict[str, Dict[str, List[int]]] = {}
        user_department = {}
        for user in users:
            dept = user.department or UNASSIGNED_DEPARTMENT
            user_department[user.id] = dept
            department_data.setdefault(dept, {})

        for us in user_skills:
            skill = skills.get(us.skill_id)
            if skill is None:
                continue
            dept = user_department[us.user_id]
            department_data[dept].setdefault(skill.category, []).append(us.level)

        if department == ALL_DEPARTMENTS:
            labels = sorted({s.category for s in skills.values()})
            data = []
            for category in labels:
                levels = [lvl for dept in department_data.values() for lvl in dept.get(category, [])]
                data.append(round(average(levels), 1))
        else:
            dept_data = department_data.get(department, {})
            labels = sorted(dept_data.keys())
            data = [round(average(dept_data[category]), 1) for category in labels]

        if labels:
            skill_map_data = {
                "labels": labels,
                "datasets": [{
                    "label": "Average skill level",
                    "data": data,
                    "backgroundColor": "rgba(44, 82, 130, 0.2)",
                    "borderColor": "rgba(44, 82, 130, 1)",
                    "borderWidth": 2,
                }],
            }
        else:
            skill_map_data = fallbacks.sample_skill_map()

        prompt = (
            "Analyse the following data and describe the organisation's skill trends:\n"
            f"Users: {len(users)}\n"
            f"Skills: {len(skills)}\n"
            f"User skills: {len(user_skills)}"
        )
        ai_analysis, fallback_used = await generate_with_fallback(
            self.llm,
            "You are an AI assistant that analyses skill maps.",
            prompt,
            fallbacks.SKILL_MAP_ANALYSIS,
        )

        return {
            "skill_map_data": skill_map_data,
            "ai_analysis": ai_analysis,
            "department_count": len(department_data),
            "total_users": len(users),
            "average_skill_level": round(average(data), 1),
            "fallback_used": fallback_used,
        }

    # =========================================================================
    # Synergy
    # =========================================================================

    def _matches_between(
        self,
        start: datetime,
        end: datetime,
        departments: List[str],
        include_end: bool = True
    ) -> List[DBMatch]:
        query = self.db.query(DBMatch).filter(DBMatch.created_at >= start)
        if include_end:
            query = query.filter(DBMatch.created_at <= end)
        else:
            query = query.filter(DBMatch.created_at < end)
        if departments:
            query = query.join(DBUser, DBUser.id == DBMatch.user_id).filter(DBUser.department.in_(departments))
        return query.all()

    async def _kpi_chart(self, matches: List[DBMatch], start: datetime, end: datetime):
        prompt = (
            f"Period: {start.date().isoformat()} to {end.date().isoformat()}\n"
            f"Matches in period: {len(matches)}\n"
            f"Average match score: {round(average([m.match_score for m in matches]), 1)}\n\n"
            'Respond only with JSON: {"labels": [month labels], "datasets": '
            '[{"label": "KPI achievement rate", "data": [numbers]}]}'
        )
        return await generate_json_with_fallback(
            self.llm,
            "Analyse cross-department KPI achievement and produce monthly achievement rate data.",
            prompt,
            fallbacks.sample_kpi_chart(),
            validate=is_chart,
        )

    async def _synergy_chart(self, matches: List[DBMatch], departments: List[str]):
        prompt = (
            f"Departments: {', '.join(departments) if departments else 'all'}\n"
            f"Matches in period: {len(matches)}\n\n"
            'Respond only with JSON: {"labels": ["Dept A x Dept B", ...], "datasets": '
            '[{"label": "Synergy score", "data": [numbers 0-100]}]}'
        )
        return await generate_json_with_fallback(
            self.llm,
            "Analyse the synergy between departments and score each pair of departments.",
            prompt,
            fallbacks.sample_synergy_chart(),
            validate=is_chart,
        )

    async def _summary(self, current: List[DBMatch], previous: List[DBMatch]) -> Dict[str, Any]:
        current_score = average([m.match_score for m in current])
        previous_score = average([m.match_score for m in previous])
        current_total = len(current)
        previous_total = len(previous)

        if previous_total:
            productivity_rate = round((current_total - previous_total) / previous_total * 100, 1)
        else:
            productivity_rate = 0

        return {
            "total_score": round(current_score, 1),
            "total_score_change": round(current_score - previous_score, 1),
            "project_count": current_total,
            "project_count_change": current_total - previous_total,
            "productivity_rate": productivity_rate,
        }

    async def synergy_analysis(
        self,
        period: str,
        departments: Optional[List[str]] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Compare matching activity in the selected period with the equal-length period before it.

        Args:
            period: One of 1month, 3months, 6months, 1year
            departments: Restrict matches to users in these departments (empty = all)
            now: End of the current window (defaults to utcnow)
        """
        departments = departments or []
        days = SYNERGY_PERIOD_DAYS[period]
        end = now or datetime.utcnow()
        start = end - timedelta(days=days)
        previous_start = start - timedelta(days=days)

        current = self._matches_between(start, end, departments)
        previous = self._matches_between(previous_start, start, departments, include_end=False)

        (kpi_data, kpi_fallback), (synergy_data, synergy_fallback), summary = await asyncio.gather(
            self._kpi_chart(current, start, end),
            self._synergy_chart(current, departments),
            self._summary(current, previous),
        )

        logger.info(
            f"Synergy analysis {period}: {len(current)} current / {len(previous)} previous matches"
        )

        return {
            "kpi_data": kpi_data,
            "synergy_data": synergy_data,
            "summary": summary,
            "fallback_used": kpi_fallback or synergy_fallback,
        }

    # =========================================================================
    # Talent Utilization
    # =========================================================================

    @staticmethod
    def _monthly_data(matches: List[DBMatch], starts: List[datetime], end: datetime) -> List[Dict[str, Any]]:
        boundaries = starts[1:] + [end]
        monthly = []
        for month_start, month_end in zip(starts, boundaries):
            scores = [m.match_score for m in matches if month_start <= m.created_at < month_end]
            monthly.append({
                "month": month_start.strftime("%Y-%m"),
                "utilization_rate": round(average(scores)),
                "activity": len(scores),
            })
        return monthly

    async def talent_utilization(
        self,
        department: str = ALL_DEPARTMENTS,
        period_months: int = 6,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Per-employee growth, utilization and activity with department rollups.

        The summary and department analysis cover every employee;
        `talent_data` is narrowed to `department` unless it is "all".
        """
        now = now or datetime.utcnow()
        starts = month_starts(period_months, now)
        # Include matches up to the end of the current instant
        window_end = now + timedelta(seconds=1)

        users = (
            self.db.query(DBUser)
            .options(selectinload(DBUser.skills), selectinload(DBUser.matches))
            .order_by(DBUser.name)
            .all()
        )

        talent_data = []
        for user in users:
            talent_data.append({
                "id": user.id,
                "name": user.name,
                "department": user.department,
                "position": user.position,
                "skill_growth": skill_growth([us.level for us in user.skills]),
                "utilization_rate": utilization_rate(user.matches, now),
                "activity_score": activity_score(user.matches),
                "monthly_data": self._monthly_data(user.matches, starts, window_end),
            })

        department_analysis = []
        by_department: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for entry in talent_data:
            by_department[entry["department"] or UNASSIGNED_DEPARTMENT].append(entry)
        for dept in sorted(by_department):
            members = by_department[dept]
            department_analysis.append({
                "department": dept,
                "avg_utilization_rate": round(average([m["utilization_rate"] for m in members])),
                "avg_growth_rate": round(average([m["skill_growth"] for m in members])),
                "employee_count": len(members),
            })

        summary = {
            "total_employees": len(talent_data),
            "avg_skill_growth": round(average([t["skill_growth"] for t in talent_data]), 1),
            "avg_utilization_rate": round(average([t["utilization_rate"] for t in talent_data]), 1),
        }

        all_matches = [m for user in users for m in user.matches]
        trends = self._monthly_data(all_matches, starts, window_end)

        prompt = (
            "Analyse growth trends from the following talent data:\n"
            f"- Total employees: {summary['total_employees']}\n"
            f"- Average skill growth: {summary['avg_skill_growth']}\n"
            f"- Average utilization rate: {summary['avg_utilization_rate']}"
        )
        ai_insights, fallback_used = await generate_with_fallback(
            self.llm,
            "You are an AI assistant that analyses growth trends in talent data.",
            prompt,
            fallbacks.GROWTH_INSIGHTS,
        )

        if department != ALL_DEPARTMENTS:
            talent_data = [t for t in talent_data if t["department"] == department]

        return {
            "summary": summary,
            "talent_data": talent_data,
            "department_analysis": department_analysis,
            "growth_analysis": {
                "trends": trends,
                "ai_insights": ai_insights,
            },
            "period_months": period_months,
            "fallback_used": fallback_used,
        }
