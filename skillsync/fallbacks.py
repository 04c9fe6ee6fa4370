"""
Fixed content returned when an LLM call fails.

Chart payloads follow the `labels` + `datasets` shape the dashboards render.
Functions return fresh copies so callers may mutate the result.
"""

import copy
from datetime import datetime, timedelta

from .constants import REMINDER_DEADLINE_DAYS, REMINDER_THRESHOLD_DAYS

SKILL_GAP_RECOMMENDATIONS = (
    "Focus training on the high-priority skills first: enrol members in an "
    "intensive programme, pair them with mentors, and review progress monthly. "
    "Medium-priority skills can be covered with online courses over the next quarter."
)

SKILL_MAP_ANALYSIS = "Skill analysis could not be generated."

MATCH_EXPLANATION = "Candidates are ranked by how closely their recorded skill levels meet the requested minimum level."

TEAM_RATIONALE = "Team members were ranked by skill match score against the project's required skills."

GROWTH_INSIGHTS = "Growth analysis is being prepared."

_SAMPLE_SKILL_MAP = {
    "labels": ["Programming", "Database", "Infrastructure", "Management", "Communication"],
    "datasets": [{
        "label": "Average skill level",
        "data": [4, 3, 5, 2, 4],
        "backgroundColor": "rgba(44, 82, 130, 0.2)",
        "borderColor": "rgba(44, 82, 130, 1)",
        "borderWidth": 2,
    }],
}

_SAMPLE_KPI_CHART = {
    "labels": ["Month 1", "Month 2", "Month 3", "Month 4", "Month 5", "Month 6"],
    "datasets": [{
        "label": "KPI achievement rate",
        "data": [65, 72, 78, 85, 82, 90],
        "borderColor": "rgb(75, 192, 192)",
        "tension": 0.1,
    }],
}

_SAMPLE_SYNERGY_CHART = {
    "labels": ["Sales x Development", "Development x HR", "HR x Planning", "Planning x Sales"],
    "datasets": [{
        "label": "Synergy score",
        "data": [85, 65, 75, 80],
        "backgroundColor": "rgba(54, 162, 235, 0.5)",
    }],
}


def sample_skill_map() -> dict:
    return copy.deepcopy(_SAMPLE_SKILL_MAP)


def sample_kpi_chart() -> dict:
    return copy.deepcopy(_SAMPLE_KPI_CHART)


def sample_synergy_chart() -> dict:
    return copy.deepcopy(_SAMPLE_SYNERGY_CHART)


def reminder_email_template(now: datetime = None) -> str:
    """Plain reminder email with a `{USER_NAME}` placeholder."""
    now = now or datetime.utcnow()
    deadline = (now + timedelta(days=REMINDER_DEADLINE_DAYS)).strftime("%Y-%m-%d")
    return (
        "Dear {USER_NAME},\n\n"
        "It is time for the periodic update of your skill information.\n\n"
        f"More than {REMINDER_THRESHOLD_DAYS} days have passed since your skills were last updated. "
        "Please review them so the skill map reflects your current expertise.\n\n"
        "How to update:\n"
        "1. Log in to the skill management system\n"
        "2. Open \"Skills\" from your profile menu\n"
        "3. Enter your current level for each skill\n"
        "4. Save your changes\n\n"
        f"Please complete the update by {deadline}.\n\n"
        "If you have any questions, feel free to contact HR.\n"
    )
