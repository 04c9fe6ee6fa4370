"""
Scoring arithmetic shared by matching and analytics.

All functions are pure: they take plain values or ORM rows and return numbers.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    ACTIVITY_WINDOW_MONTHS,
    HIGH_PRIORITY_GAP,
    MATCH_BASE_SCORE,
    MATCH_LEVEL_STEP,
    MEDIUM_PRIORITY_GAP,
    SKILL_GROWTH_MULTIPLIER,
    TARGET_SKILL_LEVEL,
    UTILIZATION_WINDOW_DAYS,
)

# (skill_id, minimum_level)
Requirement = Tuple[str, int]


def average(numbers: Sequence[float]) -> float:
    if not numbers:
        return 0
    return sum(numbers) / len(numbers)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def requirement_score(user_level: int, required_level: int) -> float:
    """Score one satisfied requirement: 70 at the required level, +/-10 per level."""
    return clamp(MATCH_BASE_SCORE + (user_level - required_level) * MATCH_LEVEL_STEP, 0, 100)


def calculate_match_score(user_levels: Dict[str, int], requirements: Iterable[Requirement]) -> int:
    """
    Average requirement score over the requirements the user holds a skill for.

    Requirements the user has no skill for are skipped, not penalised.
    Returns 0 when no requirement matches.

    Args:
        user_levels: skill_id -> level for one user
        requirements: (skill_id, minimum_level) pairs
    """
    scores = [
        requirement_score(user_levels[skill_id], minimum_level)
        for skill_id, minimum_level in requirements
        if skill_id in user_levels
    ]
    if not scores:
        return 0
    return round(sum(scores) / len(scores))


def skill_gap(level: float) -> float:
    return TARGET_SKILL_LEVEL - level


def gap_priority(gap: float) -> str:
    if gap >= HIGH_PRIORITY_GAP:
        return "high"
    if gap >= MEDIUM_PRIORITY_GAP:
        return "medium"
    return "low"


PRIORITY_ACTIONS = {
    "high": "Join an intensive training programme",
    "medium": "Take an online learning course",
    "low": "Use self-study materials",
}

PRIORITY_ESTIMATED_TIME = {
    "high": "3-6 months",
    "medium": "2-3 months",
    "low": "1-2 months",
}


def skill_growth(levels: Sequence[int]) -> int:
    """Average level scaled to 0-100 (level 5 -> 100)."""
    if not levels:
        return 0
    return round(average(levels) * SKILL_GROWTH_MULTIPLIER)


def utilization_rate(matches: Sequence, now: Optional[datetime] = None) -> int:
    """Rounded average match score (already 0-100) over the last 90 days."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=UTILIZATION_WINDOW_DAYS)
    recent = [m.match_score for m in matches if m.created_at >= cutoff]
    if not recent:
        return 0
    return round(average(recent))


def activity_score(matches: Sequence) -> int:
    """Matches per month over a three month window, times ten, capped at 100."""
    if not matches:
        return 0
    return min(round(len(matches) / ACTIVITY_WINDOW_MONTHS * 10), 100)


def month_starts(months: int, now: Optional[datetime] = None) -> List[datetime]:
    """First day of each of the last `months` calendar months, oldest first."""
    now = now or datetime.utcnow()
    year, month = now.year, now.month
    starts = []
    for _ in range(months):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))
