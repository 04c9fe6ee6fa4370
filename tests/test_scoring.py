"""
Tests for the scoring helpers used by matching and analytics.
"""

from datetime import datetime, timedelta
from types import SimpleNamespace

from skillsync.scoring import (
    activity_score,
    calculate_match_score,
    gap_priority,
    month_starts,
    requirement_score,
    skill_gap,
    skill_growth,
    utilization_rate,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def match(score, days_ago=0):
    return SimpleNamespace(match_score=score, created_at=NOW - timedelta(days=days_ago))


# =============================================================================
# Match Score
# =============================================================================

def test_requirement_score_at_required_level_is_base():
    assert requirement_score(3, 3) == 70


def test_requirement_score_moves_ten_per_level_and_clamps():
    assert requirement_score(5, 3) == 90
    assert requirement_score(1, 3) == 50
    assert requirement_score(5, 1) == 100  # 70 + 40 clamps to 100


def test_match_score_averages_held_requirements_only():
    levels = {"python": 5, "sql": 2}
    requirements = [("python", 3), ("sql", 3), ("go", 3)]

    # python 90, sql 60, go skipped
    assert calculate_match_score(levels, requirements) == 75


def test_match_score_is_zero_without_any_held_requirement():
    assert calculate_match_score({"python": 5}, [("go", 1)]) == 0
    assert calculate_match_score({}, []) == 0


def test_match_score_rounds_to_int():
    levels = {"a": 4, "b": 4, "c": 3}
    requirements = [("a", 3), ("b", 3), ("c", 3)]
    score = calculate_match_score(levels, requirements)
    assert score == 77
    assert isinstance(score, int)

# =============================================================================
# Gap Analysis
# =============================================================================

def test_skill_gap_measures_distance_to_target():
    assert skill_gap(5) == 0
    assert skill_gap(0) == 5
    assert skill_gap(3.5) == 1.5


def test_gap_priority_thresholds():
    assert gap_priority(3) == "high"
    assert gap_priority(4.2) == "high"
    assert gap_priority(2) == "medium"
    assert gap_priority(2.9) == "medium"
    assert gap_priority(1.9) == "low"
    assert gap_priority(0) == "low"

# =============================================================================
# Talent Utilization
# =============================================================================

def test_skill_growth_scales_average_level():
    assert skill_growth([5, 5]) == 100
    assert skill_growth([3, 4]) == 70
    assert skill_growth([]) == 0


def test_utilization_rate_uses_last_90_days():
    matches = [match(80, 10), match(60, 89), match(10, 120)]
    assert utilization_rate(matches, NOW) == 70


def test_utilization_rate_without_recent_matches_is_zero():
    assert utilization_rate([match(90, 200)], NOW) == 0
    assert utilization_rate([], NOW) == 0


def test_activity_score_is_capped():
    assert activity_score([]) == 0
    assert activity_score([match(50)] * 3) == 10
    assert activity_score([match(50)] * 60) == 100


def test_month_starts_oldest_first_across_year_boundary():
    starts = month_starts(4, datetime(2026, 2, 10))
    assert starts == [
        datetime(2025, 11, 1),
        datetime(2025, 12, 1),
        datetime(2026, 1, 1),
        datetime(2026, 2, 1),
    ]
