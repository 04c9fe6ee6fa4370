"""
Application constants for the SkillSync backend.

Dynamic configuration (from environment variables) lives in config.py.
This file only holds values that don't change between environments.
"""

# =============================================================================
# Skill Levels & Scoring
# =============================================================================

MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 5
TARGET_SKILL_LEVEL = 5  # Gap analysis measures distance to this level

MATCH_BASE_SCORE = 70  # Score when user level equals required level
MATCH_LEVEL_STEP = 10  # Score change per level above/below requirement
MAX_MATCH_RESULTS = 10

HIGH_PRIORITY_GAP = 3
MEDIUM_PRIORITY_GAP = 2

SKILL_GROWTH_MULTIPLIER = 20  # avg level 5 -> 100
UTILIZATION_WINDOW_DAYS = 90
ACTIVITY_WINDOW_MONTHS = 3

# =============================================================================
# Batch Jobs
# =============================================================================

REMINDER_THRESHOLD_DAYS = 90
REMINDER_DEADLINE_DAYS = 7
REMINDER_SUBJECT = "Reminder: please update your skill information"
REMINDER_NOTIFICATION_TYPE = "skill_update_reminder"

# =============================================================================
# Domain Vocabularies
# =============================================================================

ACCESS_FLAGS = (
    "admin",
    "user_management",
    "skill_management",
    "challenge_management",
    "idea_management",
)

CHALLENGE_STATUSES = ("not_started", "in_progress", "resolved")

SKILL_CATEGORIES = (
    "Programming",
    "Database",
    "Infrastructure",
    "Network",
    "Security",
    "Management",
    "Other",
)

SYNERGY_PERIOD_DAYS = {
    "1month": 30,
    "3months": 90,
    "6months": 180,
    "1year": 365,
}

ALL_DEPARTMENTS = "all"

# =============================================================================
# Pagination
# =============================================================================

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# =============================================================================
# Authentication Configuration
# =============================================================================

MIN_PASSWORD_LENGTH = 8
JWT_ALGORITHM = "HS256"
