"""Request and response schemas for the SkillSync backend."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .constants import (
    ACCESS_FLAGS,
    CHALLENGE_STATUSES,
    MAX_SKILL_LEVEL,
    MIN_PASSWORD_LENGTH,
    MIN_SKILL_LEVEL,
)

AccessFlag = Literal[ACCESS_FLAGS]
ChallengeStatus = Literal[CHALLENGE_STATUSES]


# =============================================================================
# Authentication Models
# =============================================================================

class AccessRights(BaseModel):
    """Per-user feature flags. `admin` implies every other flag."""
    admin: bool = False
    user_management: bool = False
    skill_management: bool = False
    challenge_management: bool = False
    idea_management: bool = False


class UserCreate(BaseModel):
    """Schema for registering a new account."""
    email: EmailStr
    password: str
    name: str = Field(..., min_length=1, max_length=255)
    department: Optional[str] = None
    position: Optional[str] = None

    @field_validator('password')
    @classmethod
    def password_valid(cls, v):
        """Validate password meets security requirements."""
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        if len(v) > 72:
            raise ValueError('Password must be less than 72 characters (bcrypt limitation)')
        return v


class UserLogin(BaseModel):
    """Schema for user login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    """Public representation of a user."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: Optional[str] = None
    name: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[str] = None
    role: str = "member"
    profile_data: Dict[str, Any] = Field(default_factory=dict)
    access_rights: Dict[str, bool] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Token and user returned after a successful login."""
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class AccessValidationRequest(BaseModel):
    """Ask whether a user holds every listed access flag."""
    user_id: str
    required_access: List[AccessFlag]


# =============================================================================
# Profile Models
# =============================================================================

class ProfileUpdate(BaseModel):
    """Partial profile update. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    profile_data: Optional[Dict[str, Any]] = None


class ProfileListResponse(BaseModel):
    data: List[UserOut]
    count: int
    page: int
    total_pages: int
    departments: List[str]


class WorkHistoryEntry(BaseModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    start_date: str
    end_date: Optional[str] = None
    description: Optional[str] = None


class CertificationEntry(BaseModel):
    name: str = Field(..., min_length=1)
    issuer: Optional[str] = None
    acquired_date: Optional[str] = None
    expiry_date: Optional[str] = None


class TrainingEntry(BaseModel):
    name: str = Field(..., min_length=1)
    provider: Optional[str] = None
    completed_date: Optional[str] = None
    description: Optional[str] = None


class CareerOut(BaseModel):
    work_history: List[Dict[str, Any]] = Field(default_factory=list)
    certifications: List[Dict[str, Any]] = Field(default_factory=list)
    trainings: List[Dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Skill Models
# =============================================================================

class SkillRegister(BaseModel):
    """Register (or re-rate) one of the caller's skills."""
    skill_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    level: int = Field(..., ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)
    years_of_experience: float = Field(0, ge=0)

    @field_validator('skill_name', 'category')
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Value must not be blank')
        return v


class UserSkillUpdate(BaseModel):
    level: int = Field(..., ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)
    years_of_experience: Optional[float] = Field(None, ge=0)


class SkillOut(BaseModel):
    """Catalogue skill annotated with the caller's own rating."""
    id: str
    name: str
    category: str
    level: int = 0
    years_of_experience: float = 0
    user_skill_id: Optional[str] = None
    updated_at: Optional[datetime] = None


class SkillListResponse(BaseModel):
    skills: List[SkillOut]
    categories: List[str]


# =============================================================================
# Challenge & Idea Models
# =============================================================================

class ChallengeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    required_skills: List[str] = Field(default_factory=list)


class ChallengeStatusUpdate(BaseModel):
    status: ChallengeStatus


class ChallengeOut(BaseModel):
    id: str
    title: str
    description: str
    status: str
    posted_by: Optional[str] = None
    poster_name: Optional[str] = None
    required_skills: List[str] = Field(default_factory=list)
    created_at: datetime


class IdeaCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    required_resources: Dict[str, Any] = Field(default_factory=dict)


class EvaluationCreate(BaseModel):
    score: int = Field(..., ge=1, le=5)
    comment: str = ""


class IdeaOut(BaseModel):
    id: str
    title: str
    description: str
    posted_by: Optional[str] = None
    poster_name: Optional[str] = None
    required_resources: Dict[str, Any] = Field(default_factory=dict)
    evaluation_data: List[Dict[str, Any]] = Field(default_factory=list)
    evaluation_count: int = 0
    average_score: Optional[float] = None
    created_at: datetime


# =============================================================================
# Matching Models
# =============================================================================

class SkillMatchRequest(BaseModel):
    search_type: str = "skill"
    skill_keywords: str = Field(..., min_length=1)
    minimum_level: int = Field(MIN_SKILL_LEVEL, ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)
    department: Optional[str] = None
    target_id: Optional[str] = None


class MatchCandidate(BaseModel):
    user_id: str
    name: str
    department: Optional[str] = None
    position: Optional[str] = None
    match_score: int
    skills: List[Dict[str, Any]] = Field(default_factory=list)


class SkillMatchResponse(BaseModel):
    matches: List[MatchCandidate]
    explanation: str
    fallback_used: bool


class TeamOptimizationRequest(BaseModel):
    project_name: str = Field(..., min_length=1)
    required_skills: List[str] = Field(..., min_length=1)
    team_size: int = Field(..., ge=1, le=50)
    minimum_level: int = Field(MIN_SKILL_LEVEL, ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)


class TeamOptimizationResponse(BaseModel):
    team: List[MatchCandidate]
    rationale: str
    fallback_used: bool


# =============================================================================
# Message Models
# =============================================================================

class MessageCreate(BaseModel):
    receiver_id: str
    content: str = Field(..., min_length=1, max_length=5000)


class GroupMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageOut(BaseModel):
    id: str
    sender_id: str
    sender_name: Optional[str] = None
    receiver_id: Optional[str] = None
    receiver_name: Optional[str] = None
    group_id: Optional[str] = None
    content: str
    sent_at: datetime
    read_at: Optional[datetime] = None


# =============================================================================
# Analytics Models
# =============================================================================

class SkillGapRequest(BaseModel):
    department_id: str = Field(..., min_length=1)


class SkillMapRequest(BaseModel):
    department: str = "all"
    skill_category: str = "all"


class SynergyRequest(BaseModel):
    period: Literal["1month", "3months", "6months", "1year"] = "3months"
    departments: List[str] = Field(default_factory=list)
