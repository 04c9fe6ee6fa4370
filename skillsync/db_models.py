"""
SQLAlchemy database models.

Maps the talent-matching domain to relational tables.
Separate from Pydantic models (models.py) which handle API validation.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, JSON, ForeignKey, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base

from .constants import ACCESS_FLAGS

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def default_access_rights() -> dict:
    return {flag: False for flag in ACCESS_FLAGS}


class DBUser(Base):
    """Employee account and profile table."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    employee_id = Column(String(50), unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # HR-synced employees have no password until they register
    hashed_password = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True, index=True)
    position = Column(String(255), nullable=True)
    hire_date = Column(String(10), nullable=True)  # YYYY-MM-DD as delivered by HR
    role = Column(String(20), nullable=False, default="member")

    profile_data = Column(JSON, nullable=False, default=dict)  # bio, interests, avatar_url, career, ...
    access_rights = Column(JSON, nullable=False, default=default_access_rights)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    skills = relationship("DBUserSkill", back_populates="user", cascade="all, delete-orphan")
    matches = relationship("DBMatch", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<DBUser(id={self.id}, email='{self.email}', department='{self.department}')>"


class DBSkill(Base):
    """Skill catalogue table."""
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    holders = relationship("DBUserSkill", back_populates="skill", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<DBSkill(name='{self.name}', category='{self.category}')>"


class DBUserSkill(Base):
    """A user's recorded level (1-5) for one skill."""
    __tablename__ = "user_skills"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True)
    level = Column(Integer, nullable=False)
    years_of_experience = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False, index=True)

    user = relationship("DBUser", back_populates="skills")
    skill = relationship("DBSkill", back_populates="holders")

    __table_args__ = (
        UniqueConstraint('user_id', 'skill_id', name='uq_user_skill'),
    )

    def __repr__(self):
        return f"<DBUserSkill(user={self.user_id}, skill={self.skill_id}, level={self.level})>"


class DBChallenge(Base):
    """Business challenge posted by an employee."""
    __tablename__ = "challenges"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="not_started", index=True)
    posted_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    required_skills = Column(JSON, nullable=False, default=list)  # skill ids
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    poster = relationship("DBUser")

    def __repr__(self):
        return f"<DBChallenge(id={self.id}, title='{self.title}', status='{self.status}')>"


class DBIdea(Base):
    """Improvement idea with an append-only list of evaluations."""
    __tablename__ = "ideas"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    posted_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    required_resources = Column(JSON, nullable=False, default=dict)
    evaluation_data = Column(JSON, nullable=False, default=list)  # [{score, comment, evaluated_at, evaluated_by}]
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    poster = relationship("DBUser")

    def __repr__(self):
        return f"<DBIdea(id={self.id}, title='{self.title}', evaluations={len(self.evaluation_data or [])})>"


class DBMatch(Base):
    """Persisted matching result for one candidate."""
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_type = Column(String(50), nullable=True)
    target_id = Column(String(36), nullable=True)
    match_score = Column(Float, nullable=False)  # 0-100
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("DBUser", back_populates="matches")

    __table_args__ = (
        Index('idx_match_target', 'target_type', 'target_id'),
    )

    def __repr__(self):
        return f"<DBMatch(user={self.user_id}, score={self.match_score})>"


class DBMessage(Base):
    """Direct message (receiver_id) or group chat message (group_id)."""
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_id)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    group_id = Column(String(100), nullable=True, index=True)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)

    sender = relationship("DBUser", foreign_keys=[sender_id])
    receiver = relationship("DBUser", foreign_keys=[receiver_id])

    def __repr__(self):
        return f"<DBMessage(id={self.id}, sender={self.sender_id}, receiver={self.receiver_id}, group={self.group_id})>"


class DBNotificationLog(Base):
    """Outbound notification history (sent or failed)."""
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False)
    content = Column(Text, nullable=True)
    error_detail = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<DBNotificationLog(user={self.user_id}, type='{self.type}', status='{self.status}')>"


class DBAccessLog(Base):
    """Audit trail of access validation decisions."""
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    access_type = Column(JSON, nullable=False, default=list)
    granted = Column(Boolean, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<DBAccessLog(user={self.user_id}, granted={self.granted})>"


class DBSyncLog(Base):
    """HR synchronisation run history."""
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    operation = Column(String(50), nullable=False, default="sync")
    status = Column(String(20), nullable=False)
    details = Column(Text, nullable=True)

    def __repr__(self):
        return f"<DBSyncLog(status='{self.status}', at={self.timestamp})>"
