"""
API Routers for the SkillSync backend.

Each router handles a specific domain:
- auth: Registration, login, current user, access validation
- profiles: Employee profiles and career history
- skills: Skill catalogue, self-registered skills, skill search
- challenges: Challenge board
- ideas: Idea board and peer evaluations
- matching: Skill matching and team optimization
- messages: Direct and group messages
- analytics: Skill gap, skill map, synergy, talent utilization
- admin: Access rights management
- batch: Skill update reminders
- sync: HR system synchronisation
"""

from . import (
    auth,
    profiles,
    skills,
    challenges,
    ideas,
    matching,
    messages,
    analytics,
    admin,
    batch,
    sync,
)
