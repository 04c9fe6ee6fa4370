"""SkillSync: internal talent and skill matching backend."""

__version__ = "1.0.0"
