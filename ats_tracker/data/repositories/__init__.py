"""
Repository classes for database operations.

Repositories satisfy the collaborator protocols of the tracking
orchestrator (record store, job lookup, resume lookup, skill catalog).
"""

from .application_repository import ApplicationRepository
from .base import BaseRepository
from .job_repository import JobRepository
from .resume_repository import ResumeRepository
from .skill_repository import SkillRepository

__all__ = [
    "ApplicationRepository",
    "BaseRepository",
    "JobRepository",
    "ResumeRepository",
    "SkillRepository",
]
