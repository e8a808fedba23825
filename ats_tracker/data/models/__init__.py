"""
Pydantic data models and schemas for ATS Tracker.

This module provides all data models used throughout the application,
including database documents, embedded models, and input/query schemas.
"""

# Base models
from .base import (
    BaseDocument,
    EmbeddedModel,
    PyObjectId,
    TimestampMixin,
    UTCDateTime,
    new_entry_id,
    to_naive_utc,
    utc_now,
)

# Application models
from .application import (
    Actor,
    Application,
    ApplicationCreate,
    ApplicationPage,
    ApplicationSearch,
    ApplicationUpdate,
    Attachment,
    Availability,
    Communication,
    ExperienceMatch,
    FormData,
    InterviewData,
    InterviewFeedback,
    QuestionnaireAnswer,
    RejectionData,
    SalaryExpectation,
    ScheduledInterview,
    ScreeningData,
    ScreeningDataUpdate,
    SkillMatchDetail,
    SkillsMatch,
    TimelineEntry,
)

# Job models
from .job import Job

# Resume models
from .resume import Resume, ResumeExperience, ResumeSkill

# Skill catalog
from .skill import CatalogSkill

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    "UTCDateTime",
    "new_entry_id",
    "to_naive_utc",
    "utc_now",
    # Application
    "Actor",
    "Application",
    "ApplicationCreate",
    "ApplicationPage",
    "ApplicationSearch",
    "ApplicationUpdate",
    "Attachment",
    "Availability",
    "Communication",
    "ExperienceMatch",
    "FormData",
    "InterviewData",
    "InterviewFeedback",
    "QuestionnaireAnswer",
    "RejectionData",
    "SalaryExpectation",
    "ScheduledInterview",
    "ScreeningData",
    "ScreeningDataUpdate",
    "SkillMatchDetail",
    "SkillsMatch",
    "TimelineEntry",
    # Job
    "Job",
    # Resume
    "Resume",
    "ResumeExperience",
    "ResumeSkill",
    # Skill catalog
    "CatalogSkill",
]
