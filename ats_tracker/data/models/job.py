"""
Job posting model.

Only the fields the tracking engine reads are modeled: acceptance state,
required skills and the required experience level.
"""

from typing import Optional

from pydantic import Field, field_validator

from ats_tracker.utils.constants import ExperienceLevel, JobStatus

from .base import BaseDocument, UTCDateTime, utc_now


class Job(BaseDocument):
    """A job posting applications are submitted against."""

    title: str = Field(..., min_length=1, max_length=200)
    company_name: Optional[str] = None
    description: Optional[str] = None
    organization_id: Optional[str] = None

    status: JobStatus = JobStatus.DRAFT
    skills_required: list[str] = Field(default_factory=list)
    experience_level: Optional[ExperienceLevel] = None
    posted_date: Optional[UTCDateTime] = None
    closing_date: Optional[UTCDateTime] = None

    @field_validator("skills_required")
    @classmethod
    def strip_skills(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]

    @property
    def is_accepting_applications(self) -> bool:
        """Open and not past its closing date."""
        if self.status != JobStatus.OPEN:
            return False
        if self.closing_date and self.closing_date < utc_now():
            return False
        return True

    class Settings:
        """MongoDB collection settings."""

        name = "jobs"
        indexes = [
            "status",
            "organization_id",
            "created_at",
        ]
