"""
Resume model.

Resumes are parsed elsewhere; the engine only consumes the declared skills,
the work history and the externally computed ATS quality estimate.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseDocument, EmbeddedModel, UTCDateTime


class ResumeSkill(EmbeddedModel):
    """A skill declared on a resume."""

    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    level: Optional[str] = None


class ResumeExperience(EmbeddedModel):
    """One role in the candidate's work history."""

    company: Optional[str] = None
    position: Optional[str] = None
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    current: bool = False

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: Optional[datetime], info) -> Optional[datetime]:
        start = info.data.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError("end_date must not precede start_date")
        return v


class Resume(BaseDocument):
    """Parsed resume owned by a platform user."""

    user_id: str
    title: Optional[str] = None
    skills: list[ResumeSkill] = Field(default_factory=list)
    experience: list[ResumeExperience] = Field(default_factory=list)
    estimated_ats_score: Optional[float] = Field(default=None, ge=0, le=100)

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.skills]

    class Settings:
        """MongoDB collection settings."""

        name = "resumes"
        indexes = ["user_id", "created_at"]
