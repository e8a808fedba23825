"""
Job application data models for ATS Tracker.

The Application document carries its own append-only timeline and
communication log, screening results, interview data and rejection data.
Lifecycle changes are applied by the state machine, never by mutating
these models in place.
"""

import math
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ats_tracker.utils.config import get_settings
from ats_tracker.utils.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    SYSTEM_ACTOR_ID,
    SYSTEM_ACTOR_NAME,
    TERMINAL_STATUSES,
    ApplicationSource,
    ApplicationStage,
    ApplicationStatus,
    CommunicationDirection,
    CommunicationType,
    InterviewRecommendation,
    TimelineAction,
)

from .base import (
    BaseDocument,
    EmbeddedModel,
    PyObjectId,
    UTCDateTime,
    new_entry_id,
    utc_now,
)


# -----------------------------------------------------------------------------
# Acting identity
# -----------------------------------------------------------------------------


class Actor(EmbeddedModel):
    """Identity performing an operation, supplied by the caller after authorization."""

    id: str
    name: Optional[str] = None
    role: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or SYSTEM_ACTOR_NAME

    @classmethod
    def system(cls) -> "Actor":
        return cls(id=SYSTEM_ACTOR_ID, name=SYSTEM_ACTOR_NAME, role="system")


# -----------------------------------------------------------------------------
# Audit trail
# -----------------------------------------------------------------------------


class TimelineEntry(EmbeddedModel):
    """One append-only audit record."""

    id: str = Field(default_factory=lambda: new_entry_id("timeline"))
    action: TimelineAction
    description: str
    performed_by: str
    performed_by_name: str = SYSTEM_ACTOR_NAME
    timestamp: UTCDateTime = Field(default_factory=utc_now)
    metadata: dict[str, Any] = Field(default_factory=dict)


class Communication(EmbeddedModel):
    """Inbound or outbound contact with the candidate."""

    id: str = Field(default_factory=lambda: new_entry_id("comm"))
    type: CommunicationType
    direction: CommunicationDirection
    subject: Optional[str] = None
    content: str
    sent_by: Optional[str] = None
    sent_by_name: Optional[str] = None
    timestamp: UTCDateTime = Field(default_factory=utc_now)
    attachments: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Submission form
# -----------------------------------------------------------------------------


class QuestionnaireAnswer(EmbeddedModel):
    question: str
    answer: Any
    type: str = "text"


class Attachment(EmbeddedModel):
    name: str
    url: str
    type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)


class FormData(EmbeddedModel):
    """Free-form data captured by the application form."""

    custom_fields: dict[str, Any] = Field(default_factory=dict)
    questionnaire: list[QuestionnaireAnswer] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Screening
# -----------------------------------------------------------------------------


class SkillMatchDetail(EmbeddedModel):
    """A required skill and the candidate skill that satisfied it."""

    skill: str
    matched_skill: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    category: Optional[str] = None


class SkillsMatch(EmbeddedModel):
    required: list[str] = Field(default_factory=list)
    matched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    additional: list[str] = Field(default_factory=list)
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    matches: list[SkillMatchDetail] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ExperienceMatch(EmbeddedModel):
    required: str = "Not specified"
    candidate: str = "0 years"
    candidate_years: float = Field(default=0.0, ge=0.0)
    required_years: Optional[int] = None
    score: int = Field(default=100, ge=0, le=100)


class SalaryExpectation(EmbeddedModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"
    negotiable: bool = False

    @model_validator(mode="after")
    def validate_range(self) -> "SalaryExpectation":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Salary min cannot exceed max")
        return self


class Availability(EmbeddedModel):
    start_date: Optional[UTCDateTime] = None
    notice_period: Optional[str] = None
    relocate: Optional[bool] = None


class ScreeningData(EmbeddedModel):
    """Auto-screening results plus candidate-supplied expectations."""

    auto_screening_score: Optional[int] = Field(default=None, ge=0, le=100)
    skills_match: Optional[SkillsMatch] = None
    experience_match: Optional[ExperienceMatch] = None
    salary_expectation: Optional[SalaryExpectation] = None
    availability: Optional[Availability] = None
    screened_at: Optional[UTCDateTime] = None


class ScreeningDataUpdate(BaseModel):
    """Partial screening data; only fields explicitly set are merged."""

    auto_screening_score: Optional[int] = Field(default=None, ge=0, le=100)
    salary_expectation: Optional[SalaryExpectation] = None
    availability: Optional[Availability] = None


# -----------------------------------------------------------------------------
# Interviews and rejection
# -----------------------------------------------------------------------------


class ScheduledInterview(EmbeddedModel):
    id: str = Field(default_factory=lambda: new_entry_id("interview"))
    type: str = Field(..., min_length=1)
    scheduled_at: UTCDateTime
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    interviewers: list[str] = Field(default_factory=list)
    location: Optional[str] = None
    status: Literal["scheduled", "completed", "cancelled"] = "scheduled"


class InterviewFeedback(EmbeddedModel):
    """Per-interviewer verdict. Rating is range-checked by the state machine."""

    interview_id: Optional[str] = None
    interviewer: str
    rating: int
    feedback: str = ""
    recommendation: InterviewRecommendation
    submitted_at: UTCDateTime = Field(default_factory=utc_now)


class InterviewData(EmbeddedModel):
    scheduled_interviews: list[ScheduledInterview] = Field(default_factory=list)
    feedback: list[InterviewFeedback] = Field(default_factory=list)


class RejectionData(EmbeddedModel):
    reason: str
    feedback: Optional[str] = None
    rejected_by: str = SYSTEM_ACTOR_ID
    rejected_at: UTCDateTime = Field(default_factory=utc_now)
    send_feedback: bool = False


# -----------------------------------------------------------------------------
# Application document
# -----------------------------------------------------------------------------


class Application(BaseDocument):
    """
    A candidate's application to a job.

    Identified either by a platform user id or by an external email, never
    both. Created as applied/screening and never deleted.
    """

    job_id: PyObjectId
    candidate_id: Optional[str] = None
    external_email: Optional[EmailStr] = None
    external_name: Optional[str] = None

    resume_id: Optional[PyObjectId] = None
    cover_letter: Optional[str] = None
    source: ApplicationSource = ApplicationSource.DIRECT
    form_data: FormData = Field(default_factory=FormData)
    notes: Optional[str] = None

    # Lifecycle
    status: ApplicationStatus = ApplicationStatus.APPLIED
    stage: ApplicationStage = ApplicationStage.SCREENING
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    assigned_to: Optional[str] = None

    applied_at: UTCDateTime = Field(default_factory=utc_now)
    last_activity_at: UTCDateTime = Field(default_factory=utc_now)

    # Append-only logs
    timeline: list[TimelineEntry] = Field(default_factory=list)
    communications: list[Communication] = Field(default_factory=list)

    screening_data: ScreeningData = Field(default_factory=ScreeningData)
    interview_data: InterviewData = Field(default_factory=InterviewData)
    rejection_data: Optional[RejectionData] = None

    @field_validator("external_email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def validate_identity(self) -> "Application":
        """Exactly one of candidate_id / external_email must be set."""
        has_candidate = bool(self.candidate_id)
        has_external = bool(self.external_email)
        if has_candidate == has_external:
            raise ValueError(
                "Application must have exactly one of candidate_id or external_email"
            )
        return self

    @model_validator(mode="after")
    def validate_activity(self) -> "Application":
        if self.last_activity_at < self.applied_at:
            raise ValueError("last_activity_at cannot precede applied_at")
        return self

    # -------------------------------------------------------------------------
    # Derived flags
    # -------------------------------------------------------------------------

    @property
    def is_external(self) -> bool:
        """Submitted without a platform account."""
        return not self.candidate_id and bool(self.external_email)

    @property
    def candidate_display_name(self) -> str:
        if self.is_external:
            return self.external_name or str(self.external_email)
        return self.candidate_id or "Unknown Candidate"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def days_since_applied(self) -> int:
        return _days_between(self.applied_at, utc_now())

    @property
    def days_since_last_activity(self) -> int:
        return _days_between(self.last_activity_at, utc_now())

    @property
    def is_stale(self) -> bool:
        """No activity for longer than the configured window while still open."""
        return self.is_stale_after(get_settings().screening.stale_after_days)

    def is_stale_after(self, days: int) -> bool:
        return self.days_since_last_activity > days and not self.is_terminal

    class Settings:
        """MongoDB collection settings."""

        name = "applications"
        indexes = [
            "job_id",
            "candidate_id",
            "external_email",
            "status",
            "stage",
            "assigned_to",
            "applied_at",
            "last_activity_at",
        ]


def _days_between(start: datetime, end: datetime) -> int:
    """Whole days between two timestamps, rounded up."""
    return math.ceil(abs((end - start).total_seconds()) / 86400)


# -----------------------------------------------------------------------------
# Input schemas
# -----------------------------------------------------------------------------


class ApplicationCreate(BaseModel):
    """Schema for submitting a new application."""

    job_id: PyObjectId
    candidate_id: Optional[str] = None
    external_email: Optional[EmailStr] = None
    external_name: Optional[str] = Field(default=None, max_length=200)
    resume_id: Optional[PyObjectId] = None
    cover_letter: Optional[str] = None
    source: ApplicationSource = ApplicationSource.DIRECT
    form_data: FormData = Field(default_factory=FormData)
    salary_expectation: Optional[SalaryExpectation] = None
    availability: Optional[Availability] = None

    @field_validator("external_email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def validate_identity(self) -> "ApplicationCreate":
        if bool(self.candidate_id) == bool(self.external_email):
            raise ValueError(
                "Provide exactly one of candidate_id or external_email"
            )
        return self


class ApplicationUpdate(BaseModel):
    """
    Patch applied by update/bulk_update.

    Only explicitly set fields are applied; setting ``assigned_to`` to None
    unassigns.
    """

    status: Optional[ApplicationStatus] = None
    stage: Optional[ApplicationStage] = None
    rating: Optional[int] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    screening_data: Optional[ScreeningDataUpdate] = None

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


# -----------------------------------------------------------------------------
# Query schemas
# -----------------------------------------------------------------------------


class ApplicationSearch(BaseModel):
    """Filters, sorting and pagination for application listings."""

    job_id: Optional[PyObjectId] = None
    candidate_id: Optional[str] = None
    status: Optional[list[ApplicationStatus]] = None
    stage: Optional[list[ApplicationStage]] = None
    assigned_to: Optional[str] = None
    source: Optional[ApplicationSource] = None
    min_rating: Optional[int] = Field(default=None, ge=1, le=5)
    applied_after: Optional[UTCDateTime] = None
    applied_before: Optional[UTCDateTime] = None
    search: Optional[str] = None

    sort_by: Literal["applied_at", "last_activity_at", "rating", "candidate_name"] = "applied_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("status", "stage", mode="before")
    @classmethod
    def wrap_single(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class ApplicationPage(BaseModel):
    """One page of search results."""

    items: list[Application]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
