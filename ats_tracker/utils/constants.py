"""
Application-wide constants for ATS Tracker.

Lifecycle enums, transition tables and scoring constants used by the
state machine, the skill matcher and the screening scorer.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "ATS-Tracker"
APP_DISPLAY_NAME: Final[str] = "Application Tracking & Auto-Screening Engine"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Enums
# =============================================================================


class ApplicationStatus(str, Enum):
    """Coarse lifecycle status of an application."""

    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEWING = "interviewing"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class ApplicationStage(str, Enum):
    """Fine-grained pipeline position within the interview process."""

    SCREENING = "screening"
    PHONE_SCREEN = "phone_screen"
    TECHNICAL = "technical"
    ONSITE = "onsite"
    FINAL = "final"
    OFFER = "offer"
    HIRED = "hired"


class ApplicationSource(str, Enum):
    """Channel an application arrived through."""

    DIRECT = "direct"
    REFERRAL = "referral"
    LINKEDIN = "linkedin"
    JOB_BOARD = "job_board"
    CAREER_PAGE = "career_page"
    OTHER = "other"


class JobStatus(str, Enum):
    """Status of a job posting."""

    DRAFT = "draft"
    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"
    FILLED = "filled"


class ExperienceLevel(str, Enum):
    """Seniority required by a job posting."""

    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class CommunicationType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    MESSAGE = "message"
    MEETING = "meeting"


class CommunicationDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class InterviewRecommendation(str, Enum):
    HIRE = "hire"
    NO_HIRE = "no_hire"
    MAYBE = "maybe"


class TimelineAction(str, Enum):
    """Actions recorded in an application timeline."""

    APPLICATION_SUBMITTED = "application_submitted"
    STATUS_CHANGED = "status_changed"
    STAGE_CHANGED = "stage_changed"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    RATED = "rated"
    ASSIGNED = "assigned"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_FEEDBACK = "interview_feedback"
    COMMUNICATION_ADDED = "communication_added"
    NOTES_UPDATED = "notes_updated"
    SCREENING_UPDATED = "screening_updated"
    SCREENING_COMPLETED = "screening_completed"


class ApplicationEvent(str, Enum):
    """Notifications published to the event sink."""

    CREATED = "application.created"
    UPDATED = "application.updated"
    BULK_UPDATED = "applications.bulk.updated"
    REJECTED = "application.rejected"
    WITHDRAWN = "application.withdrawn"
    SCREENED = "application.screened"
    INTERVIEW_SCHEDULED = "interview.scheduled"
    INTERVIEW_FEEDBACK_ADDED = "interview.feedback.added"
    COMMUNICATION_ADDED = "application.communication.added"


# =============================================================================
# Lifecycle Tables
# =============================================================================

TERMINAL_STATUSES: Final[frozenset[str]] = frozenset({"hired", "rejected", "withdrawn"})

# Allowed successors for the generic status transition.
# Withdrawal and rejection have dedicated operations outside this table.
STATUS_TRANSITIONS: Final[dict[ApplicationStatus, tuple[ApplicationStatus, ...]]] = {
    ApplicationStatus.APPLIED: (ApplicationStatus.SCREENING, ApplicationStatus.REJECTED),
    ApplicationStatus.SCREENING: (ApplicationStatus.INTERVIEWING, ApplicationStatus.REJECTED),
    ApplicationStatus.INTERVIEWING: (ApplicationStatus.OFFERED, ApplicationStatus.REJECTED),
    ApplicationStatus.OFFERED: (ApplicationStatus.HIRED, ApplicationStatus.REJECTED),
    ApplicationStatus.HIRED: (),
    ApplicationStatus.REJECTED: (),
    ApplicationStatus.WITHDRAWN: (),
}

# Linear pipeline; each stage has exactly one successor
STAGE_PIPELINE: Final[tuple[ApplicationStage, ...]] = (
    ApplicationStage.SCREENING,
    ApplicationStage.PHONE_SCREEN,
    ApplicationStage.TECHNICAL,
    ApplicationStage.ONSITE,
    ApplicationStage.FINAL,
    ApplicationStage.OFFER,
    ApplicationStage.HIRED,
)


# =============================================================================
# Scoring Constants
# =============================================================================

DEFAULT_SKILL_MATCH_THRESHOLD: Final[float] = 0.70
SUBSTRING_SIMILARITY: Final[float] = 0.8

# Years of experience implied by each required level
EXPERIENCE_LEVEL_YEARS: Final[dict[str, int]] = {
    "entry": 0,
    "junior": 1,
    "mid": 3,
    "senior": 5,
    "lead": 7,
    "executive": 10,
}

# (fraction of required years, score), checked in order
EXPERIENCE_SCORE_BANDS: Final[tuple[tuple[float, int], ...]] = (
    (1.0, 100),
    (0.8, 80),
    (0.6, 60),
    (0.4, 40),
)
EXPERIENCE_SCORE_FLOOR: Final[int] = 20

DEFAULT_SCREENING_WEIGHTS: Final[dict[str, float]] = {
    "skills": 40.0,
    "experience": 30.0,
    "resume_quality": 20.0,
    "completeness": 10.0,
}

# Completeness points, capped at COMPLETENESS_MAX
COMPLETENESS_POINTS: Final[dict[str, int]] = {
    "cover_letter": 5,
    "questionnaire": 3,
    "attachments": 2,
}
COMPLETENESS_MAX: Final[int] = 10

# Minimum score for each skill-match recommendation band
SKILL_MATCH_BANDS: Final[dict[str, float]] = {
    "excellent": 80,
    "good": 60,
    "moderate": 40,
}

RECOMMENDATION_CALLOUT_LIMIT: Final[int] = 3

DAYS_PER_YEAR: Final[float] = 365.0


# =============================================================================
# Query Defaults
# =============================================================================

DEFAULT_PAGE: Final[int] = 1
DEFAULT_PAGE_SIZE: Final[int] = 20
MAX_PAGE_SIZE: Final[int] = 100

SYSTEM_ACTOR_ID: Final[str] = "system"
SYSTEM_ACTOR_NAME: Final[str] = "System"
EXTERNAL_CANDIDATE_ACTOR_ID: Final[str] = "external_candidate"
