"""
Shared test fixtures for the ATS Tracker test suite.

Sets environment variables before any ats_tracker imports to prevent config
failures, then provides factory fixtures for the Pydantic models and
in-memory stand-ins for the orchestrator's collaborators.
"""

import os

# === Set environment BEFORE any ats_tracker imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "ats_tracker_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

from datetime import datetime, timedelta
from typing import Any, Optional

import pytest
from bson import ObjectId
from bson.errors import InvalidId

from ats_tracker.core.matching import SkillMatcher
from ats_tracker.core.screening import ScreeningScorer
from ats_tracker.core.tracking import ApplicationStateMachine, ApplicationTrackingOrchestrator
from ats_tracker.data.models import (
    Actor,
    Application,
    ApplicationSearch,
    CatalogSkill,
    Job,
    Resume,
    ResumeExperience,
    ResumeSkill,
)
from ats_tracker.utils.constants import (
    DEFAULT_SCREENING_WEIGHTS,
    ApplicationStage,
    ApplicationStatus,
    ExperienceLevel,
    JobStatus,
)

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0)


def _object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class InMemoryApplicationStore:
    """Application store keeping records in a dict keyed by ObjectId."""

    def __init__(self):
        self.records: dict[ObjectId, Application] = {}
        self.saves = 0
        self.fail_on: set[ObjectId] = set()

    def add(self, application: Application) -> Application:
        if application.id is None:
            application = application.model_copy(update={"id": ObjectId()})
        self.records[application.id] = application
        return application

    async def get_by_id_async(self, id_value):
        object_id = _object_id(id_value)
        if object_id is None:
            return None
        return self.records.get(object_id)

    async def save_async(self, application: Application) -> Application:
        if application.id in self.fail_on:
            raise RuntimeError("write timed out")
        if application.id is None:
            application = application.model_copy(update={"id": ObjectId()})
        elif application.id not in self.records:
            raise LookupError(f"applications document {application.id} does not exist")
        self.records[application.id] = application
        self.saves += 1
        return application

    async def find_existing_async(self, job_id, candidate_id=None, external_email=None):
        for application in self.records.values():
            if application.job_id != job_id:
                continue
            if candidate_id and application.candidate_id == candidate_id:
                return application
            if external_email and application.external_email == external_email.lower():
                return application
        return None

    async def find_many_async(self, search: ApplicationSearch):
        items = [
            application
            for application in self.records.values()
            if (search.job_id is None or application.job_id == search.job_id)
            and (not search.status or application.status in search.status)
        ]
        items.sort(key=lambda a: a.applied_at, reverse=search.sort_order == "desc")
        return items[search.skip : search.skip + search.limit], len(items)


class InMemoryLookup:
    """Job or resume lookup; ``error`` makes every call raise."""

    def __init__(self, items=(), error: Optional[Exception] = None):
        self.items = {item.id: item for item in items}
        self.error = error

    def add(self, item):
        self.items[item.id] = item
        return item

    async def get_by_id_async(self, id_value):
        if self.error is not None:
            raise self.error
        return self.items.get(_object_id(id_value))


class InMemorySkillCatalog:
    def __init__(self, skills=(), error: Optional[Exception] = None):
        self.skills = list(skills)
        self.error = error

    async def list_skills_async(self):
        if self.error is not None:
            raise self.error
        return list(self.skills)


class RecordingEventSink:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append((event, payload))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FailingEventSink:
    def publish(self, event: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("broker unavailable")


@pytest.fixture
def application_store():
    return InMemoryApplicationStore()


@pytest.fixture
def job_lookup():
    return InMemoryLookup()


@pytest.fixture
def resume_lookup():
    return InMemoryLookup()


@pytest.fixture
def skill_catalog():
    return InMemorySkillCatalog(
        [
            CatalogSkill(name="Python", category="programming_languages"),
            CatalogSkill(name="Django", category="frameworks"),
        ]
    )


@pytest.fixture
def event_sink():
    return RecordingEventSink()


@pytest.fixture
def failing_event_sink():
    return FailingEventSink()


# ---------------------------------------------------------------------------
# Factory fixtures for Pydantic models
# ---------------------------------------------------------------------------


@pytest.fixture
def make_job():
    """Factory that returns a callable to build open Job documents."""

    def _factory(
        status: JobStatus = JobStatus.OPEN,
        skills_required: Optional[list[str]] = None,
        experience_level: Optional[ExperienceLevel] = ExperienceLevel.MID,
        closing_date: Optional[datetime] = None,
        **kwargs,
    ) -> Job:
        if skills_required is None:
            skills_required = ["Python", "Django", "PostgreSQL"]
        return Job(
            id=ObjectId(),
            title="Backend Engineer",
            company_name="Acme Corp",
            status=status,
            skills_required=skills_required,
            experience_level=experience_level,
            closing_date=closing_date,
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_resume():
    """Factory that returns a callable to build Resume documents."""

    def _factory(
        user_id: str = "user_1",
        skills: Optional[list[str]] = None,
        experience: Optional[list[ResumeExperience]] = None,
        estimated_ats_score: Optional[float] = 80.0,
        **kwargs,
    ) -> Resume:
        if skills is None:
            skills = ["Python", "Django", "Postgres"]
        if experience is None:
            experience = [
                ResumeExperience(
                    company="TechCorp",
                    position="Software Engineer",
                    start_date=FIXED_NOW - timedelta(days=4 * 365),
                    current=True,
                )
            ]
        return Resume(
            id=ObjectId(),
            user_id=user_id,
            skills=[ResumeSkill(name=name) for name in skills],
            experience=experience,
            estimated_ats_score=estimated_ats_score,
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_application():
    """Factory that returns a callable to build persisted-looking Applications."""

    def _factory(
        status: ApplicationStatus = ApplicationStatus.APPLIED,
        stage: ApplicationStage = ApplicationStage.SCREENING,
        candidate_id: Optional[str] = "user_1",
        external_email: Optional[str] = None,
        job_id: Optional[ObjectId] = None,
        applied_at: datetime = FIXED_NOW - timedelta(days=2),
        last_activity_at: Optional[datetime] = None,
        **kwargs,
    ) -> Application:
        return Application(
            id=kwargs.pop("id", ObjectId()),
            job_id=job_id or ObjectId(),
            candidate_id=candidate_id,
            external_email=external_email,
            status=status,
            stage=stage,
            applied_at=applied_at,
            last_activity_at=last_activity_at or applied_at,
            created_at=applied_at,
            updated_at=applied_at,
            **kwargs,
        )

    return _factory


# ---------------------------------------------------------------------------
# Actors and engine components
# ---------------------------------------------------------------------------


@pytest.fixture
def recruiter():
    return Actor(id="recruiter_1", name="Rita Recruiter", role="recruiter")


@pytest.fixture
def candidate_actor():
    return Actor(id="user_1", name="Casey Candidate", role="candidate")


@pytest.fixture
def state_machine(clock):
    return ApplicationStateMachine(clock=clock)


@pytest.fixture
def skill_matcher():
    return SkillMatcher(threshold=0.70)


@pytest.fixture
def scorer(skill_matcher):
    return ScreeningScorer(weights=DEFAULT_SCREENING_WEIGHTS, skill_matcher=skill_matcher)


@pytest.fixture
def orchestrator(
    application_store,
    job_lookup,
    resume_lookup,
    skill_catalog,
    event_sink,
    scorer,
    clock,
):
    return ApplicationTrackingOrchestrator(
        applications=application_store,
        jobs=job_lookup,
        resumes=resume_lookup,
        skill_catalog=skill_catalog,
        events=event_sink,
        scorer=scorer,
        clock=clock,
    )
