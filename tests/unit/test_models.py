"""
Tests for Pydantic data models in ats_tracker.data.models.
"""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from ats_tracker.data.models import (
    Actor,
    Application,
    ApplicationCreate,
    ApplicationPage,
    ApplicationSearch,
    ApplicationUpdate,
    Job,
    ResumeExperience,
    SalaryExpectation,
    utc_now,
)
from ats_tracker.data.models.base import PyObjectId
from ats_tracker.utils.constants import ApplicationStatus, JobStatus


# ── PyObjectId ──────────────────────────────────────────────────────────────


class TestPyObjectId:
    def test_valid_string(self):
        oid = ObjectId()
        assert PyObjectId.validate(str(oid)) == oid

    def test_passthrough(self):
        oid = ObjectId()
        assert PyObjectId.validate(oid) is oid

    def test_invalid(self):
        with pytest.raises(ValueError):
            PyObjectId.validate("nope")

    def test_json_dump_is_string(self, make_application):
        app = make_application()
        assert app.model_dump(mode="json")["job_id"] == str(app.job_id)
        assert isinstance(app.model_dump()["job_id"], ObjectId)


# ── Application ─────────────────────────────────────────────────────────────


class TestApplication:
    def test_defaults(self):
        app = Application(job_id=ObjectId(), candidate_id="user_1")
        assert app.status == "applied"
        assert app.stage == "screening"
        assert app.timeline == []
        assert app.screening_data.auto_screening_score is None

    def test_needs_an_identity(self):
        with pytest.raises(ValidationError):
            Application(job_id=ObjectId())

    def test_aware_applied_at_is_naive_utc(self):
        app = Application(
            job_id=ObjectId(), candidate_id="user_1", applied_at="2024-05-30T12:00:00Z"
        )
        assert app.applied_at == datetime(2024, 5, 30, 12, 0)
        assert app.days_since_applied >= 1

    def test_rejects_both_identities(self):
        with pytest.raises(ValidationError):
            Application(job_id=ObjectId(), candidate_id="u", external_email="u@example.com")

    def test_email_normalized(self):
        app = Application(job_id=ObjectId(), external_email="  Mixed@Example.COM ")
        assert app.external_email == "mixed@example.com"
        assert app.is_external

    def test_rating_range(self):
        with pytest.raises(ValidationError):
            Application(job_id=ObjectId(), candidate_id="u", rating=6)

    def test_activity_not_before_applied(self):
        now = utc_now()
        with pytest.raises(ValidationError):
            Application(
                job_id=ObjectId(),
                candidate_id="u",
                applied_at=now,
                last_activity_at=now - timedelta(seconds=1),
            )

    def test_display_name(self, make_application):
        assert make_application().candidate_display_name == "user_1"
        external = make_application(candidate_id=None, external_email="x@example.com")
        assert external.candidate_display_name == "x@example.com"

    def test_stale(self, make_application):
        old = utc_now() - timedelta(days=10)
        assert make_application(applied_at=old).is_stale_after(7)
        assert not make_application(applied_at=old, status=ApplicationStatus.HIRED).is_stale_after(7)
        assert not make_application(applied_at=utc_now()).is_stale_after(7)

    def test_days_since_applied_rounds_up(self, make_application):
        app = make_application(applied_at=utc_now() - timedelta(days=2, hours=1))
        assert app.days_since_applied == 3

    def test_mongo_dump_uses_alias(self, make_application):
        app = make_application()
        document = app.model_dump_mongo()
        assert document["_id"] == app.id
        assert "id" not in document

    def test_round_trip_keeps_nested_data(self, state_machine, make_application, recruiter):
        app = state_machine.rate(make_application(), 4, recruiter)
        restored = Application.model_validate(app.model_dump_mongo())
        assert restored.timeline == app.timeline
        assert restored.rating == 4


# ── input schemas ───────────────────────────────────────────────────────────


class TestApplicationCreate:
    def test_identity_required(self):
        with pytest.raises(ValidationError):
            ApplicationCreate(job_id=str(ObjectId()))

    def test_invalid_job_id(self):
        with pytest.raises(ValidationError):
            ApplicationCreate(job_id="bad", candidate_id="u")

    def test_salary_range(self):
        with pytest.raises(ValidationError):
            SalaryExpectation(min=200, max=100)


class TestApplicationUpdate:
    def test_empty_patch(self):
        assert ApplicationUpdate().is_empty
        assert not ApplicationUpdate(assigned_to=None).is_empty

    def test_coerces_status(self):
        assert ApplicationUpdate(status="offered").status == ApplicationStatus.OFFERED

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            ApplicationUpdate(status="ghosted")


class TestApplicationSearch:
    def test_single_status_wrapped(self):
        assert ApplicationSearch(status="screening").status == ["screening"]

    def test_skip(self):
        assert ApplicationSearch(page=3, limit=10).skip == 20

    def test_limit_bounds(self):
        with pytest.raises(ValidationError):
            ApplicationSearch(limit=500)

    def test_total_pages(self):
        assert ApplicationPage(items=[], total=41, page=1, limit=20).total_pages == 3
        assert ApplicationPage(items=[], total=0, page=1, limit=20).total_pages == 0


# ── Job / Resume / Actor ────────────────────────────────────────────────────


class TestJob:
    def test_accepting_when_open(self):
        assert Job(title="Dev", status=JobStatus.OPEN).is_accepting_applications

    def test_not_accepting_when_closed(self):
        assert not Job(title="Dev", status=JobStatus.CLOSED).is_accepting_applications

    def test_not_accepting_after_closing_date(self):
        job = Job(title="Dev", status=JobStatus.OPEN, closing_date=utc_now() - timedelta(days=1))
        assert not job.is_accepting_applications

    def test_skills_stripped(self):
        assert Job(title="Dev", skills_required=[" Python ", "", "  "]).skills_required == ["Python"]


class TestResumeExperience:
    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            ResumeExperience(start_date=datetime(2022, 1, 1), end_date=datetime(2021, 1, 1))

    def test_aware_dates_stored_as_naive_utc(self):
        role = ResumeExperience(
            start_date="2020-01-01T05:00:00+05:00", end_date="2021-01-01T00:00:00Z"
        )
        assert role.start_date == datetime(2020, 1, 1, 0, 0)
        assert role.start_date.tzinfo is None
        assert role.end_date == datetime(2021, 1, 1, 0, 0)

    def test_aware_end_compared_in_utc(self):
        with pytest.raises(ValidationError):
            ResumeExperience(
                start_date=datetime(2020, 1, 1, 12),
                end_date=datetime(2020, 1, 1, 13, tzinfo=timezone(timedelta(hours=5))),
            )


class TestActor:
    def test_system(self):
        actor = Actor.system()
        assert actor.id == "system"
        assert actor.display_name == "System"

    def test_display_name_falls_back(self):
        assert Actor(id="r1").display_name == "System"
