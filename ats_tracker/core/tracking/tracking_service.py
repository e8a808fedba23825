"""
Application tracking orchestrator.

The only component that reads and writes application records. Each
operation loads the record, runs it through the state machine (and the
screening scorer when a resume is involved), persists the result with a
single whole-document write and then publishes an event. Event delivery
failures are logged and never undo a committed change.

Concurrent writers to the same record are not detected: the last saved
document wins, including its timeline.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from ats_tracker.core.exceptions import (
    ApplicationNotFound,
    ApplicationTrackingError,
    DuplicateApplication,
    ExternalDependencyFailure,
    Forbidden,
    JobNotAcceptingApplications,
    JobNotFound,
    ResumeNotFound,
)
from ats_tracker.core.screening import ScreeningScorer, get_screening_scorer
from ats_tracker.data.models import (
    Actor,
    Application,
    ApplicationCreate,
    ApplicationPage,
    ApplicationSearch,
    ApplicationUpdate,
    Availability,
    Communication,
    ExperienceMatch,
    InterviewFeedback,
    Job,
    Resume,
    SalaryExpectation,
    ScheduledInterview,
    ScreeningData,
    SkillsMatch,
    TimelineEntry,
    utc_now,
)
from ats_tracker.utils.constants import ApplicationEvent
from ats_tracker.utils.logger import get_logger

from .events import LoggingEventSink
from .interfaces import (
    ApplicationStore,
    EventSink,
    JobLookup,
    ResumeLookup,
    SkillCatalog,
)
from .state_machine import ApplicationStateMachine

logger = get_logger(__name__)


@dataclass
class BulkUpdateResult:
    """Outcome of a partially tolerant bulk update."""

    updated_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class TimelineView:
    """Timeline and communications, newest first."""

    application_id: str
    timeline: list[TimelineEntry]
    communications: list[Communication]


@dataclass
class ScreeningResults:
    """Read-only view of an application's screening."""

    application_id: str
    auto_screening_score: int
    computed_on_read: bool
    skills_match: Optional[SkillsMatch] = None
    experience_match: Optional[ExperienceMatch] = None
    salary_expectation: Optional[SalaryExpectation] = None
    availability: Optional[Availability] = None
    recommendations: list[str] = field(default_factory=list)


class ApplicationTrackingOrchestrator:
    """
    Coordinates application lifecycle operations.

    Args:
        applications: Record store for applications
        jobs: Job lookup
        resumes: Resume lookup
        skill_catalog: Optional catalog used to tag matched skills
        events: Event sink; defaults to the audit log
        state_machine: Lifecycle reducers
        scorer: Screening scorer
        clock: Source of the current time
    """

    def __init__(
        self,
        applications: ApplicationStore,
        jobs: JobLookup,
        resumes: ResumeLookup,
        skill_catalog: Optional[SkillCatalog] = None,
        events: Optional[EventSink] = None,
        state_machine: Optional[ApplicationStateMachine] = None,
        scorer: Optional[ScreeningScorer] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.applications = applications
        self.jobs = jobs
        self.resumes = resumes
        self.skill_catalog = skill_catalog
        self.events = events or LoggingEventSink()
        self.clock = clock
        self.state_machine = state_machine or ApplicationStateMachine(clock=clock)
        self.scorer = scorer or get_screening_scorer()

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def create(
        self, data: ApplicationCreate, actor: Optional[Actor] = None
    ) -> Application:
        """
        Submit a new application.

        The job must exist and be open, and the candidate (or external email)
        must not have applied to it already. When a resume is supplied the
        record is screened before its first write.

        Raises:
            JobNotFound: The job does not exist.
            ExternalDependencyFailure: The job lookup failed.
            JobNotAcceptingApplications: The job is not open.
            DuplicateApplication: The applicant already applied.
            ResumeNotFound: The supplied resume does not exist.
            Forbidden: The resume belongs to another registered candidate.
        """
        try:
            job = await self._require_job(data.job_id)
            if not job.is_accepting_applications:
                raise JobNotAcceptingApplications(job.id, job.status)

            existing = await self.applications.find_existing_async(
                job.id,
                candidate_id=data.candidate_id,
                external_email=data.external_email,
            )
            if existing is not None:
                raise DuplicateApplication(job.id, data.candidate_id or data.external_email)

            resume = None
            if data.resume_id is not None:
                resume = await self._resume_for_submission(data)

            now = self.clock()
            application = Application(
                job_id=job.id,
                candidate_id=data.candidate_id,
                external_email=data.external_email,
                external_name=data.external_name,
                resume_id=data.resume_id,
                cover_letter=data.cover_letter,
                source=data.source,
                form_data=data.form_data,
                screening_data=ScreeningData(
                    salary_expectation=data.salary_expectation,
                    availability=data.availability,
                ),
                applied_at=now,
                last_activity_at=now,
                created_at=now,
                updated_at=now,
            )

            if actor is None and data.candidate_id:
                actor = Actor(id=data.candidate_id, role="candidate")
            application = self.state_machine.submit(application, actor)

            if resume is not None:
                catalog = await self._load_catalog()
                outcome = self.scorer.screen(application, job, resume, catalog, now)
                application = self.state_machine.record_screening(application, outcome)

            saved = await self.applications.save_async(application)
        except ApplicationTrackingError as e:
            logger.error(f"Failed to create application for job {data.job_id}: {e}")
            raise

        logger.info(f"Application created: {saved.id} for job {saved.job_id}")
        self._publish(
            ApplicationEvent.CREATED,
            saved,
            screened=saved.screening_data.auto_screening_score is not None,
        )
        return saved

    async def _resume_for_submission(self, data: ApplicationCreate) -> Optional[Resume]:
        """Resume to screen at creation; a failed lookup skips screening."""
        try:
            resume = await self.resumes.get_by_id_async(data.resume_id)
        except Exception as e:
            failure = ExternalDependencyFailure("resume", e)
            logger.warning(f"Skipping initial screening: {failure}")
            return None

        if resume is None:
            raise ResumeNotFound(data.resume_id)
        self._check_resume_owner(resume, data.candidate_id)
        return resume

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get(self, application_id: str | ObjectId) -> Application:
        """Load an application or raise ApplicationNotFound."""
        application = await self.applications.get_by_id_async(application_id)
        if application is None:
            raise ApplicationNotFound(application_id)
        return application

    async def search(self, search: Optional[ApplicationSearch] = None) -> ApplicationPage:
        """Filter, sort and paginate applications."""
        search = search or ApplicationSearch()
        items, total = await self.applications.find_many_async(search)
        return ApplicationPage(items=items, total=total, page=search.page, limit=search.limit)

    async def get_timeline(self, application_id: str | ObjectId) -> TimelineView:
        """Timeline and communications in reverse chronological order."""
        application = await self.get(application_id)
        return TimelineView(
            application_id=str(application.id),
            timeline=sorted(application.timeline, key=lambda e: e.timestamp, reverse=True),
            communications=sorted(
                application.communications, key=lambda c: c.timestamp, reverse=True
            ),
        )

    async def get_screening_results(self, application_id: str | ObjectId) -> ScreeningResults:
        """
        Screening summary with reviewer recommendations.

        When no score is stored yet it is computed from the stored
        sub-results for this view only; nothing is written.
        """
        application = await self.get(application_id)
        data = application.screening_data
        score = data.auto_screening_score
        computed = False
        if score is None:
            resume = await self._load_resume_degraded(application.resume_id)
            score = self.scorer.score_existing(application, resume)
            computed = True

        return ScreeningResults(
            application_id=str(application.id),
            auto_screening_score=score,
            computed_on_read=computed,
            skills_match=data.skills_match,
            experience_match=data.experience_match,
            salary_expectation=data.salary_expectation,
            availability=data.availability,
            recommendations=self.scorer.recommendations(application, score),
        )

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    async def update(
        self,
        application_id: str | ObjectId,
        patch: ApplicationUpdate,
        actor: Actor,
    ) -> Application:
        """
        Apply a combined patch in a fixed order.

        Status, then stage, then rating, then assignment, then notes, then
        screening data. A stage derived from the status change can be
        advanced further by an explicit stage in the same patch. Values equal
        to the current ones are skipped; a patch that changes nothing is not
        written.
        """
        saved, changed = await self._update(application_id, patch, actor)
        if changed:
            self._publish(ApplicationEvent.UPDATED, saved, fields=sorted(patch.model_fields_set))
        return saved

    async def _update(
        self,
        application_id: str | ObjectId,
        patch: ApplicationUpdate,
        actor: Actor,
    ) -> tuple[Application, bool]:
        try:
            application = await self.get(application_id)
            updated = self.apply_patch(application, patch, actor)
            if updated is application:
                logger.debug(f"No changes for application {application_id}")
                return application, False
            saved = await self._save(updated)
        except ApplicationTrackingError as e:
            logger.error(f"Failed to update application {application_id}: {e}")
            raise

        logger.info(f"Application updated: {saved.id} ({saved.status}/{saved.stage})")
        return saved, True

    def apply_patch(
        self, application: Application, patch: ApplicationUpdate, actor: Actor
    ) -> Application:
        """Run a patch through the state machine without persisting it."""
        machine = self.state_machine
        fields = patch.model_fields_set
        result = application

        if "status" in fields and patch.status is not None and patch.status != result.status:
            result = machine.update_status(result, patch.status, actor, notes=patch.notes)

        if "stage" in fields and patch.stage is not None and patch.stage != result.stage:
            result = machine.update_stage(result, patch.stage, actor)

        if "rating" in fields and patch.rating is not None and patch.rating != result.rating:
            result = machine.rate(result, patch.rating, actor)

        if "assigned_to" in fields and patch.assigned_to != result.assigned_to:
            result = machine.assign_to(result, patch.assigned_to, actor)

        if "notes" in fields and patch.notes != result.notes:
            result = machine.update_notes(result, patch.notes, actor)

        if patch.screening_data is not None and patch.screening_data.model_fields_set:
            result = machine.merge_screening_data(result, patch.screening_data, actor)

        return result

    async def bulk_update(
        self,
        application_ids: Iterable[str | ObjectId],
        patch: ApplicationUpdate,
        actor: Actor,
    ) -> BulkUpdateResult:
        """
        Apply the same patch to many applications.

        Each record commits independently. A failure on one record is
        recorded in ``errors`` and the batch continues; so is a record the
        patch would leave unchanged, since nothing is written for it.
        """
        result = BulkUpdateResult()
        for application_id in application_ids:
            try:
                _, changed = await self._update(application_id, patch, actor)
            except ApplicationTrackingError as e:
                result.errors.append(f"Application {application_id}: {e}")
                continue
            except Exception as e:
                logger.exception(f"Unexpected error updating application {application_id}")
                result.errors.append(f"Application {application_id}: {e}")
                continue
            if not changed:
                result.errors.append(f"Application {application_id}: no changes to apply")
                continue
            result.updated_count += 1

        logger.info(
            f"Bulk update: {result.updated_count} updated, {len(result.errors)} failed"
        )
        self._publish_raw(
            ApplicationEvent.BULK_UPDATED,
            {
                "updated_count": result.updated_count,
                "error_count": len(result.errors),
                "fields": sorted(patch.model_fields_set),
                "performed_by": actor.id,
            },
        )
        return result

    # -------------------------------------------------------------------------
    # Record-level operations
    # -------------------------------------------------------------------------

    async def reject(
        self,
        application_id: str | ObjectId,
        reason: str,
        actor: Optional[Actor] = None,
        feedback: Optional[str] = None,
        send_feedback: bool = False,
    ) -> Application:
        """Reject from any status; always appends a timeline entry."""
        saved = await self._mutate(
            application_id,
            "reject",
            lambda app: self.state_machine.reject(
                app, reason, feedback=feedback, actor=actor, send_feedback=send_feedback
            ),
        )
        self._publish(
            ApplicationEvent.REJECTED, saved, reason=reason, send_feedback=send_feedback
        )
        return saved

    async def withdraw(
        self,
        application_id: str | ObjectId,
        actor: Actor,
        reason: Optional[str] = None,
    ) -> Application:
        """
        Candidate-initiated withdrawal.

        Raises:
            Forbidden: The actor is not the applicant.
            InvalidTransition: The application is already closed.
        """

        def _withdraw(app: Application) -> Application:
            if not self._is_applicant(app, actor):
                raise Forbidden("Only the candidate can withdraw an application")
            return self.state_machine.withdraw(app, reason, actor)

        saved = await self._mutate(application_id, "withdraw", _withdraw)
        self._publish(ApplicationEvent.WITHDRAWN, saved, reason=reason)
        return saved

    async def rate(
        self,
        application_id: str | ObjectId,
        rating: int,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Application:
        saved = await self._mutate(
            application_id,
            "rate",
            lambda app: self.state_machine.rate(app, rating, actor, notes),
        )
        self._publish(ApplicationEvent.UPDATED, saved, fields=["rating"])
        return saved

    async def assign(
        self,
        application_id: str | ObjectId,
        user_id: Optional[str],
        actor: Actor,
    ) -> Application:
        """Assign a reviewer, or unassign with ``None``."""
        saved = await self._mutate(
            application_id,
            "assign",
            lambda app: self.state_machine.assign_to(app, user_id, actor),
        )
        self._publish(ApplicationEvent.UPDATED, saved, fields=["assigned_to"])
        return saved

    async def schedule_interview(
        self,
        application_id: str | ObjectId,
        interview: ScheduledInterview,
        actor: Actor,
    ) -> Application:
        saved = await self._mutate(
            application_id,
            "schedule interview for",
            lambda app: self.state_machine.schedule_interview(app, interview, actor),
        )
        self._publish(
            ApplicationEvent.INTERVIEW_SCHEDULED,
            saved,
            interview_id=interview.id,
            interview_type=interview.type,
            scheduled_at=interview.scheduled_at.isoformat(),
        )
        return saved

    async def add_interview_feedback(
        self,
        application_id: str | ObjectId,
        feedback: InterviewFeedback,
        actor: Actor,
    ) -> Application:
        saved = await self._mutate(
            application_id,
            "add interview feedback to",
            lambda app: self.state_machine.add_interview_feedback(app, feedback, actor),
        )
        self._publish(
            ApplicationEvent.INTERVIEW_FEEDBACK_ADDED,
            saved,
            interviewer=feedback.interviewer,
            recommendation=feedback.recommendation,
        )
        return saved

    async def add_communication(
        self,
        application_id: str | ObjectId,
        communication: Communication,
        actor: Actor,
    ) -> Application:
        saved = await self._mutate(
            application_id,
            "add communication to",
            lambda app: self.state_machine.add_communication(app, communication, actor),
        )
        self._publish(
            ApplicationEvent.COMMUNICATION_ADDED,
            saved,
            communication_type=communication.type,
            direction=communication.direction,
        )
        return saved

    # -------------------------------------------------------------------------
    # Screening
    # -------------------------------------------------------------------------

    async def attach_resume(
        self,
        application_id: str | ObjectId,
        resume_id: str | ObjectId,
        actor: Actor,
    ) -> Application:
        """
        Link a resume and re-run auto-screening.

        Raises:
            ResumeNotFound: The resume does not exist.
            ExternalDependencyFailure: The resume lookup failed.
            Forbidden: The resume belongs to another registered candidate.
        """
        try:
            application = await self.get(application_id)
            try:
                resume = await self.resumes.get_by_id_async(resume_id)
            except Exception as e:
                raise ExternalDependencyFailure("resume", e) from e
            if resume is None:
                raise ResumeNotFound(resume_id)
            self._check_resume_owner(resume, application.candidate_id)

            linked = application.model_copy(update={"resume_id": resume.id})
            screened = await self._screen(linked, actor, resume=resume)
            saved = await self._save(screened)
        except ApplicationTrackingError as e:
            logger.error(f"Failed to attach resume to application {application_id}: {e}")
            raise

        logger.info(
            f"Resume {resume.id} attached to application {saved.id}, "
            f"score={saved.screening_data.auto_screening_score}"
        )
        self._publish(
            ApplicationEvent.SCREENED,
            saved,
            score=saved.screening_data.auto_screening_score,
        )
        return saved

    async def rescreen(self, application_id: str | ObjectId, actor: Actor) -> Application:
        """Recompute screening data from the current job and resume."""
        try:
            application = await self.get(application_id)
            resume = await self._load_resume_degraded(application.resume_id)
            screened = await self._screen(application, actor, resume=resume)
            saved = await self._save(screened)
        except ApplicationTrackingError as e:
            logger.error(f"Failed to rescreen application {application_id}: {e}")
            raise

        logger.info(
            f"Application rescreened: {saved.id}, "
            f"score={saved.screening_data.auto_screening_score}"
        )
        self._publish(
            ApplicationEvent.SCREENED,
            saved,
            score=saved.screening_data.auto_screening_score,
        )
        return saved

    async def _screen(
        self,
        application: Application,
        actor: Optional[Actor],
        resume: Optional[Resume],
    ) -> Application:
        """Screen with whatever collaborators answer; missing ones reduce the components."""
        job: Optional[Job] = None
        try:
            job = await self.jobs.get_by_id_async(application.job_id)
        except Exception as e:
            logger.warning(f"Screening without job data: {ExternalDependencyFailure('job', e)}")
        else:
            if job is None:
                logger.warning(f"Job {application.job_id} unavailable; skills and experience not scored")

        catalog = await self._load_catalog()
        outcome = self.scorer.screen(application, job, resume, catalog, self.clock())
        return self.state_machine.record_screening(application, outcome, actor)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _mutate(
        self,
        application_id: str | ObjectId,
        operation: str,
        reducer: Callable[[Application], Application],
    ) -> Application:
        """Load, reduce and save one record."""
        try:
            application = await self.get(application_id)
            saved = await self._save(reducer(application))
        except ApplicationTrackingError as e:
            logger.error(f"Failed to {operation} application {application_id}: {e}")
            raise

        logger.info(f"Application {saved.id}: {operation} ok ({saved.status}/{saved.stage})")
        return saved

    async def _save(self, application: Application) -> Application:
        """Replace a stored record; a record deleted meanwhile is not found."""
        try:
            return await self.applications.save_async(application)
        except LookupError as e:
            raise ApplicationNotFound(application.id) from e

    async def _require_job(self, job_id: str | ObjectId) -> Job:
        try:
            job = await self.jobs.get_by_id_async(job_id)
        except Exception as e:
            raise ExternalDependencyFailure("job", e) from e
        if job is None:
            raise JobNotFound(job_id)
        return job

    async def _load_resume_degraded(
        self, resume_id: Optional[str | ObjectId]
    ) -> Optional[Resume]:
        if resume_id is None:
            return None
        try:
            return await self.resumes.get_by_id_async(resume_id)
        except Exception as e:
            logger.warning(f"Continuing without resume data: {ExternalDependencyFailure('resume', e)}")
            return None

    async def _load_catalog(self) -> dict[str, Optional[str]]:
        """Skill name to category; empty when the catalog is absent or failing."""
        if self.skill_catalog is None:
            return {}
        try:
            skills = await self.skill_catalog.list_skills_async()
        except Exception as e:
            logger.warning(
                f"Skill categories omitted: {ExternalDependencyFailure('skill catalog', e)}"
            )
            return {}
        return {skill.name: skill.category for skill in skills}

    @staticmethod
    def _check_resume_owner(resume: Resume, candidate_id: Optional[str]) -> None:
        if candidate_id and resume.user_id != candidate_id:
            raise Forbidden("Resume does not belong to the applicant")

    @staticmethod
    def _is_applicant(application: Application, actor: Actor) -> bool:
        if application.candidate_id:
            return actor.id == application.candidate_id
        return actor.id.strip().lower() == str(application.external_email)

    def _publish(self, event: ApplicationEvent, application: Application, **extra: Any) -> None:
        payload: dict[str, Any] = {
            "application_id": str(application.id),
            "job_id": str(application.job_id),
            "status": application.status,
            "stage": application.stage,
        }
        payload.update(extra)
        self._publish_raw(event, payload)

    def _publish_raw(self, event: ApplicationEvent, payload: dict[str, Any]) -> None:
        try:
            self.events.publish(event.value, payload)
        except Exception as e:
            logger.warning(f"Failed to publish {event.value}: {e}")


# Singleton instance
_orchestrator: Optional[ApplicationTrackingOrchestrator] = None


def get_tracking_orchestrator() -> ApplicationTrackingOrchestrator:
    """Orchestrator wired to the MongoDB repositories."""
    global _orchestrator
    if _orchestrator is None:
        from ats_tracker.data.repositories import (
            ApplicationRepository,
            JobRepository,
            ResumeRepository,
            SkillRepository,
        )

        _orchestrator = ApplicationTrackingOrchestrator(
            applications=ApplicationRepository(),
            jobs=JobRepository(),
            resumes=ResumeRepository(),
            skill_catalog=SkillRepository(),
        )
    return _orchestrator
