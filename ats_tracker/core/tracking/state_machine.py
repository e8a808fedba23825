"""
Application status/stage state machine.

Every operation is a pure reducer: it validates the request against the
transition tables, then returns a NEW Application with the change applied,
``last_activity_at`` bumped and one or more timeline entries appended. The
input record is never modified. No I/O happens here.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional

from ats_tracker.core.exceptions import InvalidRating, InvalidTransition
from ats_tracker.core.screening import ScreeningOutcome
from ats_tracker.data.models import (
    Actor,
    Application,
    Communication,
    InterviewFeedback,
    RejectionData,
    ScheduledInterview,
    ScreeningDataUpdate,
    TimelineEntry,
    to_naive_utc,
    utc_now,
)
from ats_tracker.utils.constants import (
    EXTERNAL_CANDIDATE_ACTOR_ID,
    STAGE_PIPELINE,
    STATUS_TRANSITIONS,
    ApplicationStage,
    ApplicationStatus,
    TimelineAction,
)


def allowed_statuses(status: ApplicationStatus | str) -> tuple[ApplicationStatus, ...]:
    """Successors reachable through the generic status transition."""
    return STATUS_TRANSITIONS[ApplicationStatus(status)]


def next_stage(stage: ApplicationStage | str) -> Optional[ApplicationStage]:
    """The single designated successor of a stage, or None for the last one."""
    index = STAGE_PIPELINE.index(ApplicationStage(stage))
    if index + 1 < len(STAGE_PIPELINE):
        return STAGE_PIPELINE[index + 1]
    return None


def derive_stage_from_status(
    current_stage: ApplicationStage | str,
    new_status: ApplicationStatus | str,
) -> ApplicationStage:
    """
    Stage implied by entering a status.

    Interviewing only lifts an early stage (screening, phone screen) to
    technical and never moves a later stage back. Rejected and withdrawn
    keep the stage where it was.
    """
    current = ApplicationStage(current_stage)
    status = ApplicationStatus(new_status)

    if status == ApplicationStatus.APPLIED:
        return ApplicationStage.SCREENING
    if status == ApplicationStatus.SCREENING:
        return ApplicationStage.PHONE_SCREEN
    if status == ApplicationStatus.INTERVIEWING:
        if current in (ApplicationStage.SCREENING, ApplicationStage.PHONE_SCREEN):
            return ApplicationStage.TECHNICAL
        return current
    if status == ApplicationStatus.OFFERED:
        return ApplicationStage.OFFER
    if status == ApplicationStatus.HIRED:
        return ApplicationStage.HIRED
    return current


def validate_rating(rating: Any) -> int:
    """Ratings are integers from 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating(rating)
    return rating


class ApplicationStateMachine:
    """
    Pure lifecycle reducers for applications.

    Args:
        clock: Source of the current time; injectable for tests.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def can_transition_to(app: Application, new_status: ApplicationStatus | str) -> bool:
        return ApplicationStatus(new_status) in allowed_statuses(app.status)

    @staticmethod
    def can_advance_to_stage(app: Application, new_stage: ApplicationStage | str) -> bool:
        if app.is_terminal:
            return False
        return next_stage(app.stage) == ApplicationStage(new_stage)

    # -------------------------------------------------------------------------
    # Lifecycle reducers
    # -------------------------------------------------------------------------

    def submit(self, app: Application, actor: Optional[Actor] = None) -> Application:
        """Record the initial submission entry on a new application."""
        if actor is not None:
            performed_by, performed_by_name = actor.id, actor.display_name
        else:
            performed_by = EXTERNAL_CANDIDATE_ACTOR_ID
            performed_by_name = app.external_name or str(app.external_email)

        entry = TimelineEntry(
            action=TimelineAction.APPLICATION_SUBMITTED,
            description="Application submitted",
            performed_by=performed_by,
            performed_by_name=performed_by_name,
            timestamp=app.applied_at,
            metadata={"source": app.source, "has_resume": app.resume_id is not None},
        )
        return app.model_copy(
            update={
                "timeline": [*app.timeline, entry],
                "last_activity_at": app.applied_at,
            }
        )

    def update_status(
        self,
        app: Application,
        new_status: ApplicationStatus | str,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Move to an allowed successor status.

        Raises:
            InvalidTransition: ``new_status`` is not reachable from the
                current status.
        """
        current = ApplicationStatus(app.status)
        target = ApplicationStatus(new_status)
        if target not in allowed_statuses(current):
            raise InvalidTransition("status", current, target)

        now = self._now(app)
        old_stage = ApplicationStage(app.stage)
        new_stage = derive_stage_from_status(old_stage, target)

        metadata: dict[str, Any] = {
            "old_status": current.value,
            "new_status": target.value,
            "notes": notes,
        }
        if new_stage != old_stage:
            metadata["old_stage"] = old_stage.value
            metadata["new_stage"] = new_stage.value

        changes: dict[str, Any] = {"status": target.value, "stage": new_stage.value}
        if target == ApplicationStatus.REJECTED:
            changes["rejection_data"] = RejectionData(
                reason=notes or "Status changed to rejected",
                rejected_by=actor.id,
                rejected_at=now,
            )

        entry = self._entry(
            TimelineAction.STATUS_CHANGED,
            f"Status changed from {current.value} to {target.value}",
            actor,
            now,
            metadata,
        )
        return self._evolve(app, now, [entry], **changes)

    def update_stage(
        self,
        app: Application,
        new_stage: ApplicationStage | str,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Advance to the next pipeline stage. No skipping, no going back.

        Raises:
            InvalidTransition: ``new_stage`` is not the designated successor,
                or the application is already closed.
        """
        current = ApplicationStage(app.stage)
        target = ApplicationStage(new_stage)
        if not self.can_advance_to_stage(app, target):
            raise InvalidTransition("stage", current, target)

        now = self._now(app)
        entry = self._entry(
            TimelineAction.STAGE_CHANGED,
            f"Stage changed from {current.value} to {target.value}",
            actor,
            now,
            {"old_stage": current.value, "new_stage": target.value, "notes": notes},
        )
        return self._evolve(app, now, [entry], stage=target.value)

    def reject(
        self,
        app: Application,
        reason: str,
        feedback: Optional[str] = None,
        actor: Optional[Actor] = None,
        send_feedback: bool = False,
    ) -> Application:
        """
        Reject unconditionally.

        Bypasses the transition table so rejection is always possible.
        Repeating it appends another entry and leaves the status rejected.
        """
        actor = actor or Actor.system()
        now = self._now(app)
        previous = ApplicationStatus(app.status)

        rejection = RejectionData(
            reason=reason,
            feedback=feedback,
            rejected_by=actor.id,
            rejected_at=now,
            send_feedback=send_feedback,
        )
        entry = self._entry(
            TimelineAction.REJECTED,
            f"Application rejected: {reason}",
            actor,
            now,
            {
                "reason": reason,
                "feedback": feedback,
                "send_feedback": send_feedback,
                "previous_status": previous.value,
            },
        )
        return self._evolve(
            app,
            now,
            [entry],
            status=ApplicationStatus.REJECTED.value,
            rejection_data=rejection,
        )

    def withdraw(
        self,
        app: Application,
        reason: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> Application:
        """
        Candidate-initiated withdrawal from any open status.

        Raises:
            InvalidTransition: the application is already hired, rejected or
                withdrawn.
        """
        current = ApplicationStatus(app.status)
        if current.is_terminal:
            raise InvalidTransition("status", current, ApplicationStatus.WITHDRAWN)

        if actor is None:
            actor = Actor(
                id=app.candidate_id or "candidate",
                name=app.external_name or app.candidate_id or "Candidate",
                role="candidate",
            )

        now = self._now(app)
        description = "Application withdrawn"
        if reason:
            description = f"{description}: {reason}"
        entry = self._entry(
            TimelineAction.WITHDRAWN,
            description,
            actor,
            now,
            {"reason": reason, "previous_status": current.value},
        )
        return self._evolve(app, now, [entry], status=ApplicationStatus.WITHDRAWN.value)

    def rate(
        self,
        app: Application,
        rating: int,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Set the reviewer rating.

        Raises:
            InvalidRating: rating is not an integer in [1, 5].
        """
        rating = validate_rating(rating)
        now = self._now(app)
        entry = self._entry(
            TimelineAction.RATED,
            f"Application rated {rating}/5",
            actor,
            now,
            {"old_rating": app.rating, "new_rating": rating, "notes": notes},
        )
        return self._evolve(app, now, [entry], rating=rating)

    def assign_to(
        self,
        app: Application,
        user_id: Optional[str],
        actor: Actor,
    ) -> Application:
        """Assign, reassign or (with ``None``) unassign the reviewer."""
        old = app.assigned_to
        if user_id is None:
            description = "Unassigned from recruiter"
        elif old is None:
            description = "Assigned to recruiter"
        else:
            description = "Reassigned to new recruiter"

        now = self._now(app)
        entry = self._entry(
            TimelineAction.ASSIGNED,
            description,
            actor,
            now,
            {"old_assignee": old, "new_assignee": user_id},
        )
        return self._evolve(app, now, [entry], assigned_to=user_id)

    def schedule_interview(
        self,
        app: Application,
        interview: ScheduledInterview,
        actor: Actor,
    ) -> Application:
        """
        Schedule an interview, moving the application to interviewing.

        From screening this performs the screening -> interviewing status
        change (with its derived stage). An application already
        interviewing only gets the new interview.

        Raises:
            InvalidTransition: status is neither screening nor interviewing.
        """
        current = ApplicationStatus(app.status)
        if current not in (ApplicationStatus.SCREENING, ApplicationStatus.INTERVIEWING):
            raise InvalidTransition(
                "status",
                current,
                ApplicationStatus.INTERVIEWING,
                message=f"Cannot schedule an interview while application is {current.value}",
            )

        interview_data = app.interview_data.model_copy(
            update={
                "scheduled_interviews": [
                    *app.interview_data.scheduled_interviews,
                    interview,
                ]
            }
        )
        updated = app.model_copy(update={"interview_data": interview_data})

        if current != ApplicationStatus.INTERVIEWING:
            updated = self.update_status(updated, ApplicationStatus.INTERVIEWING, actor)

        now = self._now(updated)
        entry = self._entry(
            TimelineAction.INTERVIEW_SCHEDULED,
            f"{interview.type} interview scheduled for "
            f"{interview.scheduled_at:%Y-%m-%d %H:%M}",
            actor,
            now,
            interview.model_dump(),
        )
        return self._evolve(updated, now, [entry])

    def add_interview_feedback(
        self,
        app: Application,
        feedback: InterviewFeedback,
        actor: Actor,
    ) -> Application:
        """
        Record an interviewer's verdict.

        Raises:
            InvalidRating: the feedback rating is outside [1, 5].
        """
        validate_rating(feedback.rating)
        interview_data = app.interview_data.model_copy(
            update={"feedback": [*app.interview_data.feedback, feedback]}
        )
        now = self._now(app)
        entry = self._entry(
            TimelineAction.INTERVIEW_FEEDBACK,
            f"Interview feedback received from {feedback.interviewer}",
            actor,
            now,
            feedback.model_dump(),
        )
        return self._evolve(app, now, [entry], interview_data=interview_data)

    def add_communication(
        self,
        app: Application,
        communication: Communication,
        actor: Actor,
    ) -> Application:
        """Append to the communication log; sender defaults to the actor."""
        communication = communication.model_copy(
            update={
                "sent_by": communication.sent_by or actor.id,
                "sent_by_name": communication.sent_by_name or actor.display_name,
            }
        )
        now = self._now(app)
        entry = self._entry(
            TimelineAction.COMMUNICATION_ADDED,
            f"{str(communication.direction).capitalize()} {communication.type} recorded",
            actor,
            now,
            {
                "communication_id": communication.id,
                "type": communication.type,
                "direction": communication.direction,
                "subject": communication.subject,
            },
        )
        return self._evolve(
            app, now, [entry], communications=[*app.communications, communication]
        )

    def update_notes(self, app: Application, notes: Optional[str], actor: Actor) -> Application:
        now = self._now(app)
        entry = self._entry(
            TimelineAction.NOTES_UPDATED,
            "Notes cleared" if not notes else "Notes updated",
            actor,
            now,
            {"had_notes": bool(app.notes)},
        )
        return self._evolve(app, now, [entry], notes=notes)

    def merge_screening_data(
        self,
        app: Application,
        patch: ScreeningDataUpdate,
        actor: Actor,
    ) -> Application:
        """Shallow-merge the fields explicitly set on ``patch``."""
        fields = sorted(patch.model_fields_set)
        screening = app.screening_data.model_copy(
            update={name: getattr(patch, name) for name in fields}
        )
        now = self._now(app)
        entry = self._entry(
            TimelineAction.SCREENING_UPDATED,
            "Screening data updated",
            actor,
            now,
            {"fields": fields},
        )
        return self._evolve(app, now, [entry], screening_data=screening)

    def record_screening(
        self,
        app: Application,
        outcome: ScreeningOutcome,
        actor: Optional[Actor] = None,
    ) -> Application:
        """Store an auto-screening outcome."""
        actor = actor or Actor.system()
        now = self._now(app)
        entry = self._entry(
            TimelineAction.SCREENING_COMPLETED,
            f"Auto-screening completed with score {outcome.score}",
            actor,
            now,
            {
                "score": outcome.score,
                "components": outcome.components.available(),
            },
        )
        return self._evolve(
            app, now, [entry], screening_data=outcome.apply_to(app.screening_data)
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _now(self, app: Application) -> datetime:
        """Current time, never earlier than the application date."""
        return max(to_naive_utc(self._clock()), app.applied_at)

    @staticmethod
    def _entry(
        action: TimelineAction,
        description: str,
        actor: Actor,
        timestamp: datetime,
        metadata: dict[str, Any],
    ) -> TimelineEntry:
        return TimelineEntry(
            action=action,
            description=description,
            performed_by=actor.id,
            performed_by_name=actor.display_name,
            timestamp=timestamp,
            metadata=metadata,
        )

    @staticmethod
    def _evolve(
        app: Application,
        now: datetime,
        entries: list[TimelineEntry],
        **changes: Any,
    ) -> Application:
        """New record with changes, appended entries and bumped activity."""
        return app.model_copy(
            update={
                **changes,
                "timeline": [*app.timeline, *entries],
                "last_activity_at": max(now, app.last_activity_at),
                "updated_at": now,
            }
        )

