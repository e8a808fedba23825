"""
Exceptions raised by the application tracking engine.

Transition and validation errors always propagate to the caller. Bulk
operations catch ApplicationTrackingError per record and report it as an
error string instead.
"""

from typing import Any, Optional


class ApplicationTrackingError(Exception):
    """Base class for all tracking and screening errors."""

    default_message = "Application tracking error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# -----------------------------------------------------------------------------
# Lookup errors
# -----------------------------------------------------------------------------


class NotFound(ApplicationTrackingError):
    """
    A referenced record does not exist.

    Attributes:
        resource_type: Kind of record ("application", "job", "resume").
        resource_id: Identifier that was looked up.
    """

    resource_type = "record"

    def __init__(self, resource_id: Any = None, message: Optional[str] = None):
        self.resource_id = resource_id
        super().__init__(
            message or f"{self.resource_type.capitalize()} not found: {resource_id}"
        )


class ApplicationNotFound(NotFound):
    resource_type = "application"


class JobNotFound(NotFound):
    resource_type = "job"


class ResumeNotFound(NotFound):
    resource_type = "resume"


# -----------------------------------------------------------------------------
# Rule violations
# -----------------------------------------------------------------------------


class InvalidTransition(ApplicationTrackingError):
    """
    A status or stage change is not in the allowed table.

    Attributes:
        field: "status" or "stage".
        current: Value before the attempted change.
        requested: Value that was requested.
    """

    def __init__(
        self,
        field: str,
        current: Any,
        requested: Any,
        message: Optional[str] = None,
    ):
        self.field = field
        self.current = _plain(current)
        self.requested = _plain(requested)
        super().__init__(
            message
            or f"Invalid {field} transition from {self.current} to {self.requested}"
        )


class InvalidRating(ApplicationTrackingError):
    """Rating outside the 1-5 range."""

    def __init__(self, rating: Any, message: Optional[str] = None):
        self.rating = rating
        super().__init__(message or f"Rating must be an integer between 1 and 5, got {rating!r}")


class DuplicateApplication(ApplicationTrackingError):
    """The candidate (or external email) already applied to this job."""

    def __init__(self, job_id: Any, applicant: Any, message: Optional[str] = None):
        self.job_id = job_id
        self.applicant = applicant
        super().__init__(
            message or f"An application for job {job_id} already exists for {applicant}"
        )


class JobNotAcceptingApplications(ApplicationTrackingError):
    """The job exists but is not open or its closing date has passed."""

    def __init__(self, job_id: Any, job_status: Any = None, message: Optional[str] = None):
        self.job_id = job_id
        self.job_status = _plain(job_status)
        super().__init__(
            message
            or f"Job {job_id} is not accepting applications (status: {self.job_status})"
        )


class Forbidden(ApplicationTrackingError):
    """Ownership mismatch between the actor and the target record."""

    default_message = "Operation not permitted for this actor"


# -----------------------------------------------------------------------------
# Collaborator errors
# -----------------------------------------------------------------------------


class ExternalDependencyFailure(ApplicationTrackingError):
    """
    A job, resume or skill catalog lookup raised.

    Attributes:
        dependency: Name of the collaborator that failed.
        cause: The original exception.
    """

    def __init__(self, dependency: str, cause: Optional[BaseException] = None):
        self.dependency = dependency
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{dependency} lookup failed{detail}")


def _plain(value: Any) -> Any:
    """Unwrap enum members so messages show raw values."""
    return getattr(value, "value", value)
