"""Job repository: read access to job postings."""

from ats_tracker.data.models.job import Job

from .base import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for job posting document operations."""

    @property
    def collection_name(self) -> str:
        return "jobs"

    @property
    def model_class(self) -> type[Job]:
        return Job
