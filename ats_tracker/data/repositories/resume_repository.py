"""Resume repository: read access to parsed resumes."""

from ats_tracker.data.models.resume import Resume

from .base import BaseRepository


class ResumeRepository(BaseRepository[Resume]):
    """Repository for resume document operations."""

    @property
    def collection_name(self) -> str:
        return "resumes"

    @property
    def model_class(self) -> type[Resume]:
        return Resume
