"""
Collaborator contracts for the tracking orchestrator.

The MongoDB repositories in ``ats_tracker.data.repositories`` satisfy these
protocols; tests substitute in-memory implementations.
"""

from typing import Any, Optional, Protocol

from bson import ObjectId

from ats_tracker.data.models import (
    Application,
    ApplicationSearch,
    CatalogSkill,
    Job,
    Resume,
)


class ApplicationStore(Protocol):
    """Persistence for application records (full-document round trips)."""

    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[Application]:
        ...

    async def save_async(self, application: Application) -> Application:
        """Insert when the record has no id, otherwise replace it whole."""
        ...

    async def find_many_async(
        self, search: ApplicationSearch
    ) -> tuple[list[Application], int]:
        """One page of matching records plus the total match count."""
        ...

    async def find_existing_async(
        self,
        job_id: str | ObjectId,
        candidate_id: Optional[str] = None,
        external_email: Optional[str] = None,
    ) -> Optional[Application]:
        ...


class JobLookup(Protocol):
    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[Job]:
        ...


class ResumeLookup(Protocol):
    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[Resume]:
        ...


class SkillCatalog(Protocol):
    async def list_skills_async(self) -> list[CatalogSkill]:
        ...


class EventSink(Protocol):
    """Fire-and-forget notifications."""

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        ...
