"""
Application repository for ATS Tracker.

Stores each application as one document, so a lifecycle change and its
new timeline entries are committed by a single replace.
"""

import re
from typing import Any, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ats_tracker.core.exceptions import DuplicateApplication
from ats_tracker.data.models.application import Application, ApplicationSearch
from ats_tracker.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)

SORT_FIELDS: dict[str, list[str]] = {
    "applied_at": ["applied_at"],
    "last_activity_at": ["last_activity_at"],
    "rating": ["rating"],
    "candidate_name": ["external_name", "candidate_id"],
}

TEXT_SEARCH_FIELDS = ("external_name", "external_email", "candidate_id", "notes", "cover_letter")


class ApplicationRepository(BaseRepository[Application]):
    """Repository for application document operations."""

    @property
    def collection_name(self) -> str:
        return "applications"

    @property
    def model_class(self) -> type[Application]:
        return Application

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def save_async(self, application: Application) -> Application:
        """
        Insert a new application or replace an existing one whole.

        Raises:
            DuplicateApplication: A concurrent submission by the same
                applicant for the same job won the unique index.
        """
        if application.id is None:
            try:
                return await self.create_async(application)
            except DuplicateKeyError as e:
                applicant = application.candidate_id or application.external_email
                raise DuplicateApplication(application.job_id, applicant) from e
        return await self.replace_async(application)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def find_existing_async(
        self,
        job_id: str | ObjectId,
        candidate_id: Optional[str] = None,
        external_email: Optional[str] = None,
    ) -> Optional[Application]:
        """Existing application by the same applicant for the same job."""
        query = self._identity_query(job_id, candidate_id, external_email)
        if query is None:
            return None
        return await self.find_one_async(query)

    async def find_many_async(
        self, search: ApplicationSearch
    ) -> tuple[list[Application], int]:
        query = self.build_query(search)
        total = await self.count_async(query)
        items = await self.find_async(
            query, skip=search.skip, limit=search.limit, sort=self.build_sort(search)
        )
        return items, total

    def find_many(self, search: ApplicationSearch) -> tuple[list[Application], int]:
        """Synchronous variant used by the CLI."""
        query = self.build_query(search)
        items = self.find(
            query, skip=search.skip, limit=search.limit, sort=self.build_sort(search)
        )
        return items, self.count(query)

    # -------------------------------------------------------------------------
    # Query Building
    # -------------------------------------------------------------------------

    def _identity_query(
        self,
        job_id: str | ObjectId,
        candidate_id: Optional[str],
        external_email: Optional[str],
    ) -> Optional[dict[str, Any]]:
        job_object_id = self._to_object_id(job_id)
        if job_object_id is None:
            return None
        if candidate_id:
            return {"job_id": job_object_id, "candidate_id": candidate_id}
        if external_email:
            return {"job_id": job_object_id, "external_email": external_email.strip().lower()}
        return None

    @staticmethod
    def build_query(search: ApplicationSearch) -> dict[str, Any]:
        """Translate search filters into a MongoDB query."""
        query: dict[str, Any] = {}

        if search.job_id is not None:
            query["job_id"] = search.job_id
        if search.candidate_id:
            query["candidate_id"] = search.candidate_id
        if search.status:
            query["status"] = {"$in": list(search.status)}
        if search.stage:
            query["stage"] = {"$in": list(search.stage)}
        if search.assigned_to:
            query["assigned_to"] = search.assigned_to
        if search.source:
            query["source"] = search.source
        if search.min_rating is not None:
            query["rating"] = {"$gte": search.min_rating}

        applied: dict[str, Any] = {}
        if search.applied_after is not None:
            applied["$gte"] = search.applied_after
        if search.applied_before is not None:
            applied["$lte"] = search.applied_before
        if applied:
            query["applied_at"] = applied

        if search.search and search.search.strip():
            pattern = {"$regex": re.escape(search.search.strip()), "$options": "i"}
            query["$or"] = [{name: pattern} for name in TEXT_SEARCH_FIELDS]

        return query

    @staticmethod
    def build_sort(search: ApplicationSearch) -> list[tuple[str, int]]:
        direction = 1 if search.sort_order == "asc" else -1
        keys = [(name, direction) for name in SORT_FIELDS[search.sort_by]]
        # Stable paging across equal sort keys
        keys.append(("_id", direction))
        return keys
