"""Skill catalog repository."""

from ats_tracker.data.models.skill import CatalogSkill

from .base import BaseRepository


class SkillRepository(BaseRepository[CatalogSkill]):
    """Read-only access to the reference skill catalog."""

    @property
    def collection_name(self) -> str:
        return "skills"

    @property
    def model_class(self) -> type[CatalogSkill]:
        return CatalogSkill

    async def list_skills_async(self) -> list[CatalogSkill]:
        """All catalog entries, sorted by name."""
        cursor = self._get_async_collection().find({}).sort("name", 1)
        documents = await cursor.to_list(length=None)
        return self._to_models(documents)
