"""Reference skill catalog entry, used for category tagging."""

from typing import Optional

from pydantic import Field

from .base import BaseDocument


class CatalogSkill(BaseDocument):
    name: str = Field(..., min_length=1)
    category: Optional[str] = None

    class Settings:
        """MongoDB collection settings."""

        name = "skills"
        indexes = ["name"]
