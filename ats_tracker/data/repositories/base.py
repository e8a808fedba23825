"""
Base repository class providing common CRUD operations.

All entity-specific repositories inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.collection import Collection
from pymongo.results import InsertOneResult, UpdateResult

from ats_tracker.data.database import DatabaseManager, get_database_manager
from ats_tracker.data.models.base import BaseDocument, utc_now
from ats_tracker.utils.logger import get_logger

logger = get_logger(__name__)

# Type variable for document models
T = TypeVar("T", bound=BaseDocument)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Implements both synchronous (CLI) and asynchronous (service) access.
    Subclasses must define the collection name and model class.
    """

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""
        pass

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model class for this repository."""
        pass

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_sync_collection(self) -> Collection:
        return self._db_manager.get_sync_collection(self.collection_name)

    def _get_async_collection(self) -> AsyncIOMotorCollection:
        return self._db_manager.get_async_collection(self.collection_name)

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        """Convert MongoDB document to Pydantic model."""
        if document is None:
            return None
        return self.model_class.model_validate(document)

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        return [self._to_model(doc) for doc in documents if doc is not None]

    def _to_document(self, model: T) -> dict[str, Any]:
        return model.model_dump_mongo()

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> Optional[ObjectId]:
        """Convert to ObjectId; malformed ids become None (nothing matches)."""
        if isinstance(id_value, ObjectId):
            return id_value
        if id_value is None:
            return None
        try:
            return ObjectId(id_value)
        except (InvalidId, TypeError):
            return None

    # -------------------------------------------------------------------------
    # Synchronous Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, id_value: str | ObjectId) -> Optional[T]:
        object_id = self._to_object_id(id_value)
        if object_id is None:
            return None
        document = self._get_sync_collection().find_one({"_id": object_id})
        return self._to_model(document)

    def find(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: Optional[list[tuple[str, int]]] = None,
    ) -> list[T]:
        cursor = self._get_sync_collection().find(query)
        cursor = cursor.sort(sort or [("created_at", -1)]).skip(skip).limit(limit)
        return self._to_models(list(cursor))

    def count(self, query: Optional[dict[str, Any]] = None) -> int:
        return self._get_sync_collection().count_documents(query or {})

    # -------------------------------------------------------------------------
    # Asynchronous Operations
    # -------------------------------------------------------------------------

    async def create_async(self, model: T) -> T:
        """Insert a new document and return the model carrying its id."""
        document = self._to_document(model)
        document.pop("_id", None)
        result: InsertOneResult = await self._get_async_collection().insert_one(document)
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model.model_copy(update={"id": result.inserted_id})

    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[T]:
        object_id = self._to_object_id(id_value)
        if object_id is None:
            return None
        document = await self._get_async_collection().find_one({"_id": object_id})
        return self._to_model(document)

    async def find_async(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: Optional[list[tuple[str, int]]] = None,
    ) -> list[T]:
        cursor = self._get_async_collection().find(query)
        cursor = cursor.sort(sort or [("created_at", -1)]).skip(skip).limit(limit)
        documents = await cursor.to_list(length=limit)
        return self._to_models(documents)

    async def find_one_async(self, query: dict[str, Any]) -> Optional[T]:
        document = await self._get_async_collection().find_one(query)
        return self._to_model(document)

    async def count_async(self, query: Optional[dict[str, Any]] = None) -> int:
        return await self._get_async_collection().count_documents(query or {})

    async def replace_async(self, model: T) -> T:
        """
        Replace the whole stored document in one write.

        Raises:
            LookupError: No stored document has the model's id.
        """
        document = self._to_document(model)
        document.pop("_id", None)
        document["updated_at"] = utc_now()

        result: UpdateResult = await self._get_async_collection().replace_one(
            {"_id": model.id}, document
        )
        if result.matched_count == 0:
            raise LookupError(f"{self.collection_name} document {model.id} does not exist")

        logger.debug(f"Replaced {self.collection_name} document: {model.id}")
        return model.model_copy(update={"updated_at": document["updated_at"]})
