import logging
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..errors import BadRequestError
from ..models.db_models import MongoModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=MongoModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    """Parses an entity identifier, raising BadRequestError on a malformed one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise BadRequestError("Invalid ID format")
    return ObjectId(value)


def ensure_valid_ids(*values: Any) -> List[ObjectId]:
    return [to_object_id(value) for value in values]


class BaseRepository(Generic[ModelT]):
    """
    Generic CRUD on a single collection. Subclasses set `model`, `collection_name`
    and the names of fields that hold references to other documents.
    """
    model: Type[ModelT]
    collection_name: str
    reference_fields: Sequence[str] = ()
    reference_list_fields: Sequence[str] = ()

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db
        self._collection = db[self.collection_name]

    def _prepare(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Converts reference fields of incoming data into ObjectIds."""
        document = dict(data)
        for field in self.reference_fields:
            if document.get(field) is not None:
                document[field] = to_object_id(document[field])
        for field in self.reference_list_fields:
            if document.get(field) is not None:
                document[field] = [to_object_id(item) for item in document[field]]
        return document

    def _to_model(self, document: Optional[dict]) -> Optional[ModelT]:
        return self.model.from_document(document) if document else None

    async def _find_many(self, query: dict, sort: Optional[list] = None) -> List[dict]:
        cursor = self._collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        return await cursor.to_list(length=None)

    async def _populate(self, documents: List[dict], field: str, collection_name: str, fields: Iterable[str]) -> List[dict]:
        """
        Replaces the ObjectId(s) in `field` with a projection of the referenced
        documents, using one `$in` query. Dangling references become None
        (single reference) or are dropped (list of references).
        """
        ids = set()
        for document in documents:
            value = document.get(field)
            if isinstance(value, list):
                ids.update(value)
            elif value is not None:
                ids.add(value)
        if not ids:
            return documents

        projection = {name: 1 for name in fields}
        cursor = self._db[collection_name].find({"_id": {"$in": list(ids)}}, projection)
        related = {item["_id"]: item for item in await cursor.to_list(length=None)}

        for document in documents:
            value = document.get(field)
            if isinstance(value, list):
                document[field] = [related[item] for item in value if item in related]
            elif value is not None:
                document[field] = related.get(value)
        return documents

    async def create(self, data: Dict[str, Any]) -> ModelT:
        now = utcnow()
        document = {**self._prepare(data), "createdAt": now, "updatedAt": now}
        result = await self._collection.insert_one(document)
        document["_id"] = result.inserted_id
        return self._to_model(document)

    async def find_all(self) -> List[ModelT]:
        return [self._to_model(doc) for doc in await self._find_many({})]

    async def find_by_id(self, id: str) -> Optional[ModelT]:
        document = await self._collection.find_one({"_id": to_object_id(id)})
        return self._to_model(document)

    async def update(self, id: str, update_data: Dict[str, Any]) -> Optional[ModelT]:
        object_id = to_object_id(id)
        changes = {**self._prepare(update_data), "updatedAt": utcnow()}
        document = await self._collection.find_one_and_update(
            {"_id": object_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER
        )
        return self._to_model(document)

    async def delete(self, id: str) -> Optional[ModelT]:
        document = await self._collection.find_one_and_delete({"_id": to_object_id(id)})
        return self._to_model(document)

    async def count(self, query: Optional[dict] = None) -> int:
        return await self._collection.count_documents(query or {})

    async def exists(self, query: Optional[dict] = None) -> bool:
        return await self._collection.find_one(query or {}, {"_id": 1}) is not None
