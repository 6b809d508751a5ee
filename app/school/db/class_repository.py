import logging
from typing import List, Optional

from pymongo import ReturnDocument

from .base_repository import BaseRepository, ensure_valid_ids, to_object_id, utcnow
from .mongo import CLASSES, USERS
from ..models.db_models import SchoolClass

logger = logging.getLogger(__name__)

USER_SUMMARY_FIELDS = ("name", "email")
USER_DETAIL_FIELDS = ("name", "email", "role")


class ClassRepository(BaseRepository[SchoolClass]):
    model = SchoolClass
    collection_name = CLASSES
    reference_fields = ("teacherId",)
    reference_list_fields = ("studentIds",)

    async def find_by_teacher_id(self, teacher_id: str) -> List[SchoolClass]:
        documents = await self._find_many({"teacherId": to_object_id(teacher_id)})
        await self._populate(documents, "teacherId", USERS, USER_SUMMARY_FIELDS)
        await self._populate(documents, "studentIds", USERS, USER_SUMMARY_FIELDS)
        return [self._to_model(doc) for doc in documents]

    async def find_by_student_id(self, student_id: str) -> List[SchoolClass]:
        documents = await self._find_many({"studentIds": to_object_id(student_id)})
        await self._populate(documents, "teacherId", USERS, USER_SUMMARY_FIELDS)
        return [self._to_model(doc) for doc in documents]

    async def find_by_id_with_details(self, id: str) -> Optional[SchoolClass]:
        document = await self._collection.find_one({"_id": to_object_id(id)})
        if not document:
            return None
        await self._populate([document], "teacherId", USERS, USER_DETAIL_FIELDS)
        await self._populate([document], "studentIds", USERS, USER_DETAIL_FIELDS)
        return self._to_model(document)

    async def pull_student(self, class_id: str, student_id: str) -> Optional[SchoolClass]:
        """Removes a student with the store's own atomic `$pull`; None if the class does not exist."""
        class_oid, student_oid = ensure_valid_ids(class_id, student_id)
        document = await self._collection.find_one_and_update(
            {"_id": class_oid},
            {"$pull": {"studentIds": student_oid}, "$set": {"updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        return self._to_model(document)

    async def is_student_enrolled(self, class_id: str, student_id: str) -> bool:
        class_oid, student_oid = ensure_valid_ids(class_id, student_id)
        return await self.exists({"_id": class_oid, "studentIds": student_oid})
