import logging
from datetime import datetime
from typing import List, Optional

from pymongo import DESCENDING

from .base_repository import BaseRepository, ensure_valid_ids, to_object_id
from .mongo import ATTENDANCES, CLASSES, USERS
from ..models.db_models import Attendance, AttendanceStatus

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING)]


class AttendanceRepository(BaseRepository[Attendance]):
    model = Attendance
    collection_name = ATTENDANCES
    reference_fields = ("classId", "studentId")

    async def _find_populated(self, query: dict) -> List[Attendance]:
        documents = await self._find_many(query, sort=NEWEST_FIRST)
        await self._populate(documents, "classId", CLASSES, ("className",))
        await self._populate(documents, "studentId", USERS, ("name", "email"))
        return [self._to_model(doc) for doc in documents]

    async def find_by_class_id(self, class_id: str) -> List[Attendance]:
        return await self._find_populated({"classId": to_object_id(class_id)})

    async def find_by_student_id(self, student_id: str) -> List[Attendance]:
        return await self._find_populated({"studentId": to_object_id(student_id)})

    async def find_by_class_and_student(self, class_id: str, student_id: str, populate: bool = True) -> Optional[Attendance]:
        """Newest record for the pair. The mark path reads it unpopulated."""
        class_oid, student_oid = ensure_valid_ids(class_id, student_id)
        document = await self._collection.find_one(
            {"classId": class_oid, "studentId": student_oid},
            sort=NEWEST_FIRST
        )
        if not document:
            return None
        if populate:
            await self._populate([document], "classId", CLASSES, ("className",))
            await self._populate([document], "studentId", USERS, ("name", "email"))
        return self._to_model(document)

    async def count_by_class(self, class_id: str, status: Optional[AttendanceStatus] = None) -> int:
        query = {"classId": to_object_id(class_id)}
        if status is not None:
            query["status"] = status
        return await self.count(query)

    async def find_by_date_range(self, start_date: datetime, end_date: datetime, class_id: Optional[str] = None) -> List[Attendance]:
        query = {"createdAt": {"$gte": start_date, "$lte": end_date}}
        if class_id:
            query["classId"] = to_object_id(class_id)
        return await self._find_populated(query)
