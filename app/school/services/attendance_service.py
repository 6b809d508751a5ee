import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..db.attendance_repository import AttendanceRepository
from ..db.base_repository import ensure_valid_ids
from ..errors import NotFoundError
from ..models.db_models import Attendance, AttendanceStatus, ClassStatistics

logger = logging.getLogger(__name__)


class AttendanceService:
    """
    Attendance CRUD, the mark (upsert) operation and per-class statistics.
    """
    def __init__(self, attendance_repository: AttendanceRepository):
        self.attendance_repository = attendance_repository

    async def create(self, attendance_data: Dict[str, Any]) -> Attendance:
        logger.info(
            f"Creating attendance record for class {attendance_data.get('classId')}, "
            f"student {attendance_data.get('studentId')}"
        )
        new_attendance = await self.attendance_repository.create(attendance_data)
        logger.info(f"Attendance record created: {new_attendance.id}")
        return new_attendance

    async def find_all(self) -> List[Attendance]:
        logger.debug("Fetching all attendance records")
        return await self.attendance_repository.find_all()

    async def find_by_id(self, attendance_id: str) -> Optional[Attendance]:
        logger.debug(f"Fetching attendance by ID: {attendance_id}")
        return await self.attendance_repository.find_by_id(attendance_id)

    async def update(self, attendance_id: str, update_data: Dict[str, Any]) -> Optional[Attendance]:
        logger.info(f"Updating attendance ID: {attendance_id}")
        updated = await self.attendance_repository.update(attendance_id, update_data)
        if not updated:
            logger.warning(f"Attendance not found for update: {attendance_id}")
        else:
            logger.info(f"Attendance updated successfully: {attendance_id}")
        return updated

    async def delete(self, attendance_id: str) -> Optional[Attendance]:
        logger.info(f"Deleting attendance ID: {attendance_id}")
        deleted = await self.attendance_repository.delete(attendance_id)
        if not deleted:
            logger.warning(f"Attendance not found for deletion: {attendance_id}")
        else:
            logger.info(f"Attendance deleted successfully: {attendance_id}")
        return deleted

    async def find_by_class_id(self, class_id: str) -> List[Attendance]:
        logger.debug(f"Fetching attendance for class ID: {class_id}")
        return await self.attendance_repository.find_by_class_id(class_id)

    async def find_by_student_id(self, student_id: str) -> List[Attendance]:
        logger.debug(f"Fetching attendance for student ID: {student_id}")
        return await self.attendance_repository.find_by_student_id(student_id)

    async def find_by_class_and_student(self, class_id: str, student_id: str) -> Optional[Attendance]:
        logger.debug(f"Fetching attendance for class {class_id} and student {student_id}")
        return await self.attendance_repository.find_by_class_and_student(class_id, student_id)

    async def mark_attendance(self, class_id: str, student_id: str, status: AttendanceStatus) -> Attendance:
        """
        Creates the record for (class, student) or updates the status of the
        existing one, so repeating a mark with the same status changes nothing.

        The lookup and the write are separate store calls. Two concurrent marks
        for the same pair can both miss and both create a record.
        """
        ensure_valid_ids(class_id, student_id)
        logger.info(f"Marking attendance: {status} for student {student_id} in class {class_id}")

        try:
            existing = await self.attendance_repository.find_by_class_and_student(class_id, student_id, populate=False)
            if existing:
                attendance = await self.attendance_repository.update(existing.id, {"status": status})
                if not attendance:
                    raise NotFoundError("Attendance record not found")
            else:
                attendance = await self.attendance_repository.create({
                    "classId": class_id,
                    "studentId": student_id,
                    "status": status,
                })
        except Exception:
            logger.error(
                f"Failed to mark attendance for student {student_id} in class {class_id} ({status})",
                exc_info=True
            )
            raise

        logger.info(f"Attendance marked successfully: {attendance.id}")
        return attendance

    async def get_class_statistics(self, class_id: str) -> ClassStatistics:
        """
        Three independent counts. Under concurrent writes present + absent is
        not guaranteed to equal total.
        """
        logger.debug(f"Fetching attendance statistics for class ID: {class_id}")
        total = await self.attendance_repository.count_by_class(class_id)
        present = await self.attendance_repository.count_by_class(class_id, status="present")
        absent = await self.attendance_repository.count_by_class(class_id, status="absent")
        return ClassStatistics(total=total, present=present, absent=absent)

    async def find_by_date_range(self, start_date: datetime, end_date: datetime, class_id: Optional[str] = None) -> List[Attendance]:
        logger.debug(f"Fetching attendance from {start_date} to {end_date}" + (f" for class {class_id}" if class_id else ""))
        return await self.attendance_repository.find_by_date_range(start_date, end_date, class_id)
