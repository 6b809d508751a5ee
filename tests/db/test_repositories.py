from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from unittest.mock import AsyncMock, MagicMock

from app.school.db.attendance_repository import AttendanceRepository
from app.school.db.base_repository import ensure_valid_ids, to_object_id
from app.school.db.class_repository import ClassRepository
from app.school.db.user_repository import UserRepository
from app.school.errors import BadRequestError

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

# ===== Helpers =====

def make_cursor(documents):
    """A motor cursor whose sort() chains and to_list() resolves to `documents`."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor

def make_db():
    """A database mock handing out one collection mock per name."""
    collections = {}

    def get_collection(name):
        if name not in collections:
            collection = MagicMock()
            collection.insert_one = AsyncMock()
            collection.find_one = AsyncMock(return_value=None)
            collection.find_one_and_update = AsyncMock(return_value=None)
            collection.find_one_and_delete = AsyncMock(return_value=None)
            collection.count_documents = AsyncMock(return_value=0)
            collection.find.return_value = make_cursor([])
            collections[name] = collection
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = get_collection
    return db

def user_document(**fields):
    return {
        "_id": ObjectId(), "name": "Ada Lovelace", "email": "ada@example.com",
        "password": "$2b$04$hash", "role": "student", "createdAt": NOW, "updatedAt": NOW, **fields
    }

# ===== Identifier parsing =====

def test_to_object_id_accepts_hex_strings():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id(oid) is oid

@pytest.mark.parametrize("value", ["", "123", "zzzzzzzzzzzzzzzzzzzzzzzz", None, 42])
def test_to_object_id_rejects_malformed_values(value):
    with pytest.raises(BadRequestError) as exc_info:
        to_object_id(value)
    assert exc_info.value.message == "Invalid ID format"

def test_ensure_valid_ids_fails_on_any_bad_id():
    with pytest.raises(BadRequestError):
        ensure_valid_ids(str(ObjectId()), "bad")

# ===== UserRepository =====

@pytest.mark.asyncio
class TestUserRepository:

    async def test_create_sets_timestamps_and_id(self):
        db = make_db()
        inserted_id = ObjectId()
        db["users"].insert_one.return_value = MagicMock(inserted_id=inserted_id)
        repository = UserRepository(db)

        user = await repository.create({"name": "Ada Lovelace", "email": "ada@example.com", "password": "hash", "role": "teacher"})

        stored = db["users"].insert_one.await_args.args[0]
        assert stored["createdAt"] == stored["updatedAt"]
        assert stored["createdAt"].tzinfo is not None
        assert user.id == str(inserted_id)
        assert user.role == "teacher"

    async def test_find_by_email_normalizes(self):
        db = make_db()
        db["users"].find_one.return_value = user_document()
        repository = UserRepository(db)

        user = await repository.find_by_email("  ADA@Example.com ")

        db["users"].find_one.assert_awaited_once_with({"email": "ada@example.com"})
        assert user.name == "Ada Lovelace"

    async def test_email_exists_uses_id_projection(self):
        db = make_db()
        repository = UserRepository(db)

        assert await repository.email_exists("ada@example.com") is False
        db["users"].find_one.assert_awaited_once_with({"email": "ada@example.com"}, {"_id": 1})

    async def test_find_by_id_invalid_id_does_not_query(self):
        db = make_db()
        repository = UserRepository(db)

        with pytest.raises(BadRequestError):
            await repository.find_by_id("nope")
        db["users"].find_one.assert_not_awaited()

# ===== ClassRepository =====

@pytest.mark.asyncio
class TestClassRepository:

    async def test_create_converts_references(self):
        db = make_db()
        db["classes"].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        teacher_id, student_id = ObjectId(), ObjectId()
        repository = ClassRepository(db)

        school_class = await repository.create({"className": "Physics", "teacherId": str(teacher_id), "studentIds": [str(student_id)]})

        stored = db["classes"].insert_one.await_args.args[0]
        assert stored["teacherId"] == teacher_id
        assert stored["studentIds"] == [student_id]
        assert school_class.teacher_id == str(teacher_id)
        assert school_class.student_ids == [str(student_id)]

    async def test_update_sets_fields_and_returns_new_document(self):
        db = make_db()
        class_id, teacher_id = ObjectId(), ObjectId()
        db["classes"].find_one_and_update.return_value = {
            "_id": class_id, "className": "Chemistry", "teacherId": teacher_id, "studentIds": [],
            "createdAt": NOW, "updatedAt": NOW
        }
        repository = ClassRepository(db)

        updated = await repository.update(str(class_id), {"className": "Chemistry"})

        query, update = db["classes"].find_one_and_update.await_args.args
        assert query == {"_id": class_id}
        assert update["$set"]["className"] == "Chemistry"
        assert "updatedAt" in update["$set"]
        assert db["classes"].find_one_and_update.await_args.kwargs["return_document"] == ReturnDocument.AFTER
        assert updated.class_name == "Chemistry"

    async def test_details_populate_teacher_and_students(self):
        """
        Scenario: A class references one existing teacher, one existing student and one deleted student.
        Expected: The teacher and the live student are embedded; the dangling student is dropped.
        """
        db = make_db()
        class_id, teacher_id, student_id, gone_id = ObjectId(), ObjectId(), ObjectId(), ObjectId()
        db["classes"].find_one.return_value = {
            "_id": class_id, "className": "Biology", "teacherId": teacher_id,
            "studentIds": [student_id, gone_id], "createdAt": NOW, "updatedAt": NOW
        }
        db["users"].find.side_effect = [
            make_cursor([{"_id": teacher_id, "name": "Grace Hopper", "email": "grace@example.com", "role": "teacher"}]),
            make_cursor([{"_id": student_id, "name": "Ada Lovelace", "email": "ada@example.com", "role": "student"}]),
        ]
        repository = ClassRepository(db)

        school_class = await repository.find_by_id_with_details(str(class_id))

        assert school_class.teacher_id.name == "Grace Hopper"
        assert school_class.teacher_id.role == "teacher"
        assert [s.id for s in school_class.student_ids] == [str(student_id)]
        projection = db["users"].find.call_args_list[0].args[1]
        assert projection == {"name": 1, "email": 1, "role": 1}

    async def test_details_of_missing_class(self):
        repository = ClassRepository(make_db())
        assert await repository.find_by_id_with_details(str(ObjectId())) is None

    async def test_dangling_teacher_becomes_none(self):
        db = make_db()
        teacher_id = ObjectId()
        db["classes"].find.return_value = make_cursor([{
            "_id": ObjectId(), "className": "History", "teacherId": teacher_id, "studentIds": [],
            "createdAt": NOW, "updatedAt": NOW
        }])
        db["users"].find.return_value = make_cursor([])
        repository = ClassRepository(db)

        classes = await repository.find_by_teacher_id(str(teacher_id))

        assert classes[0].teacher_id is None
        db["classes"].find.assert_called_once_with({"teacherId": teacher_id})

    async def test_pull_student_is_atomic(self):
        db = make_db()
        class_id, student_id = ObjectId(), ObjectId()
        repository = ClassRepository(db)

        assert await repository.pull_student(str(class_id), str(student_id)) is None

        query, update = db["classes"].find_one_and_update.await_args.args
        assert query == {"_id": class_id}
        assert update["$pull"] == {"studentIds": student_id}

    async def test_is_student_enrolled(self):
        db = make_db()
        class_id, student_id = ObjectId(), ObjectId()
        db["classes"].find_one.return_value = {"_id": class_id}
        repository = ClassRepository(db)

        assert await repository.is_student_enrolled(str(class_id), str(student_id)) is True
        db["classes"].find_one.assert_awaited_once_with({"_id": class_id, "studentIds": student_id}, {"_id": 1})

# ===== AttendanceRepository =====

@pytest.mark.asyncio
class TestAttendanceRepository:

    async def test_find_by_class_sorts_newest_first_and_populates(self):
        db = make_db()
        class_id, student_id = ObjectId(), ObjectId()
        cursor = make_cursor([{
            "_id": ObjectId(), "classId": class_id, "studentId": student_id, "status": "present",
            "createdAt": NOW, "updatedAt": NOW
        }])
        db["attendances"].find.return_value = cursor
        db["classes"].find.return_value = make_cursor([{"_id": class_id, "className": "Art"}])
        db["users"].find.return_value = make_cursor([{"_id": student_id, "name": "Ada Lovelace", "email": "ada@example.com"}])
        repository = AttendanceRepository(db)

        records = await repository.find_by_class_id(str(class_id))

        cursor.sort.assert_called_once_with([("createdAt", DESCENDING)])
        assert records[0].class_id.class_name == "Art"
        assert records[0].student_id.email == "ada@example.com"
        assert db["classes"].find.call_args.args[1] == {"className": 1}
        assert db["users"].find.call_args.args[1] == {"name": 1, "email": 1}

    async def test_find_by_class_and_student_unpopulated(self):
        db = make_db()
        class_id, student_id = ObjectId(), ObjectId()
        db["attendances"].find_one.return_value = {
            "_id": ObjectId(), "classId": class_id, "studentId": student_id, "status": "absent",
            "createdAt": NOW, "updatedAt": NOW
        }
        repository = AttendanceRepository(db)

        record = await repository.find_by_class_and_student(str(class_id), str(student_id), populate=False)

        assert record.class_id == str(class_id)
        db["attendances"].find_one.assert_awaited_once_with(
            {"classId": class_id, "studentId": student_id}, sort=[("createdAt", DESCENDING)]
        )
        db["classes"].find.assert_not_called()

    async def test_count_by_class_with_status(self):
        db = make_db()
        db["attendances"].count_documents.return_value = 2
        class_id = ObjectId()
        repository = AttendanceRepository(db)

        assert await repository.count_by_class(str(class_id), status="present") == 2
        db["attendances"].count_documents.assert_awaited_once_with({"classId": class_id, "status": "present"})

    async def test_find_by_date_range_query(self):
        """
        Scenario: Records are requested for a class between two instants.
        Expected: An inclusive createdAt range filtered by class, newest first.
        """
        db = make_db()
        class_id = ObjectId()
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        end = datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc)
        repository = AttendanceRepository(db)

        assert await repository.find_by_date_range(start, end, str(class_id)) == []
        db["attendances"].find.assert_called_once_with(
            {"createdAt": {"$gte": start, "$lte": end}, "classId": class_id}
        )
        db["attendances"].find.return_value.sort.assert_called_once_with([("createdAt", DESCENDING)])
