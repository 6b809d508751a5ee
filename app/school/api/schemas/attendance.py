from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from ...models.db_models import AttendanceStatus

EntityId = Annotated[str, StringConstraints(min_length=1)]


class AttendanceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttendanceCreateRequest(AttendanceRequest):
    """Request model for creating an attendance record directly."""
    class_id: EntityId
    student_id: EntityId
    status: AttendanceStatus = "absent"


class AttendanceUpdateRequest(AttendanceRequest):
    class_id: Optional[EntityId] = None
    student_id: Optional[EntityId] = None
    status: Optional[AttendanceStatus] = None


class MarkAttendanceRequest(AttendanceRequest):
    status: AttendanceStatus


def as_utc(value: datetime) -> datetime:
    """Naive datetimes from query strings are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DateRangeQuery(AttendanceRequest):
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def normalize_timezones(self):
        self.start_date = as_utc(self.start_date)
        self.end_date = as_utc(self.end_date)
        return self
