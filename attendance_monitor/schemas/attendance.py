from datetime import datetime, time
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from attendance_monitor.schemas.base import CamelModel
from attendance_monitor.utils.record_helper import to_naive_utc


def _stored_timestamp(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else None


class AttendanceCreate(BaseModel):
    """A single attendance row as submitted by a client. Required ids are checked in crud."""
    lecture_id: Optional[str] = Field(None, validation_alias=AliasChoices("lecture_id", "lectureId", "lecture"))
    student_id: Optional[str] = Field(None, validation_alias=AliasChoices("student_id", "studentId"))
    is_present: bool = Field(False, validation_alias=AliasChoices("is_present", "isPresent"))
    date: Optional[datetime] = Field(None, validation_alias=AliasChoices("date", "Date"))
    faculty_id: Optional[str] = Field(None, validation_alias=AliasChoices("faculty_id", "facultyId"))
    remark: Optional[str] = Field(None, validation_alias=AliasChoices("remark", "Remark"))

    normalise_date = field_validator("date", mode="after")(_stored_timestamp)


class AttendanceUpdate(BaseModel):
    lecture_id: Optional[str] = None
    student_id: Optional[str] = None
    is_present: Optional[bool] = None
    date: Optional[datetime] = None
    faculty_id: Optional[str] = None
    remark: Optional[str] = None

    normalise_date = field_validator("date", mode="after")(_stored_timestamp)


class AttendanceBatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attendance_records: List[AttendanceCreate] = Field(..., alias="attendanceRecords")


class BulkAttendanceRequest(CamelModel):
    lecture_id: str
    present_ids: List[Optional[str]] = []
    absent_ids: List[Optional[str]] = []
    date: Optional[datetime] = None
    faculty_id: Optional[str] = None
    remark: Optional[str] = None

    normalise_date = field_validator("date", mode="after")(_stored_timestamp)


class AttendanceRecordResponse(BaseModel):
    id: str
    lecture_id: str
    student_id: str
    is_present: bool
    date: Optional[datetime] = None
    faculty_id: Optional[str] = None
    remark: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LectureAttendance(AttendanceRecordResponse):
    """Attendance row with its lecture's subject, faculty and department names"""
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None
    faculty_name: Optional[str] = None
    lecture_faculty_id: Optional[str] = None
    department_name: Optional[str] = None
    time_from: Optional[time] = None
    time_to: Optional[time] = None


class EnrichedAttendance(LectureAttendance):
    """LectureAttendance plus the student's display fields"""
    student_first_name: str = ""
    student_last_name: str = ""
    student_email: Optional[str] = None
    student_roll_no: Optional[str] = None
    student_department: Optional[str] = None


class LectureStatusEntry(BaseModel):
    student_first_name: Optional[str] = None
    student_last_name: Optional[str] = None
    student_email: Optional[str] = None
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    faculty_name: Optional[str] = None


class LectureStatus(BaseModel):
    presentees: List[LectureStatusEntry] = []
    absentees: List[LectureStatusEntry] = []
