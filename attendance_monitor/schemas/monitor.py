from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import ConfigDict, field_validator

from attendance_monitor.schemas.attendance import EnrichedAttendance
from attendance_monitor.schemas.base import CamelModel
from attendance_monitor.utils.record_helper import parse_timestamp, to_naive_utc

# Dashboard select values that mean "no filter"
ALL_SENTINELS = {
    "All Departments",
    "All Subjects",
    "All Teachers",
    "All Counselors",
    "All Students",
}


class AttendanceStatus(str, Enum):
    """Attendance tiers, lowest first"""
    CRITICAL = "Critical"
    WARNING = "Warning"
    GOOD = "Good"
    EXCELLENT = "Excellent"


class MonitorFilters(CamelModel):
    """Immutable filter state for one attendance-monitor request"""
    model_config = ConfigDict(frozen=True)

    department: Optional[str] = None
    subject: Optional[str] = None
    teacher: Optional[str] = None
    counselor: Optional[str] = None
    id_range: Optional[str] = None
    date: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("department", "subject", "teacher", "counselor", "id_range", "date", mode="before")
    @classmethod
    def drop_sentinels(cls, value):
        if value is None:
            return None
        if isinstance(value, str) and (value.strip() == "" or value in ALL_SENTINELS):
            return None
        return value

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def parse_range_bound(cls, value):
        if isinstance(value, str):
            if value.strip() == "":
                return None
            return parse_timestamp(value)
        if isinstance(value, datetime):
            return to_naive_utc(value)
        return value


class StudentAttendanceSummary(CamelModel):
    student_id: str
    roll_no: Optional[str] = None
    name: str
    email: Optional[str] = None
    division: Optional[int] = None
    batch: Optional[str] = None
    semester: Optional[int] = None
    department: str = ""
    counselor: Optional[str] = None
    attendance_percentage: int
    status: AttendanceStatus
    sessions_attended: int
    total_sessions: int
    recent_attendance: List[EnrichedAttendance] = []


class MonitorSummary(CamelModel):
    total_students: int = 0
    excellent_count: int = 0
    good_count: int = 0
    warning_count: int = 0
    critical_count: int = 0
    average_attendance: int = 0


class MonitorReport(CamelModel):
    students: List[StudentAttendanceSummary] = []
    attendance_records: List[EnrichedAttendance] = []
    summary: MonitorSummary = MonitorSummary()


class DepartmentOption(CamelModel):
    id: str
    name: str
    abbrev: str


class SubjectOption(CamelModel):
    id: Optional[str] = None
    code: str
    name: str
    department: Optional[str] = None
    semester: Optional[int] = None


class FacultyOption(CamelModel):
    id: str
    name: str
    email: str = ""


class FilterOptions(CamelModel):
    departments: List[DepartmentOption] = []
    subjects: List[SubjectOption] = []
    faculty: List[FacultyOption] = []
    divisions: List[int] = []
    batches: List[str] = []
    semesters: List[int] = []
    student_id_ranges: Dict[str, str] = {}
