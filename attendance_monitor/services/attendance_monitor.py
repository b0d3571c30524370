import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from attendance_monitor.models.student import Student
from attendance_monitor.schemas.attendance import EnrichedAttendance
from attendance_monitor.schemas.monitor import (
    AttendanceStatus,
    MonitorFilters,
    MonitorReport,
    MonitorSummary,
    StudentAttendanceSummary,
)
from attendance_monitor.utils.record_helper import format_display_date

logger = logging.getLogger(__name__)

# Full department name -> abbreviation stored on student rows
DEPARTMENT_MAPPING: Dict[str, str] = {
    "Computer Engineering": "DCE",
    "Computer Science and Engineering": "DCSE",
    "Information Technology": "DIT",
    "Artificial Intelligence and Machine Learning": "AI-ML",
    "Civil Engineering": "CE",
    "Mechanical Engineering": "ME",
    "Electrical Engineering": "EE",
    "Electronics and Communication Engineering": "ECE",
}

_REVERSE_DEPARTMENT_MAPPING: Dict[str, str] = {abbr: name for name, abbr in DEPARTMENT_MAPPING.items()}

RECENT_ATTENDANCE_LIMIT = 10
UNKNOWN_STUDENT_NAME = "Unknown Student"


@dataclass(frozen=True)
class StatusThresholds:
    """Minimum percentage for each tier above Critical"""
    excellent: int = 85
    good: int = 75
    warning: int = 65


DEFAULT_THRESHOLDS = StatusThresholds()


def get_department_abbreviation(department_name: str) -> str:
    return DEPARTMENT_MAPPING.get(department_name, department_name)


def get_department_full_name(abbreviation: str) -> str:
    return _REVERSE_DEPARTMENT_MAPPING.get(abbreviation, abbreviation)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def attendance_percentage(sessions_attended: int, total_sessions: int) -> int:
    if total_sessions <= 0:
        return 0
    return round_half_up(sessions_attended / total_sessions * 100)


def classify_percentage(percentage: int, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> AttendanceStatus:
    """First matching tier from the top wins"""
    if percentage >= thresholds.excellent:
        return AttendanceStatus.EXCELLENT
    if percentage >= thresholds.good:
        return AttendanceStatus.GOOD
    if percentage >= thresholds.warning:
        return AttendanceStatus.WARNING
    return AttendanceStatus.CRITICAL


def _matches_subject(record: EnrichedAttendance, subject: str) -> bool:
    if record.subject_code == subject:
        return True
    return bool(record.subject_name) and subject in record.subject_name


def filter_attendance(records: Sequence[EnrichedAttendance], filters: MonitorFilters) -> List[EnrichedAttendance]:
    """
    Narrow attendance rows by date range, single day, subject and teacher.

    Rows without a date always pass the range filter but never match a single day.
    """
    filtered = list(records)

    if filters.date_from or filters.date_to:
        def in_range(record: EnrichedAttendance) -> bool:
            if record.date is None:
                return True
            if filters.date_from and record.date < filters.date_from:
                return False
            if filters.date_to and record.date > filters.date_to:
                return False
            return True

        filtered = [record for record in filtered if in_range(record)]

    if filters.date:
        filtered = [
            record for record in filtered
            if record.date is not None and format_display_date(record.date) == filters.date
        ]

    if filters.subject:
        filtered = [record for record in filtered if _matches_subject(record, filters.subject)]

    if filters.teacher:
        # Lecture's faculty first; the row's own faculty_id is often dropped on insert
        filtered = [
            record for record in filtered
            if filters.teacher in (record.faculty_name, record.lecture_faculty_id, record.faculty_id)
        ]

    return filtered


def filter_students(students: Sequence[Student], filters: MonitorFilters) -> List[Student]:
    """Narrow students by department, counselor and roll-number range"""
    filtered = list(students)

    if filters.department:
        department_abbr = get_department_abbreviation(filters.department)
        filtered = [student for student in filtered if student.department == department_abbr]

    if filters.counselor:
        filtered = [student for student in filtered if student.counselor == filters.counselor]

    if filters.id_range:
        # Ranges look like "22DCE001 to 22DCE060"; only the leading token is matched
        range_token = filters.id_range.split(" ")[0]
        filtered = [
            student for student in filtered
            if student.roll_no is not None and range_token in student.roll_no
        ]

    return filtered


def summarize_student(
        student: Student,
        attendance: Sequence[EnrichedAttendance],
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS
) -> StudentAttendanceSummary:
    """Attendance figures for one student over already-filtered attendance rows"""
    student_attendance = [record for record in attendance if record.student_id == student.id]

    total_sessions = len(student_attendance)
    sessions_attended = sum(1 for record in student_attendance if record.is_present)
    percentage = attendance_percentage(sessions_attended, total_sessions)

    return StudentAttendanceSummary(
        student_id=student.id,
        roll_no=student.roll_no,
        name=student.name or UNKNOWN_STUDENT_NAME,
        email=student.guardian_email,
        division=student.division,
        batch=student.batch,
        semester=student.semester,
        department=get_department_full_name(student.department or ""),
        counselor=student.counselor,
        attendance_percentage=percentage,
        status=classify_percentage(percentage, thresholds),
        sessions_attended=sessions_attended,
        total_sessions=total_sessions,
        # Positional slice: rows are not re-sorted by date
        recent_attendance=student_attendance[-RECENT_ATTENDANCE_LIMIT:],
    )


def classify(
        students: Sequence[Student],
        attendance: Sequence[EnrichedAttendance],
        filters: Optional[MonitorFilters] = None,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS
) -> List[StudentAttendanceSummary]:
    """
    Compute a StudentAttendanceSummary for every student left after filtering.

    Args:
        students: Student rows
        attendance: Enriched attendance rows
        filters: Dashboard filter state; None means no filtering
        thresholds: Status tier boundaries

    Returns:
        One summary per remaining student, in student order
    """
    filters = filters or MonitorFilters()
    filtered_attendance = filter_attendance(attendance, filters)
    filtered_students = filter_students(students, filters)
    return [summarize_student(student, filtered_attendance, thresholds) for student in filtered_students]


def summarize(summaries: Sequence[StudentAttendanceSummary]) -> MonitorSummary:
    """Per-status counts and the rounded mean percentage"""
    counts = {status: 0 for status in AttendanceStatus}
    for summary in summaries:
        counts[summary.status] += 1

    average = 0
    if summaries:
        average = round_half_up(sum(s.attendance_percentage for s in summaries) / len(summaries))

    return MonitorSummary(
        total_students=len(summaries),
        excellent_count=counts[AttendanceStatus.EXCELLENT],
        good_count=counts[AttendanceStatus.GOOD],
        warning_count=counts[AttendanceStatus.WARNING],
        critical_count=counts[AttendanceStatus.CRITICAL],
        average_attendance=average,
    )


def build_monitor_report(
        students: Sequence[Student],
        attendance: Sequence[EnrichedAttendance],
        filters: Optional[MonitorFilters] = None
) -> MonitorReport:
    """Everything the monitor dashboard shows for one filter state"""
    filters = filters or MonitorFilters()
    filtered_attendance = filter_attendance(attendance, filters)
    filtered_students = filter_students(students, filters)
    summaries = [summarize_student(student, filtered_attendance) for student in filtered_students]

    logger.info(
        f"Attendance monitor: {len(summaries)} students, "
        f"{len(filtered_attendance)} of {len(attendance)} attendance records after filters"
    )

    return MonitorReport(
        students=summaries,
        attendance_records=filtered_attendance,
        summary=summarize(summaries),
    )
