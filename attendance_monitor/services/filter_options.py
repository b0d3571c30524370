import logging
from typing import Dict, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_monitor.crud.student import get_all_students
from attendance_monitor.crud.timetable import get_all_timetables
from attendance_monitor.models.student import Student
from attendance_monitor.schemas.monitor import (
    DepartmentOption,
    FacultyOption,
    FilterOptions,
    SubjectOption,
)
from attendance_monitor.schemas.timetable import TimetableEntry

logger = logging.getLogger(__name__)

UNKNOWN_DEPARTMENT = "Unknown"


def _department_options(students: Sequence[Student]) -> List[DepartmentOption]:
    seen: Dict[str, DepartmentOption] = {}
    for student in students:
        name = student.department
        if name and name not in seen:
            seen[name] = DepartmentOption(id=name, name=name, abbrev=name)
    return sorted(seen.values(), key=lambda option: option.name)


def _subject_options(timetables: Sequence[TimetableEntry]) -> List[SubjectOption]:
    seen: Dict[str, SubjectOption] = {}
    for entry in timetables:
        if entry.subject_code and entry.subject_code not in seen:
            seen[entry.subject_code] = SubjectOption(
                id=entry.subject_id,
                code=entry.subject_code,
                name=entry.subject_name or "",
                department=entry.department,
                semester=entry.semester,
            )
    return sorted(seen.values(), key=lambda option: option.name)


def _faculty_options(timetables: Sequence[TimetableEntry]) -> List[FacultyOption]:
    seen: Dict[str, FacultyOption] = {}
    for entry in timetables:
        if entry.faculty_id and entry.faculty_id not in seen:
            seen[entry.faculty_id] = FacultyOption(
                id=entry.faculty_id,
                name=entry.faculty_name or "",
                email=entry.faculty_email or "",
            )
    return sorted(seen.values(), key=lambda option: option.name)


def roll_number_ranges(students: Sequence[Student]) -> Dict[str, str]:
    """
    "first to last" roll number per department.

    Roll numbers are compared as strings, so "10" sorts before "9".
    """
    grouped: Dict[str, List[str]] = {}
    for student in students:
        department = student.department or UNKNOWN_DEPARTMENT
        grouped.setdefault(department, [])
        if student.roll_no:
            grouped[department].append(str(student.roll_no))

    ranges = {}
    for department, roll_numbers in grouped.items():
        if roll_numbers:
            roll_numbers.sort()
            ranges[department] = f"{roll_numbers[0]} to {roll_numbers[-1]}"
    return ranges


def compute_filter_options(students: Sequence[Student], timetables: Sequence[TimetableEntry]) -> FilterOptions:
    """Derive every dashboard filter choice from the current students and timetable"""
    divisions = sorted({int(student.division) for student in students if student.division})
    batches = sorted({str(student.batch) for student in students if student.batch})
    semesters = sorted({int(student.semester) for student in students if student.semester})

    return FilterOptions(
        departments=_department_options(students),
        subjects=_subject_options(timetables),
        faculty=_faculty_options(timetables),
        divisions=divisions,
        batches=batches,
        semesters=semesters,
        student_id_ranges=roll_number_ranges(students),
    )


async def load_filter_options(db: AsyncSession) -> FilterOptions:
    """Read students and timetable, then derive options. Any read failure fails the whole call."""
    students = await get_all_students(db)
    timetables = await get_all_timetables(db)
    logger.info(f"Building filter options from {len(students)} students and {len(timetables)} timetable entries")
    return compute_filter_options(students, timetables)
