from datetime import time
from typing import Optional

from pydantic import BaseModel


class TimetableEntry(BaseModel):
    """A timetable row flattened with its subject, faculty and department"""
    id: str
    subject_id: Optional[str] = None
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = None
    faculty_email: Optional[str] = None
    department: Optional[str] = None
    division: Optional[int] = None
    batch: Optional[str] = None
    semester: Optional[int] = None
    lecture_type: Optional[str] = None
    time_from: Optional[time] = None
    time_to: Optional[time] = None
