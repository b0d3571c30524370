from typing import Optional

from attendance_monitor.schemas.base import CamelModel

DEFAULT_PHOTO = "/student1.png"


class RosterStudent(CamelModel):
    """One row of the attendance-marking roster for a lecture"""
    id: str
    student_id: str
    name: str
    photo: str = DEFAULT_PHOTO
    counselor_name: str = "Not Assigned"
    present: bool = True
    division: Optional[int] = None
    batch: Optional[str] = None
    semester: Optional[int] = None
    department: Optional[str] = None
