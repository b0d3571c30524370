import uuid

from sqlalchemy import Column, Integer, String

from attendance_monitor.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    roll_no = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    guardian_email = Column(String(255), nullable=True)
    # Stored as the department abbreviation, e.g. "DCE"
    department = Column(String(64), nullable=True, index=True)
    division = Column(Integer, nullable=True)
    batch = Column(String(32), nullable=True)
    semester = Column(Integer, nullable=True)
    counselor = Column(String(255), nullable=True)
