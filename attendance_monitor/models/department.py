import uuid

from sqlalchemy import Column, String

from attendance_monitor.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, unique=True)
    abbreviation = Column(String(32), nullable=True)
