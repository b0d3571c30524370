import os
from datetime import time

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from attendance_monitor.database import database  # noqa: E402
from attendance_monitor.main import app  # noqa: E402
from attendance_monitor.models.department import Department  # noqa: E402
from attendance_monitor.models.faculty import Faculty  # noqa: E402
from attendance_monitor.models.student import Student  # noqa: E402
from attendance_monitor.models.subject import Subject  # noqa: E402
from attendance_monitor.models.timetable import Timetable  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_session():
    """Fresh in-memory database per test, bound to the global database the app uses"""
    await database.connect(TEST_DATABASE_URL)
    await database.create_tables()
    async with database.get_session() as session:
        yield session
    await database.disconnect()


@pytest_asyncio.fixture
async def seeded(db_session):
    db_session.add_all([
        Department(id="dep-ce", name="Computer Engineering", abbreviation="DCE"),
        Department(id="dep-it", name="Information Technology", abbreviation="DIT"),
        Faculty(id="fac-1", name="Asha Patel", email="asha.patel@college.edu"),
        Faculty(id="fac-2", name="Rohan Mehta", email="rohan.mehta@college.edu"),
    ])
    await db_session.flush()
    db_session.add_all([
        Subject(id="sub-dbms", code="CE501", name="Database Management Systems", department_id="dep-ce", semester=5),
        Subject(id="sub-os", code="IT301", name="Operating Systems", department_id="dep-it", semester=3),
    ])
    await db_session.flush()
    db_session.add_all([
        Timetable(id="lec-1", subject_id="sub-dbms", faculty_id="fac-1", department_id="dep-ce",
                  division=1, semester=5, lecture_type="lecture", time_from=time(9, 0), time_to=time(10, 0)),
        Timetable(id="lec-2", subject_id="sub-os", faculty_id="fac-2", department_id="dep-it",
                  division=2, batch="B1", semester=3, lecture_type="lab", time_from=time(11, 0), time_to=time(13, 0)),
        Student(id="stu-1", roll_no="22DCE001", name="Aarav Kumar Shah", guardian_email="shah.family@mail.com",
                department="DCE", division=1, batch="A1", semester=5, counselor="Asha Patel"),
        Student(id="stu-2", roll_no="22DCE010", name="Diya Rao", guardian_email="rao.family@mail.com",
                department="DCE", division=1, batch="A2", semester=5, counselor="Rohan Mehta"),
        Student(id="stu-3", roll_no="22DIT005", name="Kabir", guardian_email="kabir.home@mail.com",
                department="DIT", division=2, batch="B1", semester=3, counselor="Asha Patel"),
        Student(id="stu-4", roll_no="22DCE002", name=None, department="DCE", division=1, batch="A1", semester=5),
    ])
    await db_session.commit()
    return db_session


@pytest_asyncio.fixture
async def client(seeded):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
