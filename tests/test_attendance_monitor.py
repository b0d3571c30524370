from datetime import datetime

import pytest

from attendance_monitor.models.student import Student
from attendance_monitor.schemas.attendance import EnrichedAttendance
from attendance_monitor.schemas.monitor import AttendanceStatus, MonitorFilters
from attendance_monitor.services.attendance_monitor import (
    attendance_percentage,
    build_monitor_report,
    classify,
    classify_percentage,
    filter_attendance,
    get_department_abbreviation,
    get_department_full_name,
    summarize,
)

STATUS_RANK = [
    AttendanceStatus.CRITICAL,
    AttendanceStatus.WARNING,
    AttendanceStatus.GOOD,
    AttendanceStatus.EXCELLENT,
]


def make_student(student_id, roll_no=None, department="DCE", counselor=None, name="Test Student"):
    return Student(
        id=student_id,
        roll_no=roll_no or f"22{department}{student_id[-3:]}",
        name=name,
        guardian_email=f"{student_id}@mail.com",
        department=department,
        division=1,
        batch="A1",
        semester=5,
        counselor=counselor,
    )


_counter = iter(range(1, 100000))


def make_record(student_id, present=True, date=None, subject_code="CE501",
                subject_name="Database Management Systems", faculty_name="Asha Patel", faculty_id=None,
                lecture_faculty_id="fac-1"):
    return EnrichedAttendance(
        id=f"att-{next(_counter)}",
        lecture_id="lec-1",
        student_id=student_id,
        is_present=present,
        date=date,
        faculty_id=faculty_id,
        lecture_faculty_id=lecture_faculty_id,
        subject_code=subject_code,
        subject_name=subject_name,
        faculty_name=faculty_name,
    )


def test_student_without_sessions_is_critical():
    summaries = classify([make_student("s1")], [])

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.attendance_percentage == 0
    assert summary.status == AttendanceStatus.CRITICAL
    assert summary.sessions_attended == 0
    assert summary.total_sessions == 0


def test_seventeen_of_twenty_is_excellent():
    records = [make_record("s1", present=i < 17) for i in range(20)]

    summary = classify([make_student("s1")], records)[0]

    assert summary.total_sessions == 20
    assert summary.sessions_attended == 17
    assert summary.attendance_percentage == 85
    assert summary.status == AttendanceStatus.EXCELLENT


@pytest.mark.parametrize("percentage, expected", [
    (100, AttendanceStatus.EXCELLENT),
    (85, AttendanceStatus.EXCELLENT),
    (84, AttendanceStatus.GOOD),
    (75, AttendanceStatus.GOOD),
    (74, AttendanceStatus.WARNING),
    (65, AttendanceStatus.WARNING),
    (64, AttendanceStatus.CRITICAL),
    (0, AttendanceStatus.CRITICAL),
])
def test_status_thresholds(percentage, expected):
    assert classify_percentage(percentage) == expected


def test_percentage_rounds_half_up():
    # 1/8 = 12.5%, banker's rounding would give 12
    assert attendance_percentage(1, 8) == 13
    assert attendance_percentage(2, 3) == 67
    assert attendance_percentage(0, 0) == 0


def test_more_sessions_attended_never_lowers_status():
    total = 20
    previous_percentage = -1
    previous_rank = -1
    for attended in range(total + 1):
        percentage = attendance_percentage(attended, total)
        rank = STATUS_RANK.index(classify_percentage(percentage))
        assert percentage >= previous_percentage
        assert rank >= previous_rank
        previous_percentage, previous_rank = percentage, rank


def test_summary_of_no_students_averages_zero():
    summary = summarize([])

    assert summary.total_students == 0
    assert summary.average_attendance == 0


def test_summary_of_single_student_uses_its_percentage():
    records = [make_record("s1", present=i < 2) for i in range(3)]
    summaries = classify([make_student("s1")], records)

    summary = summarize(summaries)

    assert summary.average_attendance == summaries[0].attendance_percentage == 67
    assert summary.warning_count == 1
    assert summary.total_students == 1


def test_summary_counts_each_status():
    students = [make_student(f"s{i}") for i in range(1, 5)]
    records = (
        [make_record("s1", present=True)] +
        [make_record("s2", present=i < 3) for i in range(4)] +
        [make_record("s3", present=i < 2) for i in range(3)] +
        [make_record("s4", present=False)]
    )

    summary = summarize(classify(students, records))

    assert summary.excellent_count == 1
    assert summary.good_count == 1
    assert summary.warning_count == 1
    assert summary.critical_count == 1
    # (100 + 75 + 67 + 0) / 4 = 60.5
    assert summary.average_attendance == 61


def test_department_filter_translates_full_name_to_abbreviation():
    students = [
        make_student("s1", department="DCE"),
        make_student("s2", department="DIT"),
        make_student("s3", department="DCE"),
    ]

    summaries = classify(students, [], MonitorFilters(department="Computer Engineering"))

    assert [s.student_id for s in summaries] == ["s1", "s3"]
    assert all(s.department == "Computer Engineering" for s in summaries)


def test_unmapped_department_names_pass_through():
    assert get_department_abbreviation("Chemical Engineering") == "Chemical Engineering"
    assert get_department_full_name("DCHE") == "DCHE"
    assert get_department_full_name("AI-ML") == "Artificial Intelligence and Machine Learning"


def test_sentinel_filters_mean_no_filter():
    filters = MonitorFilters(
        department="All Departments",
        subject="All Subjects",
        teacher="All Teachers",
        counselor="All Counselors",
        id_range="All Students",
        date="",
    )
    students = [make_student("s1", department="DCE"), make_student("s2", department="DIT")]

    assert filters.department is None
    assert len(classify(students, [make_record("s1")], filters)) == 2


def test_counselor_filter_is_exact():
    students = [
        make_student("s1", counselor="Asha Patel"),
        make_student("s2", counselor="Rohan Mehta"),
        make_student("s3", counselor="asha patel"),
    ]

    summaries = classify(students, [], MonitorFilters(counselor="Asha Patel"))

    assert [s.student_id for s in summaries] == ["s1"]


def test_id_range_matches_leading_token_of_roll_number():
    students = [
        make_student("s1", roll_no="22DCE001"),
        make_student("s2", roll_no="22DCE060"),
        make_student("s3", roll_no="X22DCE001"),
    ]

    summaries = classify(students, [], MonitorFilters(id_range="22DCE001 to 22DCE060"))

    assert [s.student_id for s in summaries] == ["s1", "s3"]


def test_date_range_is_inclusive_and_keeps_undated_records():
    records = [
        make_record("s1", date=datetime(2024, 9, 1, 9, 0)),
        make_record("s1", date=datetime(2024, 9, 10, 9, 0)),
        make_record("s1", date=datetime(2024, 9, 20, 9, 0)),
        make_record("s1", date=None),
    ]
    filters = MonitorFilters(date_from="2024-09-01T09:00:00", date_to="2024-09-10T09:00:00")

    kept = filter_attendance(records, filters)

    assert [r.id for r in kept] == [records[0].id, records[1].id, records[3].id]


def test_single_day_filter_uses_day_month_year():
    records = [
        make_record("s1", date=datetime(2024, 9, 16, 9, 30)),
        make_record("s1", date=datetime(2024, 9, 17, 9, 30)),
        make_record("s1", date=None),
    ]

    kept = filter_attendance(records, MonitorFilters(date="16/09/2024"))

    assert [r.id for r in kept] == [records[0].id]


def test_subject_filter_matches_code_or_name_fragment():
    records = [
        make_record("s1", subject_code="CE501", subject_name="Database Management Systems"),
        make_record("s1", subject_code="IT301", subject_name="Operating Systems"),
        make_record("s1", subject_code="CE502", subject_name="Advanced Database Design"),
        make_record("s1", subject_code=None, subject_name=None),
    ]

    by_code = filter_attendance(records, MonitorFilters(subject="IT301"))
    by_name = filter_attendance(records, MonitorFilters(subject="Database"))

    assert [r.subject_code for r in by_code] == ["IT301"]
    assert [r.subject_code for r in by_name] == ["CE501", "CE502"]


def test_teacher_filter_matches_faculty_name_or_id():
    records = [
        make_record("s1", faculty_name="Asha Patel", lecture_faculty_id="fac-1"),
        make_record("s1", faculty_name="Rohan Mehta", lecture_faculty_id="fac-2"),
        make_record("s1", faculty_name=None, lecture_faculty_id=None, faculty_id="fac-3"),
    ]

    assert len(filter_attendance(records, MonitorFilters(teacher="Rohan Mehta"))) == 1
    assert len(filter_attendance(records, MonitorFilters(teacher="fac-1"))) == 1
    assert len(filter_attendance(records, MonitorFilters(teacher="fac-3"))) == 1


def test_recent_attendance_is_last_ten_in_arrival_order():
    records = [make_record("s1", date=datetime(2024, 9, 30 - i)) for i in range(12)]

    summary = classify([make_student("s1")], records)[0]

    assert [r.id for r in summary.recent_attendance] == [r.id for r in records[-10:]]


def test_missing_student_name_is_reported_as_unknown():
    summary = classify([make_student("s1", name=None)], [])[0]

    assert summary.name == "Unknown Student"


def test_report_serialises_with_dashboard_keys():
    students = [make_student("s1"), make_student("s2")]
    records = [make_record("s1", present=True), make_record("s2", present=False)]

    report = build_monitor_report(students, records, MonitorFilters())
    payload = report.model_dump(by_alias=True)

    assert set(payload) == {"students", "attendanceRecords", "summary"}
    assert payload["summary"]["totalStudents"] == 2
    assert payload["summary"]["averageAttendance"] == 50
    first = payload["students"][0]
    assert first["attendancePercentage"] == 100
    assert first["status"] == AttendanceStatus.EXCELLENT
    assert "sessionsAttended" in first and "recentAttendance" in first
