"""Unit tests for dashboard and report composition."""

from grade_tracker.config import SUBJECTS, EXAMS
from grade_tracker.models import MarkRecord, StatusLabel, Student
from grade_tracker.reports import (
    find_student_for_session,
    student_dashboard,
    student_report,
    teacher_dashboard,
)


def make_student(student_id, email, percent=None):
    return Student(
        id=student_id,
        name=student_id.title(),
        student_code=student_id.upper(),
        class_name='10-A',
        email=email,
        overall_percent=percent,
    )


def make_record(record_id, student_id, exam, scores):
    marks = dict(zip(SUBJECTS, scores))
    total = float(sum(scores))
    return MarkRecord(
        id=record_id,
        student_id=student_id,
        exam=exam,
        marks=marks,
        total=total,
        percent=round(total / 4, 2)
    )


STUDENTS = [
    make_student('asha', 'Asha@School.test', 72.5),
    make_student('ravi', 'ravi@school.test', 45.0),
    make_student('meera', 'meera@school.test'),
]

RECORDS = [
    make_record('m1', 'asha', 'Mid 1', [90, 60, 70, 80]),
    make_record('m2', 'asha', 'Final', [80, 50, 70, 90]),
    make_record('m3', 'ravi', 'Mid 1', [40, 50, 45, 45]),
    make_record('m4', 'gone', 'Mid 1', [100, 100, 100, 100]),
]


def test_find_student_for_session_ignores_case():
    assert find_student_for_session(STUDENTS, 'asha@school.test').id == 'asha'
    assert find_student_for_session(STUDENTS, 'nobody@school.test') is None
    assert find_student_for_session(STUDENTS, None) is None


def test_student_dashboard():
    dashboard = student_dashboard(STUDENTS, RECORDS, 'asha@school.test')

    assert dashboard.student.id == 'asha'
    assert dashboard.status == StatusLabel.AVERAGE
    # Mathematics 85 vs Computer Science 85: first in order wins
    assert dashboard.strength.subject == 'Mathematics'
    assert dashboard.strength.average == 85.0
    assert dashboard.weakness.subject == 'Science'

    assert [row['exam'] for row in dashboard.exam_chart] == EXAMS
    assert dashboard.exam_chart[0]['Mathematics'] == 0
    assert dashboard.exam_chart[1]['Mathematics'] == 90.0
    assert dashboard.exam_chart[3]['Computer Science'] == 90.0


def test_student_dashboard_without_student():
    dashboard = student_dashboard(STUDENTS, RECORDS, 'stranger@school.test')

    assert dashboard.student is None
    assert dashboard.status == StatusLabel.NOT_EVALUATED
    assert dashboard.strength.subject == '-'
    assert all(row[s] == 0 for row in dashboard.exam_chart for s in SUBJECTS)


def test_student_report():
    report = student_report(STUDENTS, RECORDS, 'ravi@school.test')

    assert report.status == StatusLabel.AT_RISK
    assert [row.grade for row in report.exam_summary] == ['-', 'D', '-', '-']
    assert report.exam_summary[1].total == 180.0
    assert [a.average for a in report.subject_summary] == [40.0, 50.0, 45.0, 45.0]
    assert report.strength.subject == 'Science'
    assert report.weakness.subject == 'Mathematics'


def test_student_report_no_match():
    assert student_report(STUDENTS, RECORDS, 'stranger@school.test') is None


def test_teacher_dashboard():
    dashboard = teacher_dashboard(STUDENTS, RECORDS)

    assert dashboard.total_students == 3
    assert dashboard.class_average == 58.75
    assert dashboard.counts.top_count == 0
    assert dashboard.counts.avg_count == 1
    assert dashboard.counts.risk_count == 1

    # Orphaned record m4 is part of the class averages
    by_subject = {a.subject: a.average for a in dashboard.subject_averages}
    assert by_subject['Mathematics'] == 77.5
    assert [s.id for s in dashboard.top_performers] == ['asha', 'ravi']
    assert [s.id for s in dashboard.at_risk] == ['ravi']
