"""Dashboard and report composition for students and teachers."""

from typing import Dict, List, Optional, Sequence

from grade_tracker.aggregation import (
    exam_summary,
    find_exam_record,
    strength_and_weakness,
    subject_averages,
)
from grade_tracker.cohort import (
    class_average,
    class_subject_averages,
    ranked_at_risk,
    ranked_top,
    status_counts,
)
from grade_tracker.config import SUBJECTS, EXAMS
from grade_tracker.models import (
    MarkRecord,
    StatusLabel,
    Student,
    StudentDashboard,
    StudentReport,
    SubjectAverage,
    TeacherDashboard,
)
from grade_tracker.status import classify, clean_percent

PLACEHOLDER = SubjectAverage(subject='-', average=0.0)


def find_student_for_session(students: Sequence[Student], email: Optional[str]) -> Optional[Student]:
    """Student whose email matches the session email, ignoring case."""
    if not email:
        return None
    wanted = email.strip().lower()
    return next((s for s in students if s.email.strip().lower() == wanted), None)


def records_for_student(records: Sequence[MarkRecord], student: Optional[Student]) -> List[MarkRecord]:
    if student is None:
        return []
    return [r for r in records if r.student_id == student.id]


def exam_chart(records: Sequence[MarkRecord]) -> List[Dict[str, object]]:
    """One row per exam with each subject's score, 0 when missing."""
    rows = []
    for exam in EXAMS:
        record = find_exam_record(records, exam)
        row: Dict[str, object] = {'exam': exam}
        for subject in SUBJECTS:
            score = clean_percent(record.marks.get(subject)) if record else None
            row[subject] = score if score is not None else 0
        rows.append(row)
    return rows


def student_dashboard(
    students: Sequence[Student],
    records: Sequence[MarkRecord],
    email: Optional[str]
) -> StudentDashboard:
    student = find_student_for_session(students, email)
    mine = records_for_student(records, student)

    if student is None:
        return StudentDashboard(
            student=None,
            status=StatusLabel.NOT_EVALUATED,
            strength=PLACEHOLDER,
            weakness=PLACEHOLDER,
            exam_chart=exam_chart(mine),
        )

    extremes = strength_and_weakness(subject_averages(mine))
    return StudentDashboard(
        student=student,
        status=classify(student.overall_percent),
        strength=extremes.strongest,
        weakness=extremes.weakest,
        exam_chart=exam_chart(mine),
    )


def student_report(
    students: Sequence[Student],
    records: Sequence[MarkRecord],
    email: Optional[str]
) -> Optional[StudentReport]:
    """Exam-wise and subject-wise report, or None if no student matches."""
    student = find_student_for_session(students, email)
    if student is None:
        return None

    mine = records_for_student(records, student)
    averages = subject_averages(mine)
    extremes = strength_and_weakness(averages)
    return StudentReport(
        student=student,
        status=classify(student.overall_percent),
        exam_summary=exam_summary(mine),
        subject_summary=averages,
        strength=extremes.strongest,
        weakness=extremes.weakest,
    )


def teacher_dashboard(
    students: Sequence[Student],
    records: Sequence[MarkRecord],
    top_n: int = 3
) -> TeacherDashboard:
    return TeacherDashboard(
        total_students=len(students),
        class_average=class_average(students),
        counts=status_counts(students),
        subject_averages=class_subject_averages(records),
        top_performers=ranked_top(students, top_n),
        at_risk=ranked_at_risk(students, top_n),
    )
