"""Unit tests for per-student aggregation module."""

import pytest

from grade_tracker.aggregation import (
    compute_totals,
    exam_summary,
    grade_for_percent,
    recompute_overall,
    strength_and_weakness,
    subject_averages,
)
from grade_tracker.config import SUBJECTS, EXAMS
from grade_tracker.models import MarkRecord, StatusLabel, SubjectAverage


def make_record(record_id, exam='Unit Test 1', marks=None, student_id='stu-1', percent=None, total=None):
    marks = marks if marks is not None else {s: 70.0 for s in SUBJECTS}
    if total is None:
        total = sum(v for v in marks.values() if v is not None)
    if percent is None:
        percent = round(total / (len(SUBJECTS) * 100) * 100, 2)
    return MarkRecord(
        id=record_id,
        student_id=student_id,
        exam=exam,
        marks=marks,
        total=total,
        percent=percent
    )


def test_compute_totals():
    """Test total and percentage for a full set of marks."""
    total, percent = compute_totals({
        'Mathematics': 90, 'Science': 80, 'English': 70, 'Computer Science': 61
    })
    assert total == 301
    assert percent == 75.25

    total, percent = compute_totals({s: 100 for s in SUBJECTS})
    assert total == 400
    assert percent == 100.0


def test_recompute_overall_empty():
    summary = recompute_overall([])
    assert summary.overall_percent is None
    assert summary.status == StatusLabel.NOT_EVALUATED


def test_recompute_overall_mean_of_percents():
    records = [
        make_record('m1', percent=90.0),
        make_record('m2', exam='Mid 1', percent=75.0),
        make_record('m3', exam='Mid 2', percent=80.0),
    ]
    summary = recompute_overall(records)

    # (90 + 75 + 80) / 3 = 81.666...
    assert summary.overall_percent == 81.67
    assert summary.status == StatusLabel.TOP_PERFORMER


def test_recompute_overall_is_idempotent():
    records = [make_record('m1', percent=45.5), make_record('m2', percent=52.25)]
    assert recompute_overall(records) == recompute_overall(records)
    assert recompute_overall(records).status == StatusLabel.AT_RISK


def test_recompute_overall_ignores_unusable_percent():
    records = [make_record('m1', percent=60.0), make_record('m2', percent=float('nan'))]
    summary = recompute_overall(records)
    assert summary.overall_percent == 60.0
    assert summary.status == StatusLabel.AVERAGE


def test_subject_averages_partial_data():
    """Subjects without data average 0; order follows the subject list."""
    record = make_record('m1', marks={'Mathematics': 70, 'Science': 80}, total=150, percent=37.5)
    averages = subject_averages([record])

    assert [a.subject for a in averages] == SUBJECTS
    by_subject = {a.subject: a.average for a in averages}
    assert by_subject['Mathematics'] == 70.0
    assert by_subject['Science'] == 80.0
    assert by_subject['English'] == 0.0
    assert by_subject['Computer Science'] == 0.0


def test_subject_averages_counts_only_supplied_values():
    records = [
        make_record('m1', marks={'Mathematics': 70, 'Science': 90, 'English': None}),
        make_record('m2', marks={'Mathematics': 85, 'English': 60}),
        make_record('m3', marks={'Mathematics': 66}),
    ]
    by_subject = {a.subject: a.average for a in subject_averages(records)}

    # (70 + 85 + 66) / 3 = 73.666...
    assert by_subject['Mathematics'] == 73.67
    assert by_subject['Science'] == 90.0
    assert by_subject['English'] == 60.0
    assert by_subject['Computer Science'] == 0.0


def test_subject_averages_no_records():
    averages = subject_averages([])
    assert [a.average for a in averages] == [0.0] * len(SUBJECTS)


def test_strength_and_weakness_tie_break():
    """Ties resolve to the earliest subject in order."""
    averages = [
        SubjectAverage(subject='Mathematics', average=60.0),
        SubjectAverage(subject='Science', average=75.0),
        SubjectAverage(subject='English', average=75.0),
        SubjectAverage(subject='Computer Science', average=60.0),
    ]
    result = strength_and_weakness(averages)

    assert result.strongest.subject == 'Science'
    assert result.weakest.subject == 'Mathematics'


def test_strength_and_weakness_empty_is_seeded():
    result = strength_and_weakness([])
    assert result.strongest == SubjectAverage(subject=SUBJECTS[0], average=0.0)
    assert result.weakest == SubjectAverage(subject=SUBJECTS[0], average=0.0)

    with pytest.raises(ValueError):
        strength_and_weakness([], subjects=[])


def test_grade_for_percent_boundaries():
    assert grade_for_percent(80) == 'A'
    assert grade_for_percent(79.999) == 'B'
    assert grade_for_percent(60) == 'B'
    assert grade_for_percent(59.999) == 'C'
    assert grade_for_percent(50) == 'C'
    assert grade_for_percent(49.999) == 'D'
    assert grade_for_percent(None) == '-'


def test_exam_summary():
    records = [
        make_record('m1', exam='Mid 1', total=320, percent=80.0),
        make_record('m2', exam='Final', total=200, percent=49.999),
    ]
    rows = exam_summary(records)

    assert [r.exam for r in rows] == EXAMS
    assert rows[0].total is None
    assert rows[0].percent is None
    assert rows[0].grade == '-'
    assert rows[1].total == 320
    assert rows[1].grade == 'A'
    assert rows[2].grade == '-'
    assert rows[3].grade == 'D'


def test_exam_summary_first_match_wins():
    """Duplicate records for one exam: the first in record order is used."""
    records = [
        make_record('m1', exam='Mid 2', total=240, percent=60.0),
        make_record('m2', exam='Mid 2', total=360, percent=90.0),
    ]
    mid2 = exam_summary(records)[2]
    assert mid2.total == 240
    assert mid2.grade == 'B'
