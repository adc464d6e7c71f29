"""Per-student aggregation: overall percentage, subject averages, exam grades."""

from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from grade_tracker.config import SUBJECTS, EXAMS, GRADE_BANDS, NO_GRADE, STATUS_THRESHOLDS
from grade_tracker.models import (
    MarkRecord,
    OverallSummary,
    StatusLabel,
    StatusThresholds,
    SubjectAverage,
    StrengthWeakness,
    ExamSummaryRow,
)
from grade_tracker.status import classify, clean_percent, round_pct


def compute_totals(marks: Dict[str, float], subjects: Sequence[str] = SUBJECTS) -> Tuple[float, float]:
    """
    Compute total score and percentage for one exam.

    Args:
        marks: Subject -> score, one entry per subject
        subjects: Ordered subject list

    Returns:
        Tuple of (total, percent rounded to 2 dp)
    """
    total = sum(marks[subject] for subject in subjects)
    percent = round_pct(total / (len(subjects) * 100) * 100)
    return total, percent


def recompute_overall(
    records: Sequence[MarkRecord],
    thresholds: StatusThresholds = STATUS_THRESHOLDS
) -> OverallSummary:
    """
    Recompute a student's overall percentage and status from their mark records.

    Records without a usable percent are ignored; no usable records means
    the student is not evaluated.
    """
    percents = [p for p in (clean_percent(r.percent) for r in records) if p is not None]
    if not percents:
        return OverallSummary(overall_percent=None, status=StatusLabel.NOT_EVALUATED)

    overall = round_pct(sum(percents) / len(percents))
    return OverallSummary(overall_percent=overall, status=classify(overall, thresholds))


def subject_averages(
    records: Sequence[MarkRecord],
    subjects: Sequence[str] = SUBJECTS
) -> List[SubjectAverage]:
    """
    Average score per subject across the given records.

    Only records holding a numeric value for a subject count towards it.
    Subjects with no data average 0. Output follows the subject order.
    """
    frame = pd.DataFrame([r.marks for r in records], columns=list(subjects))
    frame = frame.map(clean_percent).astype(float)

    totals = frame.sum(skipna=True)
    counts = frame.count()

    averages = []
    for subject in subjects:
        count = int(counts[subject])
        average = 0.0 if count == 0 else round_pct(float(totals[subject]) / count)
        averages.append(SubjectAverage(subject=subject, average=average))
    return averages


def strength_and_weakness(
    averages: Sequence[SubjectAverage],
    subjects: Sequence[str] = SUBJECTS
) -> StrengthWeakness:
    """
    Pick the strongest and weakest subject.

    Ties go to the earliest subject in order. An empty input is seeded with
    a zero average for every subject.
    """
    if not averages:
        averages = [SubjectAverage(subject=s, average=0.0) for s in subjects]
    if not averages:
        raise ValueError("No subjects configured")

    strongest = averages[0]
    weakest = averages[0]
    for current in averages[1:]:
        if current.average > strongest.average:
            strongest = current
        if current.average < weakest.average:
            weakest = current
    return StrengthWeakness(strongest=strongest, weakest=weakest)


def grade_for_percent(percent: Optional[float]) -> str:
    """Letter grade for one exam percentage."""
    value = clean_percent(percent)
    if value is None:
        return NO_GRADE
    if value >= GRADE_BANDS['A']:
        return 'A'
    if value >= GRADE_BANDS['B']:
        return 'B'
    if value < GRADE_BANDS['D']:
        return 'D'
    return 'C'


def find_exam_record(records: Sequence[MarkRecord], exam: str) -> Optional[MarkRecord]:
    """First record for the exam, in record order."""
    return next((r for r in records if r.exam == exam), None)


def exam_summary(
    records: Sequence[MarkRecord],
    exams: Sequence[str] = EXAMS
) -> List[ExamSummaryRow]:
    """Total, percent and grade for every exam, in exam order."""
    rows = []
    for exam in exams:
        record = find_exam_record(records, exam)
        if record is None:
            rows.append(ExamSummaryRow(exam=exam, total=None, percent=None, grade=NO_GRADE))
            continue
        rows.append(ExamSummaryRow(
            exam=exam,
            total=record.total,
            percent=record.percent,
            grade=grade_for_percent(record.percent)
        ))
    return rows
