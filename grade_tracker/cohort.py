"""Class-wide statistics over the full roster and all mark records."""

from typing import List, Optional, Sequence

import pandas as pd

from grade_tracker.aggregation import subject_averages
from grade_tracker.config import SUBJECTS, STATUS_THRESHOLDS
from grade_tracker.models import (
    MarkRecord,
    StatusCounts,
    StatusLabel,
    StatusThresholds,
    Student,
    SubjectAverage,
)
from grade_tracker.status import classify, clean_percent, round_pct


def _percent_frame(students: Sequence[Student]) -> pd.DataFrame:
    """Roster position and cleaned overall percent, evaluated students only."""
    frame = pd.DataFrame({
        'position': range(len(students)),
        'overall_percent': [clean_percent(s.overall_percent) for s in students],
    })
    frame['overall_percent'] = frame['overall_percent'].astype(float)
    return frame.dropna(subset=['overall_percent'])


def class_average(students: Sequence[Student]) -> Optional[float]:
    """Mean overall percent of evaluated students, or None if nobody is evaluated."""
    frame = _percent_frame(students)
    if frame.empty:
        return None
    return round_pct(float(frame['overall_percent'].sum()) / len(frame))


def status_counts(
    students: Sequence[Student],
    thresholds: StatusThresholds = STATUS_THRESHOLDS
) -> StatusCounts:
    """Tally students per status; not-evaluated students are not counted."""
    counts = StatusCounts()
    for student in students:
        status = classify(student.overall_percent, thresholds)
        if status == StatusLabel.TOP_PERFORMER:
            counts.top_count += 1
        elif status == StatusLabel.AT_RISK:
            counts.risk_count += 1
        elif status == StatusLabel.AVERAGE:
            counts.avg_count += 1
    return counts


def class_subject_averages(
    records: Sequence[MarkRecord],
    subjects: Sequence[str] = SUBJECTS
) -> List[SubjectAverage]:
    """Per-subject averages over every record, orphaned ones included."""
    return subject_averages(records, subjects)


def ranked_top(students: Sequence[Student], n: int = 3) -> List[Student]:
    """Highest overall percent first; equal percents keep roster order."""
    frame = _percent_frame(students)
    frame = frame.sort_values('overall_percent', ascending=False, kind='stable')
    return [students[i] for i in frame['position'].head(max(n, 0))]


def ranked_at_risk(
    students: Sequence[Student],
    n: int = 3,
    thresholds: StatusThresholds = STATUS_THRESHOLDS
) -> List[Student]:
    """Students below the at-risk ceiling, lowest first; ties keep roster order."""
    frame = _percent_frame(students)
    frame = frame[frame['overall_percent'] < thresholds.at_risk]
    frame = frame.sort_values('overall_percent', ascending=True, kind='stable')
    return [students[i] for i in frame['position'].head(max(n, 0))]
