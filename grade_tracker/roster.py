"""Teacher edit workflow for students and mark records."""

import logging
import uuid
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from grade_tracker.aggregation import compute_totals, recompute_overall
from grade_tracker.config import SUBJECTS, EXAMS, STUDENTS_KEY, MARKS_KEY, STATUS_THRESHOLDS
from grade_tracker.models import MarkRecord, MarkRow, StatusLabel, StatusThresholds, Student
from grade_tracker.storage import (
    KeyValueStore,
    dump_models,
    load_marks,
    load_students,
    save_students,
)

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Form input rejected before it reaches storage."""


class NotFoundError(LookupError):
    """Edit or delete of an identifier that does not exist."""


class CommitError(RuntimeError):
    """The store did not accept a write."""


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _clean_student_fields(name: str, student_code: str, class_name: str, email: str) -> Dict[str, str]:
    fields = {
        'name': (name or '').strip(),
        'student_code': (student_code or '').strip(),
        'class_name': (class_name or '').strip(),
        'email': (email or '').strip(),
    }
    if not all(fields.values()):
        raise ValidationError("All fields are required.")
    if '@' not in fields['email']:
        raise ValidationError("Please enter a valid email.")
    return fields


def _check_code_unique(students: Sequence[Student], student_code: str, editing_id: Optional[str] = None) -> None:
    code = student_code.lower()
    if any(s.student_code.lower() == code and s.id != editing_id for s in students):
        raise ValidationError("A student with this ID already exists.")


def create_student(store: KeyValueStore, name: str, student_code: str, class_name: str, email: str) -> Student:
    """Add a student to the front of the roster."""
    fields = _clean_student_fields(name, student_code, class_name, email)
    students = load_students(store)
    _check_code_unique(students, fields['student_code'])

    student = Student(
        id=_new_id('stu'),
        overall_percent=None,
        status=StatusLabel.NOT_EVALUATED,
        **fields
    )
    save_students(store, [student] + students)
    logger.info("Created student %s (%d on roster)", student.id, len(students) + 1)
    return student


def update_student(
    store: KeyValueStore,
    student_id: str,
    name: str,
    student_code: str,
    class_name: str,
    email: str
) -> Student:
    """Edit a student's details. Overall percent and status are left alone."""
    fields = _clean_student_fields(name, student_code, class_name, email)
    students = load_students(store)
    _check_code_unique(students, fields['student_code'], editing_id=student_id)

    updated = None
    for idx, student in enumerate(students):
        if student.id == student_id:
            updated = student.model_copy(update=fields)
            students[idx] = updated
            break
    if updated is None:
        raise NotFoundError(f"Student {student_id} not found")

    save_students(store, students)
    logger.info("Updated student %s", student_id)
    return updated


def delete_student(store: KeyValueStore, student_id: str) -> None:
    """Remove a student. Their mark records are kept."""
    students = load_students(store)
    remaining = [s for s in students if s.id != student_id]
    if len(remaining) == len(students):
        raise NotFoundError(f"Student {student_id} not found")
    save_students(store, remaining)
    logger.info("Deleted student %s", student_id)


def _parse_score(raw) -> float:
    if raw is None or (isinstance(raw, str) and raw.strip() == ''):
        raise ValidationError("Please enter marks for all subjects.")
    if isinstance(raw, bool):
        raise ValidationError("Marks must be a number between 0 and 100.")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Marks must be a number between 0 and 100.")
    if not 0 <= value <= 100:
        raise ValidationError("Marks must be a number between 0 and 100.")
    return value


def build_mark_record(
    student_id: str,
    exam: str,
    marks: Mapping[str, object],
    record_id: Optional[str] = None,
    subjects: Sequence[str] = SUBJECTS,
    exams: Sequence[str] = EXAMS
) -> MarkRecord:
    """
    Validate form input and build a mark record with total and percent.

    Raises:
        ValidationError: Missing student, unknown exam, missing or out-of-range score
    """
    if not student_id:
        raise ValidationError("Please select a student.")
    if exam not in exams:
        raise ValidationError(f"Unknown exam '{exam}'.")

    parsed = {subject: _parse_score(marks.get(subject)) for subject in subjects}
    total, percent = compute_totals(parsed, subjects)

    return MarkRecord(
        id=record_id or _new_id('mark'),
        student_id=student_id,
        exam=exam,
        marks=parsed,
        total=total,
        percent=percent
    )


def recompute_students(
    students: Sequence[Student],
    records: Sequence[MarkRecord],
    thresholds: StatusThresholds = STATUS_THRESHOLDS
) -> List[Student]:
    """Refresh every student's overall percent and status from the records."""
    by_student: Dict[str, List[MarkRecord]] = defaultdict(list)
    for record in records:
        by_student[record.student_id].append(record)

    updated = []
    for student in students:
        summary = recompute_overall(by_student.get(student.id, []), thresholds)
        updated.append(student.model_copy(update={
            'overall_percent': summary.overall_percent,
            'status': summary.status,
        }))
    return updated


def commit_marks(store: KeyValueStore, records: List[MarkRecord]) -> List[Student]:
    """Persist the mark records and the recomputed students together."""
    students = recompute_students(load_students(store), records)
    written = store.set_items({
        MARKS_KEY: dump_models(records),
        STUDENTS_KEY: dump_models(students),
    })
    if not written:
        logger.error("Failed to commit %d mark records", len(records))
        raise CommitError("Marks could not be saved.")
    logger.info("Committed %d mark records, recomputed %d students", len(records), len(students))
    return students


def _check_student_exists(store: KeyValueStore, student_id: str) -> None:
    if not any(s.id == student_id for s in load_students(store)):
        raise ValidationError("Please select a student.")


def create_marks(store: KeyValueStore, student_id: str, exam: str, marks: Mapping[str, object]) -> MarkRecord:
    """Record marks for a student; the new record goes to the front."""
    record = build_mark_record(student_id, exam, marks)
    _check_student_exists(store, student_id)

    commit_marks(store, [record] + load_marks(store))
    return record


def update_marks(
    store: KeyValueStore,
    record_id: str,
    student_id: str,
    exam: str,
    marks: Mapping[str, object]
) -> MarkRecord:
    """Replace a mark record's contents, keeping its id."""
    records = load_marks(store)
    idx = next((i for i, r in enumerate(records) if r.id == record_id), None)
    if idx is None:
        raise NotFoundError(f"Mark record {record_id} not found")

    record = build_mark_record(student_id, exam, marks, record_id=record_id)
    _check_student_exists(store, student_id)
    records[idx] = record
    commit_marks(store, records)
    return record


def delete_marks(store: KeyValueStore, record_id: str) -> None:
    records = load_marks(store)
    remaining = [r for r in records if r.id != record_id]
    if len(remaining) == len(records):
        raise NotFoundError(f"Mark record {record_id} not found")
    commit_marks(store, remaining)


def marks_with_student_names(students: Sequence[Student], records: Sequence[MarkRecord]) -> List[MarkRow]:
    """Join records to students for display; orphaned records show as Unknown."""
    by_id = {s.id: s for s in students}
    rows = []
    for record in records:
        student = by_id.get(record.student_id)
        rows.append(MarkRow(
            **record.model_dump(),
            student_name=student.name if student else "Unknown",
            student_code=student.student_code if student else "-",
            class_name=student.class_name if student else "-",
        ))
    return rows
