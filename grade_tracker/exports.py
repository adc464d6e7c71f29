"""CSV and Excel downloads of reports and the marks register."""

import csv
from io import BytesIO, StringIO
from typing import Sequence

import pandas as pd

from grade_tracker.config import SUBJECTS
from grade_tracker.models import MarkRecord, Student, StudentReport
from grade_tracker.roster import marks_with_student_names


def report_to_csv(report: StudentReport) -> str:
    """Exam-wise summary of a student report as CSV text."""
    output = StringIO()
    writer = csv.writer(output)

    writer.writerow(['Exam', 'Total', 'Percent', 'Grade'])
    for row in report.exam_summary:
        writer.writerow([
            row.exam,
            '-' if row.total is None else f"{row.total:g}",
            '-' if row.percent is None else f"{row.percent:.2f}",
            row.grade,
        ])

    return output.getvalue()


def marks_to_excel(students: Sequence[Student], records: Sequence[MarkRecord]) -> bytes:
    """Marks register as an .xlsx workbook, one row per record."""
    columns = ['Student Name', 'Student ID', 'Class', 'Exam'] + list(SUBJECTS) + ['Total', 'Percent']
    rows = []
    for row in marks_with_student_names(students, records):
        entry = {
            'Student Name': row.student_name,
            'Student ID': row.student_code,
            'Class': row.class_name,
            'Exam': row.exam,
            'Total': row.total,
            'Percent': row.percent,
        }
        for subject in SUBJECTS:
            entry[subject] = row.marks.get(subject)
        rows.append(entry)

    df = pd.DataFrame(rows, columns=columns)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Marks')
    return buffer.getvalue()
