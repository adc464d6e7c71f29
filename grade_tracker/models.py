"""Data models for the Grade Tracker application."""

from enum import Enum
from typing import Any, Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class StatusLabel(str, Enum):
    """Qualitative status derived from a percentage."""
    NOT_EVALUATED = "Not evaluated"
    TOP_PERFORMER = "Top Performer"
    AVERAGE = "Average"
    AT_RISK = "At Risk"


class StatusThresholds(BaseModel):
    """Cutoffs for status classification."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    top: float = 80.0
    at_risk: float = 50.0


class Student(BaseModel):
    """One enrolled learner."""
    id: str
    name: str
    student_code: str
    class_name: str
    email: str
    overall_percent: Optional[float] = None
    status: StatusLabel = StatusLabel.NOT_EVALUATED


class MarkRecord(BaseModel):
    """One student's scores for one exam."""
    id: str
    student_id: str
    exam: str
    marks: Dict[str, Any] = Field(default_factory=dict)
    total: float
    percent: float


class Session(BaseModel):
    """Fabricated session record for the signed-in user."""
    id: str
    name: str
    email: str
    role: str
    student_code: Optional[str] = None


class OverallSummary(BaseModel):
    overall_percent: Optional[float] = None
    status: StatusLabel


class SubjectAverage(BaseModel):
    subject: str
    average: float


class StrengthWeakness(BaseModel):
    strongest: SubjectAverage
    weakest: SubjectAverage


class ExamSummaryRow(BaseModel):
    exam: str
    total: Optional[float] = None
    percent: Optional[float] = None
    grade: str


class StatusCounts(BaseModel):
    top_count: int = 0
    avg_count: int = 0
    risk_count: int = 0


class MarkRow(BaseModel):
    """Mark record joined with its student for display."""
    id: str
    student_id: str
    exam: str
    marks: Dict[str, Any]
    total: float
    percent: float
    student_name: str
    student_code: str
    class_name: str


class StudentDashboard(BaseModel):
    student: Optional[Student] = None
    status: StatusLabel
    strength: SubjectAverage
    weakness: SubjectAverage
    exam_chart: List[Dict[str, Any]]


class StudentReport(BaseModel):
    student: Student
    status: StatusLabel
    exam_summary: List[ExamSummaryRow]
    subject_summary: List[SubjectAverage]
    strength: SubjectAverage
    weakness: SubjectAverage


class TeacherDashboard(BaseModel):
    total_students: int
    class_average: Optional[float] = None
    counts: StatusCounts
    subject_averages: List[SubjectAverage]
    top_performers: List[Student]
    at_risk: List[Student]


class StudentRequest(BaseModel):
    """Add/edit student form payload."""
    name: str = ""
    student_code: str = ""
    class_name: str = ""
    email: str = ""


class MarksRequest(BaseModel):
    """Add/edit marks form payload."""
    student_id: str = ""
    exam: str
    marks: Dict[str, Any] = Field(default_factory=dict)


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    role: str = "teacher"


class RegisterRequest(BaseModel):
    name: str
    student_code: str
    email: str
    password: str


class InsightResponse(BaseModel):
    available: bool
    text: Optional[str] = None
    author: Optional[str] = None
    message: Optional[str] = None
