"""Configuration and fixed domain vocabulary for the Grade Tracker."""

import os
from typing import Dict

from dotenv import load_dotenv

from grade_tracker.models import StatusThresholds

# Load environment variables
load_dotenv()

SUBJECTS = ["Mathematics", "Science", "English", "Computer Science"]

EXAMS = ["Unit Test 1", "Mid 1", "Mid 2", "Final"]

# Exam grade cutoffs (independent of the status thresholds)
GRADE_BANDS = {
    'A': 80.0,  # >= 80
    'B': 60.0,  # >= 60
    'D': 50.0,  # < 50, everything in between is C
}
NO_GRADE = '-'

STUDENTS_KEY = "grade_tracker_students"
MARKS_KEY = "grade_tracker_marks"
USERS_KEY = "grade_tracker_users"
CURRENT_USER_KEY = "grade_tracker_current_user"


def parse_thresholds(thresholds_str: str) -> StatusThresholds:
    """
    Parse a threshold string such as 'top:80,at_risk:50'.

    Args:
        thresholds_str: Comma separated key:value pairs

    Returns:
        StatusThresholds model

    Raises:
        ValueError: If a pair is malformed or a value is not numeric
    """
    values: Dict[str, float] = {}
    for item in thresholds_str.split(','):
        if not item.strip():
            continue
        if ':' not in item:
            raise ValueError(f"Malformed threshold entry: '{item}'")
        key, value = item.split(':', 1)
        values[key.strip()] = float(value.strip())
    return StatusThresholds(**values)


STATUS_THRESHOLDS = parse_thresholds(os.getenv('STATUS_THRESHOLDS', 'top:80,at_risk:50'))

DATA_FILE = os.getenv('DATA_FILE', 'grade_tracker_data.json')

QUOTES_API_URL = os.getenv('QUOTES_API_URL', 'https://type.fit/api/quotes')
QUOTES_TIMEOUT = float(os.getenv('QUOTES_TIMEOUT', '5'))

ALLOW_ORIGINS = os.getenv('ALLOW_ORIGINS', '*').split(',')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
