"""Status classification and percentage helpers."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import numpy as np

from grade_tracker.config import STATUS_THRESHOLDS
from grade_tracker.models import StatusLabel, StatusThresholds


def clean_percent(value) -> Optional[float]:
    """
    Return value as a float if it is a usable number, else None.

    Booleans, NaN, Infinity and anything non-numeric count as absent.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return None
    val = float(value)
    if np.isnan(val) or np.isinf(val):
        return None
    return val


def round_pct(value: float) -> float:
    """Round to 2 decimal places, halves away from zero."""
    return float(Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def classify(percent, thresholds: StatusThresholds = STATUS_THRESHOLDS) -> StatusLabel:
    """
    Map a percentage to a status label.

    Args:
        percent: Percentage (0-100), or None/NaN when not evaluated
        thresholds: Top performer floor and at-risk ceiling

    Returns:
        StatusLabel
    """
    value = clean_percent(percent)
    if value is None:
        return StatusLabel.NOT_EVALUATED
    if value >= thresholds.top:
        return StatusLabel.TOP_PERFORMER
    if value < thresholds.at_risk:
        return StatusLabel.AT_RISK
    return StatusLabel.AVERAGE
