"""
grading.py — Grade boundary tables and overall grade lookup.

The default table is the nine-band A1..F9 scale. Tenants may supply their
own ordered table; tables are validated when they are saved
(validate_grade_boundaries) and looked up here without further checks.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from engine.models import GradeBoundary

logger = logging.getLogger(__name__)


# Ordered high to low. (grade, min_score, max_score, description)
DEFAULT_GRADE_BOUNDARIES: List[GradeBoundary] = [
    GradeBoundary("A1", 75, 100, description="Excellent"),
    GradeBoundary("B2", 70, 74, description="Very Good"),
    GradeBoundary("B3", 65, 69, description="Good"),
    GradeBoundary("C4", 60, 64, description="Credit"),
    GradeBoundary("C5", 55, 59, description="Credit"),
    GradeBoundary("C6", 50, 54, description="Credit"),
    GradeBoundary("D7", 45, 49, description="Pass"),
    GradeBoundary("E8", 40, 44, description="Pass"),
    GradeBoundary("F9", 0, 39, description="Fail"),
]

FALLBACK_GRADE = "F"


class GradeBoundaryError(ValueError):
    """Raised when a grade table cannot give every score exactly one grade."""


def validate_grade_boundaries(boundaries: Sequence[GradeBoundary]) -> None:
    """
    Reject tables with empty ranges, overlaps, or gaps of more than one point.

    Adjacent integral bands such as 70-74 and 75-100 are contiguous: a
    fractional score between them (74.5) belongs to the lower band.
    """
    if not boundaries:
        raise GradeBoundaryError("Grade table must contain at least one band.")

    for b in boundaries:
        if b.min_score > b.max_score:
            raise GradeBoundaryError(
                f"Grade {b.grade}: minimum {b.min_score} is above maximum {b.max_score}."
            )

    ordered = sorted(boundaries, key=lambda b: b.min_score, reverse=True)
    for upper, lower in zip(ordered, ordered[1:]):
        if lower.max_score >= upper.min_score:
            raise GradeBoundaryError(
                f"Grades {lower.grade} ({lower.min_score}-{lower.max_score}) and "
                f"{upper.grade} ({upper.min_score}-{upper.max_score}) overlap."
            )
        if upper.min_score - lower.max_score > 1:
            raise GradeBoundaryError(
                f"Gap between {lower.grade} (max {lower.max_score}) and "
                f"{upper.grade} (min {upper.min_score})."
            )


def determine_overall_grade(
    average_percentage: float,
    boundaries: Optional[Sequence[GradeBoundary]] = None,
) -> str:
    """
    Return the grade for an average percentage.

    The first band (in table order) whose inclusive range contains the value
    wins. A value just above an integral band ceiling (74.999 against
    70-74 / 75-100) takes the highest band whose minimum it reaches. Anything
    else falls back to the last band in the table.
    """
    table = DEFAULT_GRADE_BOUNDARIES if boundaries is None else list(boundaries)

    for b in table:
        if b.min_score <= average_percentage <= b.max_score:
            return b.grade

    between = [
        b for b in table
        if b.min_score <= average_percentage < b.max_score + 1
    ]
    if between:
        return max(between, key=lambda b: b.min_score).grade

    fallback = table[-1].grade if table else FALLBACK_GRADE
    logger.warning(
        f"No grade band contains {average_percentage}; falling back to {fallback}"
    )
    return fallback


def grade_scale(boundaries: Optional[Sequence[GradeBoundary]] = None) -> List[Dict[str, Any]]:
    """Return the grade table for legend/reference display."""
    table = DEFAULT_GRADE_BOUNDARIES if boundaries is None else list(boundaries)
    return [
        {
            "grade": b.grade,
            "min": b.min_score,
            "max": b.max_score,
            "gpa": b.gpa,
            "description": b.description,
        }
        for b in table
    ]
