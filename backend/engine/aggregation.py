"""
aggregation.py — Term score aggregation.

Reduces a student's per-subject scores for one term into totals, a
percentage-based average and pass/fail counts. Absent and exempted subjects
are kept by callers for display but never counted here.

Scores are rounded to 2 decimals half-up (63.125 -> 63.13), matching the
figures printed on existing report cards.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from engine.models import (
    PromotionSettings,
    StudentPerformance,
    StudentResult,
    SubjectScore,
    TermResultCalculation,
)

logger = logging.getLogger(__name__)

DEFAULT_PASS_MARK = 40

_CENTS = Decimal("0.01")


def round2(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def graded_scores(scores: Iterable[SubjectScore]) -> List[SubjectScore]:
    """Return the scores that count towards aggregation."""
    return [s for s in scores if s.is_graded]


def calculate_term_result(
    scores: Iterable[SubjectScore],
    pass_mark: float = DEFAULT_PASS_MARK,
) -> TermResultCalculation:
    """
    Aggregate one student's term scores.

    The average is the mean of subject percentages rather than
    total / max possible, so subjects marked out of different maxima weigh
    the same. A student with no gradable subject gets an all-zero result.
    """
    valid = graded_scores(scores)

    if not valid:
        return TermResultCalculation()

    total_score = sum(s.total for s in valid)
    average = sum(s.percentage for s in valid) / len(valid)
    subjects_passed = sum(1 for s in valid if s.percentage >= pass_mark)

    return TermResultCalculation(
        total_score=round2(total_score),
        average_score=round2(average),
        number_of_subjects=len(valid),
        subjects_passed=subjects_passed,
        subjects_failed=len(valid) - subjects_passed,
    )


def build_student_result(
    student_id: str,
    student_name: str,
    scores: Iterable[SubjectScore],
    pass_mark: float = DEFAULT_PASS_MARK,
) -> StudentResult:
    """Wrap a student's term aggregate into an unranked StudentResult."""
    term = calculate_term_result(scores, pass_mark=pass_mark)
    return StudentResult(
        student_id=student_id,
        student_name=student_name,
        total_score=term.total_score,
        average_score=term.average_score,
        number_of_subjects=term.number_of_subjects,
        subjects_passed=term.subjects_passed,
        subjects_failed=term.subjects_failed,
    )


def build_student_performance(
    student_id: str,
    student_name: str,
    scores: Iterable[SubjectScore],
    pass_mark: Optional[float] = None,
    core_subject_ids: Optional[Iterable[str]] = None,
    admission_number: str = "",
    attendance: Optional[float] = None,
    settings: Optional[PromotionSettings] = None,
) -> StudentPerformance:
    """
    Build the promotion view of a student's term from the same scores.

    With `settings`, the tenant's promotion pass mark and core subjects are
    used unless pass_mark / core_subject_ids are given explicitly.
    """
    if pass_mark is None:
        criteria = settings.criteria if settings else None
        pass_mark = criteria.pass_mark if criteria else DEFAULT_PASS_MARK
    if core_subject_ids is None and settings is not None:
        core_subject_ids = settings.core_subject_ids

    scores = list(scores)
    term = calculate_term_result(scores, pass_mark=pass_mark)
    core_ids = set(core_subject_ids or [])

    failed = [s for s in graded_scores(scores) if s.percentage < pass_mark]
    failed_core = [s.subject_name for s in failed if s.subject_id in core_ids]

    if failed_core:
        logger.debug(f"Student {student_id} failed core subjects: {', '.join(failed_core)}")

    return StudentPerformance(
        student_id=student_id,
        student_name=student_name,
        admission_number=admission_number,
        average_score=term.average_score,
        total_subjects=term.number_of_subjects,
        subjects_passed=term.subjects_passed,
        subjects_failed=term.subjects_failed,
        failed_subjects=[s.subject_name for s in failed],
        failed_core_subjects=failed_core,
        attendance=attendance,
    )
