"""
results.py — Report-card result summaries.

Composes aggregation, ranking, grading and remarks into the terminal
ResultSummary consumed by report cards and class result pages.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from engine.aggregation import DEFAULT_PASS_MARK, build_student_result, calculate_term_result
from engine.grading import determine_overall_grade
from engine.models import GradeBoundary, ResultSummary, SubjectScore
from engine.ranking import calculate_class_positions, compute_class_statistics, get_position_suffix
from engine.remarks import generate_performance_remark

logger = logging.getLogger(__name__)

# (student_id, student_name, subject scores)
StudentScores = Tuple[str, str, Sequence[SubjectScore]]


def generate_result_summary(
    scores: Iterable[SubjectScore],
    position: int,
    class_size: int,
    pass_mark: float = DEFAULT_PASS_MARK,
    boundaries: Optional[Sequence[GradeBoundary]] = None,
) -> ResultSummary:
    """Aggregate one student's scores and attach grade and remark."""
    term = calculate_term_result(scores, pass_mark=pass_mark)
    overall_grade = determine_overall_grade(term.average_score, boundaries)
    remark = generate_performance_remark(
        term.average_score,
        position,
        class_size,
        term.subjects_passed,
        term.subjects_failed,
    )
    return ResultSummary(
        total_score=term.total_score,
        average_score=term.average_score,
        number_of_subjects=term.number_of_subjects,
        subjects_passed=term.subjects_passed,
        subjects_failed=term.subjects_failed,
        position=position,
        class_size=class_size,
        overall_grade=overall_grade,
        remark=remark,
    )


def summarize_class(
    cohort: Sequence[StudentScores],
    pass_mark: float = DEFAULT_PASS_MARK,
    boundaries: Optional[Sequence[GradeBoundary]] = None,
) -> Dict[str, Any]:
    """
    Build ranked result summaries for a whole class.

    Returns {"students": [...], "statistics": {...}} with students ordered
    by position. Student ids must be unique within the cohort.
    """
    scores_by_id = {sid: list(scores) for sid, _, scores in cohort}
    if len(scores_by_id) != len(cohort):
        raise ValueError("Duplicate student ids in class cohort.")
    results = [
        build_student_result(sid, name, scores, pass_mark=pass_mark)
        for sid, name, scores in cohort
    ]
    ranked = calculate_class_positions(results)
    class_size = len(ranked)

    students: List[Dict[str, Any]] = []
    for r in ranked:
        summary = generate_result_summary(
            scores_by_id[r.student_id],
            position=r.position,
            class_size=class_size,
            pass_mark=pass_mark,
            boundaries=boundaries,
        )
        students.append({
            "student_id": r.student_id,
            "student_name": r.student_name,
            "position_label": get_position_suffix(r.position),
            **asdict(summary),
        })

    logger.info(f"Summarized results for a class of {class_size}")

    return {
        "students": students,
        "statistics": compute_class_statistics(ranked, pass_mark=pass_mark),
    }
