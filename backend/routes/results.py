"""
Results routes — term results, class positions, grades and remarks.
"""

import os
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from engine.aggregation import calculate_term_result
from engine.assessment import (
    AssessmentConfigError,
    assessment_breakdown_labels,
    calculate_total_score,
    validate_score_entry,
)
from engine.grading import determine_overall_grade, grade_scale
from engine.models import to_dict
from engine.ranking import calculate_class_positions, get_position_suffix
from engine.remarks import generate_performance_remark
from engine.results import generate_result_summary, summarize_class
from schemas.results import (
    AssessmentRequest,
    ClassPositionsRequest,
    ClassResultsRequest,
    GradeRequest,
    RemarkRequest,
    SummaryRequest,
    TermResultRequest,
)

router = APIRouter()

PASS_MARK = float(os.getenv("PASS_MARK", "40"))


def _pass_mark(value):
    return PASS_MARK if value is None else value


@router.post("/term-result")
async def term_result(payload: TermResultRequest):
    """Aggregate one student's subject scores for a term."""
    scores = [s.to_engine() for s in payload.scores]
    return asdict(calculate_term_result(scores, pass_mark=_pass_mark(payload.pass_mark)))


@router.post("/class-positions")
async def class_positions(payload: ClassPositionsRequest):
    """Rank a class by total score with average as tie-breaker."""
    ranked = calculate_class_positions([s.to_engine() for s in payload.students])
    return {
        "students": [
            {**asdict(r), "position_label": get_position_suffix(r.position)}
            for r in ranked
        ]
    }


@router.post("/summary")
async def summary(payload: SummaryRequest):
    """Report-card summary: aggregate, grade and remark for one student."""
    result = generate_result_summary(
        [s.to_engine() for s in payload.scores],
        position=payload.position,
        class_size=payload.class_size,
        pass_mark=_pass_mark(payload.pass_mark),
        boundaries=payload.engine_boundaries(),
    )
    return {**asdict(result), "position_label": get_position_suffix(result.position)}


@router.post("/class")
async def class_results(payload: ClassResultsRequest):
    """Ranked summaries and statistics for a whole class."""
    if not payload.students:
        raise HTTPException(400, "No students provided.")
    cohort = [
        (s.student_id, s.student_name, [sc.to_engine() for sc in s.scores])
        for s in payload.students
    ]
    return summarize_class(
        cohort,
        pass_mark=_pass_mark(payload.pass_mark),
        boundaries=payload.engine_boundaries(),
    )


@router.post("/grade")
async def grade(payload: GradeRequest):
    return {
        "average": payload.average,
        "grade": determine_overall_grade(payload.average, payload.engine_boundaries()),
    }


@router.post("/remark")
async def remark(payload: RemarkRequest):
    text = generate_performance_remark(
        payload.average,
        payload.position,
        payload.class_size,
        payload.subjects_passed,
        payload.subjects_failed,
    )
    return {"remark": text}


@router.post("/assessment")
async def assessment(payload: AssessmentRequest):
    """
    Validate a subject's assessment scores and compute its total.
    Returns 400 with the validation errors when the entry is incomplete.
    """
    config = payload.config.to_engine()
    valid, errors = validate_score_entry(payload.scores, config)
    if not valid:
        raise HTTPException(400, {"errors": errors})
    try:
        result = calculate_total_score(payload.scores, config)
    except AssessmentConfigError as exc:
        raise HTTPException(400, str(exc))
    return {
        **to_dict(result),
        "grade": determine_overall_grade(result.percentage),
        "labels": assessment_breakdown_labels(payload.scores, config),
    }


@router.get("/grade-scale")
async def default_grade_scale():
    """Return the default grade table."""
    return {"pass_mark": PASS_MARK, "grade_scale": grade_scale()}
