"""
Promotion routes — eligibility analysis, decision submission and execution planning.
"""

import os
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from engine.aggregation import build_student_performance
from engine.eligibility import analyze_eligibility, categorize_students, resolve_target_level, suggest_decision
from engine.models import to_dict
from engine.promotion import (
    InvalidTransition,
    SubmissionError,
    approve_record,
    plan_execution,
    submit_class_decisions,
)
from schemas.promotion import (
    ApproveRequest,
    CategorizeRequest,
    EligibilityRequest,
    ExecutionPlanRequest,
    PerformanceRequest,
    SubmitRequest,
)

router = APIRouter()

BATCH_SIZE = int(os.getenv("PROMOTION_BATCH_SIZE", "50"))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/eligibility")
async def eligibility(payload: EligibilityRequest):
    """Classify one student against the tenant's promotion criteria."""
    settings = payload.settings.to_engine()
    core_ids = payload.core_subject_ids if payload.core_subject_ids is not None else settings.core_subject_ids
    result = analyze_eligibility(payload.student.to_engine(), settings, core_ids)

    response = to_dict(result)
    if payload.class_level:
        response["suggested_decision"] = suggest_decision(result, payload.class_level, settings)
        response["target_level"] = resolve_target_level(payload.class_level, settings)
    return response


@router.post("/categorize")
async def categorize(payload: CategorizeRequest):
    """Bucket a class into auto-eligible, review-required and auto-ineligible."""
    settings = payload.settings.to_engine()
    buckets = categorize_students(
        [s.to_engine() for s in payload.students],
        settings,
        payload.core_subject_ids,
    )
    return {
        "categories": {k: to_dict(v) for k, v in buckets.items()},
        "counts": {k: len(v) for k, v in buckets.items()},
    }


@router.post("/performance")
async def performance(payload: PerformanceRequest):
    """
    Build each student's promotion performance from term scores and classify it.
    Failed and failed-core subjects use the tenant's promotion pass mark.
    """
    settings = payload.settings.to_engine()
    students = []
    for s in payload.students:
        perf = build_student_performance(
            s.student_id,
            s.student_name,
            [score.to_engine() for score in s.scores],
            admission_number=s.admission_number,
            attendance=s.attendance,
            settings=settings,
        )
        result = analyze_eligibility(perf, settings, settings.core_subject_ids)
        entry = {**to_dict(perf), "eligibility": to_dict(result)}
        if payload.class_level:
            entry["suggested_decision"] = suggest_decision(result, payload.class_level, settings)
        students.append(entry)
    return {"students": students, "count": len(students)}


@router.post("/submit")
async def submit(payload: SubmitRequest):
    """
    Build promotion records for a class's decisions.
    Overrides of an ineligible student need a reason; the caller persists the records.
    """
    choices = {
        d.student_id: {
            "decision": d.decision,
            "override_reason": d.override_reason,
            "teacher_notes": d.teacher_notes,
        }
        for d in payload.decisions
    }
    try:
        records = submit_class_decisions(
            payload.campaign.to_engine(),
            [s.to_engine() for s in payload.students],
            choices,
            payload.settings.to_engine(),
            from_class_id=payload.class_id,
            from_class_name=payload.class_name,
            from_class_level=payload.class_level,
            submitted_by=payload.submitted_by,
            submitted_at=_now(),
        )
    except SubmissionError as exc:
        raise HTTPException(400, str(exc))
    return {"records": to_dict(records), "count": len(records)}


@router.post("/approve")
async def approve(payload: ApproveRequest):
    """Move submitted records to approved."""
    at = _now()
    try:
        records = [approve_record(r.to_engine(), payload.approved_by, at) for r in payload.records]
    except InvalidTransition as exc:
        raise HTTPException(400, str(exc))
    return {"records": to_dict(records), "count": len(records)}


@router.post("/execution-plan")
async def execution_plan(payload: ExecutionPlanRequest):
    """Batch a campaign's approved records for execution."""
    try:
        return plan_execution(
            payload.campaign.to_engine(),
            [r.to_engine() for r in payload.records],
            batch_size=payload.batch_size or BATCH_SIZE,
        )
    except (SubmissionError, InvalidTransition) as exc:
        raise HTTPException(400, str(exc))
