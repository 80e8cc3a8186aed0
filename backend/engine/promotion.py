"""
promotion.py — Promotion decisions, records and campaign workflow.

Layers human decisions on top of the eligibility classifier:

- A decision that contradicts the classifier (promoting or graduating an
  ineligible student) is an override and carries a mandatory reason.
- Submitting a class produces one PromotionRecord per student, snapshotting
  the performance, the classifier output and the decision.
- Records move submitted -> approved; campaigns move draft -> open -> executed.
- Execution planning chunks approved records into fixed-size batches for the
  collaborator that performs the class reassignment writes.

Nothing here persists anything; callers store the returned records.
"""

import logging
import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from engine.eligibility import analyze_eligibility, resolve_target_level
from engine.models import (
    AUTO_ELIGIBLE,
    DECISIONS,
    GRADUATED_LEVEL,
    Computed,
    EligibilityResult,
    Overridden,
    PromotionCampaign,
    PromotionRecord,
    PromotionSettings,
    StudentDecision,
    StudentPerformance,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50

CAMPAIGN_TRANSITIONS = {
    "draft": ("open",),
    "open": ("executed",),
    "executed": (),
}
RECORD_TRANSITIONS = {
    "submitted": ("approved",),
    "approved": (),
}


class SubmissionError(ValueError):
    """Raised when a set of decisions cannot be submitted."""


class OverrideReasonRequired(SubmissionError):
    pass


class OverrideNotAllowed(SubmissionError):
    pass


class InvalidTransition(ValueError):
    pass


# ── Decisions ───────────────────────────────────────────────────────

def is_override(decision: str, eligibility: EligibilityResult) -> bool:
    return decision in ("promote", "graduate") and not eligibility.is_eligible


def make_decision(
    student_id: str,
    decision: str,
    eligibility: EligibilityResult,
    settings: PromotionSettings,
    override_reason: Optional[str] = None,
    teacher_notes: Optional[str] = None,
) -> StudentDecision:
    if decision not in DECISIONS:
        raise SubmissionError(f"Unknown decision '{decision}' for student {student_id}.")

    if not is_override(decision, eligibility):
        return StudentDecision(student_id, decision, Computed(eligibility), teacher_notes)

    if not settings.allow_manual_override:
        raise OverrideNotAllowed(
            f"Student {student_id} is not eligible and manual overrides are disabled."
        )
    if not override_reason or not override_reason.strip():
        raise OverrideReasonRequired(
            f"Student {student_id} is not eligible; a reason is required to {decision}."
        )

    logger.info(f"Override recorded for student {student_id}: {decision}")
    return StudentDecision(
        student_id,
        decision,
        Overridden(eligibility, override_reason.strip()),
        teacher_notes,
    )


def _eligibility_label(decision: StudentDecision) -> str:
    if decision.basis.eligibility.is_eligible:
        return AUTO_ELIGIBLE
    if decision.is_override:
        return "manual_override"
    return "manual_decision"


def _target_level(decision: str, from_level: str, settings: PromotionSettings) -> Optional[str]:
    if decision == "graduate":
        return GRADUATED_LEVEL
    if decision == "repeat":
        return from_level
    return resolve_target_level(from_level, settings)


# ── Records ─────────────────────────────────────────────────────────

def build_promotion_record(
    campaign_id: str,
    performance: StudentPerformance,
    decision: StudentDecision,
    from_class_id: str,
    from_class_name: str,
    from_class_level: str,
    settings: PromotionSettings,
    submitted_by: str,
    submitted_at: str,
) -> PromotionRecord:
    eligibility = decision.basis.eligibility
    return PromotionRecord(
        campaign_id=campaign_id,
        student_id=performance.student_id,
        student_name=performance.student_name,
        admission_number=performance.admission_number,
        from_class_id=from_class_id,
        from_class_name=from_class_name,
        from_class_level=from_class_level,
        to_class_level=_target_level(decision.decision, from_class_level, settings),
        decision=decision.decision,
        eligibility=_eligibility_label(decision),
        category=eligibility.category,
        average_score=performance.average_score,
        total_subjects=performance.total_subjects,
        subjects_passed=performance.subjects_passed,
        subjects_failed_list=list(performance.failed_subjects),
        failed_core_subjects=list(performance.failed_core_subjects),
        attendance=performance.attendance,
        criteria_results=eligibility.criteria_results,
        failed_criteria=list(eligibility.failed_criteria),
        passed_criteria=list(eligibility.passed_criteria),
        status="submitted",
        submitted_by=submitted_by,
        submitted_at=submitted_at,
        override_reason=decision.override_reason,
        teacher_notes=decision.teacher_notes,
    )


def submit_class_decisions(
    campaign: PromotionCampaign,
    performances: Sequence[StudentPerformance],
    choices: Mapping[str, Mapping[str, Any]],
    settings: PromotionSettings,
    from_class_id: str,
    from_class_name: str,
    from_class_level: str,
    submitted_by: str,
    submitted_at: str,
) -> List[PromotionRecord]:
    """
    Turn a class's decisions into promotion records.

    `choices` maps student_id to {"decision", "override_reason",
    "teacher_notes"}. Every student must have a decision, and the campaign
    must be open for submissions.
    """
    if campaign.status != "open":
        raise SubmissionError(
            f"Campaign '{campaign.name}' is {campaign.status}; submissions are not accepted."
        )

    undecided = [p.student_id for p in performances if not (choices.get(p.student_id) or {}).get("decision")]
    if undecided:
        raise SubmissionError(
            f"Please make a decision for all students. {len(undecided)} student(s) pending."
        )

    core_ids = settings.core_subject_ids
    records = []
    for perf in performances:
        choice = choices[perf.student_id]
        eligibility = analyze_eligibility(perf, settings, core_ids)
        decision = make_decision(
            perf.student_id,
            choice["decision"],
            eligibility,
            settings,
            override_reason=choice.get("override_reason"),
            teacher_notes=choice.get("teacher_notes"),
        )
        records.append(build_promotion_record(
            campaign.campaign_id,
            perf,
            decision,
            from_class_id,
            from_class_name,
            from_class_level,
            settings,
            submitted_by,
            submitted_at,
        ))

    logger.info(f"Submitted {len(records)} promotion records for {from_class_name}")
    return records


def approve_record(record: PromotionRecord, approved_by: str, approved_at: str) -> PromotionRecord:
    if "approved" not in RECORD_TRANSITIONS.get(record.status, ()):
        raise InvalidTransition(
            f"Record for student {record.student_id} is {record.status}; only submitted records can be approved."
        )
    return replace(record, status="approved", approved_by=approved_by, approved_at=approved_at)


# ── Campaigns ───────────────────────────────────────────────────────

def advance_campaign(campaign: PromotionCampaign, target: str) -> PromotionCampaign:
    allowed = CAMPAIGN_TRANSITIONS.get(campaign.status, ())
    if target not in allowed:
        raise InvalidTransition(f"Campaign cannot move from {campaign.status} to {target}.")
    return replace(campaign, status=target)


def plan_execution(
    campaign: PromotionCampaign,
    records: Sequence[PromotionRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Dict[str, Any]:
    """
    Split a campaign's approved records into write batches and tally the
    outcome by decision. Records that are not approved are skipped.
    """
    if campaign.status == "executed":
        raise InvalidTransition(f"Campaign '{campaign.name}' has already been executed.")
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than 0")

    approved = [r for r in records if r.status == "approved" and r.campaign_id == campaign.campaign_id]
    if not approved:
        raise SubmissionError("No approved promotion records to process.")

    results = {"promoted": 0, "repeated": 0, "graduated": 0}
    outcome = {"promote": "promoted", "repeat": "repeated", "graduate": "graduated"}
    for r in approved:
        results[outcome[r.decision]] += 1

    batches = [
        [r.student_id for r in approved[i:i + batch_size]]
        for i in range(0, len(approved), batch_size)
    ]

    return {
        "campaign_id": campaign.campaign_id,
        "total_students": len(approved),
        "skipped": len(records) - len(approved),
        "batch_size": batch_size,
        "total_batches": math.ceil(len(approved) / batch_size),
        "batches": batches,
        "results": results,
    }
