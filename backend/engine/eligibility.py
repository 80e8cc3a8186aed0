"""
eligibility.py — Rule-based promotion eligibility.

Evaluates a student's term performance against the tenant's promotion
criteria. Each enabled criterion is checked independently and contributes
one line to either failed_criteria or passed_criteria:

- Minimum average score
- Minimum number of subjects passed
- Core subjects (all passed, or at least N passed)
- Minimum attendance percentage

A criterion that is missing from the settings, disabled, or whose input is
unknown (attendance not recorded) is skipped: it neither passes nor fails.

Categories:
  auto_eligible    every evaluated criterion passed
  review_required  manual or hybrid mode, or only soft criteria failed
  auto_ineligible  automatic mode and at least one hard criterion failed
"""

import logging
from typing import Dict, List, Optional, Sequence

from engine.models import (
    AUTO_ELIGIBLE,
    AUTO_INELIGIBLE,
    GRADUATED_LEVEL,
    REVIEW_REQUIRED,
    CriteriaResults,
    EligibilityResult,
    PromotionSettings,
    StudentPerformance,
)

logger = logging.getLogger(__name__)

PROMOTION_MODES = ("automatic", "manual", "hybrid")


def _fmt(value: float) -> str:
    """Render 50.0 as 50 and 72.5 as 72.5 in criterion descriptions."""
    return f"{value:g}"


def analyze_eligibility(
    student: StudentPerformance,
    settings: PromotionSettings,
    core_subject_ids: Sequence[str],
) -> EligibilityResult:
    if settings.mode == "manual":
        return EligibilityResult(
            is_eligible=False,
            category=REVIEW_REQUIRED,
            criteria_results=CriteriaResults(),
            failed_criteria=["Manual review required"],
        )

    criteria = settings.criteria
    if criteria is None:
        return EligibilityResult(
            is_eligible=True,
            category=AUTO_ELIGIBLE,
            criteria_results=CriteriaResults(),
            passed_criteria=["No criteria configured"],
        )

    results: Dict[str, bool] = {
        "passed_minimum_average": True,
        "passed_minimum_subjects": True,
        "passed_core_subjects": True,
        "passed_attendance": True,
    }
    failed: List[str] = []
    passed: List[str] = []
    hard_failures: List[str] = []

    def record(key: str, ok: bool, hard: bool, passed_text: str, failed_text: str) -> None:
        if ok:
            passed.append(passed_text)
            return
        results[key] = False
        failed.append(failed_text)
        if hard:
            hard_failures.append(failed_text)

    # ── Minimum average ────────────────────────────────────────────
    rule = criteria.minimum_average_score
    if rule is not None and rule.enabled:
        avg = _fmt(student.average_score)
        record(
            "passed_minimum_average",
            student.average_score >= rule.value,
            rule.hard,
            f"Average score: {avg}% (≥{_fmt(rule.value)}%)",
            f"Average score: {avg}% (required: {_fmt(rule.value)}%)",
        )

    # ── Minimum subjects passed ────────────────────────────────────
    rule = criteria.minimum_subjects_passed
    if rule is not None and rule.enabled:
        ratio = f"{student.subjects_passed}/{student.total_subjects}"
        record(
            "passed_minimum_subjects",
            student.subjects_passed >= rule.value,
            rule.hard,
            f"Subjects passed: {ratio} (≥{_fmt(rule.value)})",
            f"Subjects passed: {ratio} (required: {_fmt(rule.value)})",
        )

    # ── Core subjects ──────────────────────────────────────────────
    core = criteria.core_subjects_requirement
    if core is not None and core.enabled:
        failed_core = len(student.failed_core_subjects)
        if core.type == "all":
            record(
                "passed_core_subjects",
                failed_core == 0,
                core.hard,
                "All core subjects passed",
                f"Failed core subjects: {', '.join(student.failed_core_subjects)}",
            )
        elif core.type == "minimum":
            core_passed = len(core_subject_ids) - failed_core
            required = core.minimum_required or 0
            ratio = f"{core_passed}/{len(core_subject_ids)}"
            record(
                "passed_core_subjects",
                core_passed >= required,
                core.hard,
                f"Core subjects passed: {ratio}",
                f"Core subjects passed: {ratio} (required: {required})",
            )
        else:
            logger.warning(f"Unknown core subject requirement type '{core.type}'; skipped")

    # ── Attendance ─────────────────────────────────────────────────
    rule = criteria.attendance_requirement
    if rule is not None and rule.enabled and student.attendance is not None:
        att = _fmt(student.attendance)
        record(
            "passed_attendance",
            student.attendance >= rule.value,
            rule.hard,
            f"Attendance: {att}% (≥{_fmt(rule.value)}%)",
            f"Attendance: {att}% (required: {_fmt(rule.value)}%)",
        )

    is_eligible = not failed
    if is_eligible:
        category = AUTO_ELIGIBLE
    elif settings.mode == "hybrid" or not hard_failures:
        category = REVIEW_REQUIRED
    else:
        category = AUTO_INELIGIBLE

    return EligibilityResult(
        is_eligible=is_eligible,
        category=category,
        criteria_results=CriteriaResults(**results),
        failed_criteria=failed,
        passed_criteria=passed,
        hard_failures=hard_failures,
    )


def categorize_students(
    students: Sequence[StudentPerformance],
    settings: PromotionSettings,
    core_subject_ids: Optional[Sequence[str]] = None,
) -> Dict[str, List[StudentPerformance]]:
    """Bucket students by eligibility category."""
    core_ids = settings.core_subject_ids if core_subject_ids is None else list(core_subject_ids)
    buckets: Dict[str, List[StudentPerformance]] = {
        AUTO_ELIGIBLE: [],
        REVIEW_REQUIRED: [],
        AUTO_INELIGIBLE: [],
    }
    for student in students:
        result = analyze_eligibility(student, settings, core_ids)
        buckets[result.category].append(student)

    logger.info(
        f"Categorized {len(students)} students: "
        f"{len(buckets[AUTO_ELIGIBLE])} eligible, "
        f"{len(buckets[REVIEW_REQUIRED])} for review, "
        f"{len(buckets[AUTO_INELIGIBLE])} ineligible"
    )
    return buckets


# ── Decision Helpers ────────────────────────────────────────────────

def resolve_target_level(class_level: str, settings: PromotionSettings) -> Optional[str]:
    """Level a promoted student moves to, GRADUATED for final levels, None if unmapped."""
    if class_level in settings.graduating_levels:
        return GRADUATED_LEVEL
    return settings.level_mapping.get(class_level)


def suggest_decision(
    eligibility: EligibilityResult,
    class_level: str,
    settings: PromotionSettings,
) -> Optional[str]:
    """
    Pre-fill a decision for the submission form.

    Eligible students are suggested for promotion (graduation in a final
    level). Ineligible students are suggested to repeat only when the
    tenant's failure action is "repeat"; otherwise a person decides.
    """
    if eligibility.is_eligible:
        if class_level in settings.graduating_levels:
            return "graduate"
        return "promote"
    if eligibility.category == AUTO_INELIGIBLE and settings.failure_action == "repeat":
        return "repeat"
    return None
