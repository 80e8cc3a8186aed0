"""
Tests for engine/eligibility.py — criteria evaluation, categories and decision helpers.
"""

import os
import sys
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.eligibility import (
    analyze_eligibility,
    categorize_students,
    resolve_target_level,
    suggest_decision,
)
from engine.models import (
    AUTO_ELIGIBLE,
    AUTO_INELIGIBLE,
    REVIEW_REQUIRED,
    CoreSubjectsRule,
    PromotionCriteria,
    PromotionSettings,
    StudentPerformance,
    ThresholdRule,
)

CORE_IDS = ["math", "english"]


@pytest.fixture
def criteria():
    return PromotionCriteria(
        pass_mark=40,
        minimum_average_score=ThresholdRule(enabled=True, value=50),
        minimum_subjects_passed=ThresholdRule(enabled=True, value=5),
        core_subjects_requirement=CoreSubjectsRule(enabled=True, type="all", core_subject_ids=CORE_IDS),
        attendance_requirement=ThresholdRule(enabled=True, value=75),
    )


@pytest.fixture
def settings(criteria):
    return PromotionSettings(
        mode="automatic",
        criteria=criteria,
        level_mapping={"JSS1": "JSS2", "JSS2": "JSS3"},
        graduating_levels=["SS3"],
    )


@pytest.fixture
def strong_student():
    return StudentPerformance(
        student_id="S001",
        student_name="Ada Obi",
        admission_number="ADM/001",
        average_score=72.5,
        total_subjects=8,
        subjects_passed=8,
        subjects_failed=0,
        attendance=92,
    )


class TestAnalyzeEligibility:
    """Tests for analyze_eligibility."""

    def test_all_criteria_pass(self, strong_student, settings):
        result = analyze_eligibility(strong_student, settings, CORE_IDS)
        assert result.is_eligible
        assert result.category == AUTO_ELIGIBLE
        assert result.failed_criteria == []
        assert result.passed_criteria == [
            "Average score: 72.5% (≥50%)",
            "Subjects passed: 8/8 (≥5)",
            "All core subjects passed",
            "Attendance: 92% (≥75%)",
        ]

    def test_manual_mode_always_needs_review(self, strong_student, settings):
        result = analyze_eligibility(strong_student, replace(settings, mode="manual"), CORE_IDS)
        assert not result.is_eligible
        assert result.category == REVIEW_REQUIRED
        assert result.failed_criteria == ["Manual review required"]

    def test_no_criteria_configured(self, strong_student):
        result = analyze_eligibility(strong_student, PromotionSettings(criteria=None), [])
        assert result.is_eligible
        assert result.passed_criteria == ["No criteria configured"]

    def test_failed_core_subject_is_hard(self, strong_student, settings):
        student = replace(strong_student, failed_core_subjects=["Mathematics"], subjects_passed=7, subjects_failed=1)
        result = analyze_eligibility(student, settings, CORE_IDS)
        assert not result.is_eligible
        assert result.category == AUTO_INELIGIBLE
        assert "Failed core subjects: Mathematics" in result.failed_criteria
        assert not result.criteria_results.passed_core_subjects
        assert result.hard_failures == ["Failed core subjects: Mathematics"]

    def test_soft_failure_needs_review(self, strong_student, settings):
        student = replace(strong_student, average_score=45)
        result = analyze_eligibility(student, settings, CORE_IDS)
        assert result.category == REVIEW_REQUIRED
        assert result.failed_criteria == ["Average score: 45% (required: 50%)"]
        assert not result.criteria_results.passed_minimum_average
        assert result.criteria_results.passed_attendance

    def test_soft_rule_can_be_made_hard(self, strong_student, settings, criteria):
        strict = replace(criteria, attendance_requirement=ThresholdRule(enabled=True, value=75, hard=True))
        student = replace(strong_student, attendance=60)
        result = analyze_eligibility(student, replace(settings, criteria=strict), CORE_IDS)
        assert result.category == AUTO_INELIGIBLE

    def test_hybrid_mode_never_auto_ineligible(self, strong_student, settings):
        student = replace(strong_student, failed_core_subjects=["English"])
        result = analyze_eligibility(student, replace(settings, mode="hybrid"), CORE_IDS)
        assert result.category == REVIEW_REQUIRED

    def test_minimum_core_subjects(self, strong_student, settings, criteria):
        rule = CoreSubjectsRule(enabled=True, type="minimum", minimum_required=2, core_subject_ids=["a", "b", "c"])
        custom = replace(settings, criteria=replace(criteria, core_subjects_requirement=rule))
        ok = analyze_eligibility(replace(strong_student, failed_core_subjects=["C"]), custom, ["a", "b", "c"])
        assert "Core subjects passed: 2/3" in ok.passed_criteria
        bad = analyze_eligibility(replace(strong_student, failed_core_subjects=["B", "C"]), custom, ["a", "b", "c"])
        assert "Core subjects passed: 1/3 (required: 2)" in bad.failed_criteria

    def test_unknown_attendance_is_skipped(self, strong_student, settings):
        result = analyze_eligibility(replace(strong_student, attendance=None), settings, CORE_IDS)
        assert result.is_eligible
        assert not any(c.startswith("Attendance") for c in result.passed_criteria + result.failed_criteria)

    def test_disabled_and_missing_rules_are_skipped(self, strong_student):
        criteria = PromotionCriteria(minimum_average_score=ThresholdRule(enabled=False, value=99))
        result = analyze_eligibility(replace(strong_student, average_score=10), PromotionSettings(criteria=criteria), [])
        assert result.is_eligible
        assert result.passed_criteria == []

    def test_failures_are_independent(self, strong_student, settings):
        student = replace(strong_student, average_score=30, subjects_passed=2, attendance=50)
        result = analyze_eligibility(student, settings, CORE_IDS)
        assert len(result.failed_criteria) == 3
        assert result.passed_criteria == ["All core subjects passed"]

    def test_average_drop_flips_eligibility(self, strong_student, settings):
        assert analyze_eligibility(replace(strong_student, average_score=50), settings, CORE_IDS).is_eligible
        assert not analyze_eligibility(replace(strong_student, average_score=49.99), settings, CORE_IDS).is_eligible


class TestCategorizeStudents:

    def test_buckets(self, strong_student, settings):
        students = [
            strong_student,
            replace(strong_student, student_id="S002", average_score=40),
            replace(strong_student, student_id="S003", failed_core_subjects=["English"]),
        ]
        buckets = categorize_students(students, settings)
        assert [s.student_id for s in buckets[AUTO_ELIGIBLE]] == ["S001"]
        assert [s.student_id for s in buckets[REVIEW_REQUIRED]] == ["S002"]
        assert [s.student_id for s in buckets[AUTO_INELIGIBLE]] == ["S003"]


class TestDecisionHelpers:

    def test_target_levels(self, settings):
        assert resolve_target_level("JSS1", settings) == "JSS2"
        assert resolve_target_level("SS3", settings) == "GRADUATED"
        assert resolve_target_level("UNKNOWN", settings) is None

    def test_suggestions(self, strong_student, settings):
        eligible = analyze_eligibility(strong_student, settings, CORE_IDS)
        assert suggest_decision(eligible, "JSS1", settings) == "promote"
        assert suggest_decision(eligible, "SS3", settings) == "graduate"

        hard_fail = analyze_eligibility(replace(strong_student, failed_core_subjects=["English"]), settings, CORE_IDS)
        assert suggest_decision(hard_fail, "JSS1", settings) == "repeat"
        assert suggest_decision(hard_fail, "JSS1", replace(settings, failure_action="manual")) is None

        soft_fail = analyze_eligibility(replace(strong_student, attendance=10), settings, CORE_IDS)
        assert suggest_decision(soft_fail, "JSS1", settings) is None
