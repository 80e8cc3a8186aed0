"""
Tests for engine/assessment.py — CA/exam totals, validation and labels.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.assessment import (
    AssessmentConfigError,
    assessment_key,
    calculate_total_score,
    get_assessment_label,
    validate_score_entry,
)
from engine.models import AssessmentComponent, AssessmentConfig


@pytest.fixture
def sum_config():
    """Two CAs of 20, an exam of 60: total 100."""
    return AssessmentConfig(
        ca_configs=[
            AssessmentComponent("CA1", 20),
            AssessmentComponent("CA2", 20, is_optional=True),
        ],
        exam=AssessmentComponent("End of Term Exam", 60),
        project=AssessmentComponent("Project", 10, enabled=False),
        custom_assessments=[AssessmentComponent("Class Conduct", 5, key="conduct")],
        total_max_score=100,
    )


class TestAssessmentKey:

    def test_key(self):
        assert assessment_key("Test 1") == "test-1"
        assert assessment_key("  Mid  Term Quiz ") == "mid-term-quiz"


class TestCalculateTotalScore:
    """Tests for calculate_total_score."""

    def test_sum(self, sum_config):
        result = calculate_total_score({"ca1": 15, "ca2": 12, "exam": 48}, sum_config)
        assert result.total_ca == 27
        assert result.total == 75
        assert result.percentage == 75
        assert result.max_score == 100
        assert result.breakdown == {"ca1": 15, "ca2": 12, "exam": 48}

    def test_sum_rounds_halves_up(self, sum_config):
        result = calculate_total_score({"ca1": 10.125, "exam": 50}, sum_config)
        assert result.total_ca == 10.13
        assert result.total == 60.13

    def test_sum_skips_missing_and_disabled(self, sum_config):
        result = calculate_total_score({"ca1": 10, "ca2": None, "project": 9, "exam": 40}, sum_config)
        assert result.total == 50
        assert "ca2" not in result.breakdown

    def test_sum_adds_custom_assessments(self, sum_config):
        result = calculate_total_score({"ca1": 10, "exam": 40, "conduct": 4}, sum_config)
        assert result.total == 54

    def test_weighted_average(self):
        config = AssessmentConfig(
            ca_configs=[AssessmentComponent("CA1", 10, weight=20), AssessmentComponent("CA2", 10, weight=20)],
            exam=AssessmentComponent("Exam", 100, weight=60),
            calculation_method="weighted_average",
            total_max_score=100,
        )
        result = calculate_total_score({"ca1": 5, "ca2": 10, "exam": 50}, config)
        assert result.total_ca == 30
        assert result.total == 60
        assert result.percentage == 60

    def test_best_of_n(self):
        config = AssessmentConfig(
            ca_configs=[AssessmentComponent(f"CA{i}", 10) for i in range(1, 5)],
            exam=AssessmentComponent("Exam", 70),
            calculation_method="best_of_n",
            best_of_n_take=3,
            total_max_score=100,
        )
        result = calculate_total_score({"ca1": 4, "ca2": 9, "ca3": 7, "ca4": 10, "exam": 50}, config)
        assert result.total_ca == 26
        assert result.total == 76

    def test_zero_max_gives_zero_percentage(self):
        config = AssessmentConfig(ca_configs=[AssessmentComponent("CA1", 20)], total_max_score=0)
        assert calculate_total_score({"ca1": 10}, config).percentage == 0

    def test_percentage_is_rounded(self):
        config = AssessmentConfig(ca_configs=[AssessmentComponent("CA1", 30)], total_max_score=30)
        assert calculate_total_score({"ca1": 10}, config).percentage == 33.33

    def test_unknown_method(self):
        config = AssessmentConfig(ca_configs=[], total_max_score=100, calculation_method="custom")
        with pytest.raises(AssessmentConfigError):
            calculate_total_score({}, config)


class TestValidateScoreEntry:
    """Tests for validate_score_entry."""

    def test_valid_entry(self, sum_config):
        valid, errors = validate_score_entry({"ca1": 15, "exam": 50}, sum_config)
        assert valid
        assert errors == []

    def test_missing_required(self, sum_config):
        valid, errors = validate_score_entry({}, sum_config)
        assert not valid
        assert "CA1 is required" in errors
        assert "Exam score is required" in errors
        assert not any("CA2" in e for e in errors)

    def test_out_of_range(self, sum_config):
        valid, errors = validate_score_entry({"ca1": -1, "ca2": 25, "exam": 61}, sum_config)
        assert not valid
        assert "CA1 score cannot be negative" in errors
        assert "CA2 score (25) exceeds maximum (20)" in errors
        assert "Exam score (61) exceeds maximum (60)" in errors

    def test_required_project(self):
        config = AssessmentConfig(
            ca_configs=[],
            project=AssessmentComponent("Practical", 20),
            total_max_score=20,
        )
        valid, errors = validate_score_entry({}, config)
        assert errors == ["Project score is required"]


class TestGetAssessmentLabel:

    def test_labels(self, sum_config):
        assert get_assessment_label("ca1", sum_config) == "CA1"
        assert get_assessment_label("exam", sum_config) == "End of Term Exam"
        assert get_assessment_label("conduct", sum_config) == "Class Conduct"
        assert get_assessment_label("project", sum_config) == "project"
        assert get_assessment_label("unknown", sum_config) == "unknown"
