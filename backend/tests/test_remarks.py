"""
Tests for engine/remarks.py — the performance remark decision table.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.remarks import (
    EXCELLENT,
    GOOD,
    NEEDS_EFFORT,
    SATISFACTORY,
    VERY_GOOD,
    generate_performance_remark,
)


class TestTopBand:
    """Top 10% of the class: ceil(class_size * 0.10)."""

    def test_excellent(self):
        remark = generate_performance_remark(80, 1, 10, 9, 0)
        assert "Excellent" in remark
        assert remark == EXCELLENT

    def test_very_good(self):
        assert generate_performance_remark(70, 1, 10, 9, 0) == VERY_GOOD

    def test_weak_average_falls_through_to_top_quarter(self):
        assert generate_performance_remark(60, 1, 10, 9, 0) == GOOD

    def test_cutoff_rounds_up(self):
        # ceil(11 * 0.10) == 2, so second place is still in the top band.
        assert generate_performance_remark(76, 2, 11, 9, 0) == EXCELLENT
        assert generate_performance_remark(76, 2, 10, 9, 0) == GOOD


class TestMiddleBands:

    def test_top_quarter_edge_is_inclusive(self):
        # ceil(10 * 0.25) == 3
        assert generate_performance_remark(50, 3, 10, 8, 1) == GOOD
        assert generate_performance_remark(50, 4, 10, 8, 0) == SATISFACTORY

    def test_middle_with_failures(self):
        remark = generate_performance_remark(50, 5, 10, 6, 2)
        assert remark == "Satisfactory performance but needs improvement in 2 subject(s). Work harder."

    def test_three_quarter_edge_is_inclusive(self):
        # ceil(10 * 0.75) == 8
        assert generate_performance_remark(45, 8, 10, 8, 0) == SATISFACTORY
        assert generate_performance_remark(45, 9, 10, 8, 0) == NEEDS_EFFORT


class TestBottomQuarter:

    @pytest.mark.parametrize("failed,expected", [
        (5, "Poor performance. Failed 5 subjects. Student must improve significantly."),
        (4, "Poor performance. Failed 4 subjects. Student must improve significantly."),
        (3, "Fair performance. Student must improve in 3 subject(s)."),
        (1, "Fair performance. Student must improve in 1 subject(s)."),
        (0, NEEDS_EFFORT),
    ])
    def test_failure_counts(self, failed, expected):
        assert generate_performance_remark(30, 10, 10, 9 - failed, failed) == expected
