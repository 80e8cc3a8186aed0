"""
ranking.py — Class position ranking and cohort statistics.

Positions use competition ranking: students with the same
(total score, average score) share a position and the next distinct pair
resumes at its 1-based index, so totals [90, 90, 80, 70] rank [1, 1, 3, 4].

Callers pass one comparable cohort (one class, one term) per call. Mixing
classes produces a cross-class ranking and is not detected here.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from engine.aggregation import DEFAULT_PASS_MARK, round2
from engine.models import StudentResult

logger = logging.getLogger(__name__)

RANK_KEYS = ["total_score", "average_score"]


# ── Helpers ─────────────────────────────────────────────────────────

def _safe_float(val) -> Optional[float]:
    """Convert to float or return None."""
    try:
        v = float(val)
        return None if np.isnan(v) or np.isinf(v) else round2(v)
    except (TypeError, ValueError):
        return None


def _results_frame(students: Sequence[StudentResult]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "row": range(len(students)),
            "student_id": [s.student_id for s in students],
            "total_score": [float(s.total_score) for s in students],
            "average_score": [float(s.average_score) for s in students],
        }
    )


# ── Positions ───────────────────────────────────────────────────────

def calculate_class_positions(students: Sequence[StudentResult]) -> List[StudentResult]:
    """
    Rank a cohort by total score (desc), tie-broken by average score (desc).

    Returns new StudentResult objects ordered by position; the input
    sequence and its objects are left untouched.
    """
    if not students:
        return []

    df = _results_frame(students)
    df = df.sort_values(RANK_KEYS, ascending=False, kind="mergesort")

    # A row starts a new position when its (total, average) pair differs
    # from the row above it.
    starts = (df[RANK_KEYS] != df[RANK_KEYS].shift()).any(axis=1)
    index_rank = pd.Series(np.arange(1, len(df) + 1), index=df.index)
    df["position"] = index_rank.where(starts).ffill().astype(int)

    logger.debug(f"Ranked {len(df)} students; {int(starts.sum())} distinct positions")

    return [
        replace(students[int(row)], position=int(position))
        for row, position in zip(df["row"], df["position"])
    ]


def get_position_suffix(position: int) -> str:
    """Ordinal form of a position: 1st, 2nd, 3rd, 4th, 11th, 21st, ..."""
    last_two = position % 100
    if 11 <= last_two <= 13:
        return f"{position}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"


# ── Class Statistics ────────────────────────────────────────────────

def compute_class_statistics(
    students: Sequence[StudentResult],
    pass_mark: float = DEFAULT_PASS_MARK,
    top_n: int = 3,
) -> Dict[str, Any]:
    """
    Summary figures for a class result page: class average, highest and
    lowest averages, how many students' averages reach the pass mark, and
    the top performers.
    """
    if not students:
        return {
            "class_size": 0,
            "class_average": 0.0,
            "highest_average": 0.0,
            "lowest_average": 0.0,
            "students_passed": 0,
            "pass_rate": 0.0,
            "top_performers": [],
        }

    ranked = list(students)
    if any(s.position is None for s in ranked):
        ranked = calculate_class_positions(ranked)
    ranked.sort(key=lambda s: s.position)

    averages = pd.Series([s.average_score for s in ranked], dtype=float)
    passed = int((averages >= pass_mark).sum())

    return {
        "class_size": len(ranked),
        "class_average": _safe_float(averages.mean()),
        "highest_average": _safe_float(averages.max()),
        "lowest_average": _safe_float(averages.min()),
        "students_passed": passed,
        "pass_rate": _safe_float(passed / len(ranked) * 100),
        "top_performers": [
            {
                "student_id": s.student_id,
                "student_name": s.student_name,
                "position": s.position,
                "position_label": get_position_suffix(s.position),
                "total_score": s.total_score,
                "average_score": s.average_score,
            }
            for s in ranked[:top_n]
        ],
    }
