"""
remarks.py — Template-based performance remarks for report cards.

A remark is chosen from the student's position band within the class
(top 10%, top 25%, middle, bottom 25%) and their average / failed subject
count. Band cut-offs are ceil(class_size * fraction) and a position equal to
the cut-off is inside the band.
"""

import math


# ── Remark Templates ────────────────────────────────────────────────

EXCELLENT = "Excellent performance! Keep up the outstanding work."
VERY_GOOD = "Very good performance. Continue working hard."
GOOD = "Good performance. Keep striving for excellence."
SATISFACTORY = "Satisfactory performance. More effort is needed to excel."
NEEDS_EFFORT = "Student needs to work harder to improve performance."


def narrate_satisfactory_with_failures(subjects_failed: int) -> str:
    return (
        f"Satisfactory performance but needs improvement in "
        f"{subjects_failed} subject(s). Work harder."
    )


def narrate_poor(subjects_failed: int) -> str:
    return (
        f"Poor performance. Failed {subjects_failed} subjects. "
        f"Student must improve significantly."
    )


def narrate_fair(subjects_failed: int) -> str:
    return f"Fair performance. Student must improve in {subjects_failed} subject(s)."


# ── Decision Table ──────────────────────────────────────────────────

def band_cutoff(class_size: int, fraction: float) -> int:
    return math.ceil(class_size * fraction)


def generate_performance_remark(
    average_percentage: float,
    position: int,
    class_size: int,
    subjects_passed: int,
    subjects_failed: int,
) -> str:
    # Top 10%: only a strong average earns the top remarks; otherwise the
    # student falls through to the top-25% remark.
    if position <= band_cutoff(class_size, 0.10):
        if average_percentage >= 75:
            return EXCELLENT
        if average_percentage >= 65:
            return VERY_GOOD

    if position <= band_cutoff(class_size, 0.25):
        return GOOD

    if position <= band_cutoff(class_size, 0.75):
        if subjects_failed > 0:
            return narrate_satisfactory_with_failures(subjects_failed)
        return SATISFACTORY

    # Bottom 25%
    if subjects_failed > 3:
        return narrate_poor(subjects_failed)
    if subjects_failed > 0:
        return narrate_fair(subjects_failed)
    return NEEDS_EFFORT
