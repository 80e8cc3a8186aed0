"""
assessment.py — Subject score calculation from continuous assessments.

Turns a student's raw assessment scores for one subject (CAs, exam,
project, custom components) into the subject total and percentage that
the term aggregator consumes. Supports three calculation methods:

- sum:              every component's raw score is added
- weighted_average: each weighted component contributes score/max * weight
- best_of_n:        only the best N CA scores count, plus the exam
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from engine.aggregation import round2
from engine.models import AssessmentComponent, AssessmentConfig, ScoreCalculationResult

CALCULATION_METHODS = ("sum", "weighted_average", "best_of_n")

RawScores = Mapping[str, Optional[float]]


class AssessmentConfigError(ValueError):
    """Raised for an assessment configuration the calculator cannot use."""


# ── Helpers ─────────────────────────────────────────────────────────

def assessment_key(name: str) -> str:
    """Score key for a component name: "Test 1" -> "test-1"."""
    return re.sub(r"\s+", "-", name.strip().lower())


def _component_key(component: AssessmentComponent) -> str:
    return assessment_key(component.key or component.name)


def _score(scores: RawScores, key: str) -> Optional[float]:
    value = scores.get(key)
    return None if value is None else float(value)


def _weighted(score: float, component: AssessmentComponent) -> float:
    if not component.weight or component.max_score <= 0:
        return 0.0
    return score / component.max_score * 100 * component.weight / 100


def _ca_scores(scores: RawScores, config: AssessmentConfig) -> List[Tuple[AssessmentComponent, float]]:
    found = []
    for ca in config.ca_configs:
        value = _score(scores, _component_key(ca))
        if value is not None:
            found.append((ca, value))
    return found


def _enabled(component: Optional[AssessmentComponent]) -> bool:
    return component is not None and component.enabled


# ── Calculation ─────────────────────────────────────────────────────

def calculate_total_score(scores: RawScores, config: AssessmentConfig) -> ScoreCalculationResult:
    method = config.calculation_method
    if method not in CALCULATION_METHODS:
        raise AssessmentConfigError(
            f"Unsupported calculation method: {method}. Use {', '.join(CALCULATION_METHODS)}."
        )

    cas = _ca_scores(scores, config)
    exam = _score(scores, "exam") if _enabled(config.exam) else None
    project = _score(scores, "project") if _enabled(config.project) else None

    if method == "weighted_average":
        total_ca = sum(_weighted(value, ca) for ca, value in cas)
        total = total_ca
        if exam is not None:
            total += _weighted(exam, config.exam)
        if project is not None:
            total += _weighted(project, config.project)

    elif method == "best_of_n":
        values = sorted((value for _, value in cas), reverse=True)
        if config.best_of_n_take:
            values = values[:config.best_of_n_take]
        total_ca = sum(values)
        total = total_ca + (exam or 0.0)

    else:
        total_ca = sum(value for _, value in cas)
        total = total_ca + (exam or 0.0) + (project or 0.0)
        for custom in config.custom_assessments:
            value = _score(scores, _component_key(custom))
            if value is not None:
                total += value

    percentage = total / config.total_max_score * 100 if config.total_max_score > 0 else 0.0

    return ScoreCalculationResult(
        total_ca=round2(total_ca),
        total=round2(total),
        percentage=round2(percentage),
        max_score=config.total_max_score,
        breakdown={k: float(v) for k, v in scores.items() if v is not None},
    )


# ── Validation ──────────────────────────────────────────────────────

def _check_range(label: str, value: float, max_score: float, errors: List[str]) -> None:
    if value < 0:
        errors.append(f"{label} score cannot be negative")
    elif value > max_score:
        errors.append(f"{label} score ({value:g}) exceeds maximum ({max_score:g})")


def validate_score_entry(scores: RawScores, config: AssessmentConfig) -> Tuple[bool, List[str]]:
    """Check a score entry against its configuration. Returns (valid, errors)."""
    errors: List[str] = []

    for ca in config.ca_configs:
        value = scores.get(_component_key(ca))
        if value is None:
            if not ca.is_optional:
                errors.append(f"{ca.name} is required")
            continue
        _check_range(ca.name, float(value), ca.max_score, errors)

    if _enabled(config.exam):
        value = scores.get("exam")
        if value is None:
            errors.append("Exam score is required")
        else:
            _check_range("Exam", float(value), config.exam.max_score, errors)

    if _enabled(config.project) and not config.project.is_optional:
        value = scores.get("project")
        if value is None:
            errors.append("Project score is required")
        else:
            _check_range("Project", float(value), config.project.max_score, errors)

    return not errors, errors


def get_assessment_label(key: str, config: AssessmentConfig) -> str:
    """Human-readable name for a score key, falling back to the key itself."""
    for ca in config.ca_configs:
        if _component_key(ca) == key:
            return ca.name
    if key == "exam" and _enabled(config.exam):
        return config.exam.name
    if key == "project" and _enabled(config.project):
        return config.project.name
    for custom in config.custom_assessments:
        if _component_key(custom) == key:
            return custom.name
    return key


def assessment_breakdown_labels(scores: RawScores, config: AssessmentConfig) -> Dict[str, str]:
    """Map every scored key to its display label."""
    return {key: get_assessment_label(key, config) for key in scores}
