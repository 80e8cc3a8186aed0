"""
models.py — Plain data types shared by the result and promotion engines.

Everything here is an in-memory value object. Records arrive already
validated from the HTTP schemas (or any other collaborator) and the engine
functions return fresh instances; nothing in this module performs I/O.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union


# ── Result Aggregation ──────────────────────────────────────────────

@dataclass(frozen=True)
class SubjectScore:
    subject_id: str
    subject_name: str
    total: float
    percentage: float
    grade: str = ""
    max_score: float = 100.0
    is_absent: bool = False
    is_exempted: bool = False

    @property
    def is_graded(self) -> bool:
        return not (self.is_absent or self.is_exempted)


@dataclass(frozen=True)
class TermResultCalculation:
    total_score: float = 0.0
    average_score: float = 0.0
    number_of_subjects: int = 0
    subjects_passed: int = 0
    subjects_failed: int = 0


@dataclass(frozen=True)
class StudentResult:
    student_id: str
    student_name: str
    total_score: float
    average_score: float
    number_of_subjects: int = 0
    subjects_passed: int = 0
    subjects_failed: int = 0
    position: Optional[int] = None


@dataclass(frozen=True)
class ResultSummary:
    total_score: float
    average_score: float
    number_of_subjects: int
    subjects_passed: int
    subjects_failed: int
    position: int
    class_size: int
    overall_grade: str
    remark: str


@dataclass(frozen=True)
class GradeBoundary:
    grade: str
    min_score: float
    max_score: float
    gpa: Optional[float] = None
    description: Optional[str] = None


# ── Assessment Scoring ──────────────────────────────────────────────

@dataclass(frozen=True)
class AssessmentComponent:
    name: str
    max_score: float
    weight: Optional[float] = None
    is_optional: bool = False
    enabled: bool = True
    key: Optional[str] = None


@dataclass(frozen=True)
class AssessmentConfig:
    ca_configs: List[AssessmentComponent]
    total_max_score: float
    exam: Optional[AssessmentComponent] = None
    project: Optional[AssessmentComponent] = None
    custom_assessments: List[AssessmentComponent] = field(default_factory=list)
    calculation_method: str = "sum"
    best_of_n_take: Optional[int] = None


@dataclass(frozen=True)
class ScoreCalculationResult:
    total_ca: float
    total: float
    percentage: float
    max_score: float
    breakdown: Dict[str, float]


# ── Promotion ───────────────────────────────────────────────────────

AUTO_ELIGIBLE = "auto_eligible"
REVIEW_REQUIRED = "review_required"
AUTO_INELIGIBLE = "auto_ineligible"
CATEGORIES = (AUTO_ELIGIBLE, REVIEW_REQUIRED, AUTO_INELIGIBLE)

DECISIONS = ("promote", "repeat", "graduate")
GRADUATED_LEVEL = "GRADUATED"


@dataclass(frozen=True)
class StudentPerformance:
    student_id: str
    student_name: str
    average_score: float
    total_subjects: int
    subjects_passed: int
    subjects_failed: int
    admission_number: str = ""
    failed_subjects: List[str] = field(default_factory=list)
    failed_core_subjects: List[str] = field(default_factory=list)
    attendance: Optional[float] = None


@dataclass(frozen=True)
class ThresholdRule:
    """An enabled/disabled numeric threshold, e.g. a minimum average of 50."""

    enabled: bool
    value: float
    hard: bool = False


@dataclass(frozen=True)
class CoreSubjectsRule:
    enabled: bool
    type: str = "all"  # "all" or "minimum"
    minimum_required: Optional[int] = None
    core_subject_ids: List[str] = field(default_factory=list)
    hard: bool = True


@dataclass(frozen=True)
class PromotionCriteria:
    pass_mark: float = 40.0
    minimum_average_score: Optional[ThresholdRule] = None
    minimum_subjects_passed: Optional[ThresholdRule] = None
    core_subjects_requirement: Optional[CoreSubjectsRule] = None
    attendance_requirement: Optional[ThresholdRule] = None


@dataclass(frozen=True)
class PromotionSettings:
    mode: str = "automatic"  # automatic | manual | hybrid
    allow_manual_override: bool = True
    criteria: Optional[PromotionCriteria] = None
    level_mapping: Dict[str, str] = field(default_factory=dict)
    graduating_levels: List[str] = field(default_factory=list)
    failure_action: str = "repeat"  # repeat | conditional | manual
    require_approval: bool = True

    @property
    def core_subject_ids(self) -> List[str]:
        rule = self.criteria.core_subjects_requirement if self.criteria else None
        return list(rule.core_subject_ids) if rule else []


@dataclass(frozen=True)
class CriteriaResults:
    passed_minimum_average: bool = True
    passed_minimum_subjects: bool = True
    passed_core_subjects: bool = True
    passed_attendance: bool = True


@dataclass(frozen=True)
class EligibilityResult:
    is_eligible: bool
    category: str
    criteria_results: CriteriaResults
    failed_criteria: List[str] = field(default_factory=list)
    passed_criteria: List[str] = field(default_factory=list)
    hard_failures: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Computed:
    """A decision that agrees with (or does not contradict) the classifier."""

    eligibility: EligibilityResult
    kind: str = "computed"


@dataclass(frozen=True)
class Overridden:
    """A decision that contradicts the classifier; the reason is mandatory."""

    eligibility: EligibilityResult
    reason: str
    kind: str = "overridden"

    def __post_init__(self):
        if not self.reason or not self.reason.strip():
            raise ValueError("An overridden decision needs a non-empty reason.")


DecisionBasis = Union[Computed, Overridden]


@dataclass(frozen=True)
class StudentDecision:
    student_id: str
    decision: str
    basis: DecisionBasis
    teacher_notes: Optional[str] = None

    @property
    def is_override(self) -> bool:
        return isinstance(self.basis, Overridden)

    @property
    def override_reason(self) -> Optional[str]:
        return self.basis.reason if isinstance(self.basis, Overridden) else None


@dataclass(frozen=True)
class PromotionCampaign:
    campaign_id: str
    name: str
    academic_year: str
    status: str = "draft"  # draft -> open -> executed
    new_academic_year: Optional[str] = None


@dataclass(frozen=True)
class PromotionRecord:
    campaign_id: str
    student_id: str
    student_name: str
    admission_number: str
    from_class_id: str
    from_class_name: str
    from_class_level: str
    to_class_level: Optional[str]
    decision: str
    eligibility: str  # auto_eligible | manual_override | manual_decision
    category: str
    average_score: float
    total_subjects: int
    subjects_passed: int
    subjects_failed_list: List[str]
    failed_core_subjects: List[str]
    attendance: Optional[float]
    criteria_results: CriteriaResults
    failed_criteria: List[str]
    passed_criteria: List[str]
    status: str
    submitted_by: str
    submitted_at: str
    override_reason: Optional[str] = None
    teacher_notes: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None


def to_dict(obj: Any) -> Any:
    """Convert engine dataclasses (or lists of them) to JSON-ready dicts."""
    if isinstance(obj, list):
        return [to_dict(o) for o in obj]
    if isinstance(obj, dict):
        return {k: to_dict(v) for k, v in obj.items()}
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    return obj
