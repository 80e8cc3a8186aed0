"""
Request schemas for the results endpoints.

Every model converts itself into the matching engine dataclass with
to_engine(), so engine functions only ever see validated values.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from engine.grading import validate_grade_boundaries
from engine.models import (
    AssessmentComponent,
    AssessmentConfig,
    GradeBoundary,
    StudentResult,
    SubjectScore,
)
from schemas.common import EngineModel


class SubjectScoreIn(EngineModel):
    subject_id: str
    subject_name: str
    total: float = Field(ge=0)
    percentage: float = Field(ge=0, le=100)
    grade: str = ""
    max_score: float = Field(default=100, gt=0)
    is_absent: bool = False
    is_exempted: bool = False

    def to_engine(self) -> SubjectScore:
        return SubjectScore(**self.model_dump())


class GradeBoundaryIn(EngineModel):
    grade: str
    min_score: float
    max_score: float
    gpa: Optional[float] = None
    description: Optional[str] = None

    def to_engine(self) -> GradeBoundary:
        return GradeBoundary(**self.model_dump())


class GradeTableMixin(EngineModel):
    """Optional tenant grade table; rejected at the boundary if it has gaps or overlaps."""

    boundaries: Optional[List[GradeBoundaryIn]] = None

    @field_validator("boundaries")
    @classmethod
    def check_boundaries(cls, value):
        if value is not None:
            validate_grade_boundaries([b.to_engine() for b in value])
        return value

    def engine_boundaries(self) -> Optional[List[GradeBoundary]]:
        if self.boundaries is None:
            return None
        return [b.to_engine() for b in self.boundaries]


class TermResultRequest(EngineModel):
    scores: List[SubjectScoreIn]
    pass_mark: Optional[float] = Field(default=None, ge=0, le=100)


class StudentResultIn(EngineModel):
    student_id: str
    student_name: str
    total_score: float
    average_score: float
    number_of_subjects: int = 0
    subjects_passed: int = 0
    subjects_failed: int = 0

    def to_engine(self) -> StudentResult:
        return StudentResult(**self.model_dump())


class ClassPositionsRequest(EngineModel):
    students: List[StudentResultIn]


class SummaryRequest(GradeTableMixin):
    scores: List[SubjectScoreIn]
    position: int = Field(ge=1)
    class_size: int = Field(ge=1)
    pass_mark: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def position_within_class(self):
        if self.position > self.class_size:
            raise ValueError("position cannot exceed class_size")
        return self


class ClassStudentIn(EngineModel):
    student_id: str
    student_name: str
    scores: List[SubjectScoreIn]


class ClassResultsRequest(GradeTableMixin):
    students: List[ClassStudentIn]
    pass_mark: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def unique_student_ids(self):
        ids = [s.student_id for s in self.students]
        if len(ids) != len(set(ids)):
            raise ValueError("student ids must be unique within a class")
        return self


class GradeRequest(GradeTableMixin):
    average: float


class RemarkRequest(EngineModel):
    average: float
    position: int = Field(ge=1)
    class_size: int = Field(ge=1)
    subjects_passed: int = Field(default=0, ge=0)
    subjects_failed: int = Field(default=0, ge=0)


# ── Assessment ──────────────────────────────────────────────────────

class AssessmentComponentIn(EngineModel):
    name: str
    max_score: float = Field(gt=0)
    weight: Optional[float] = Field(default=None, ge=0, le=100)
    is_optional: bool = False
    enabled: bool = True
    key: Optional[str] = None

    def to_engine(self) -> AssessmentComponent:
        return AssessmentComponent(**self.model_dump())


class AssessmentConfigIn(EngineModel):
    ca_configs: List[AssessmentComponentIn] = Field(default_factory=list, max_length=10)
    exam: Optional[AssessmentComponentIn] = None
    project: Optional[AssessmentComponentIn] = None
    custom_assessments: List[AssessmentComponentIn] = Field(default_factory=list)
    calculation_method: Literal["sum", "weighted_average", "best_of_n"] = "sum"
    best_of_n_take: Optional[int] = Field(default=None, ge=1)
    total_max_score: float = Field(gt=0)

    def to_engine(self) -> AssessmentConfig:
        return AssessmentConfig(
            ca_configs=[c.to_engine() for c in self.ca_configs],
            exam=self.exam.to_engine() if self.exam else None,
            project=self.project.to_engine() if self.project else None,
            custom_assessments=[c.to_engine() for c in self.custom_assessments],
            calculation_method=self.calculation_method,
            best_of_n_take=self.best_of_n_take,
            total_max_score=self.total_max_score,
        )


class AssessmentRequest(EngineModel):
    scores: Dict[str, Optional[float]]
    config: AssessmentConfigIn
