"""
Request schemas for the promotion endpoints.
"""

from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, Field

from engine.models import (
    CoreSubjectsRule,
    CriteriaResults,
    PromotionCampaign,
    PromotionCriteria,
    PromotionRecord,
    PromotionSettings,
    StudentPerformance,
    ThresholdRule,
)
from schemas.common import EngineModel
from schemas.results import SubjectScoreIn


class ThresholdRuleIn(EngineModel):
    enabled: bool = False
    # Attendance rules arrive as minimumPercentage from the settings page.
    value: float = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("value", "minimumPercentage", "minimum_percentage"),
    )
    hard: bool = False

    def to_engine(self) -> ThresholdRule:
        return ThresholdRule(enabled=self.enabled, value=self.value, hard=self.hard)


class CoreSubjectsRuleIn(EngineModel):
    enabled: bool = False
    type: Literal["all", "minimum"] = "all"
    minimum_required: Optional[int] = Field(default=None, ge=0)
    core_subject_ids: List[str] = Field(default_factory=list)
    hard: bool = True

    def to_engine(self) -> CoreSubjectsRule:
        return CoreSubjectsRule(**self.model_dump())


class PromotionCriteriaIn(EngineModel):
    pass_mark: float = Field(default=40, ge=0, le=100)
    minimum_average_score: Optional[ThresholdRuleIn] = None
    minimum_subjects_passed: Optional[ThresholdRuleIn] = None
    core_subjects_requirement: Optional[CoreSubjectsRuleIn] = None
    attendance_requirement: Optional[ThresholdRuleIn] = None

    def to_engine(self) -> PromotionCriteria:
        def rule(r):
            return r.to_engine() if r is not None else None

        return PromotionCriteria(
            pass_mark=self.pass_mark,
            minimum_average_score=rule(self.minimum_average_score),
            minimum_subjects_passed=rule(self.minimum_subjects_passed),
            core_subjects_requirement=rule(self.core_subjects_requirement),
            attendance_requirement=rule(self.attendance_requirement),
        )


class PromotionSettingsIn(EngineModel):
    mode: Literal["automatic", "manual", "hybrid"] = "automatic"
    allow_manual_override: bool = True
    criteria: Optional[PromotionCriteriaIn] = None
    level_mapping: Dict[str, str] = Field(default_factory=dict)
    graduating_levels: List[str] = Field(default_factory=list)
    failure_action: Literal["repeat", "conditional", "manual"] = "repeat"
    require_approval: bool = True

    def to_engine(self) -> PromotionSettings:
        return PromotionSettings(
            mode=self.mode,
            allow_manual_override=self.allow_manual_override,
            criteria=self.criteria.to_engine() if self.criteria else None,
            level_mapping=dict(self.level_mapping),
            graduating_levels=list(self.graduating_levels),
            failure_action=self.failure_action,
            require_approval=self.require_approval,
        )


class StudentPerformanceIn(EngineModel):
    student_id: str
    student_name: str
    admission_number: str = ""
    average_score: float = Field(ge=0, le=100)
    total_subjects: int = Field(ge=0)
    subjects_passed: int = Field(ge=0)
    subjects_failed: int = Field(ge=0)
    failed_subjects: List[str] = Field(default_factory=list)
    failed_core_subjects: List[str] = Field(default_factory=list)
    attendance: Optional[float] = Field(default=None, ge=0, le=100)

    def to_engine(self) -> StudentPerformance:
        return StudentPerformance(**self.model_dump())


class EligibilityRequest(EngineModel):
    student: StudentPerformanceIn
    settings: PromotionSettingsIn
    class_level: Optional[str] = None
    core_subject_ids: Optional[List[str]] = None


class CategorizeRequest(EngineModel):
    students: List[StudentPerformanceIn]
    settings: PromotionSettingsIn
    core_subject_ids: Optional[List[str]] = None


class StudentScoresIn(EngineModel):
    student_id: str
    student_name: str
    admission_number: str = ""
    attendance: Optional[float] = Field(default=None, ge=0, le=100)
    scores: List[SubjectScoreIn]


class PerformanceRequest(EngineModel):
    students: List[StudentScoresIn]
    settings: PromotionSettingsIn
    class_level: Optional[str] = None


class CampaignIn(EngineModel):
    campaign_id: str
    name: str
    academic_year: str
    status: Literal["draft", "open", "executed"] = "draft"
    new_academic_year: Optional[str] = None

    def to_engine(self) -> PromotionCampaign:
        return PromotionCampaign(**self.model_dump())


class DecisionIn(EngineModel):
    student_id: str
    decision: Optional[Literal["promote", "repeat", "graduate"]] = None
    override_reason: Optional[str] = None
    teacher_notes: Optional[str] = None


class SubmitRequest(EngineModel):
    campaign: CampaignIn
    settings: PromotionSettingsIn
    class_id: str
    class_name: str
    class_level: str
    submitted_by: str
    students: List[StudentPerformanceIn]
    decisions: List[DecisionIn]


class CriteriaResultsIn(EngineModel):
    passed_minimum_average: bool = True
    passed_minimum_subjects: bool = True
    passed_core_subjects: bool = True
    passed_attendance: bool = True


class PromotionRecordIn(EngineModel):
    campaign_id: str
    student_id: str
    student_name: str
    admission_number: str = ""
    from_class_id: str = ""
    from_class_name: str = ""
    from_class_level: str = ""
    to_class_level: Optional[str] = None
    decision: Literal["promote", "repeat", "graduate"]
    eligibility: Literal["auto_eligible", "manual_override", "manual_decision"] = "auto_eligible"
    category: Literal["auto_eligible", "review_required", "auto_ineligible"] = "auto_eligible"
    average_score: float = 0
    total_subjects: int = 0
    subjects_passed: int = 0
    subjects_failed_list: List[str] = Field(default_factory=list)
    failed_core_subjects: List[str] = Field(default_factory=list)
    attendance: Optional[float] = None
    criteria_results: CriteriaResultsIn = Field(default_factory=CriteriaResultsIn)
    failed_criteria: List[str] = Field(default_factory=list)
    passed_criteria: List[str] = Field(default_factory=list)
    status: Literal["submitted", "approved", "executed"] = "submitted"
    submitted_by: str = ""
    submitted_at: str = ""
    override_reason: Optional[str] = None
    teacher_notes: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None

    def to_engine(self) -> PromotionRecord:
        data = self.model_dump()
        data["criteria_results"] = CriteriaResults(**data["criteria_results"])
        return PromotionRecord(**data)


class ApproveRequest(EngineModel):
    records: List[PromotionRecordIn]
    approved_by: str


class ExecutionPlanRequest(EngineModel):
    campaign: CampaignIn
    records: List[PromotionRecordIn]
    batch_size: Optional[int] = Field(default=None, ge=1)
