"""
Aggregation output models.

``Optional[float]`` scores mean "not applicable / no data" and are never
used in arithmetic; a computed zero is a plain ``0.0``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eval360.models.enumerations import AggregationStatus, EvaluatorType, RuleAction, RuleOperator


class ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

class Statistics(ResultModel):
    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    standard_deviation: float = 0.0
    range: float = 0.0
    count: int = 0


# ---------------------------------------------------------------------------
# Score tree (category / subdimension rollup for one answer set)
# ---------------------------------------------------------------------------

class SubdimensionScore(ResultModel):
    subdimension_id: Optional[str] = None      # None for the implicit group of a category
    subdimension_name: str = ""
    score: float = 0.0
    weighted_score: float = 0.0                # score × subdimension weight
    total_weight: float = 0.0                  # weight contributed to the category denominator
    question_weight: float = 0.0               # Σ weights of answered numeric questions
    answered_questions: int = 0
    total_questions: int = 0
    statistics: Statistics = Field(default_factory=Statistics)


class CategoryScore(ResultModel):
    category_id: str
    category_name: str = ""
    score: Optional[float] = None
    weighted_score: float = 0.0
    total_weight: float = 0.0
    answered_questions: int = 0
    total_questions: int = 0
    subdimension_scores: List[SubdimensionScore] = Field(default_factory=list)
    statistics: Statistics = Field(default_factory=Statistics)
    is_excluded: bool = False
    exclusion_reason: Optional[str] = None


class ActiveRule(ResultModel):
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    question_id: str
    question_text: str = ""
    operator: RuleOperator
    value: Any = None
    action: RuleAction
    user_answer: Any = None


class ScoreTree(ResultModel):
    overall_score: float = 0.0
    completion_percentage: float = 0.0
    answered_questions: int = 0
    total_questions: int = 0
    category_scores: List[CategoryScore] = Field(default_factory=list)
    excluded_categories: List[str] = Field(default_factory=list)
    active_rules: List[ActiveRule] = Field(default_factory=list)

    @property
    def conditional_rules_applied(self) -> bool:
        return len(self.active_rules) > 0


# ---------------------------------------------------------------------------
# Session-level aggregation
# ---------------------------------------------------------------------------

class AnswerRecord(ResultModel):
    evaluator_id: str
    value: Any = None
    normalized: Optional[float] = None
    answered_at: Optional[datetime] = None


class AggregatedQuestion(ResultModel):
    question_id: str
    question_text: str = ""
    question_type: str = "likert"
    category_id: str
    subdimension_id: Optional[str] = None
    responses_by_type: Dict[EvaluatorType, List[AnswerRecord]] = Field(default_factory=dict)
    statistics: Statistics = Field(default_factory=Statistics)
    aggregated_score: Optional[float] = None
    distribution: Dict[str, int] = Field(default_factory=dict)
    is_valid: bool = False


class TypeScore(ResultModel):
    evaluator_type: EvaluatorType
    count: int = 0                      # numeric answers received from this type
    evaluator_count: int = 0            # distinct evaluators of this type
    question_count: int = 0             # questions with at least one numeric answer
    weight: float = 1.0
    score: Optional[float] = None       # mean of per-question means
    category_scores: Dict[str, Optional[float]] = Field(default_factory=dict)
    consensus_index: float = 0.0
    anonymity_met: bool = False
    is_valid: bool = False


class SessionCategoryScore(ResultModel):
    category_id: str
    category_name: str = ""
    weight: float = 1.0
    score: Optional[float] = None       # mean over evaluators that did not exclude it
    is_excluded: bool = False           # excluded for every evaluator
    evaluator_count: int = 0
    excluded_count: int = 0


class AnonymityTypeStatus(ResultModel):
    required: int
    actual: int
    met: bool
    percentage: int
    critical: bool = False


class AnonymityViolation(ResultModel):
    evaluator_type: EvaluatorType
    actual: int
    required: int
    severity: str                       # "critical" (one rater) or "warning"


class AnonymityValidation(ResultModel):
    is_valid: bool
    status: Dict[EvaluatorType, AnonymityTypeStatus] = Field(default_factory=dict)
    total_evaluators: int = 0
    critical_violations: List[AnonymityViolation] = Field(default_factory=list)
    should_hide_data: bool = False


class AggregationMetrics(ResultModel):
    completion_rate: float = 0.0
    response_rate: float = 0.0
    consensus_index: float = 0.0


class RankedCategory(ResultModel):
    category_id: str
    category_name: str = ""
    score: float
    percentage: Optional[float] = None  # score on 0..100 of the test scale


class CategoryGap(ResultModel):
    category_id: str
    self_score: float
    others_score: float
    gap: float                          # self − others; positive means self-overrating


class ReportInsights(ResultModel):
    strengths: List[RankedCategory] = Field(default_factory=list)
    weaknesses: List[RankedCategory] = Field(default_factory=list)
    self_score: Optional[float] = None
    others_score: Optional[float] = None
    self_other_gap: Optional[float] = None
    category_gaps: List[CategoryGap] = Field(default_factory=list)


class AggregationResult(ResultModel):
    test_id: str
    test_version: str
    total_responses: int = 0
    valid_responses: int = 0
    aggregated_responses: Dict[str, AggregatedQuestion] = Field(default_factory=dict)
    scores_by_type: Dict[EvaluatorType, TypeScore] = Field(default_factory=dict)
    category_scores: Dict[str, SessionCategoryScore] = Field(default_factory=dict)
    overall_score: float = 0.0
    overall_score_by_type: float = 0.0
    category_overall_score: float = 0.0
    metrics: AggregationMetrics = Field(default_factory=AggregationMetrics)
    anonymity_status: Dict[EvaluatorType, AnonymityTypeStatus] = Field(default_factory=dict)
    insights: ReportInsights = Field(default_factory=ReportInsights)
    is_valid: bool = False
    validation_errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class AggregationRecord(ResultModel):
    """Persisted envelope around a result; timestamps belong to the caller, not the engine."""

    session_id: str
    status: AggregationStatus = AggregationStatus.PENDING
    result: Optional[AggregationResult] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    processed_at: Optional[datetime] = None
