"""
ScoringPolicy — the single immutable configuration value the engine reads.

Evaluator weights and anonymity thresholds vary by plan/organization, so
they are passed into the orchestrator instead of living in module constants.
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eval360.models.enumerations import EvaluatorType, OverallScoreMode

DEFAULT_EVALUATOR_WEIGHTS: Dict[EvaluatorType, float] = {
    EvaluatorType.SELF: 0.10,
    EvaluatorType.MANAGER: 0.30,
    EvaluatorType.PEER: 0.25,
    EvaluatorType.SUBORDINATE: 0.25,
    EvaluatorType.EXTERNAL: 0.10,
}

# Self-evaluations are never anonymous, so no threshold applies to them.
DEFAULT_ANONYMITY_THRESHOLDS: Dict[EvaluatorType, int] = {
    EvaluatorType.PEER: 3,
    EvaluatorType.SUBORDINATE: 3,
    EvaluatorType.EXTERNAL: 1,
    EvaluatorType.MANAGER: 1,
}


class ScoringPolicy(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    evaluator_weights: Dict[EvaluatorType, float] = Field(
        default_factory=lambda: dict(DEFAULT_EVALUATOR_WEIGHTS),
        description="Weight of each evaluator type in the overall score",
    )
    anonymity_thresholds: Dict[EvaluatorType, int] = Field(
        default_factory=lambda: dict(DEFAULT_ANONYMITY_THRESHOLDS),
        description="Minimum respondents per evaluator type before disclosure",
    )
    overall_score_mode: OverallScoreMode = Field(
        default=OverallScoreMode.EVALUATOR_TYPE,
        description="Which formula produces the headline overall score",
    )
    unknown_type_weight: float = Field(
        default=1.0,
        ge=0,
        description="Weight used for an evaluator type missing from evaluator_weights",
    )
    consensus_max_std_dev: float = Field(
        default=2.0,
        gt=0,
        description="Standard deviation treated as total disagreement (2 on a 1-5 scale)",
    )
    min_completion_rate: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Completion rate (%) below which a warning is emitted",
    )

    @field_validator("evaluator_weights")
    @classmethod
    def validate_weights(cls, v: Dict[EvaluatorType, float]) -> Dict[EvaluatorType, float]:
        for evaluator_type, weight in v.items():
            if weight < 0:
                raise ValueError(f"weight for {evaluator_type.value} must be >= 0, got {weight}")
        return v

    @field_validator("anonymity_thresholds")
    @classmethod
    def validate_thresholds(cls, v: Dict[EvaluatorType, int]) -> Dict[EvaluatorType, int]:
        for evaluator_type, threshold in v.items():
            if threshold < 1:
                raise ValueError(
                    f"threshold for {evaluator_type.value} must be >= 1, got {threshold}"
                )
        return v

    def weight_for(self, evaluator_type: EvaluatorType) -> float:
        return self.evaluator_weights.get(evaluator_type, self.unknown_type_weight)
