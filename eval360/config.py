"""Application configuration with comprehensive validation."""
from typing import Literal
from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eval360.models.enumerations import EvaluatorType, OverallScoreMode
from eval360.models.policy import ScoringPolicy


class Settings(BaseSettings):
    """Application settings; scoring defaults can be overridden per deployment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "360 Evaluation Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Evaluator-type weights
    W_SELF: float = Field(default=0.10, ge=0.0, le=1.0)
    W_MANAGER: float = Field(default=0.30, ge=0.0, le=1.0)
    W_PEER: float = Field(default=0.25, ge=0.0, le=1.0)
    W_SUBORDINATE: float = Field(default=0.25, ge=0.0, le=1.0)
    W_EXTERNAL: float = Field(default=0.10, ge=0.0, le=1.0)

    # Anonymity thresholds (minimum respondents per type)
    MIN_PEER: int = Field(default=3, ge=1)
    MIN_SUBORDINATE: int = Field(default=3, ge=1)
    MIN_EXTERNAL: int = Field(default=1, ge=1)
    MIN_MANAGER: int = Field(default=1, ge=1)

    # Scoring
    OVERALL_SCORE_MODE: OverallScoreMode = OverallScoreMode.EVALUATOR_TYPE
    CONSENSUS_MAX_STD_DEV: float = Field(default=2.0, gt=0)
    MIN_COMPLETION_RATE: float = Field(default=50.0, ge=0, le=100)

    @model_validator(mode="after")
    def validate_evaluator_weights(self):
        """Validate evaluator weights sum to 1.0."""
        total = sum(self.evaluator_weights.values())
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Evaluator weights must sum to 1.0, got {total}")
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self

    @property
    def evaluator_weights(self) -> dict:
        return {
            EvaluatorType.SELF: self.W_SELF,
            EvaluatorType.MANAGER: self.W_MANAGER,
            EvaluatorType.PEER: self.W_PEER,
            EvaluatorType.SUBORDINATE: self.W_SUBORDINATE,
            EvaluatorType.EXTERNAL: self.W_EXTERNAL,
        }

    @property
    def anonymity_thresholds(self) -> dict:
        return {
            EvaluatorType.PEER: self.MIN_PEER,
            EvaluatorType.SUBORDINATE: self.MIN_SUBORDINATE,
            EvaluatorType.EXTERNAL: self.MIN_EXTERNAL,
            EvaluatorType.MANAGER: self.MIN_MANAGER,
        }

    def scoring_policy(self) -> ScoringPolicy:
        """Default ScoringPolicy for this deployment."""
        return ScoringPolicy(
            evaluator_weights=self.evaluator_weights,
            anonymity_thresholds=self.anonymity_thresholds,
            overall_score_mode=self.OVERALL_SCORE_MODE,
            consensus_max_std_dev=self.CONSENSUS_MAX_STD_DEV,
            min_completion_rate=self.MIN_COMPLETION_RATE,
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
