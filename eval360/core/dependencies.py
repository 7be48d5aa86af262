"""
Dependencies - 360 Evaluation Scoring Engine
eval360/core/dependencies.py

FastAPI dependency injection for the orchestrator, repository and service.
"""

from functools import lru_cache

from eval360.config import get_settings
from eval360.models.policy import ScoringPolicy
from eval360.repositories.aggregation_repository import AggregationRepository
from eval360.scoring.orchestrator import AggregationOrchestrator
from eval360.services.aggregation_service import AggregationService


@lru_cache()
def get_scoring_policy() -> ScoringPolicy:
    """Get the ScoringPolicy built from settings."""
    return get_settings().scoring_policy()


@lru_cache()
def get_orchestrator() -> AggregationOrchestrator:
    """Get cached AggregationOrchestrator instance."""
    return AggregationOrchestrator(get_scoring_policy())


@lru_cache()
def get_aggregation_repository() -> AggregationRepository:
    """Get cached AggregationRepository instance."""
    return AggregationRepository()


@lru_cache()
def get_aggregation_service() -> AggregationService:
    """Get cached AggregationService instance."""
    return AggregationService(get_orchestrator(), get_aggregation_repository())
