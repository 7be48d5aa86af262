"""
Health Check Router - 360 Evaluation Scoring Engine
eval360/routers/health.py

Returns service status plus a smoke check of the scoring engine: a tiny
one-question aggregation must produce the expected score.
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict
from datetime import datetime, timezone

from eval360.config import settings
from eval360.models.response import EvaluatorResponse
from eval360.models.test_definition import TestDefinition
from eval360.scoring.orchestrator import AggregationOrchestrator

router = APIRouter(tags=["Health"])



#  Schemas


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]



#  Dependency Health Checks


_SMOKE_DEFINITION = {
    "id": "health",
    "categories": [{"id": "c1", "name": "Health"}],
    "questions": [{"id": "q1", "text": "Health", "categoryId": "c1"}],
}


def check_scoring_engine() -> str:
    """Run a one-answer aggregation; the self score must equal the answer."""
    try:
        result = AggregationOrchestrator().compute(
            TestDefinition.model_validate(_SMOKE_DEFINITION),
            [EvaluatorResponse(evaluator_id="health", evaluator_type="self", answers={"q1": 4})],
        )
        if result.overall_score_by_type != 4.0:
            return f"unhealthy: expected 4.0, got {result.overall_score_by_type}"
        return "healthy"
    except Exception as e:
        error_msg = str(e)[:100] + "..." if len(str(e)) > 100 else str(e)
        return f"unhealthy: {error_msg}"



#  Endpoints


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
    responses={503: {"description": "A dependency is unhealthy"}},
)
async def health_check():
    dependencies = {"scoring_engine": check_scoring_engine()}
    all_healthy = all(v.startswith("healthy") for v in dependencies.values())

    response = HealthResponse(
        status="healthy" if all_healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )
    if all_healthy:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
