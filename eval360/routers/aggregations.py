"""
Aggregation Router - 360 Evaluation Scoring Engine
eval360/routers/aggregations.py

Endpoints:
  GET  /api/v1/scoring/policy                               — active ScoringPolicy
  POST /api/v1/aggregations/compute                         — stateless compute
  POST /api/v1/sessions/{session_id}/aggregation            — aggregate a session once
  POST /api/v1/sessions/{session_id}/aggregation/recompute  — force a new run
  GET  /api/v1/sessions/{session_id}/aggregation            — stored record (404 when absent;
                                                              ?redacted=true for the report view)

Bodies and responses use camelCase keys.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eval360.config import settings
from eval360.core.dependencies import get_aggregation_service, get_orchestrator, get_scoring_policy
from eval360.core.exceptions import AggregationNotFoundException, InputError
from eval360.models.aggregation import AggregationRecord, AggregationResult
from eval360.models.policy import ScoringPolicy
from eval360.models.response import EvaluatorResponse
from eval360.models.test_definition import TestDefinition
from eval360.scoring.orchestrator import AggregationOrchestrator
from eval360.services.aggregation_service import AggregationService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Aggregations"])



#  Schemas


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Optional[dict] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionAggregationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    test_definition: TestDefinition
    responses: List[EvaluatorResponse] = Field(default_factory=list)


class ComputeRequest(SessionAggregationRequest):
    policy: Optional[ScoringPolicy] = None



#  Exception Handlers


def error_response(status_code: int, error_code: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error_code=error_code, message=message, details=details).model_dump(mode="json"),
    )


async def input_error_handler(request: Request, exc: InputError):
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "INVALID_TEST_DEFINITION",
        exc.message,
        {"problems": exc.problems} if exc.problems else None,
    )


async def not_found_handler(request: Request, exc: AggregationNotFoundException):
    return error_response(
        status.HTTP_404_NOT_FOUND,
        "AGGREGATION_NOT_FOUND",
        str(exc),
        {"session_id": exc.session_id},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", "Request validation failed")
    err = errors[0]
    error_type = err.get("type", "")
    if "json_invalid" in error_type:
        return error_response(status.HTTP_400_BAD_REQUEST, "INVALID_REQUEST", "Malformed JSON request body")
    field = ".".join(str(l) for l in err.get("loc", []) if l != "body")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        err.get("msg", "Invalid request"),
        {"field": field, "type": error_type} if field else None,
    )



#  Endpoints


@router.get("/scoring/policy", response_model=ScoringPolicy, response_model_by_alias=True, summary="Active scoring policy")
async def get_policy(policy: ScoringPolicy = Depends(get_scoring_policy)):
    return policy


@router.post(
    "/aggregations/compute",
    response_model=AggregationResult,
    response_model_by_alias=True,
    summary="Aggregate responses without storing anything",
)
async def compute_aggregation(
    body: ComputeRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    if body.policy is not None:
        orchestrator = AggregationOrchestrator(body.policy)
    return orchestrator.compute(body.test_definition, body.responses)


@router.post(
    "/sessions/{session_id}/aggregation",
    response_model=AggregationRecord,
    response_model_by_alias=True,
    summary="Aggregate a session (no-op if already aggregated)",
)
async def process_session(
    session_id: str,
    body: SessionAggregationRequest,
    service: AggregationService = Depends(get_aggregation_service),
):
    return service.process_submission(session_id, body.test_definition, body.responses)


@router.post(
    "/sessions/{session_id}/aggregation/recompute",
    response_model=AggregationRecord,
    response_model_by_alias=True,
    summary="Recompute and overwrite a session aggregation",
)
async def recompute_session(
    session_id: str,
    body: SessionAggregationRequest,
    service: AggregationService = Depends(get_aggregation_service),
):
    return service.recompute(session_id, body.test_definition, body.responses)


@router.get(
    "/sessions/{session_id}/aggregation",
    response_model=AggregationRecord,
    response_model_by_alias=True,
    summary="Get a stored session aggregation",
)
async def get_session_aggregation(
    session_id: str,
    redacted: bool = Query(default=False, description="Hide per-type data of evaluator types below their anonymity threshold"),
    service: AggregationService = Depends(get_aggregation_service),
):
    return service.get(session_id, redacted=redacted)
