# tests/conftest.py

"""
Pytest Fixtures - Shared test definitions, responses and the API client

TEST DEFINITION REFERENCE:
- simple_definition:      1 category (c1) / 1 subdimension (s1) / q1 (weight 1), q2 (weight 2, negative)
- leadership_definition:  c-general (always scored) + c-team (conditional on q-manages == "no"),
                          plus an open-text question
"""

import pytest
from fastapi.testclient import TestClient

from eval360.main import app
from eval360.models.policy import ScoringPolicy
from eval360.models.response import EvaluatorResponse
from eval360.models.test_definition import TestDefinition


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture(scope="module")
def client():
    """Create a TestClient for FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# TEST DEFINITION FIXTURES
# =============================================================================

@pytest.fixture
def simple_definition_data():
    """Raw camelCase snapshot, as stored on an evaluation session."""
    return {
        "id": "test-simple",
        "version": "1.0",
        "title": "Simple 360",
        "scale": {"min": 1, "max": 5},
        "categories": [
            {
                "id": "c1",
                "name": "Communication",
                "weight": 1,
                "subdimensions": [{"id": "s1", "name": "Clarity", "weight": 1}],
            }
        ],
        "questions": [
            {"id": "q1", "text": "Explains ideas clearly", "categoryId": "c1", "subdimensionId": "s1", "weight": 1},
            {
                "id": "q2",
                "text": "Is often confusing",
                "categoryId": "c1",
                "subdimensionId": "s1",
                "weight": 2,
                "isNegative": True,
            },
        ],
    }


@pytest.fixture
def simple_definition(simple_definition_data):
    return TestDefinition.model_validate(simple_definition_data)


@pytest.fixture
def leadership_definition():
    return TestDefinition.model_validate(
        {
            "id": "test-leadership",
            "version": "2.0",
            "scale": {"min": 1, "max": 5},
            "categories": [
                {
                    "id": "c-general",
                    "name": "General",
                    "weight": 1,
                    "subdimensions": [{"id": "s-general", "name": "General", "weight": 1}],
                },
                {
                    "id": "c-team",
                    "name": "Team Leadership",
                    "weight": 1,
                    "isConditional": True,
                    "conditionalRule": {
                        "condition": {"questionId": "q-manages", "operator": "equals", "value": "no"},
                        "action": "exclude_from_scoring",
                    },
                    "subdimensions": [{"id": "s-team", "name": "Delegation", "weight": 1}],
                },
            ],
            "questions": [
                {
                    "id": "q-manages",
                    "text": "Do you manage a team?",
                    "type": "multiple-choice",
                    "categoryId": "c-general",
                    "options": ["yes", "no"],
                },
                {"id": "q-g1", "text": "Meets deadlines", "categoryId": "c-general", "subdimensionId": "s-general"},
                {"id": "q-t1", "text": "Delegates well", "categoryId": "c-team", "subdimensionId": "s-team"},
                {"id": "q-comment", "text": "Comments", "type": "open-text", "categoryId": "c-general"},
            ],
        }
    )


# =============================================================================
# RESPONSE FIXTURES
# =============================================================================

def make_response(evaluator_id, evaluator_type, answers, **kwargs):
    """Build a submitted response from bare ``{question_id: value}`` answers."""
    return EvaluatorResponse(
        id=f"r-{evaluator_id}",
        evaluator_id=evaluator_id,
        evaluator_type=evaluator_type,
        answers=answers,
        **kwargs,
    )


@pytest.fixture
def single_peer_response():
    return [make_response("p1", "peer", {"q1": 4, "q2": 2})]


@pytest.fixture
def full_session_responses():
    """Every default threshold met: 1 self, 1 manager, 3 peers, 3 subordinates, 1 external."""
    return [
        make_response("self", "self", {"q1": 5, "q2": 1}),
        make_response("m1", "manager", {"q1": 4, "q2": 2}),
        make_response("p1", "peer", {"q1": 4, "q2": 2}),
        make_response("p2", "peer", {"q1": 3, "q2": 3}),
        make_response("p3", "peer", {"q1": 5, "q2": 1}),
        make_response("s1", "subordinate", {"q1": 3, "q2": 2}),
        make_response("s2", "subordinate", {"q1": 4, "q2": 3}),
        make_response("s3", "subordinate", {"q1": 2, "q2": 4}),
        make_response("e1", "external", {"q1": 4, "q2": 2}),
    ]


@pytest.fixture
def peer_only_policy():
    """Policy that only requires peers, used to isolate anonymity from other checks."""
    return ScoringPolicy(anonymity_thresholds={"peer": 1})


@pytest.fixture
def response_factory():
    return make_response
