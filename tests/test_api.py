# tests/test_api.py

"""
API Endpoint Tests - Tests for all FastAPI endpoints
"""

import uuid

import pytest
from fastapi import status


def responses_payload(responses):
    return [r.model_dump(mode="json", by_alias=True) for r in responses]


@pytest.fixture
def session_id():
    return f"session-{uuid.uuid4()}"



# HEALTH AND ROOT


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["scoring_engine"] == "healthy"

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "running"



# POLICY


class TestPolicyEndpoint:
    """Tests for GET /api/v1/scoring/policy."""

    def test_default_policy(self, client):
        response = client.get("/api/v1/scoring/policy")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["evaluatorWeights"]["manager"] == 0.3
        assert data["anonymityThresholds"]["peer"] == 3
        assert data["overallScoreMode"] == "evaluator_type"
        assert abs(sum(data["evaluatorWeights"].values()) - 1.0) < 0.001



# STATELESS COMPUTE


class TestComputeEndpoint:
    """Tests for POST /api/v1/aggregations/compute."""

    def test_compute_single_peer(self, client, simple_definition_data, single_peer_response):
        response = client.post(
            "/api/v1/aggregations/compute",
            json={"testDefinition": simple_definition_data, "responses": responses_payload(single_peer_response)},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["isValid"] is False
        assert data["categoryScores"]["c1"]["score"] == pytest.approx(4.0)
        assert data["anonymityStatus"]["peer"]["percentage"] == 33
        assert data["aggregatedResponses"]["q2"]["responsesByType"]["peer"][0]["normalized"] == 4.0

    def test_compute_with_custom_policy(self, client, simple_definition_data, single_peer_response):
        response = client.post(
            "/api/v1/aggregations/compute",
            json={
                "testDefinition": simple_definition_data,
                "responses": responses_payload(single_peer_response),
                "policy": {"anonymityThresholds": {"peer": 1}},
            },
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["isValid"] is True

    def test_compute_accepts_bare_answer_values(self, client, simple_definition_data):
        response = client.post(
            "/api/v1/aggregations/compute",
            json={
                "testDefinition": simple_definition_data,
                "responses": [{"evaluatorId": "p1", "evaluatorType": "peer", "answers": {"q1": 4, "q2": 2}}],
            },
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["overallScoreByType"] == pytest.approx(4.0)

    def test_malformed_definition_is_422(self, client, simple_definition_data, single_peer_response):
        simple_definition_data["questions"][0]["categoryId"] = "missing"
        response = client.post(
            "/api/v1/aggregations/compute",
            json={"testDefinition": simple_definition_data, "responses": responses_payload(single_peer_response)},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["error_code"] == "INVALID_TEST_DEFINITION"
        assert "question q1 references unknown category missing" in data["details"]["problems"]
        assert "timestamp" in data

    def test_request_validation_error_envelope(self, client):
        response = client.post("/api/v1/aggregations/compute", json={"responses": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["field"] == "testDefinition"

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/api/v1/aggregations/compute",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_REQUEST"



# SESSION AGGREGATIONS


class TestSessionAggregationEndpoints:
    """Tests for /api/v1/sessions/{session_id}/aggregation."""

    def test_process_then_get(self, client, session_id, simple_definition_data, full_session_responses):
        body = {"testDefinition": simple_definition_data, "responses": responses_payload(full_session_responses)}
        response = client.post(f"/api/v1/sessions/{session_id}/aggregation", json=body)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "completed"

        stored = client.get(f"/api/v1/sessions/{session_id}/aggregation")
        assert stored.status_code == status.HTTP_200_OK
        assert stored.json()["sessionId"] == session_id
        assert stored.json()["result"]["isValid"] is True

    def test_duplicate_trigger_keeps_first_result(
        self, client, session_id, simple_definition_data, full_session_responses, single_peer_response
    ):
        url = f"/api/v1/sessions/{session_id}/aggregation"
        client.post(url, json={"testDefinition": simple_definition_data, "responses": responses_payload(full_session_responses)})
        again = client.post(
            url, json={"testDefinition": simple_definition_data, "responses": responses_payload(single_peer_response)}
        )
        assert again.json()["status"] == "completed"
        assert again.json()["result"]["totalResponses"] == 9

    def test_recompute_overwrites(
        self, client, session_id, simple_definition_data, full_session_responses, single_peer_response
    ):
        url = f"/api/v1/sessions/{session_id}/aggregation"
        client.post(url, json={"testDefinition": simple_definition_data, "responses": responses_payload(full_session_responses)})
        recomputed = client.post(
            f"{url}/recompute",
            json={"testDefinition": simple_definition_data, "responses": responses_payload(single_peer_response)},
        )
        assert recomputed.status_code == status.HTTP_200_OK
        assert recomputed.json()["status"] == "failed"
        assert recomputed.json()["result"]["totalResponses"] == 1

    def test_get_unknown_session_is_404(self, client, session_id):
        response = client.get(f"/api/v1/sessions/{session_id}/aggregation")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = response.json()
        assert data["error_code"] == "AGGREGATION_NOT_FOUND"
        assert data["details"]["session_id"] == session_id

    def test_structural_error_recorded_as_failed(self, client, session_id, simple_definition_data, single_peer_response):
        simple_definition_data["questions"][1]["subdimensionId"] = "ghost"
        response = client.post(
            f"/api/v1/sessions/{session_id}/aggregation",
            json={"testDefinition": simple_definition_data, "responses": responses_payload(single_peer_response)},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "failed"
        assert "unknown subdimension ghost" in data["error"]

    def test_redacted_view(self, client, session_id, simple_definition_data, response_factory):
        responses = [
            response_factory("m1", "manager", {"q1": 5, "q2": 1}),
            response_factory("p1", "peer", {"q1": 2, "q2": 4}),
        ]
        client.post(
            f"/api/v1/sessions/{session_id}/aggregation",
            json={"testDefinition": simple_definition_data, "responses": responses_payload(responses)},
        )
        full = client.get(f"/api/v1/sessions/{session_id}/aggregation").json()
        redacted = client.get(f"/api/v1/sessions/{session_id}/aggregation", params={"redacted": "true"}).json()
        assert full["result"]["scoresByType"]["peer"]["score"] is not None
        assert redacted["result"]["scoresByType"]["peer"]["score"] is None
        assert "peer" not in redacted["result"]["aggregatedResponses"]["q1"]["responsesByType"]
        assert redacted["result"]["scoresByType"]["manager"]["score"] == pytest.approx(5.0)
