from fastapi import FastAPI
from fastapi.testclient import TestClient

import pytest

from api.routes import router


@pytest.fixture
def client(make_orchestrator):
    app = FastAPI()
    app.include_router(router)
    app.state.orchestrator = make_orchestrator()
    return TestClient(app)


def test_full_flow(client, strong_tourist_answers):
    start_resp = client.post(
        "/api/interview/start",
        json={"visa_type": "tourist", "destination_country": "Saudi Arabia", "language": "urdu"},
    )
    assert start_resp.status_code == 200
    body = start_resp.json()
    session_id = body["session_id"]
    assert body["language"] == "ur"
    question = body["question"]
    assert question["question_number"] == 1
    assert question["total_questions"] == 10
    assert question["text_localized"]

    while question is not None:
        turn = client.post(
            "/api/interview/answer",
            json={"session_id": session_id, "answer": strong_tourist_answers[question["id"]], "response_time_ms": 900},
        )
        assert turn.status_code == 200
        turn_body = turn.json()
        assert turn_body["scores"]["total"] >= 80
        assert turn_body["feedback"]
        question = turn_body["next_question"]
    assert turn_body["is_complete"]
    assert turn_body["question_number"] == 10

    end_resp = client.post("/api/interview/end", json={"session_id": session_id})
    assert end_resp.status_code == 200
    result = end_resp.json()
    assert result["passed"]
    assert result["questions_answered"] == 10
    assert result["flagged_answers"] == 0
    assert set(result["score_breakdown"]) == {"completeness", "clarity", "relevance", "confidence", "consistency"}
    assert result["feedback"].startswith("بہترین کارکردگی")

    again = client.post("/api/interview/answer", json={"session_id": session_id, "answer": "hello"})
    assert again.status_code == 404
    assert again.json()["detail"] == "Session not found or expired"

    history = client.get("/api/interview/history", params={"limit": 5}).json()["history"]
    assert history[0]["session_id"] == session_id
    assert history[0]["passed"]


def test_invalid_visa_type(client):
    resp = client.post("/api/interview/start", json={"visa_type": "pilgrim", "destination_country": "Saudi Arabia"})
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid visa type. Must be one of:")


def test_empty_answer_is_rejected(client):
    session_id = client.post(
        "/api/interview/start", json={"visa_type": "work", "destination_country": "UAE"}
    ).json()["session_id"]
    resp = client.post("/api/interview/answer", json={"session_id": session_id, "answer": ""})
    assert resp.status_code == 422


def test_unknown_session(client):
    assert client.post("/api/interview/answer", json={"session_id": "nope", "answer": "hi"}).status_code == 404
    assert client.post("/api/interview/end", json={"session_id": "nope"}).status_code == 404
    assert client.get("/api/interview/sessions/nope/question").status_code == 404


def test_answer_after_last_question_conflicts(client):
    session_id = client.post(
        "/api/interview/start", json={"visa_type": "business", "destination_country": "Turkey"}
    ).json()["session_id"]
    for _ in range(10):
        client.post("/api/interview/answer", json={"session_id": session_id, "answer": "Meeting our supplier"})
    resp = client.post("/api/interview/answer", json={"session_id": session_id, "answer": "extra"})
    assert resp.status_code == 409
    assert client.get(f"/api/interview/sessions/{session_id}/question").json() is None


def test_current_question_endpoint(client):
    start = client.post(
        "/api/interview/start", json={"visa_type": "student", "destination_country": "UK"}
    ).json()
    resp = client.get(f"/api/interview/sessions/{start['session_id']}/question")
    assert resp.status_code == 200
    assert resp.json()["id"] == start["question"]["id"]


def test_visa_types_and_ai_status(client):
    visa_types = client.get("/api/interview/visa-types").json()
    assert [item["type"] for item in visa_types] == ["tourist", "visit", "family", "work", "student", "business"]
    assert all(item["label_urdu"] for item in visa_types)

    status = client.get("/api/interview/ai-status").json()
    assert status["available"] is False
    assert status["configured"] is False


def test_service_not_ready():
    app = FastAPI()
    app.include_router(router)
    resp = TestClient(app).get("/api/interview/ai-status")
    assert resp.status_code == 503
