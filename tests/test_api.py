from __future__ import annotations

import json

from conftest import SAMPLE_DIFF
from conftest import ScriptedLLMClient
from fastapi.testclient import TestClient

from diff_sheriff.config import load_config_from_env
from diff_sheriff.main import create_app
from diff_sheriff.review.errors import InferenceError

CONFIG = load_config_from_env(
    {
        "AUTH_TOKEN": "secret",
        "LLM_BASE_URL": "https://llm.example.com",
        "LLM_API_KEY": "k",
        "LLM_MODEL": "m",
    }
)
AUTH = {"Authorization": "Bearer secret"}
REPLY = json.dumps(
    {
        "summary": "Looks fine.",
        "findings": [{"severity": "medium", "title": "KeyError", "rationale": "KEY may be unset"}],
    }
)


def _client(replies: list[object]) -> tuple[TestClient, ScriptedLLMClient]:
    llm = ScriptedLLMClient(replies)
    return TestClient(create_app(config=CONFIG, llm_client=llm)), llm


def test_health() -> None:
    client, _ = _client([])
    body = client.get("/health").json()
    assert body["ok"] is True
    assert body["name"] == "diff-sheriff"
    assert body["ts"]


def test_review_requires_bearer_header() -> None:
    client, llm = _client([REPLY])
    response = client.post("/review", json={"diff": SAMPLE_DIFF})
    assert response.status_code == 401
    assert response.json() == {"ok": False, "error": "Unauthorized: Missing or invalid Authorization header"}
    assert llm.calls == []


def test_review_rejects_wrong_token() -> None:
    client, _ = _client([REPLY])
    response = client.post("/review", json={"diff": SAMPLE_DIFF}, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized: Invalid token"


def test_review_rejects_invalid_json() -> None:
    client, _ = _client([])
    response = client.post("/review", content=b"{not json", headers=AUTH)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Invalid JSON body"}


def test_review_rejects_non_object_body() -> None:
    client, _ = _client([])
    response = client.post("/review", json=["diff"], headers=AUTH)
    assert response.status_code == 400
    assert response.json()["error"] == "Request body must be a JSON object"


def test_review_rejects_empty_diff() -> None:
    client, llm = _client([])
    response = client.post("/review", json={"diff": "  "}, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing or empty 'diff' field"
    assert llm.calls == []


def test_review_success() -> None:
    client, _ = _client([REPLY])
    response = client.post("/review", json={"diff": SAMPLE_DIFF, "sha": "1234567890"}, headers=AUTH)
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["recommendation"] == "approve_with_changes"
    assert body["meta"] == {"sha": "1234567890", "mode": "summary", "truncatedDiff": False}
    assert body["findings"] == [{"severity": "medium", "title": "KeyError", "rationale": "KEY may be unset"}]
    assert "Commit: `1234567`" in body["commentMd"]


def test_review_upstream_failure_is_500() -> None:
    client, _ = _client([InferenceError("timeout")])
    response = client.post("/review", json={"diff": SAMPLE_DIFF}, headers=AUTH)
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "AI failure: timeout"}


def test_review_parse_failure_is_500() -> None:
    client, _ = _client(["nope", "still nope"])
    response = client.post("/review", json={"diff": SAMPLE_DIFF}, headers=AUTH)
    assert response.status_code == 500
    assert response.json()["error"].startswith("AI response parsing failed:")


def test_unknown_route_and_method_are_404() -> None:
    client, _ = _client([])
    assert client.get("/nope").json() == {"ok": False, "error": "Not found"}
    response = client.get("/review")
    assert response.status_code == 404
    assert response.json() == {"ok": False, "error": "Not found"}


def test_review_rejects_oversized_integer_in_body() -> None:
    client, llm = _client([REPLY])
    body = '{"diff": "+x", "prNumber": 1' + "0" * 5000 + "}"
    response = client.post("/review", content=body.encode("utf-8"), headers=AUTH)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Invalid JSON body"}
    assert llm.calls == []
