from __future__ import annotations

from conftest import SAMPLE_DIFF
from fastapi.testclient import TestClient

from diff_sheriff.dev.mock_openai_server import _decide_mock_response
from diff_sheriff.dev.mock_openai_server import _extract_changed_paths_from_review_prompt
from diff_sheriff.dev.mock_openai_server import app
from diff_sheriff.llm.client import ChatMessage
from diff_sheriff.review.extraction import extract_json
from diff_sheriff.review.extraction import get_response_text
from diff_sheriff.review.validation import validate_review_result


def test_extract_changed_paths() -> None:
    assert _extract_changed_paths_from_review_prompt(SAMPLE_DIFF) == ["src/app.py"]
    assert _extract_changed_paths_from_review_prompt("+++ /dev/null") == []


def test_mock_response_parses_into_review() -> None:
    raw = _decide_mock_response([ChatMessage(role="user", content=SAMPLE_DIFF)])
    result = validate_review_result(extract_json(raw))
    assert result.findings[0].file == "src/app.py"
    assert result.findings[0].severity == "medium"


def test_mock_endpoint_returns_chat_envelope() -> None:
    client = TestClient(app)
    response = client.post(
        "/v1/chat/completions",
        json={"model": "m", "messages": [{"role": "user", "content": SAMPLE_DIFF}]},
    )
    assert response.status_code == 200
    text = get_response_text(response.json())
    assert text.startswith("Here is the review:")
