from __future__ import annotations

import json

import pytest
from conftest import ScriptedLLMClient

from diff_sheriff.review.errors import InferenceError
from diff_sheriff.review.errors import ResponseFormatError
from diff_sheriff.review.errors import UnexpectedResponseFormatError
from diff_sheriff.review.errors import UpstreamInferenceError
from diff_sheriff.review.prompt import RETRY_INSTRUCTION
from diff_sheriff.review.prompt import STRICT_JSON_INSTRUCTION
from diff_sheriff.review.reviewer import request_review_result

VALID_REPLY = json.dumps(
    {
        "summary": "Adds env lookup.",
        "findings": [{"severity": "medium", "title": "KeyError", "rationale": "KEY may be unset"}],
        "testingNotes": ["Test without KEY"],
    }
)


@pytest.mark.anyio
async def test_first_valid_reply_needs_one_call() -> None:
    client = ScriptedLLMClient([VALID_REPLY])
    result = await request_review_result(llm_client=client, user_prompt="prompt")
    assert result.summary == "Adds env lookup."
    assert len(client.calls) == 1
    assert client.calls[0][1].content.endswith(STRICT_JSON_INSTRUCTION)


@pytest.mark.anyio
async def test_invalid_then_valid_reply_succeeds_after_retry() -> None:
    client = ScriptedLLMClient(["I cannot produce JSON today", VALID_REPLY])
    result = await request_review_result(llm_client=client, user_prompt="prompt")
    assert [f.title for f in result.findings] == ["KeyError"]
    assert len(client.calls) == 2
    assert client.calls[1][1].content.endswith(RETRY_INSTRUCTION)


@pytest.mark.anyio
async def test_missing_summary_triggers_retry() -> None:
    client = ScriptedLLMClient(['{"findings": []}', {"response": VALID_REPLY}])
    result = await request_review_result(llm_client=client, user_prompt="prompt")
    assert result.testingNotes == ["Test without KEY"]


@pytest.mark.anyio
async def test_two_invalid_replies_are_terminal() -> None:
    client = ScriptedLLMClient(["nope", "{broken"])
    with pytest.raises(ResponseFormatError) as exc_info:
        await request_review_result(llm_client=client, user_prompt="prompt")
    assert str(exc_info.value).startswith("AI response parsing failed:")
    assert len(client.calls) == 2


@pytest.mark.anyio
async def test_inference_failure_is_not_retried() -> None:
    client = ScriptedLLMClient([InferenceError("provider down"), VALID_REPLY])
    with pytest.raises(UpstreamInferenceError) as exc_info:
        await request_review_result(llm_client=client, user_prompt="prompt")
    assert str(exc_info.value) == "AI failure: provider down"
    assert len(client.calls) == 1


@pytest.mark.anyio
async def test_unknown_envelope_is_upstream_failure() -> None:
    client = ScriptedLLMClient([{"weird": True}])
    with pytest.raises(UnexpectedResponseFormatError):
        await request_review_result(llm_client=client, user_prompt="prompt")
    assert len(client.calls) == 1


@pytest.mark.anyio
async def test_oversized_integer_reply_is_retried() -> None:
    big_int_reply = '{"summary": "ok", "findings": [], "line": ' + "1" * 5000 + "}"
    client = ScriptedLLMClient([big_int_reply, VALID_REPLY])
    result = await request_review_result(llm_client=client, user_prompt="prompt")
    assert result.summary == "Adds env lookup."
    assert len(client.calls) == 2


@pytest.mark.anyio
async def test_nan_reply_is_retried() -> None:
    client = ScriptedLLMClient(['{"summary": "ok", "score": NaN}', VALID_REPLY])
    result = await request_review_result(llm_client=client, user_prompt="prompt")
    assert [f.title for f in result.findings] == ["KeyError"]
    assert len(client.calls) == 2
