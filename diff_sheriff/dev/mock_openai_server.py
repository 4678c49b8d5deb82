"""
本地 Mock OpenAI-compatible LLM server。

用途：
- 在没有真实 LLM 网关的情况下，本地跑通 review 闭环
- 回复故意包一层说明文字 + ```json 代码块，用来覆盖 `extract_json` 的容错路径

启动：
  python -m diff_sheriff.dev.mock_openai_server
然后把 `LLM_BASE_URL` 指向 http://127.0.0.1:9001
"""

from __future__ import annotations

import json
from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel, Field

from diff_sheriff.llm.client import ChatMessage


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)


def _extract_changed_paths_from_review_prompt(prompt: str) -> list[str]:
    """
    从 user prompt 的 diff 代码块里提取文件 path（取 `+++ b/...` 行）。

    形如：
      +++ b/src/app.py
    """
    paths: list[str] = []
    for line in prompt.splitlines():
        if not line.startswith("+++ "):
            continue
        raw = line.removeprefix("+++ ").strip()
        if raw == "/dev/null":
            continue
        path = raw.removeprefix("b/")
        if path and path not in paths:
            paths.append(path)
    return paths


def _build_mock_review_json(changed_paths: list[str]) -> str:
    findings: list[dict[str, object]] = []
    if changed_paths:
        findings.append(
            {
                "severity": "medium",
                "title": "[MOCK] Missing error handling",
                "rationale": "The new code path does not handle failures from its dependencies.",
                "suggestion": "Wrap the call and surface a clear error to the caller.",
                "file": changed_paths[0],
                "line": 1,
            }
        )
    review = {
        "summary": "[MOCK] Automated review generated by the local mock server.",
        "findings": findings,
        "testingNotes": ["[MOCK] Add a unit test for the failure path."],
    }
    return json.dumps(review, ensure_ascii=False)


def _decide_mock_response(messages: Sequence[ChatMessage]) -> str:
    user_texts = [m.content for m in messages if m.role == "user"]
    if not user_texts:
        raise ValueError("Mock server expects at least one user message")
    prompt = "\n".join(user_texts)
    review_json = _build_mock_review_json(_extract_changed_paths_from_review_prompt(prompt=prompt))
    return f"Here is the review:\n```json\n{review_json}\n```"


app = FastAPI(title="Mock OpenAI-compatible LLM", version="0.1.0")


@app.post("/v1/chat/completions")
async def chat_completions(req: ChatCompletionRequest) -> dict[str, object]:
    content = _decide_mock_response(messages=req.messages)
    return {
        "id": "chatcmpl-mock",
        "object": "chat.completion",
        "created": 0,
        "model": req.model,
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9001)


if __name__ == "__main__":
    main()
