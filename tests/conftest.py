from __future__ import annotations

from collections.abc import Sequence

import pytest

from diff_sheriff.llm.client import ChatMessage
from diff_sheriff.review.errors import InferenceError


class ScriptedLLMClient:
    """按顺序返回预置回复的假推理 client；回复是异常实例时直接抛出。"""

    def __init__(self, replies: Sequence[object]) -> None:
        self._replies = list(replies)
        self.calls: list[list[ChatMessage]] = []

    async def infer(
        self,
        messages: Sequence[ChatMessage],
        response_format: dict[str, str] | None = None,
    ) -> object:
        self.calls.append(list(messages))
        if not self._replies:
            raise InferenceError("no scripted reply left")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


SAMPLE_DIFF = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -1,2 +1,3 @@",
        " import os",
        "+x = os.environ['KEY']",
        " print('hi')",
    ]
)
