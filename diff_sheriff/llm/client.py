"""
LLM Client（基于 OpenAI SDK，对接任意 OpenAI-compatible 网关）。

目标：
- **尽量薄**：只做协议适配与错误处理
- **不解析**：返回原始 envelope（dict），文本抽取/JSON 解析由 `review/extraction.py` 负责
- **统一错误**：provider/网络错误统一包装成 `InferenceError`
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal, Protocol

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel

from diff_sheriff.review.errors import InferenceError

logger = logging.getLogger(__name__)

ApiStyle = Literal["chat", "responses"]


class ChatMessage(BaseModel):
    """OpenAI chat message 的最小结构。"""

    role: str
    content: str


class InferenceClient(Protocol):
    """pipeline 依赖的推理接口（用于依赖倒置，测试里可以换成脚本化的假实现）。"""

    async def infer(
        self,
        messages: Sequence[ChatMessage],
        response_format: dict[str, str] | None = None,
    ) -> object: ...


def _normalize_base_url(base_url: str) -> str:
    normalized = base_url.rstrip("/")
    if normalized.endswith("/v1"):
        return normalized
    return f"{normalized}/v1"


class OpenAICompatLLMClient:
    """
    通过 OpenAI-compatible API 调用 LLM。

    - api_style="chat"：`chat.completions.create`，envelope 为 `{"choices": [...]}`
    - api_style="responses"：`responses.create`，envelope 为 `{"output": [...]}`
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        http_client: httpx.AsyncClient,
        model: str,
        api_style: ApiStyle = "chat",
    ) -> None:
        """
        - api_key: LLM API key
        - base_url: OpenAI-compatible base URL
        - http_client: 复用 httpx.AsyncClient 连接池（超时也在这里配置）
        - model: 模型名（例如 `@cf/openai/gpt-oss-120b`）
        """
        self._base_url = _normalize_base_url(base_url=base_url)
        self._model = model
        self._api_style = api_style
        self._client = AsyncOpenAI(api_key=api_key, base_url=self._base_url, http_client=http_client)

    @property
    def model(self) -> str:
        return self._model

    async def infer(
        self,
        messages: Sequence[ChatMessage],
        response_format: dict[str, str] | None = None,
    ) -> object:
        """
        调用一次 LLM，返回原始 envelope。

        注意：
        - 不做 retry（重试策略由 reviewer 决定）
        - 出错统一抛 `InferenceError`，便于上游区分“推理失败”与“回复格式不对”
        """
        payload = [m.model_dump() for m in messages]
        try:
            logger.info(f"LLM request: model={self._model}, style={self._api_style}, messages={len(messages)} msg(s)")
            if self._api_style == "responses":
                response = await self._client.responses.create(
                    model=self._model,
                    input=payload,
                    text={"format": response_format} if response_format else {"format": {"type": "text"}},
                )
            elif response_format:
                response = await self._client.chat.completions.create(
                    model=self._model,
                    messages=payload,
                    response_format=response_format,
                )
            else:
                response = await self._client.chat.completions.create(model=self._model, messages=payload)
        except OpenAIError as exc:
            logger.error(f"LLM API error: {exc}")
            raise InferenceError(str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error(f"LLM HTTP error: {exc}")
            raise InferenceError(str(exc)) from exc

        envelope = response.model_dump()
        logger.info(f"LLM response received: model={self._model}")
        return envelope
