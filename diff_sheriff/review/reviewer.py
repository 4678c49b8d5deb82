"""
Reviewer：调用 LLM 并把回复变成 `ReviewResult`（带一次重试）。

失败策略：
- 推理调用本身失败（provider 报错/超时/envelope 不认识）：立即上抛 `UpstreamInferenceError`，不重试
- 回复抽不出 JSON / 结构校验失败：追加“上次不是合法 JSON”再请求**一次**；
  第二次仍失败则上抛 `ResponseFormatError`
- 两次调用严格串行，没有 backoff
"""

from __future__ import annotations

import logging

from diff_sheriff.llm.client import ChatMessage
from diff_sheriff.llm.client import InferenceClient
from diff_sheriff.review.errors import InferenceError
from diff_sheriff.review.errors import ResponseFormatError
from diff_sheriff.review.errors import UpstreamInferenceError
from diff_sheriff.review.extraction import extract_json
from diff_sheriff.review.extraction import get_response_text
from diff_sheriff.review.models import ReviewResult
from diff_sheriff.review.prompt import build_messages
from diff_sheriff.review.prompt import build_retry_user_prompt
from diff_sheriff.review.prompt import build_strict_user_prompt
from diff_sheriff.review.validation import validate_review_result

logger = logging.getLogger(__name__)

JSON_RESPONSE_FORMAT: dict[str, str] = {"type": "json_object"}


async def _infer_text(llm_client: InferenceClient, messages: list[ChatMessage]) -> str:
    try:
        envelope = await llm_client.infer(messages=messages, response_format=JSON_RESPONSE_FORMAT)
    except InferenceError as exc:
        raise UpstreamInferenceError(str(exc) or "Unknown AI error") from exc
    return get_response_text(envelope)


def parse_review_text(text: str) -> ReviewResult:
    """抽 JSON + 结构校验；失败抛 `ResponseFormatError` 的子类。"""
    return validate_review_result(extract_json(text))


async def request_review_result(llm_client: InferenceClient, user_prompt: str) -> ReviewResult:
    """
    请求一次 review，解析失败时重试一次。

    - 输入：不含 JSON 约束的 user prompt（由 `build_user_prompt` 生成）
    - 输出：校验后的 `ReviewResult`（尚未做噪音过滤）
    """
    strict_prompt = build_strict_user_prompt(user_prompt)
    text = await _infer_text(llm_client, build_messages(strict_prompt))
    try:
        return parse_review_text(text)
    except ResponseFormatError as exc:
        logger.warning(f"AI response rejected ({type(exc).__name__}: {exc}), retrying once")

    retry_text = await _infer_text(llm_client, build_messages(build_retry_user_prompt(strict_prompt)))
    try:
        return parse_review_text(retry_text)
    except ResponseFormatError as exc:
        logger.error(f"AI response rejected after retry: {exc}. Raw: {retry_text[:500]}")
        raise ResponseFormatError(f"AI response parsing failed: {exc}") from exc
