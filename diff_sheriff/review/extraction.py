"""
模型回复解析：envelope -> 文本 -> JSON 对象。

两步：
1. `get_response_text`：不同 provider/API 的回复 envelope 不一样，
   用一组有序的“形状识别器”依次尝试，第一个命中的生效，都不命中就抛错
2. `extract_json`：取第一个 `{` 到最后一个 `}` 之间的子串做 `json.loads`

注意：
- `extract_json` 是刻意保留的简单启发式（容忍 markdown 代码块/前后解释文字），
  不是完整的 JSON tokenizer；代价是如果 JSON 之前的文字里带 `{`，会抽错
"""

from __future__ import annotations

import json
from collections.abc import Callable

from diff_sheriff.review.errors import MalformedJsonError
from diff_sheriff.review.errors import NoJsonFoundError
from diff_sheriff.review.errors import UnexpectedResponseFormatError

EnvelopeRecognizer = Callable[[object], str | None]


def _from_plain_string(envelope: object) -> str | None:
    if isinstance(envelope, str):
        return envelope
    return None


def _from_chat_completion(envelope: object) -> str | None:
    """OpenAI chat completions：`choices[0].message.content`。"""
    if not isinstance(envelope, dict):
        return None
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    return content


def _from_response_field(envelope: object) -> str | None:
    if isinstance(envelope, dict) and "response" in envelope:
        return str(envelope["response"])
    return None


def _from_output_text_field(envelope: object) -> str | None:
    if isinstance(envelope, dict) and "output_text" in envelope:
        return str(envelope["output_text"])
    return None


def _from_output_blocks(envelope: object) -> str | None:
    """Responses API 风格：`output[*].content[*].text`，所有文本块按顺序拼接。"""
    if not isinstance(envelope, dict):
        return None
    output = envelope.get("output")
    if not isinstance(output, list):
        return None
    chunks: list[str] = []
    for item in output:
        if not isinstance(item, dict):
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for block in content:
            if isinstance(block, dict) and isinstance(block.get("text"), str):
                chunks.append(block["text"])
    if not chunks:
        return None
    return "\n".join(chunks)


ENVELOPE_RECOGNIZERS: tuple[EnvelopeRecognizer, ...] = (
    _from_plain_string,
    _from_chat_completion,
    _from_response_field,
    _from_output_text_field,
    _from_output_blocks,
)


def get_response_text(envelope: object) -> str:
    """从 LLM 原始回复中取出文本；形状都不认识时抛 `UnexpectedResponseFormatError`。"""
    for recognizer in ENVELOPE_RECOGNIZERS:
        text = recognizer(envelope)
        if text is not None:
            return text
    raise UnexpectedResponseFormatError()


def _reject_non_standard_constant(name: str) -> object:
    raise ValueError(f"Non-standard JSON constant: {name}")


def extract_json(text: str) -> object:
    """
    从任意文本里抽出一个 JSON 对象。

    - 找不到 `{`/`}`，或最后一个 `}` 在第一个 `{` 之前：`NoJsonFoundError`
    - 子串不是合法 JSON：`MalformedJsonError`
      （包括 NaN/Infinity、超长整数、嵌套过深这类 `json.loads` 拒绝或无法处理的输入）
    """
    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace == -1 or last_brace == -1 or last_brace < first_brace:
        raise NoJsonFoundError("No JSON object found in response")

    try:
        return json.loads(text[first_brace : last_brace + 1], parse_constant=_reject_non_standard_constant)
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(f"Malformed JSON in response: {exc.msg}") from exc
    except (ValueError, RecursionError) as exc:
        raise MalformedJsonError(f"Malformed JSON in response: {exc}") from exc
