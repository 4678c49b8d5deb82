"""
Request intake（非 AI）。

职责：
- 把 HTTP 层传进来的原始 JSON payload 转成内部的 `ReviewRequest`
- 宽松处理可选字段：类型不对就当作没传，不报错
- 只有 diff 是硬性要求：必须是包含非空白内容的字符串
"""

from __future__ import annotations

from collections.abc import Mapping

from diff_sheriff.review.errors import InvalidInputError
from diff_sheriff.review.models import ReviewRequest

_OPTIONAL_TEXT_FIELDS: tuple[str, ...] = ("provider", "repo", "sha", "title", "description", "rulesMd")
_OPTIONAL_INT_FIELDS: tuple[str, ...] = ("prNumber", "mrIid")


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_review_request(payload: object) -> ReviewRequest:
    """
    payload -> `ReviewRequest`。

    - payload 不是对象 / diff 缺失或只有空白：抛 `InvalidInputError`
    - mode 只有严格等于 `"inline"` 时才是 inline，其余一律 summary
    """
    if not isinstance(payload, Mapping):
        raise InvalidInputError("Request body must be a JSON object")

    diff = payload.get("diff")
    if not isinstance(diff, str) or not diff.strip():
        raise InvalidInputError("Missing or empty 'diff' field")

    fields: dict[str, object] = {"diff": diff}
    for name in _OPTIONAL_TEXT_FIELDS:
        value = payload.get(name)
        fields[name] = value if isinstance(value, str) else None
    for name in _OPTIONAL_INT_FIELDS:
        fields[name] = _optional_int(payload.get(name))
    fields["mode"] = "inline" if payload.get("mode") == "inline" else "summary"

    return ReviewRequest.model_validate(fields)
