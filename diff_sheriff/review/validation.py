"""
模型输出的结构校验/清洗。

策略：
- `summary` 缺失直接失败（整个回复不可用，交给 reviewer 重试）
- `findings` 逐条校验：不合法的单条直接丢弃，不影响其它条目
- `testingNotes` 只保留非空字符串（去首尾空白）

逐条校验是一个 fold：每条原始数据产出 `(finding, reason)`，
对外只暴露合法的那部分，丢弃原因只用于日志。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from diff_sheriff.review.errors import InvalidReviewShapeError
from diff_sheriff.review.errors import MissingSummaryError
from diff_sheriff.review.models import SEVERITIES
from diff_sheriff.review.models import Finding
from diff_sheriff.review.models import ReviewResult

logger = logging.getLogger(__name__)


def _non_empty_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _line_number(value: object) -> int | None:
    # bool 是 int 的子类，必须排除；3.0 这种整数值浮点数按整数处理
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        line = value
    elif isinstance(value, float) and value.is_integer():
        line = int(value)
    else:
        return None
    if line < 0:
        return None
    return line


def validate_finding(raw: object) -> tuple[Finding | None, str | None]:
    """
    校验单条 finding。

    - 合法：`(Finding, None)`
    - 不合法：`(None, 丢弃原因)`；必填字段不会被填默认值
    - 可选字段（suggestion/file/line）不合法时只丢掉该字段，finding 本身保留
    """
    if not isinstance(raw, Mapping):
        return None, "not an object"

    severity = raw.get("severity")
    if not isinstance(severity, str) or severity not in SEVERITIES:
        return None, f"invalid severity: {severity!r}"
    title = _non_empty_str(raw.get("title"))
    if title is None:
        return None, "missing title"
    rationale = _non_empty_str(raw.get("rationale"))
    if rationale is None:
        return None, "missing rationale"

    finding = Finding(
        severity=severity,
        title=title,
        rationale=rationale,
        suggestion=_non_empty_str(raw.get("suggestion")),
        file=_non_empty_str(raw.get("file")),
        line=_line_number(raw.get("line")),
    )
    return finding, None


def validate_findings(raw_findings: object) -> list[Finding]:
    """非数组（或缺失）视为空列表，不报错。"""
    if not isinstance(raw_findings, list):
        return []

    findings: list[Finding] = []
    for index, raw in enumerate(raw_findings):
        finding, reason = validate_finding(raw)
        if finding is None:
            logger.debug(f"Dropped finding #{index}: {reason}")
            continue
        findings.append(finding)
    return findings


def validate_testing_notes(raw_notes: object) -> list[str]:
    if not isinstance(raw_notes, list):
        return []
    return [note.strip() for note in raw_notes if isinstance(note, str) and note.strip()]


def validate_review_result(parsed: object) -> ReviewResult:
    """把 `extract_json` 的结果转为 `ReviewResult`。"""
    if not isinstance(parsed, Mapping):
        raise InvalidReviewShapeError("AI response is not an object")

    summary = parsed.get("summary")
    if not isinstance(summary, str):
        raise MissingSummaryError("AI response missing summary")

    return ReviewResult(
        summary=summary,
        findings=validate_findings(parsed.get("findings")),
        testingNotes=validate_testing_notes(parsed.get("testingNotes")),
    )
