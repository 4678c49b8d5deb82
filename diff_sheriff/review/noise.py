from __future__ import annotations

"""
过滤“流程类噪音” finding。

模型偶尔会抱怨 PR 标题/描述缺失，这类反馈不是代码层面的问题，
无论模型怎么输出都直接过滤掉。规则表是静态的，不做按请求配置。
"""

import re

from diff_sheriff.review.models import Finding

METADATA_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bpr\s+title\b", re.IGNORECASE),
    re.compile(r"\bpr\s+description\b", re.IGNORECASE),
    re.compile(r"\bmissing\s+(title|description|context)\b", re.IGNORECASE),
    re.compile(r"\black\s+of\s+(context|description)\b", re.IGNORECASE),
    re.compile(r"\bempty\s+(title|description)\b", re.IGNORECASE),
    re.compile(r"\bno\s+(title|description|context)\b", re.IGNORECASE),
    re.compile(r"\bprovide\s+(a\s+)?(clear\s+)?(title|description)\b", re.IGNORECASE),
)


def is_metadata_noise_finding(finding: Finding) -> bool:
    """title + rationale + suggestion 拼起来后，命中任一规则即视为噪音。"""
    text = f"{finding.title} {finding.rationale} {finding.suggestion or ''}"
    return any(pattern.search(text) for pattern in METADATA_NOISE_PATTERNS)


def filter_noise_findings(findings: list[Finding]) -> list[Finding]:
    """只删不改：保留下来的 finding 内容和顺序都不变。"""
    return [f for f in findings if not is_metadata_noise_finding(f)]
