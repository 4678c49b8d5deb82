from __future__ import annotations

from collections.abc import Iterable

from diff_sheriff.review.models import Finding
from diff_sheriff.review.models import Recommendation


def derive_recommendation(findings: Iterable[Finding]) -> Recommendation:
    """
    根据（过滤后的）findings 严重级别得出合并建议。

    high 优先于 medium，low/nit 不影响结论。
    """
    severities = {f.severity for f in findings}
    if "high" in severities:
        return "request_changes"
    if "medium" in severities:
        return "approve_with_changes"
    return "approve"
