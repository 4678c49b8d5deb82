from __future__ import annotations

"""
Synthesis（汇总输出）。

注意：
- 这里是**确定性输出**（不依赖 LLM），同样输入必须得到逐字节相同的文本
- 报告的段落顺序/标题/emoji 是对外契约，下游可能会解析它；任何改动都算 breaking change
"""

from diff_sheriff.review.models import Finding
from diff_sheriff.review.models import InlineComment
from diff_sheriff.review.models import Recommendation

REPORT_MARKER = "<!-- diff-sheriff -->"

HEADING_EMOJI: dict[str, str] = {
    "approve": "✅",
    "approve_with_changes": "⚠️",
    "request_changes": "⛔",
}

RECOMMENDATION_TEXT: dict[str, str] = {
    "approve": "**Approve** — No blocking issues found.",
    "approve_with_changes": (
        "**Approve with changes** — Address the recommended items before or shortly after merge."
    ),
    "request_changes": "**Request changes** — Blocking issues must be resolved before merge.",
}

# (标题, 归入该分组的 severity)；顺序固定
FINDING_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("### 🚨 Must Fix (Blocking)", ("high",)),
    ("### ⚠️ Should Fix (Recommended)", ("medium",)),
    ("### 💡 Nice to Have (Optional)", ("low", "nit")),
)


def format_finding_bullet(finding: Finding) -> str:
    """单条 finding -> markdown bullet：标题、位置（可选）、理由、修复建议（可选）。"""
    bullet = f"- **{finding.title}**"
    if finding.file:
        bullet += f" (`{finding.file}`"
        if finding.line:
            bullet += f":{finding.line}"
        bullet += ")"
    bullet += f" — {finding.rationale}"
    if finding.suggestion:
        bullet += f" *Suggestion:* {finding.suggestion}"
    return bullet


def render_review_markdown(
    summary: str,
    findings: list[Finding],
    testing_notes: list[str],
    recommendation: Recommendation,
    sha: str | None = None,
) -> str:
    """
    渲染最终的 review 评论正文。

    - 空分组整体省略（不输出空标题）
    - 每个分组内部保持输入顺序
    - sha 只展示前 7 位；没有 sha 时显示 N/A
    """
    lines: list[str] = []
    lines.append(REPORT_MARKER)
    lines.append(f"## {HEADING_EMOJI[recommendation]} Diff-Sheriff Review")
    lines.append("")

    lines.append("### 🔎 Summary")
    lines.append(f"> {summary}")
    lines.append("")

    for heading, severities in FINDING_SECTIONS:
        bucket = [f for f in findings if f.severity in severities]
        if not bucket:
            continue
        lines.append(heading)
        lines.extend(format_finding_bullet(f) for f in bucket)
        lines.append("")

    if testing_notes:
        lines.append("### 🧪 Testing Notes")
        lines.extend(f"- {note}" for note in testing_notes)
        lines.append("")

    lines.append("### 🧭 Overall Recommendation")
    lines.append(f"- {RECOMMENDATION_TEXT[recommendation]}")
    lines.append("")

    commit_ref = f"`{sha[:7]}`" if sha else "N/A"
    lines.append(f"<sub>Reviewed by Diff-Sheriff • AI-assisted, human-aligned • Commit: {commit_ref}</sub>")

    return "\n".join(lines)


def format_inline_comment_body(finding: Finding) -> str:
    body = f"**[{finding.severity}] {finding.title}**\n\n{finding.rationale}"
    if finding.suggestion:
        body += f"\n\n*Suggestion:* {finding.suggestion}"
    return body


def build_inline_comments(findings: list[Finding]) -> list[InlineComment]:
    """
    为带 file + line 的 finding 生成行级评论记录（1:1，保持顺序）。

    line 必须 > 0：0 无法锚定到具体行，这类 finding 只出现在汇总报告里。
    """
    return [
        InlineComment(path=f.file, line=f.line, body=format_inline_comment_body(f))
        for f in findings
        if f.file and f.line
    ]
