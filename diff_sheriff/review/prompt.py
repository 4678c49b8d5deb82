"""
Review prompt 构造。

约定：
- system prompt 固定，负责人设、优先级、规则、输出 JSON schema
- user prompt 的字段顺序固定：title -> description -> rules -> mode -> 截断提示 -> diff
- 所有调用都会追加“只输出单个 JSON 对象”的要求；重试时再追加一句“上次不是合法 JSON”
"""

from __future__ import annotations

from diff_sheriff.llm.client import ChatMessage
from diff_sheriff.review.models import ReviewRequest

SYSTEM_PROMPT = """You are Diff-Sheriff, a senior/lead engineer conducting a thorough PR review. Your job is to review code diffs and provide actionable, high-signal feedback.

Priorities (in order):
1. Correctness - bugs, logic errors, edge cases
2. Security - vulnerabilities, data exposure, injection risks
3. Maintainability - clarity, testability, future-proofing
4. Performance - only if clearly impactful

Rules:
- ONLY comment on actual code changes visible in the diff. Do NOT invent feedback.
- Do NOT comment on missing PR title, description, or other metadata. Do NOT give process feedback.
- Do NOT flag GitHub Actions secrets references like `${{ secrets.* }}` as hardcoded secrets.
- Do NOT comment on code style unless it significantly impacts readability.
- Be concise and specific. Avoid nitpicks unless they matter.
- If the diff only contains comments, whitespace, or trivial changes with no functional impact, return an empty findings array.
- Output ONLY valid JSON matching the schema below. No markdown, no explanations outside JSON.

Severity guide:
- high: Bugs, security issues, data loss risks - must fix before merge
- medium: Logic issues, missing validation, poor error handling - should fix
- low: Minor improvements, edge cases, clarity - nice to have
- nit: Trivial suggestions - only include if truly valuable

Output JSON Schema:
{
  "summary": "string - 2-4 sentence high-level assessment of the actual code changes",
  "findings": [
    {
      "severity": "high" | "medium" | "low" | "nit",
      "title": "string - Short title for the issue",
      "rationale": "string - Why this is a problem",
      "suggestion": "string (optional) - How to fix it",
      "file": "string (optional) - File path if identifiable",
      "line": "number (optional) - Line number if identifiable"
    }
  ],
  "testingNotes": ["string (optional) - 1-3 testing suggestions if relevant"]
}

If the diff looks good with no issues, return:
{
  "summary": "Code looks good. No significant issues found.",
  "findings": [],
  "testingNotes": []
}"""

TRUNCATION_NOTICE = "Note: The diff was truncated due to length limits."

STRICT_JSON_INSTRUCTION = (
    "IMPORTANT: Return ONLY a single valid JSON object (double quotes for keys/strings). "
    "No markdown, no code fences, no commentary."
)

RETRY_INSTRUCTION = "Your previous response was not valid JSON. Try again and output ONLY valid JSON."


def build_user_prompt(request: ReviewRequest, truncated: bool) -> str:
    """按固定顺序拼 user prompt；diff 用 ```diff 代码块包起来。"""
    parts: list[str] = []
    if request.title:
        parts.append(f"PR Title: {request.title}")
    if request.description:
        parts.append(f"PR Description: {request.description}")
    if request.rulesMd:
        parts.append(f"Additional Review Rules:\n{request.rulesMd}")
    parts.append(f"Review Mode: {request.mode}")
    if truncated:
        parts.append(TRUNCATION_NOTICE)
    parts.append(f"\nDiff to review:\n```diff\n{request.diff}\n```")
    return "\n\n".join(parts)


def build_strict_user_prompt(user_prompt: str) -> str:
    return f"{user_prompt}\n\n{STRICT_JSON_INSTRUCTION}"


def build_retry_user_prompt(strict_user_prompt: str) -> str:
    return f"{strict_user_prompt}\n\n{RETRY_INSTRUCTION}"


def build_messages(user_prompt: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=user_prompt),
    ]
