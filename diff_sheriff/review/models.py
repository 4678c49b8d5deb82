"""
Review 领域模型（Pydantic）。

用途：
- 明确 pipeline 各阶段输入/输出的数据结构
- `ReviewResponse` / `ReviewMeta` / `Finding` 的 JSON 形状是对外契约（字段名保持 camelCase）

注意：
- `Finding` 不直接用 `model_validate` 校验 LLM 输出：
  单条不合法要被丢弃而不是整体失败，这部分在 `review/validation.py` 里手动完成
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["high", "medium", "low", "nit"]
Recommendation = Literal["approve", "approve_with_changes", "request_changes"]
ReviewMode = Literal["summary", "inline"]

SEVERITIES: tuple[str, ...] = ("high", "medium", "low", "nit")


class ReviewRequest(BaseModel):
    """一次 review 请求（由 `review/context.py` 从原始 payload 构造）。"""

    model_config = ConfigDict(frozen=True)

    diff: str = Field(min_length=1)
    provider: str | None = None
    repo: str | None = None
    prNumber: int | None = None
    mrIid: int | None = None
    sha: str | None = None
    title: str | None = None
    description: str | None = None
    mode: ReviewMode = "summary"
    rulesMd: str | None = None


class Finding(BaseModel):
    """reviewer 给出的单条问题。"""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    title: str = Field(min_length=1)
    rationale: str = Field(min_length=1)
    suggestion: str | None = None
    file: str | None = None
    line: int | None = Field(default=None, ge=0)


class ReviewResult(BaseModel):
    """校验/清洗之后的模型输出。findings 保持模型给出的顺序。"""

    model_config = ConfigDict(frozen=True)

    summary: str
    findings: list[Finding] = Field(default_factory=list)
    testingNotes: list[str] = Field(default_factory=list)


class InlineComment(BaseModel):
    """可直接锚定到文件行的评论记录（只生成，不负责发送）。"""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int = Field(gt=0)
    body: str


class ReviewMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str | None = None
    repo: str | None = None
    sha: str | None = None
    mode: ReviewMode
    truncatedDiff: bool


class ReviewResponse(BaseModel):
    """最终返回给调用方的结果（每次请求构造一次，不持久化）。"""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    reviewId: str
    summary: str
    findings: list[Finding]
    commentMd: str
    inlineComments: list[InlineComment] | None = None
    recommendation: Recommendation
    meta: ReviewMeta

    def to_payload(self) -> dict[str, object]:
        """序列化为对外 JSON：省略值为 None 的可选字段（与 `findings` 的可选字段一致）。"""
        return self.model_dump(exclude_none=True)


class ErrorResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    error: str
