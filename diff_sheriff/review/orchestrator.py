"""
Review Orchestrator（核心流程编排）。

关键思想：
- **流程由工程代码控制**：预处理、prompt、解析、过滤、结论、渲染都是确定性步骤
- **LLM 只负责生成 review 文本**：唯一的挂起点是推理调用（及其一次重试）

流程：
payload -> ReviewRequest -> 截断 -> trivial? (直接 approve) -> prompt -> LLM
        -> 抽 JSON / 校验（失败重试一次） -> 噪音过滤 -> 推导结论 -> 渲染 -> ReviewResponse

每个请求独立跑完整流程，不共享任何可变状态。
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from diff_sheriff.llm.client import InferenceClient
from diff_sheriff.review.context import parse_review_request
from diff_sheriff.review.errors import ReviewError
from diff_sheriff.review.models import ErrorResponse
from diff_sheriff.review.models import Finding
from diff_sheriff.review.models import Recommendation
from diff_sheriff.review.models import ReviewMeta
from diff_sheriff.review.models import ReviewRequest
from diff_sheriff.review.models import ReviewResponse
from diff_sheriff.review.noise import filter_noise_findings
from diff_sheriff.review.preprocess import MAX_DIFF_LENGTH
from diff_sheriff.review.preprocess import is_trivial_diff
from diff_sheriff.review.preprocess import truncate_diff
from diff_sheriff.review.prompt import build_user_prompt
from diff_sheriff.review.recommendation import derive_recommendation
from diff_sheriff.review.reviewer import request_review_result
from diff_sheriff.review.synthesis import build_inline_comments
from diff_sheriff.review.synthesis import render_review_markdown

logger = logging.getLogger(__name__)

TRIVIAL_SUMMARY = "Trivial change (comments, whitespace, or non-functional). No issues found."


@dataclass(frozen=True)
class ReviewOrchestrator:
    """Orchestrator 运行时依赖集合：推理 client + diff 长度上限。"""

    llm_client: InferenceClient
    max_diff_length: int = MAX_DIFF_LENGTH

    async def review(self, request: ReviewRequest) -> ReviewResponse:
        """
        跑一次完整 review。

        - 成功：返回 `ReviewResponse`
        - 失败：抛 `ReviewError` 子类（由调用方映射成传输层状态码）
        """
        diff, truncated = truncate_diff(request.diff, max_length=self.max_diff_length)
        if truncated:
            logger.info(f"Diff truncated: {len(request.diff)} -> {len(diff)} chars")
            request = request.model_copy(update={"diff": diff})

        if is_trivial_diff(request.diff):
            logger.info("Trivial diff detected, skipping AI review")
            return _build_response(
                request=request,
                summary=TRIVIAL_SUMMARY,
                findings=[],
                testing_notes=[],
                truncated=truncated,
            )

        result = await request_review_result(
            llm_client=self.llm_client,
            user_prompt=build_user_prompt(request, truncated),
        )
        findings = filter_noise_findings(result.findings)
        if len(findings) != len(result.findings):
            logger.info(f"Filtered {len(result.findings) - len(findings)} metadata noise finding(s)")

        return _build_response(
            request=request,
            summary=result.summary,
            findings=findings,
            testing_notes=result.testingNotes,
            truncated=truncated,
        )


def build_review_orchestrator(llm_client: InferenceClient, max_diff_length: int = MAX_DIFF_LENGTH) -> ReviewOrchestrator:
    """创建 orchestrator（便于未来注入更多依赖）。"""
    return ReviewOrchestrator(llm_client=llm_client, max_diff_length=max_diff_length)


def _build_response(
    request: ReviewRequest,
    summary: str,
    findings: list[Finding],
    testing_notes: list[str],
    truncated: bool,
) -> ReviewResponse:
    recommendation: Recommendation = derive_recommendation(findings)
    comment_md = render_review_markdown(
        summary=summary,
        findings=findings,
        testing_notes=testing_notes,
        recommendation=recommendation,
        sha=request.sha,
    )
    inline_comments = build_inline_comments(findings) if request.mode == "inline" else None
    return ReviewResponse(
        reviewId=str(uuid.uuid4()),
        summary=summary,
        findings=findings,
        commentMd=comment_md,
        inlineComments=inline_comments,
        recommendation=recommendation,
        meta=ReviewMeta(
            provider=request.provider,
            repo=request.repo,
            sha=request.sha,
            mode=request.mode,
            truncatedDiff=truncated,
        ),
    )


async def run_review(orchestrator: ReviewOrchestrator, payload: object) -> ReviewResponse | ErrorResponse:
    """
    对外的单一入口：原始 payload -> `ReviewResponse | ErrorResponse`。

    所有 `ReviewError` 都在这里转成 `ErrorResponse`；其它异常照常上抛。
    """
    try:
        request = parse_review_request(payload)
        return await orchestrator.review(request)
    except ReviewError as exc:
        logger.warning(f"Review failed: {exc}")
        return ErrorResponse(error=str(exc))
