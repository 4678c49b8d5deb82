"""
Review HTTP 接入层。

职责：
- 校验 `Authorization: Bearer <token>`（常量时间比较）
- 解析 JSON body
- 调用 orchestrator，并把 `ReviewError` 映射成 HTTP 状态码

真正的 review 流程不写在这里（由 `review/orchestrator.py` 负责）。
"""

from __future__ import annotations

import hmac
import json

from fastapi import APIRouter
from fastapi import Header
from fastapi import HTTPException
from fastapi import Request
from fastapi.responses import JSONResponse

from diff_sheriff.review.context import parse_review_request
from diff_sheriff.review.errors import ReviewError
from diff_sheriff.review.models import ErrorResponse
from diff_sheriff.review.orchestrator import ReviewOrchestrator

BEARER_PREFIX = "Bearer "


def _verify_bearer_token(authorization: str | None, expected_token: str) -> None:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Unauthorized: Missing or invalid Authorization header")
    token = authorization[len(BEARER_PREFIX) :]
    if not hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid token")


def build_review_router(auth_token: str, orchestrator: ReviewOrchestrator) -> APIRouter:
    """创建 `/review` 路由。"""
    router = APIRouter()

    @router.post("/review")
    async def review(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        # 1) 鉴权：必须在解析 body 之前完成
        _verify_bearer_token(authorization=authorization, expected_token=auth_token)

        # 2) 解析 body
        body = await request.body()
        try:
            payload = json.loads(body.decode("utf-8"))
        except (ValueError, RecursionError) as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON body") from exc

        # 3) 跑 review；业务错误按类型映射状态码
        try:
            review_request = parse_review_request(payload)
            result = await orchestrator.review(review_request)
        except ReviewError as exc:
            error = ErrorResponse(error=str(exc))
            return JSONResponse(status_code=exc.status_code, content=error.model_dump())

        return JSONResponse(content=result.to_payload())

    return router
