"""
FastAPI 服务入口。

这里做三件事：
- 加载配置（严格校验环境变量）
- 组装外部依赖（HTTP Client / LLM Client / Review orchestrator）
- 装配路由（health + review）以及统一的错误 envelope

注意：
- 业务流程不写在这里（由 `review/orchestrator.py` 负责）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from diff_sheriff.api.review import build_review_router
from diff_sheriff.config import AppConfig
from diff_sheriff.config import load_config_from_env
from diff_sheriff.llm.client import InferenceClient
from diff_sheriff.llm.client import OpenAICompatLLMClient
from diff_sheriff.review.models import ErrorResponse
from diff_sheriff.review.orchestrator import build_review_orchestrator

SERVICE_NAME = "diff-sheriff"


def create_app(config: AppConfig, llm_client: InferenceClient) -> FastAPI:
    """根据已加载的配置与推理 client 装配 app（测试可直接注入假 client）。"""
    orchestrator = build_review_orchestrator(llm_client=llm_client, max_diff_length=config.max_diff_length)

    app = FastAPI(title="Diff-Sheriff", version="0.1.0")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        """所有 HTTP 错误统一为 `{"ok": false, "error": ...}`；未知路由/方法一律 404。"""
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=ErrorResponse(error="Not found").model_dump())
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=str(exc.detail)).model_dump())

    @app.get("/health")
    async def health() -> dict[str, object]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"ok": True, "name": SERVICE_NAME, "ts": datetime.now(timezone.utc).isoformat()}

    app.include_router(build_review_router(auth_token=config.auth_token, orchestrator=orchestrator))
    return app


def build_app() -> FastAPI:
    """从环境变量创建并返回 FastAPI app。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    config = load_config_from_env(os.environ)
    logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # 2) 可复用的 HTTP client：超时由这里统一控制，pipeline 本身不设超时
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.llm.timeout_seconds))

    # 3) LLM client：OpenAI-compatible（只需配置 base_url/api_key/model）
    llm_client = OpenAICompatLLMClient(
        api_key=config.llm.api_key,
        base_url=str(config.llm.base_url).rstrip("/"),
        http_client=http_client,
        model=config.llm.model,
        api_style=config.llm.api_style,
    )
    return create_app(config=config, llm_client=llm_client)


def main() -> None:
    """启动服务（等价于 `uvicorn diff_sheriff.main:build_app --factory`）。"""
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8787"))
    uvicorn.run("diff_sheriff.main:build_app", factory=True, host=host, port=port)


if __name__ == "__main__":
    main()
