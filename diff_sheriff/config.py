"""
应用配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/数字/枚举等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, ValidationError

from diff_sheriff.review.preprocess import MAX_DIFF_LENGTH


class LLMConfig(BaseModel):
    """推理后端配置（OpenAI-compatible）。"""

    base_url: HttpUrl
    api_key: str
    model: str
    api_style: Literal["chat", "responses"] = "chat"
    timeout_seconds: float = Field(default=60.0, gt=0)


class AppConfig(BaseModel):
    """应用运行所需的配置集合。"""

    auth_token: str
    llm: LLMConfig
    max_diff_length: int = Field(default=MAX_DIFF_LENGTH, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：必填项缺失/为空，或可选项格式不对，统一抛 `ValueError`
    """

    required_keys: tuple[str, ...] = (
        "AUTH_TOKEN",
        "LLM_BASE_URL",
        "LLM_API_KEY",
        "LLM_MODEL",
    )

    missing: list[str] = [key for key in required_keys if key not in environ or not environ[key]]
    if missing:
        raise ValueError(f"Missing required env vars: {', '.join(missing)}")

    llm_fields: dict[str, object] = {
        "base_url": environ["LLM_BASE_URL"],
        "api_key": environ["LLM_API_KEY"],
        "model": environ["LLM_MODEL"],
    }
    if environ.get("LLM_API_STYLE"):
        llm_fields["api_style"] = environ["LLM_API_STYLE"]
    if environ.get("LLM_TIMEOUT_SECONDS"):
        llm_fields["timeout_seconds"] = environ["LLM_TIMEOUT_SECONDS"]

    app_fields: dict[str, object] = {"auth_token": environ["AUTH_TOKEN"]}
    if environ.get("MAX_DIFF_LENGTH"):
        app_fields["max_diff_length"] = environ["MAX_DIFF_LENGTH"]
    if environ.get("LOG_LEVEL"):
        app_fields["log_level"] = environ["LOG_LEVEL"].upper()

    # 交给 Pydantic 做类型校验（例如 URL 合法性、数字范围）
    try:
        return AppConfig(llm=LLMConfig(**llm_fields), **app_fields)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
