from __future__ import annotations

"""
Review pipeline 错误类型。

分类：
- `InvalidInputError`：请求本身不合法（调用 LLM 之前就拒绝，不重试）
- `UpstreamInferenceError`：LLM 服务本身失败（立即上抛，不重试）
- `ResponseFormatError`：模型回复无法解析/校验（由 reviewer 重试一次后上抛）

`status_code` 只是给 HTTP 层的映射提示，pipeline 自身不关心传输层。
"""


class ReviewError(RuntimeError):
    """pipeline 所有可上抛错误的基类。"""

    status_code = 500


class InvalidInputError(ReviewError):
    status_code = 400


class InferenceError(RuntimeError):
    """LLM client 层的调用失败（provider 报错、超时、网络错误）。"""

    pass


class UpstreamInferenceError(ReviewError):
    """推理调用失败，对外表现为 `AI failure: ...`。"""

    def __init__(self, message: str) -> None:
        super().__init__(f"AI failure: {message}")


class UnexpectedResponseFormatError(UpstreamInferenceError):
    """LLM 返回的 envelope 形状无法识别（取不到文本）。"""

    def __init__(self, message: str = "Unexpected AI response format") -> None:
        super().__init__(message)


class ResponseFormatError(ReviewError):
    """模型回复的 JSON 抽取或结构校验失败。"""

    pass


class NoJsonFoundError(ResponseFormatError):
    pass


class MalformedJsonError(ResponseFormatError):
    pass


class InvalidReviewShapeError(ResponseFormatError):
    pass


class MissingSummaryError(ResponseFormatError):
    pass
