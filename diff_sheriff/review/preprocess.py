"""
Diff 预处理（非 AI）。

职责：
- 超长 diff 的确定性截断（按字符精确截取）
- 判断 diff 是否“无实际改动”（只动了空行/注释），是的话直接跳过 LLM

这两步都必须确定性：同样的输入永远得到同样的结果。
"""

from __future__ import annotations

MAX_DIFF_LENGTH = 60_000

COMMENT_MARKERS: tuple[str, ...] = ("//", "#", "*", "/*", "*/")


def truncate_diff(diff: str, max_length: int = MAX_DIFF_LENGTH) -> tuple[str, bool]:
    """
    截断超长 diff。

    - 输出：`(diff, truncated)`；未超长时原样返回且 `truncated=False`
    - 截断时只保留前 `max_length` 个字符，不追加任何标记（提示语由 prompt 负责）
    """
    if max_length <= 0:
        raise ValueError("max_length must be > 0")
    if len(diff) <= max_length:
        return diff, False
    return diff[:max_length], True


def is_trivial_diff(diff: str) -> bool:
    """
    只看 `+`/`-` 开头的内容行（跳过 `+++`/`---` 文件头）。

    去掉前缀和首尾空白后，为空或以注释符号开头的行不算实质改动；
    遇到第一条实质改动立即返回 False。没有任何改动行的 diff 视为 trivial。
    """
    for line in diff.split("\n"):
        if not line.startswith(("+", "-")):
            continue
        if line.startswith(("+++", "---")):
            continue
        content = line[1:].strip()
        if not content:
            continue
        if content.startswith(COMMENT_MARKERS):
            continue
        return False
    return True
