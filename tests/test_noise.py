from __future__ import annotations

import pytest

from diff_sheriff.review.models import Finding
from diff_sheriff.review.noise import filter_noise_findings
from diff_sheriff.review.noise import is_metadata_noise_finding


def _finding(title: str, rationale: str = "r", suggestion: str | None = None) -> Finding:
    return Finding(severity="medium", title=title, rationale=rationale, suggestion=suggestion)


@pytest.mark.parametrize(
    "title,rationale,suggestion",
    [
        ("Missing PR Title", "r", None),
        ("Docs", "The PR description is empty", None),
        ("Context", "Missing context for this change", None),
        ("Context", "Lack of description makes review hard", None),
        ("Empty Description", "r", None),
        ("No description", "r", None),
        ("Metadata", "r", "Please provide a clear title"),
    ],
)
def test_metadata_noise_is_detected(title: str, rationale: str, suggestion: str | None) -> None:
    assert is_metadata_noise_finding(_finding(title, rationale, suggestion)) is True


def test_code_finding_is_not_noise() -> None:
    finding = _finding("Null dereference", "user may be None when the cache misses")
    assert is_metadata_noise_finding(finding) is False


def test_filter_keeps_order_and_content_of_survivors() -> None:
    keep_a = _finding("Race condition", "Shared dict mutated without lock", "Use a lock")
    noise = _finding("PR description missing", "r")
    keep_b = _finding("Unchecked index", "list may be empty")
    assert filter_noise_findings([keep_a, noise, keep_b]) == [keep_a, keep_b]
