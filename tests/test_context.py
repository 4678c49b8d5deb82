from __future__ import annotations

import pytest

from diff_sheriff.review.context import parse_review_request
from diff_sheriff.review.errors import InvalidInputError


def test_parse_review_request_full() -> None:
    request = parse_review_request(
        {
            "diff": "+x = 1",
            "provider": "gitlab",
            "repo": "group/project",
            "mrIid": 7,
            "sha": "abc",
            "title": "T",
            "description": "D",
            "mode": "inline",
            "rulesMd": "- rule",
        }
    )
    assert request.provider == "gitlab"
    assert request.mrIid == 7
    assert request.prNumber is None
    assert request.mode == "inline"
    assert request.rulesMd == "- rule"


def test_parse_review_request_drops_wrongly_typed_optionals() -> None:
    request = parse_review_request({"diff": "+x", "repo": 5, "prNumber": "12", "mrIid": True, "mode": "INLINE"})
    assert request.repo is None
    assert request.prNumber is None
    assert request.mrIid is None
    assert request.mode == "summary"


@pytest.mark.parametrize("payload", [{}, {"diff": ""}, {"diff": " \n\t"}, {"diff": 42}, ["diff"], None])
def test_parse_review_request_rejects_bad_input(payload: object) -> None:
    with pytest.raises(InvalidInputError):
        parse_review_request(payload)


def test_review_request_is_immutable() -> None:
    request = parse_review_request({"diff": "+x"})
    with pytest.raises(Exception):
        request.diff = "changed"  # type: ignore[misc]
