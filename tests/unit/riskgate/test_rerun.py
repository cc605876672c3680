"""Rerun-request comment de-duplication."""

from riskgate.review.rerun import DEFAULT_MARKER, PrComment, build_rerun_comment, has_existing_rerun_request, maybe_rerun_comment


def test_build_rerun_comment_carries_marker_and_revision() -> None:
    body = build_rerun_comment("abc123")
    assert body.startswith(DEFAULT_MARKER)
    assert "revision:abc123" in body.splitlines()


def test_existing_request_for_same_revision_suppresses_comment() -> None:
    comments = [PrComment(id=1, body=build_rerun_comment("abc123"), user="bot")]
    assert has_existing_rerun_request(comments, "abc123")
    assert maybe_rerun_comment(comments, "abc123") is None


def test_request_for_older_revision_does_not_count() -> None:
    comments = [PrComment(id=1, body=build_rerun_comment("old999"), user="bot")]
    assert maybe_rerun_comment(comments, "abc123") == build_rerun_comment("abc123")


def test_revision_without_marker_does_not_count() -> None:
    comments = [PrComment(id=1, body="please rerun\nrevision:abc123", user="alice")]
    assert not has_existing_rerun_request(comments, "abc123")


def test_revision_prefix_is_not_a_match() -> None:
    comments = [PrComment(id=1, body=build_rerun_comment("abc1234"), user="bot")]
    assert not has_existing_rerun_request(comments, "abc123")
