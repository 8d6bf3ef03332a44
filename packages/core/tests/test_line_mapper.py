"""Tests for the model-line → GitHub-line correction."""

from prereview_core.formatter import derive_inline_comments
from prereview_core.line_mapper import DEFAULT_LINE_OFFSET, map_inline_comments, map_line, to_review_comments
from prereview_core.models import InlineComment, Issue


def test_default_offset_is_one():
    assert DEFAULT_LINE_OFFSET == 1
    assert map_line(10) == 11


def test_offset_is_configurable():
    assert map_line(10, offset=0) == 10
    assert map_line(10, offset=-1) == 9


def test_map_inline_comments_returns_new_comments():
    original = [InlineComment("a.go", 10, "body")]
    mapped = map_inline_comments(original)
    assert mapped == [InlineComment("a.go", 11, "body")]
    assert original[0].line == 10


def test_every_anchored_issue_maps_to_line_plus_one():
    issues = [
        Issue(file="a.go", line=10, type="bug", severity="high", description="nil deref"),
        Issue(file="b.go", line=1, type="style", severity="low", description="naming"),
        Issue(file="", line=4, type="security", severity="medium", description="dropped"),
    ]
    mapped = map_inline_comments(derive_inline_comments(issues))
    assert [(c.path, c.line) for c in mapped] == [("a.go", 11), ("b.go", 2)]
    assert "Bug Issue (high)" in mapped[0].body
    assert "nil deref" in mapped[0].body


def test_to_review_comments_payload():
    payload = to_review_comments([InlineComment("a.go", 11, "**Bug Issue (high)**\n\nnil deref")])
    assert payload == [{"path": "a.go", "line": 11, "body": "**Bug Issue (high)**\n\nnil deref"}]
