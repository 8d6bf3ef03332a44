"""Tests for the cooperative cancellation token."""

import pytest

from prereview_core.errors import ReviewCancelled
from prereview_core.utils.cancel import CancelToken


def test_token_without_deadline_never_expires():
    token = CancelToken()
    token.check()
    assert token.remaining() is None
    assert token.cancelled is False


def test_explicit_cancel():
    token = CancelToken()
    token.cancel()
    assert token.cancelled is True
    with pytest.raises(ReviewCancelled) as exc_info:
        token.check(step="fetched_pr")
    assert exc_info.value.step == "fetched_pr"


def test_deadline_in_past_raises(mocker):
    mocker.patch("prereview_core.utils.cancel.time.monotonic", return_value=100.0)
    token = CancelToken(deadline=99.0)
    with pytest.raises(ReviewCancelled, match="deadline"):
        token.check()


def test_after_sets_relative_deadline(mocker):
    mocker.patch("prereview_core.utils.cancel.time.monotonic", return_value=50.0)
    token = CancelToken.after(10)
    assert token.remaining() == 10.0
    token.check()


def test_after_none_means_no_deadline():
    assert CancelToken.after(None).remaining() is None


def test_remaining_never_returns_zero(mocker):
    # Deadline reached exactly: a zero timeout would be rejected by the transport.
    mocker.patch("prereview_core.utils.cancel.time.monotonic", return_value=100.0)
    token = CancelToken(deadline=100.0)
    with pytest.raises(ReviewCancelled, match="deadline") as exc_info:
        token.remaining(step="fetched_diff")
    assert exc_info.value.step == "fetched_diff"


def test_remaining_raises_after_explicit_cancel():
    token = CancelToken.after(60)
    token.cancel()
    with pytest.raises(ReviewCancelled, match="cancelled"):
        token.remaining()
