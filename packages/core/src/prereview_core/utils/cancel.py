from __future__ import annotations

import time

from prereview_core.errors import ReviewCancelled


class CancelToken:
    """Cooperative cancellation shared by every external call of one review.

    The orchestrator calls ``check()`` around each step; blocking calls that
    accept a timeout receive ``remaining()`` so they abort at the deadline too.
    """

    def __init__(self, deadline: float | None = None):
        self._deadline = deadline
        self._cancelled = False

    @classmethod
    def after(cls, seconds: float | None) -> CancelToken:
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self, step: str | None = None) -> float | None:
        """Seconds left before the deadline, or None when there is none.

        Raises ReviewCancelled instead of returning a non-positive timeout, so
        a transport never receives ``timeout=0``.
        """
        self.check(step)
        if self._deadline is None:
            return None
        left = self._deadline - time.monotonic()
        if left <= 0:
            raise ReviewCancelled("review deadline exceeded", step=step)
        return left

    def check(self, step: str | None = None) -> None:
        if self._cancelled:
            raise ReviewCancelled("review cancelled", step=step)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise ReviewCancelled("review deadline exceeded", step=step)
