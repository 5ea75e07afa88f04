"""Resolution context passed to every alternate lookup."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from pull_alternates.exceptions import LoadCancelledError


@dataclass
class ResolveContext:
    """Context provided by the caller of a resolution.

    Attributes:
        cancel_event: Threading event that is set when cancellation is requested.
                      Checked around the one-time policy load.
        deadline: Optional `time.monotonic()` value after which the load is
                  considered timed out.
    """

    cancel_event: threading.Event = field(default_factory=threading.Event)
    deadline: Optional[float] = None

    @classmethod
    def with_timeout(cls, seconds: float) -> "ResolveContext":
        """Create a context whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        """Request cancellation."""
        self.cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self.cancel_event.is_set()

    @property
    def is_expired(self) -> bool:
        """Check if the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self, source: Optional[str] = None) -> None:
        """Raise if the context was cancelled or its deadline passed.

        Raises:
            LoadCancelledError: When cancelled or expired.
        """
        if self.is_cancelled:
            raise LoadCancelledError("Policy load cancelled", source=source)
        if self.is_expired:
            raise LoadCancelledError("Policy load deadline exceeded", source=source)
