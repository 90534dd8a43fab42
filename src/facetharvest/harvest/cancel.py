from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancelToken:
    """Cooperative abort signal with an optional deadline.

    ``cancel()`` may be called from any thread; the harvester checks
    ``cancelled`` between rounds and sleeps through ``wait()`` so a cancel
    cuts the settle interval short.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self.deadline = None if timeout is None else clock() + timeout

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and self._clock() >= self.deadline

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True when the token fired meanwhile."""
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            self._event.wait(remaining)
            return True
        self._event.wait(max(0.0, seconds))
        return self.cancelled
