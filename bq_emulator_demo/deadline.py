from __future__ import annotations

import time
from typing import Callable


class Deadline:
    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        left = self._expires_at - self._clock()
        if left <= 0:
            raise TimeoutError(f"run deadline of {self.seconds}s exceeded")
        return left
