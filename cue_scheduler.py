"""One-shot timer for delayed cue transitions.

The timer runs on the same virtual timeline as the frame clock: it only
moves when the animator is ticked.
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from frame_clock import EPSILON

logger = logging.getLogger(__name__)


class CueScheduler:
    """Holds at most one pending delayed callback.

    The random source is injectable so tests can pin the sampled delay.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._remaining: float | None = None
        self._callback: Callable[[], None] | None = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    @property
    def remaining(self) -> float | None:
        """Seconds until the pending callback fires, or None."""
        return self._remaining

    def sample_delay(self, min_seconds: float, max_seconds: float) -> float:
        """Uniform sample from [min_seconds, max_seconds)."""
        if max_seconds <= min_seconds:
            return min_seconds
        return min_seconds + self._rng.random() * (max_seconds - min_seconds)

    def schedule(
        self,
        min_seconds: float,
        max_seconds: float,
        callback: Callable[[], None],
    ) -> float:
        """Arm the timer, replacing any pending one. Returns the sampled delay."""
        self.cancel()
        delay = self.sample_delay(min_seconds, max_seconds)
        self._remaining = delay
        self._callback = callback
        logger.debug("Cue armed: %.3fs (range %.3f-%.3f)", delay, min_seconds, max_seconds)
        return delay

    def cancel(self) -> None:
        if self._callback is not None:
            logger.debug("Cue cancelled with %.3fs remaining", self._remaining)
        self._remaining = None
        self._callback = None

    def advance(self, elapsed: float) -> bool:
        """Move the timer forward; fire the callback once it runs out.

        Returns True if the callback fired during this call.
        """
        if self._callback is None:
            return False
        self._remaining -= elapsed
        if self._remaining > EPSILON:
            return False

        # Cleared before the call so the callback may arm a new cue
        callback = self._callback
        self._remaining = None
        self._callback = None
        callback()
        return True
