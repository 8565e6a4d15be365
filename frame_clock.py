"""Fixed-step frame clock.

Turns arbitrary elapsed-time deltas into whole frame steps. Leftover
time carries over to the next call, so variable tick sizes add up to
the same number of steps as a steady clock would produce.
"""

# Absorbs float drift from summing deltas like 0.1 + 0.1 + 0.1
EPSILON = 1e-9


class FrameClock:
    """Accumulates elapsed seconds and hands out whole frame steps."""

    def __init__(self, fps: int = 1) -> None:
        self.frame_delay: float = 1.0 / fps
        self.accumulator: float = 0.0

    def reset(self, fps: int | None = None) -> None:
        """Drop accumulated time; optionally switch to a new frame rate."""
        if fps is not None:
            self.frame_delay = 1.0 / fps
        self.accumulator = 0.0

    def advance(self, elapsed: float) -> int:
        """Add ``elapsed`` seconds and return how many frame steps are due."""
        self.accumulator += elapsed

        steps = 0
        while self.accumulator + EPSILON >= self.frame_delay:
            self.accumulator = max(0.0, self.accumulator - self.frame_delay)
            steps += 1
        return steps
