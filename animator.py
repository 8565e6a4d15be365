"""Sprite animation state machine.

Advances a frame pointer through an animation's frames, fires frame
triggers and follows cues to the next animation. The animator never
waits on anything: the host calls :meth:`SpriteAnimator.tick` with the
elapsed time and reads the frame handle to draw.

Two stepping modes exist. Linear animations walk their frame list,
wrapping when looping and stopping on the last frame otherwise.
Sequence-coded animations walk their segments in order and cycle
through them forever.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Hashable

from animation_registry import AnimationDefinition, AnimationRegistry
from cue_scheduler import CueScheduler
from errors import AnimationNotFound
from frame_clock import EPSILON, FrameClock
from sequence_code import DelayedCue, ImmediateCue

logger = logging.getLogger(__name__)


class PlayMode(enum.Enum):
    IDLE = "idle"
    LINEAR = "linear"
    SEQUENCED = "sequenced"


@dataclass
class TickResult:
    """What changed during one tick."""
    frame: int
    triggers: list[str] = field(default_factory=list)
    finished: bool = False


class SpriteAnimator:
    """Plays animations from a registry, one at a time.

    Not thread-safe: drive it from a single loop.

    ``on_trigger(name)`` is called for every trigger reached, in
    playback order. ``on_finished(name)`` is called when a non-looping
    animation completes.
    """

    def __init__(
        self,
        registry: AnimationRegistry,
        on_trigger: Callable[[str], None] | None = None,
        on_finished: Callable[[str], None] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self.on_trigger = on_trigger
        self.on_finished = on_finished
        self._clock = FrameClock()
        self._scheduler = CueScheduler(rng)

        self._animation: AnimationDefinition | None = None
        # Last animation shown; kept after completion so its final frame stays visible
        self._shown: AnimationDefinition | None = None
        self._frame: int = 0
        self._loop: bool = False
        self._mode: PlayMode = PlayMode.IDLE
        self._segment_index: int = 0
        self._segment_remaining: float = 0.0
        self._suspended: bool = False
        self._torn_down: bool = False
        # Bumped on every force_play so a tick can tell it was interrupted
        self._generation: int = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_animation(self) -> AnimationDefinition | None:
        return self._animation

    @property
    def current_animation_name(self) -> str | None:
        return self._animation.name if self._animation is not None else None

    @property
    def current_frame(self) -> int:
        return self._frame

    @property
    def loop(self) -> bool:
        """Runtime loop flag; forced on while a delayed cue is pending."""
        return self._loop

    @property
    def mode(self) -> PlayMode:
        return self._mode

    @property
    def playing(self) -> bool:
        return self._mode is not PlayMode.IDLE and not self._suspended

    @property
    def suspended(self) -> bool:
        return self._suspended

    @property
    def accumulator(self) -> float:
        return self._clock.accumulator

    @property
    def cue_pending(self) -> bool:
        return self._scheduler.pending

    def is_playing(self, name: str) -> bool:
        return self._animation is not None and self._animation.name == name

    def current_frame_handle(self) -> Hashable | None:
        if self._shown is None:
            return None
        return self._shown.frames[self._frame]

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def _resolve(self, name: str) -> AnimationDefinition | None:
        try:
            return self._registry.require(name)
        except AnimationNotFound as e:
            logger.warning("%s", e)
            return None

    def play(self, name: str, start_frame: int = 0) -> bool:
        """Play ``name`` unless it is already the current animation.

        Returns False if no such animation exists.
        """
        animation = self._resolve(name)
        if animation is None:
            return False
        if animation is not self._animation:
            self.force_play(animation, start_frame)
        return True

    def force_play(self, animation: AnimationDefinition | str, start_frame: int = 0) -> bool:
        """Start ``animation`` from ``start_frame``, even if already playing.

        Out-of-range start frames fall back to frame 0. While suspended the
        new state is kept and playback begins on :meth:`resume`.
        """
        self._check_alive()
        if isinstance(animation, str):
            animation = self._resolve(animation)
            if animation is None:
                return False

        self._scheduler.cancel()
        self._generation += 1
        self._animation = animation
        self._shown = animation
        self._loop = animation.loop
        self._clock.reset(animation.fps)
        if not 0 <= start_frame < animation.frame_count:
            start_frame = 0
        self._frame = start_frame

        if animation.sequenced:
            self._mode = PlayMode.SEQUENCED
            self._start_sequence(animation, start_frame)
        else:
            self._mode = PlayMode.LINEAR

        if isinstance(animation.cue_spec, DelayedCue):
            cue = animation.cue_spec
            self._scheduler.schedule(
                cue.min_seconds, cue.max_seconds, lambda: self._fire_cue(cue.target)
            )
            self._loop = True

        logger.debug(
            "Playing %s from frame %d (%s, loop=%s)",
            animation.name, self._frame, self._mode.value, self._loop,
        )
        return True

    def slip_play(self, name: str, want_frame: int, *other_names: str) -> bool:
        """Play ``name``, keeping the current frame if coming from ``other_names``.

        Lets frame-aligned variants (walk/run) swap without a visual jump.
        """
        if self._animation is not None and self._animation.name in other_names:
            return self.play(name, self._frame)
        return self.play(name, want_frame)

    def _fire_cue(self, target: str) -> None:
        logger.debug("Cue fired: %s -> %s", self.current_animation_name, target)
        self.force_play(target)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def suspend(self) -> None:
        """Stop advancing; frame, animation and pending cue are kept."""
        if not self._suspended:
            self._suspended = True
            logger.debug("Suspended at %s frame %d", self.current_animation_name, self._frame)

    def resume(self) -> None:
        """Continue from where :meth:`suspend` left off."""
        self._check_alive()
        if self._suspended:
            self._suspended = False
            logger.debug("Resumed at %s frame %d", self.current_animation_name, self._frame)

    def teardown(self) -> None:
        """Cancel pending cues and drop all animation state for good."""
        self._scheduler.cancel()
        self._animation = None
        self._shown = None
        self._mode = PlayMode.IDLE
        self._frame = 0
        self._clock.reset()
        self.on_trigger = None
        self.on_finished = None
        self._generation += 1
        self._torn_down = True
        logger.debug("Animator torn down")

    def _check_alive(self) -> None:
        if self._torn_down:
            raise RuntimeError("Animator has been torn down")

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self, elapsed: float) -> TickResult:
        """Advance playback by ``elapsed`` seconds.

        Cue transitions that happen during this tick take effect from the
        next tick on; the new animation starts on its first frame.
        """
        if elapsed < 0:
            raise ValueError(f"elapsed must be >= 0, got {elapsed}")
        result = TickResult(frame=self._frame)
        if self._suspended or self._mode is PlayMode.IDLE:
            return result

        animation = self._animation
        generation = self._generation
        cue_was_pending = self._scheduler.pending

        if self._mode is PlayMode.LINEAR:
            result.finished = self._advance_linear(animation, elapsed, result.triggers)
        else:
            self._advance_sequenced(animation, elapsed, result.triggers)

        if self.on_trigger is not None:
            for index, name in enumerate(result.triggers):
                self.on_trigger(name)
                if self._interrupted(generation):
                    del result.triggers[index + 1:]
                    break
        if self._interrupted(generation):
            # A trigger handler switched animation, suspended or tore down.
            # Completion is left to a later tick.
            result.finished = False
            result.frame = self._frame
            return result

        if cue_was_pending:
            self._scheduler.advance(elapsed)
        elif result.finished:
            self._finish(animation)

        result.frame = self._frame
        return result

    def _interrupted(self, generation: int) -> bool:
        return self._generation != generation or self._suspended

    def _advance_linear(
        self, animation: AnimationDefinition, elapsed: float, fired: list[str]
    ) -> bool:
        """Step through the frame list; True once a non-looping animation completes."""
        last = animation.frame_count - 1
        if not self._loop and self._frame >= last:
            return True

        for _ in range(self._clock.advance(elapsed)):
            self._frame += 1
            if self._frame > last:
                # Wrapping back to frame 0 fires nothing
                self._frame = 0
            else:
                fired.extend(animation.triggers_at(self._frame))
            if not self._loop and self._frame == last:
                return True
        return False

    def _start_sequence(self, animation: AnimationDefinition, start_frame: int) -> None:
        for index, segment in enumerate(animation.segments):
            if segment.contains(start_frame):
                self._segment_index = index
                self._segment_remaining = segment.duration
                self._frame = start_frame
                return
        self._segment_index = 0
        self._segment_remaining = animation.segments[0].duration
        self._frame = animation.segments[0].start

    def _advance_sequenced(
        self, animation: AnimationDefinition, elapsed: float, fired: list[str]
    ) -> None:
        """Step through segments, cycling back to the first after the last.

        Segment time is spent in order; a tick that outlasts the current
        segment carries its remainder into the following ones.
        """
        segments = animation.segments
        while elapsed > 0:
            segment = segments[self._segment_index]
            span = min(elapsed, self._segment_remaining)
            elapsed -= span
            self._segment_remaining -= span

            for _ in range(self._clock.advance(span)):
                self._frame += 1
                if self._frame > segment.end:
                    self._frame = segment.start
                fired.extend(animation.triggers_at(self._frame))

            if self._segment_remaining <= EPSILON:
                self._segment_index = (self._segment_index + 1) % len(segments)
                segment = segments[self._segment_index]
                self._segment_remaining = segment.duration
                if self._frame != segment.start:
                    self._frame = segment.start
                    fired.extend(animation.triggers_at(self._frame))
                logger.debug(
                    "%s: segment %d (%d-%d for %.3fs)", animation.name,
                    self._segment_index, segment.start, segment.end, segment.duration,
                )

    def _finish(self, animation: AnimationDefinition) -> None:
        logger.debug("Finished %s on frame %d", animation.name, self._frame)
        self._mode = PlayMode.IDLE
        self._animation = None
        generation = self._generation
        if self.on_finished is not None:
            self.on_finished(animation.name)
        if self._generation != generation:
            return
        if isinstance(animation.cue_spec, ImmediateCue):
            self.force_play(animation.cue_spec.target)
