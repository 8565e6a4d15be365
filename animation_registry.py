"""Animation definitions and the registry that looks them up by name.

Definitions are validated and their sequence code and cue decoded once,
when they are built. Nothing is re-parsed while playing.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterator

from errors import AnimationNotFound, DuplicateAnimation, InvalidDefinition
from sequence_code import (
    CueSpec,
    ImmediateCue,
    SequenceSegment,
    parse_cue,
    parse_sequence,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trigger:
    """Named action fired when playback reaches ``frame``."""
    frame: int
    name: str


@dataclass(frozen=True)
class AnimationDefinition:
    """A named, immutable animation.

    ``frames`` holds opaque frame handles (sprite indices, surfaces,
    anything hashable); the animator only hands them back to the host.
    """
    name: str
    fps: int
    loop: bool
    frames: tuple[Hashable, ...]
    sequence_code: str = ""
    cue: str = ""
    triggers: tuple[Trigger, ...] = ()

    segments: tuple[SequenceSegment, ...] = field(init=False, repr=False, compare=False)
    cue_spec: CueSpec | None = field(init=False, repr=False, compare=False)
    _triggers_by_frame: dict[int, tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidDefinition(f"Animation name must be a non-empty string: {self.name!r}")
        if isinstance(self.fps, bool) or not isinstance(self.fps, int) or self.fps <= 0:
            raise InvalidDefinition(f"{self.name}: fps must be a positive integer, got {self.fps!r}")

        frames = tuple(self.frames)
        if not frames:
            raise InvalidDefinition(f"{self.name}: animation has no frames")
        object.__setattr__(self, "frames", frames)
        object.__setattr__(self, "loop", bool(self.loop))
        object.__setattr__(self, "triggers", tuple(self.triggers))

        segments = parse_sequence(self.sequence_code)
        for segment in segments:
            if segment.end >= len(frames):
                raise InvalidDefinition(
                    f"{self.name}: segment {segment.start}-{segment.end} "
                    f"is outside {len(frames)} frames"
                )
        cue_spec = parse_cue(self.cue)
        if segments and isinstance(cue_spec, ImmediateCue):
            # Sequence-coded animations cycle forever and never complete
            raise InvalidDefinition(
                f"{self.name}: cue {self.cue!r} waits for completion, "
                "but sequence-coded animations never complete"
            )

        by_frame: dict[int, list[str]] = {}
        for trigger in self.triggers:
            if not 0 <= trigger.frame < len(frames):
                raise InvalidDefinition(
                    f"{self.name}: trigger {trigger.name!r} on frame {trigger.frame} "
                    f"is outside {len(frames)} frames"
                )
            by_frame.setdefault(trigger.frame, []).append(trigger.name)

        object.__setattr__(self, "segments", segments)
        object.__setattr__(self, "cue_spec", cue_spec)
        object.__setattr__(
            self, "_triggers_by_frame", {k: tuple(v) for k, v in by_frame.items()}
        )

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def frame_delay(self) -> float:
        return 1.0 / self.fps

    @property
    def sequenced(self) -> bool:
        return bool(self.segments)

    def triggers_at(self, frame: int) -> tuple[str, ...]:
        """Names of every trigger on ``frame``, in definition order."""
        return self._triggers_by_frame.get(frame, ())

    @property
    def cue_target(self) -> str | None:
        return self.cue_spec.target if self.cue_spec is not None else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnimationDefinition:
        """Build a definition from its JSON form."""
        if not isinstance(data, dict):
            raise InvalidDefinition(f"Animation entry must be an object, got {type(data).__name__}")
        name = data.get("name")
        for key in ("name", "fps", "frames"):
            if key not in data:
                raise InvalidDefinition(f"{name or '<unnamed>'}: missing {key!r}")
        frames = data["frames"]
        if not isinstance(frames, list):
            raise InvalidDefinition(f"{name}: 'frames' must be a list")

        triggers = []
        for entry in data.get("triggers") or ():
            try:
                triggers.append(Trigger(frame=int(entry["frame"]), name=str(entry["name"])))
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidDefinition(f"{name}: bad trigger {entry!r}") from e

        return cls(
            name=name,
            fps=data["fps"],
            loop=data.get("loop", False),
            frames=tuple(frames),
            sequence_code=data.get("sequence_code") or "",
            cue=data.get("cue") or "",
            triggers=tuple(triggers),
        )


class AnimationRegistry:
    """Flat name -> definition lookup, filled once at startup."""

    def __init__(self, definitions=()) -> None:
        self._animations: dict[str, AnimationDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: AnimationDefinition) -> None:
        if definition.name in self._animations:
            raise DuplicateAnimation(definition.name)
        self._animations[definition.name] = definition
        logger.debug(
            "Registered %s: %d frames @ %d fps, loop=%s, segments=%d, cue=%r",
            definition.name, definition.frame_count, definition.fps,
            definition.loop, len(definition.segments), definition.cue,
        )

    def lookup(self, name: str) -> AnimationDefinition | None:
        return self._animations.get(name)

    def require(self, name: str) -> AnimationDefinition:
        try:
            return self._animations[name]
        except KeyError:
            raise AnimationNotFound(name) from None

    def names(self) -> list[str]:
        return list(self._animations)

    def unresolved_cues(self) -> list[tuple[str, str]]:
        """(animation, target) pairs whose cue names an unknown animation."""
        return [
            (a.name, a.cue_target)
            for a in self._animations.values()
            if a.cue_target is not None and a.cue_target not in self._animations
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._animations

    def __iter__(self) -> Iterator[AnimationDefinition]:
        return iter(self._animations.values())

    def __len__(self) -> int:
        return len(self._animations)


def registry_from_dict(doc: dict[str, Any]) -> tuple[AnimationRegistry, str | None]:
    """Build a registry from a parsed definitions document.

    Returns the registry and the optional ``play_on_start`` animation name.
    """
    if not isinstance(doc, dict) or not isinstance(doc.get("animations"), list):
        raise InvalidDefinition("Definitions document needs an 'animations' list")

    registry = AnimationRegistry()
    for entry in doc["animations"]:
        registry.register(AnimationDefinition.from_dict(entry))

    for name, target in registry.unresolved_cues():
        logger.warning("Animation %s cues unknown animation %s", name, target)

    play_on_start = doc.get("play_on_start") or None
    if play_on_start is not None and play_on_start not in registry:
        logger.warning("play_on_start names unknown animation %s", play_on_start)
    return registry, play_on_start


def load_animations(path: str) -> tuple[AnimationRegistry, str | None]:
    """Load a JSON definitions file. See :func:`registry_from_dict`."""
    with open(path) as f:
        doc = json.load(f)
    registry, play_on_start = registry_from_dict(doc)
    logger.info("Loaded %d animations from %s", len(registry), path)
    return registry, play_on_start
