import random

import pytest

from animation_registry import AnimationDefinition, AnimationRegistry
from animator import SpriteAnimator


class FixedRandom(random.Random):
    """Random source whose random() always returns ``value``."""

    def __init__(self, value: float = 0.0) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def make_animation(name="a", fps=4, loop=False, frames=4, **kw) -> AnimationDefinition:
    """Animation whose frame handles are ``name:index`` strings."""
    if isinstance(frames, int):
        frames = tuple(f"{name}:{i}" for i in range(frames))
    return AnimationDefinition(name=name, fps=fps, loop=loop, frames=frames, **kw)


@pytest.fixture
def fixed_random():
    return FixedRandom()


@pytest.fixture
def triggers():
    """List that collects trigger names fired by the animator."""
    return []


@pytest.fixture
def make_animator(fixed_random, triggers):
    """Build an animator over the given definitions."""
    def _make(*definitions, **kw):
        registry = AnimationRegistry(definitions)
        kw.setdefault("rng", fixed_random)
        kw.setdefault("on_trigger", triggers.append)
        return SpriteAnimator(registry, **kw)
    return _make
