"""Sprite-backed character for the preview window.

Loads PNG sprites from a mascot directory and uses their numbers as the
frame handles of the animation definitions: handle ``7`` is drawn from
``shime7.png``. Playback itself is delegated to :class:`SpriteAnimator`;
this class only picks the surface for the current handle, mirrors it
according to the facing direction and paints it with cairo.
"""

from __future__ import annotations

import logging
import os
import random

import cairo

from animation_registry import AnimationRegistry
from animator import SpriteAnimator, TickResult

logger = logging.getLogger(__name__)

SPRITE_PREFIX = "shime"
MAX_SPRITE_INDEX = 200


def load_sprites(mascot_path: str) -> dict[int, cairo.ImageSurface]:
    """Load ``shime<N>.png`` files keyed by N.

    Accepts both a flat sprite directory and the ``mascot/img/`` layout.
    """
    img_dir = os.path.join(mascot_path, "img")
    if not os.path.isdir(img_dir):
        img_dir = mascot_path

    sprites: dict[int, cairo.ImageSurface] = {}
    # Scan the whole range to handle gaps in numbering
    for i in range(MAX_SPRITE_INDEX):
        path = os.path.join(img_dir, f"{SPRITE_PREFIX}{i}.png")
        if os.path.exists(path):
            sprites[i] = cairo.ImageSurface.create_from_png(path)
    return sprites


class SpriteCharacter:
    """Animated sprite with a facing direction.

    ``facing`` is -1 when looking left (the sprites' native direction)
    and 1 when looking right.
    """

    def __init__(
        self,
        mascot_path: str,
        registry: AnimationRegistry,
        play_on_start: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.facing: int = -1
        self.last_triggers: list[str] = []
        self._sprites = load_sprites(mascot_path)
        self._registry = registry
        self.animator = SpriteAnimator(registry, on_trigger=self._on_trigger, rng=rng)

        # Handles without a sprite are drawn with the first available one
        self._fallback: int | None = min(self._sprites) if self._sprites else None
        missing = sorted({
            handle
            for animation in registry
            for handle in animation.frames
            if handle not in self._sprites
        }, key=str)
        if missing:
            logger.warning(
                "No sprite for frame handles %s in %s, using shime%s.png",
                missing, mascot_path, self._fallback,
            )

        if play_on_start:
            self.animator.play(play_on_start)

    @property
    def sprite_count(self) -> int:
        return len(self._sprites)

    @property
    def registry(self) -> AnimationRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play(self, name: str, start_frame: int = 0) -> bool:
        return self.animator.play(name, start_frame)

    def force_play(self, name: str, start_frame: int = 0) -> bool:
        return self.animator.force_play(name, start_frame)

    def tick(self, elapsed: float) -> TickResult:
        return self.animator.tick(elapsed)

    def suspend(self) -> None:
        self.animator.suspend()

    def resume(self) -> None:
        self.animator.resume()

    def teardown(self) -> None:
        self.animator.teardown()
        self._sprites.clear()

    def _on_trigger(self, name: str) -> None:
        logger.info("Trigger %s on %s frame %d", name,
                    self.animator.current_animation_name, self.animator.current_frame)
        self.last_triggers.append(name)
        del self.last_triggers[:-5]

    # ------------------------------------------------------------------
    # Facing
    # ------------------------------------------------------------------

    def flip_to(self, direction: float) -> None:
        """Look left for a negative direction, right otherwise."""
        self.facing = -1 if direction < 0 else 1

    def flip_towards(self, x: float, own_x: float) -> None:
        """Look at the horizontal position ``x`` from ``own_x``."""
        self.flip_to(x - own_x)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def current_surface(self) -> cairo.ImageSurface | None:
        handle = self.animator.current_frame_handle()
        if handle is None:
            return None
        surface = self._sprites.get(handle)
        if surface is None and self._fallback is not None:
            surface = self._sprites[self._fallback]
        return surface

    def draw(self, ctx: cairo.Context, width: int, height: int) -> None:
        surface = self.current_surface()
        if surface is None:
            return

        sprite_w = surface.get_width()
        sprite_h = surface.get_height()

        ctx.save()

        # Scale sprite to fill the target area
        sx = width / sprite_w
        sy = height / sprite_h

        # Flip horizontally when facing right (sprites face left by default)
        if self.facing > 0:
            ctx.translate(width, 0)
            ctx.scale(-sx, sy)
        else:
            ctx.scale(sx, sy)

        ctx.set_source_surface(surface, 0, 0)
        ctx.get_source().set_filter(cairo.FILTER_NEAREST)
        ctx.paint()
        ctx.restore()
