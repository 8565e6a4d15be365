"""GTK3 preview window for sprite animations.

Drives a :class:`SpriteCharacter` from the GLib main loop: every frame
timer callback measures the real elapsed time and feeds it to the
animator, then redraws. Keyboard controls switch animations, flip the
sprite and pause playback.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

import cairo
import gi

gi.require_version("Gtk", "3.0")
gi.require_version("Gdk", "3.0")
from gi.repository import Gdk, GLib, Gtk  # noqa: E402

from animator import SpriteAnimator  # noqa: E402

logger = logging.getLogger(__name__)


class CharacterProto(Protocol):
    animator: SpriteAnimator
    facing: int
    last_triggers: list[str]
    def draw(self, ctx: cairo.Context, width: int, height: int) -> None: ...
    def tick(self, elapsed: float) -> object: ...
    def force_play(self, name: str, start_frame: int = 0) -> bool: ...
    def suspend(self) -> None: ...
    def resume(self) -> None: ...
    def teardown(self) -> None: ...
    def flip_to(self, direction: float) -> None: ...


FRAME_INTERVAL_MS = 1000 // 60
STATUS_HEIGHT = 20  # Extra height below sprite for the status line


class PreviewWindow(Gtk.Window):
    """Plain window showing one animated sprite and a status line.

    Keys: Space/Right next animation, Left previous animation,
    ``f`` flip facing, ``p`` pause/resume, ``q``/Escape quit.
    """

    def __init__(self, character: CharacterProto, names: list[str], size: int = 128) -> None:
        super().__init__(title="sprite-sequencer")

        self.character = character
        self._names = names
        self._size = size
        current = character.animator.current_animation_name
        self._index = names.index(current) if current in names else 0
        self._paused = False
        self._frame_timer_id: int | None = None
        self._last_time: float | None = None

        self._setup_window()
        self._start_timers()

    # ------------------------------------------------------------------
    # Window configuration
    # ------------------------------------------------------------------

    def _setup_window(self) -> None:
        self.set_default_size(self._size, self._size + STATUS_HEIGHT)
        self.set_resizable(False)

        self._da = Gtk.DrawingArea()
        self._da.set_size_request(self._size, self._size + STATUS_HEIGHT)
        self._da.connect("draw", self._on_draw)
        self.add(self._da)

        self.connect("key-press-event", self._on_key_press)
        self.connect("destroy", self._on_destroy)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_timers(self) -> None:
        self._last_time = time.monotonic()
        self._frame_timer_id = GLib.timeout_add(FRAME_INTERVAL_MS, self._on_frame_tick)

    def _stop_timers(self) -> None:
        if self._frame_timer_id is not None:
            GLib.source_remove(self._frame_timer_id)
            self._frame_timer_id = None

    def _on_frame_tick(self) -> bool:
        now = time.monotonic()
        elapsed = now - self._last_time
        self._last_time = now

        result = self.character.tick(elapsed)
        if result.finished:
            logger.debug("Animation finished on frame %d", result.frame)

        animator = self.character.animator
        self.set_title(
            f"{animator.current_animation_name or '-'} [{animator.current_frame}]"
        )
        self._da.queue_draw()
        return True

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _on_draw(self, widget: Gtk.DrawingArea, ctx: cairo.Context) -> bool:
        ctx.set_source_rgb(0.2, 0.2, 0.2)
        ctx.paint()

        width = widget.get_allocated_width()

        ctx.save()
        self.character.draw(ctx, width, self._size)
        ctx.restore()

        status = ", ".join(self.character.last_triggers)
        if self._paused:
            status = "paused " + status
        if status:
            ctx.save()
            ctx.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL)
            ctx.set_font_size(11)
            ctx.set_source_rgba(1, 1, 1, 0.95)
            ctx.move_to(4, self._size + STATUS_HEIGHT - 6)
            ctx.show_text(status)
            ctx.restore()

        return True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _on_key_press(self, widget: Gtk.Window, event: Gdk.EventKey) -> bool:
        key = Gdk.keyval_name(event.keyval)
        if key in ("space", "Right"):
            self._cycle(1)
        elif key == "Left":
            self._cycle(-1)
        elif key == "f":
            self.character.flip_to(-self.character.facing)
        elif key == "p":
            self._toggle_pause()
        elif key in ("q", "Escape"):
            self.destroy()
        else:
            return False
        return True

    def _cycle(self, step: int) -> None:
        if not self._names:
            return
        self._index = (self._index + step) % len(self._names)
        name = self._names[self._index]
        logger.debug("Switching to %s", name)
        self.character.force_play(name)

    def _toggle_pause(self) -> None:
        self._paused = not self._paused
        if self._paused:
            self.character.suspend()
        else:
            self.character.resume()
        self._da.queue_draw()

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def _cleanup(self) -> None:
        self._stop_timers()
        self.character.teardown()

    def _on_destroy(self, widget: Gtk.Window) -> None:
        self._cleanup()
        Gtk.main_quit()
