"""
Tests for animation definitions, the registry and JSON loading.
"""

import json
import logging
from pathlib import Path

import pytest

from animation_registry import (
    AnimationDefinition,
    AnimationRegistry,
    Trigger,
    load_animations,
    registry_from_dict,
)
from conftest import make_animation
from errors import (
    AnimationNotFound,
    DuplicateAnimation,
    InvalidDefinition,
    MalformedEncoding,
)
from sequence_code import DelayedCue, ImmediateCue, SequenceSegment

SAMPLES = Path(__file__).parent.parent / "samples" / "animations.json"


class TestAnimationDefinition:
    """Definitions are validated and decoded when built."""

    def test_decodes_once(self):
        animation = make_animation(frames=6, sequence_code="0-1:3,2-5:1", cue="1-2:run")
        assert animation.segments == (SequenceSegment(0, 1, 3.0), SequenceSegment(2, 5, 1.0))
        assert animation.cue_spec == DelayedCue(1.0, 2.0, "run")
        assert animation.cue_target == "run"
        assert animation.sequenced

    def test_plain_animation(self):
        animation = make_animation(fps=10, frames=3)
        assert animation.frame_count == 3
        assert animation.frame_delay == pytest.approx(0.1)
        assert animation.segments == ()
        assert animation.cue_spec is None
        assert not animation.sequenced

    def test_triggers_grouped_by_frame(self):
        animation = make_animation(triggers=(
            Trigger(2, "step"), Trigger(0, "start"), Trigger(2, "dust"),
        ))
        assert animation.triggers_at(2) == ("step", "dust")
        assert animation.triggers_at(0) == ("start",)
        assert animation.triggers_at(1) == ()

    def test_frames_are_frozen(self):
        animation = AnimationDefinition(name="a", fps=1, loop=True, frames=[1, 2])
        assert animation.frames == (1, 2)
        with pytest.raises(AttributeError):
            animation.fps = 2

    def test_zero_frames(self):
        with pytest.raises(InvalidDefinition, match="no frames"):
            make_animation(frames=())

    @pytest.mark.parametrize("fps", [0, -5, 2.5, True, "10"])
    def test_bad_fps(self, fps):
        with pytest.raises(InvalidDefinition, match="fps"):
            make_animation(fps=fps)

    def test_empty_name(self):
        with pytest.raises(InvalidDefinition):
            make_animation(name="")

    def test_segment_outside_frames(self):
        with pytest.raises(InvalidDefinition, match="segment 2-4"):
            make_animation(frames=4, sequence_code="0-1:1,2-4:1")

    def test_trigger_outside_frames(self):
        with pytest.raises(InvalidDefinition, match="trigger 'boom'"):
            make_animation(frames=4, triggers=(Trigger(4, "boom"),))

    def test_sequence_with_immediate_cue(self):
        """Sequence-coded animations never complete, so a completion cue is invalid."""
        with pytest.raises(InvalidDefinition, match="never complete"):
            make_animation(frames=4, sequence_code="0-3:1", cue="idle")

    def test_sequence_with_delayed_cue_is_fine(self):
        animation = make_animation(frames=4, sequence_code="0-3:1", cue="2:idle")
        assert animation.cue_spec == DelayedCue(2.0, 2.0, "idle")

    def test_malformed_encoding_surfaces(self):
        with pytest.raises(MalformedEncoding) as exc:
            make_animation(frames=4, sequence_code="0-1:3,2-3")
        assert exc.value.text == "2-3"


class TestFromDict:

    def test_full_entry(self):
        animation = AnimationDefinition.from_dict({
            "name": "walk",
            "fps": 8,
            "loop": True,
            "frames": [1, 2, 1, 3],
            "cue": "run",
            "triggers": [{"frame": 1, "name": "footstep"}],
        })
        assert animation.name == "walk"
        assert animation.frames == (1, 2, 1, 3)
        assert animation.loop is True
        assert animation.cue_spec == ImmediateCue("run")
        assert animation.triggers == (Trigger(1, "footstep"),)

    def test_defaults(self):
        animation = AnimationDefinition.from_dict({"name": "a", "fps": 1, "frames": [0]})
        assert animation.loop is False
        assert animation.sequence_code == ""
        assert animation.cue == ""
        assert animation.triggers == ()

    @pytest.mark.parametrize("key", ["name", "fps", "frames"])
    def test_missing_key(self, key):
        entry = {"name": "a", "fps": 1, "frames": [0]}
        del entry[key]
        with pytest.raises(InvalidDefinition, match=f"missing '{key}'"):
            AnimationDefinition.from_dict(entry)

    def test_bad_trigger(self):
        with pytest.raises(InvalidDefinition, match="bad trigger"):
            AnimationDefinition.from_dict(
                {"name": "a", "fps": 1, "frames": [0], "triggers": [{"frame": 0}]}
            )

    def test_frames_must_be_list(self):
        with pytest.raises(InvalidDefinition, match="must be a list"):
            AnimationDefinition.from_dict({"name": "a", "fps": 1, "frames": "abc"})


class TestAnimationRegistry:

    def test_register_and_lookup(self):
        a = make_animation("a")
        registry = AnimationRegistry([a])
        assert registry.lookup("a") is a
        assert registry.require("a") is a
        assert registry.lookup("b") is None
        assert "a" in registry
        assert len(registry) == 1
        assert list(registry) == [a]

    def test_require_unknown(self):
        with pytest.raises(AnimationNotFound) as exc:
            AnimationRegistry().require("ghost")
        assert exc.value.name == "ghost"

    def test_duplicate(self):
        registry = AnimationRegistry([make_animation("a")])
        with pytest.raises(DuplicateAnimation):
            registry.register(make_animation("a", fps=8))
        assert registry.require("a").fps == 4

    def test_names_keep_order(self):
        registry = AnimationRegistry([make_animation("b"), make_animation("a")])
        assert registry.names() == ["b", "a"]

    def test_unresolved_cues(self):
        registry = AnimationRegistry([
            make_animation("a", cue="b"),
            make_animation("b", cue="1:ghost"),
        ])
        assert registry.unresolved_cues() == [("b", "ghost")]


class TestLoading:

    def test_registry_from_dict(self):
        registry, play_on_start = registry_from_dict({
            "play_on_start": "a",
            "animations": [
                {"name": "a", "fps": 2, "frames": [0, 1], "cue": "b"},
                {"name": "b", "fps": 2, "frames": [2], "loop": True},
            ],
        })
        assert registry.names() == ["a", "b"]
        assert play_on_start == "a"

    def test_unknown_cue_target_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            registry, _ = registry_from_dict({
                "animations": [{"name": "a", "fps": 2, "frames": [0], "cue": "ghost"}],
            })
        assert "a" in registry
        assert "cues unknown animation ghost" in caplog.text

    def test_duplicate_in_document(self):
        with pytest.raises(DuplicateAnimation):
            registry_from_dict({"animations": [
                {"name": "a", "fps": 2, "frames": [0]},
                {"name": "a", "fps": 2, "frames": [0]},
            ]})

    def test_document_needs_animations(self):
        with pytest.raises(InvalidDefinition):
            registry_from_dict({"anims": []})

    def test_load_file(self, tmp_path):
        path = tmp_path / "animations.json"
        path.write_text(json.dumps({
            "animations": [{"name": "a", "fps": 2, "frames": [0, 1]}],
        }))
        registry, play_on_start = load_animations(str(path))
        assert registry.names() == ["a"]
        assert play_on_start is None

    def test_sample_file_loads(self):
        registry, play_on_start = load_animations(str(SAMPLES))
        assert play_on_start == "idle"
        assert registry.unresolved_cues() == []
        assert registry.require("thinking").sequenced
