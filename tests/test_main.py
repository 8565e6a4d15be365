"""
Tests for the command-line entry point (headless paths only).
"""

import json
from pathlib import Path

import pytest

import main
from animation_registry import registry_from_dict

SAMPLES = Path(__file__).parent.parent / "samples" / "animations.json"


@pytest.fixture
def definitions(tmp_path):
    path = tmp_path / "animations.json"
    path.write_text(json.dumps({
        "play_on_start": "idle",
        "animations": [
            {"name": "idle", "fps": 2, "loop": True, "frames": [1, 2], "cue": "1-2:blink"},
            {"name": "blink", "fps": 8, "frames": [3, 4, 3], "cue": "idle",
             "triggers": [{"frame": 1, "name": "shut"}]},
            {"name": "think", "fps": 4, "frames": [5, 6, 7, 8], "sequence_code": "0-1:2.5,2-3:1"},
        ],
    }))
    return path


class TestParseArgs:

    def test_defaults(self):
        args = main.parse_args(["defs.json"])
        assert args.definitions == "defs.json"
        assert args.mascot is None
        assert args.play is None
        assert args.size == 128
        assert args.seed is None
        assert not args.check
        assert not args.debug

    def test_options(self):
        args = main.parse_args(
            ["defs.json", "--mascot", "m", "--play", "walk", "--seed", "3", "--check", "--debug"]
        )
        assert (args.mascot, args.play, args.seed) == ("m", "walk", 3)
        assert args.check and args.debug


class TestDescribe:

    def test_summary_lines(self, definitions):
        registry, play_on_start = registry_from_dict(json.loads(definitions.read_text()))
        lines = main.describe(registry, play_on_start).splitlines()
        assert lines == [
            "idle: 2 frames @ 2 fps, loop, cue 1-2:blink",
            "blink: 3 frames @ 8 fps, cue idle, triggers shut@1",
            "think: 4 frames @ 4 fps, sequence 0-1:2.5,2-3:1",
            "play_on_start: idle",
        ]


class TestMainCheck:

    def test_check_ok(self, definitions, capsys):
        assert main.main([str(definitions), "--check"]) == 0
        out = capsys.readouterr().out
        assert "blink: 3 frames" in out

    def test_check_sample_file(self, capsys):
        assert main.main([str(SAMPLES), "--check"]) == 0
        assert "thinking: 6 frames" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main.main([str(tmp_path / "nope.json"), "--check"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_malformed_sequence(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"animations": [
            {"name": "a", "fps": 2, "frames": [1, 2], "sequence_code": "0-1"},
        ]}))
        assert main.main([str(path), "--check"]) == 1
        assert "'0-1'" in capsys.readouterr().out

    def test_unknown_play(self, definitions, capsys):
        assert main.main([str(definitions), "--check", "--play", "ghost"]) == 1
        assert "unknown animation 'ghost'" in capsys.readouterr().out


class TestConfig:

    def test_round_trip(self, tmp_path, monkeypatch):
        monkeypatch.setattr(main, "CONFIG_DIR", str(tmp_path / "cfg"))
        monkeypatch.setattr(main, "CONFIG_FILE", str(tmp_path / "cfg" / "config.json"))
        assert main.load_config() == {}
        main.save_config({"mascot": "/sprites/cat"})
        assert main.load_config() == {"mascot": "/sprites/cat"}

    def test_corrupt_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        monkeypatch.setattr(main, "CONFIG_FILE", str(path))
        assert main.load_config() == {}
