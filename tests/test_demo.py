"""Tests for the command-line demo and visualization helpers."""

import json

import numpy as np
import pytest

from gridsketch.demo import main, render_script, replay_gestures
from gridsketch.document import Sketch
from gridsketch.live import LiveEditor
from gridsketch.viz import composite_rgba, save_session_figure, side_by_side, to_pil

SCRIPT = """canvas.width = 16;
canvas.height = 16;
// Shape 1: rectangle
ctx.strokeStyle = '#000000';
ctx.lineWidth = 1;
ctx.beginPath();
ctx.rect(0, 0, 7, 7);
ctx.stroke();
"""

GESTURES = [
    {"tool": "Rectangle", "stroke": "#ff0000"},
    {"action": "down", "x": 10, "y": 10, "t": 0.0},
    {"action": "move", "x": 90, "y": 60, "t": 0.4},
    {"action": "down", "x": 150, "y": 150, "t": 0.9},
]


@pytest.fixture
def script_file(tmp_path):
    path = tmp_path / "drawing.js"
    path.write_text(SCRIPT)
    return path


@pytest.fixture
def gesture_file(tmp_path):
    path = tmp_path / "gestures.json"
    path.write_text(json.dumps(GESTURES))
    return path


class TestRenderScript:
    def test_writes_png(self, script_file, tmp_path):
        out = tmp_path / "out" / "preview.png"
        script = render_script(str(script_file), save_path=str(out), scale=4)
        assert out.exists()
        assert "ctx.rect(0, 0, 7, 7);" in script

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            render_script(str(tmp_path / "nope.js"), save_path=str(tmp_path / "p.png"))


class TestReplay:
    def test_writes_gif(self, gesture_file, tmp_path):
        out = tmp_path / "replay.gif"
        script = replay_gestures(str(gesture_file), save_path=str(out))
        assert out.exists()
        assert "// Shape 1: rectangle" in script
        assert "ctx.strokeStyle = '#ff0000';" in script


class TestMain:
    def test_render_command(self, script_file, tmp_path, capsys):
        out = tmp_path / "preview.png"
        main(["render", str(script_file), "--save-path", str(out)])
        assert "// Shape 1: rectangle" in capsys.readouterr().out
        assert out.exists()

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestViz:
    def test_to_pil_scales(self):
        img = np.zeros((16, 16, 4), dtype=np.uint8)
        assert to_pil(img, 4).size == (64, 64)

    def test_side_by_side(self):
        surface = np.zeros((320, 320, 4), dtype=np.uint8)
        preview = np.zeros((16, 16, 4), dtype=np.uint8)
        assert side_by_side(surface, preview).shape == (320, 644, 4)

    def test_composite_is_rgb(self):
        out = composite_rgba(np.zeros((8, 8, 4), dtype=np.uint8))
        assert out.shape == (8, 8, 3)
        assert out.min() >= 0.0 and out.max() <= 1.0

    def test_session_figure(self, tmp_path):
        editor = LiveEditor(Sketch())
        path = save_session_figure(editor, str(tmp_path / "session.png"))
        assert (tmp_path / "session.png").exists()
        assert path.endswith("session.png")
