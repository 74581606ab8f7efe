"""Tests for the live-edit loop."""

import pytest

from gridsketch.config import TOOL_MAP
from gridsketch.document import Sketch
from gridsketch.live import LiveEditor
from gridsketch.shapes import Circle, PointerEvent, Rectangle


@pytest.fixture
def editor():
    return LiveEditor(Sketch(16, 16, 320))


def draw_rectangle(editor, t=0.0):
    editor.handle(PointerEvent("down", 10, 10, t))
    editor.handle(PointerEvent("move", 95, 50, t + 0.5))
    return editor.handle(PointerEvent("down", 150, 150, t + 1.0))


CIRCLE_SCRIPT = """canvas.width = 16;
canvas.height = 16;
// Shape 1: circle
ctx.strokeStyle = '#000000';
ctx.lineWidth = 1;
ctx.beginPath();
ctx.arc(8, 8, 3, 0, Math.PI * 2);
ctx.stroke();
"""


class TestPointerLoop:
    def test_initial_script(self, editor):
        assert "canvas.width = 16;" in editor.script
        assert "// Shape" not in editor.script

    def test_commit_resynthesizes(self, editor):
        shape = draw_rectangle(editor)
        assert shape == Rectangle(10, 10, 140, 140)
        assert "// Shape 1: rectangle" in editor.script
        assert "ctx.rect(0, 0, 7, 7);" in editor.script
        assert editor.preview[0, 0, 3] == 255

    def test_preview_not_synthesized(self, editor):
        before = editor.script
        editor.handle(PointerEvent("down", 10, 10, 0.0))
        editor.handle(PointerEvent("move", 95, 50, 0.5))
        assert editor.script == before
        # the pending rectangle is on both surfaces
        assert editor.preview[0, 0, 3] == 255
        assert editor.surface[10, 10, 3] == 255


class TestTextLoop:
    def test_own_write_is_suppressed(self, editor):
        draw_rectangle(editor, t=1.0)
        assert not editor.on_text_changed(editor.script, now=2.05)
        assert editor.pending_text is None

    def test_edit_applied_after_delay(self, editor):
        draw_rectangle(editor, t=1.0)
        assert editor.on_text_changed(CIRCLE_SCRIPT, now=3.0)
        assert not editor.poll(3.2)
        assert editor.sketch.shapes == [Rectangle(10, 10, 140, 140)]
        assert editor.poll(3.6)
        assert editor.sketch.shapes == [Circle(170, 170, 120)]
        assert editor.script == CIRCLE_SCRIPT
        assert editor.pending_text is None

    def test_typing_restarts_delay(self, editor):
        editor.on_text_changed("canvas.width = 8;", now=1.0)
        editor.on_text_changed(CIRCLE_SCRIPT, now=1.4)
        assert not editor.poll(1.6)
        assert editor.poll(2.0)
        assert editor.sketch.canvas.target_width == 16
        assert len(editor.sketch.shapes) == 1

    def test_apply_changes_canvas(self, editor):
        assert editor.apply_script("canvas.width = 32;\ncanvas.height = 16;\n")
        assert editor.sketch.canvas.target_width == 32
        assert editor.preview.shape == (16, 32, 4)

    def test_malformed_blocks_dropped(self, editor):
        draw_rectangle(editor)
        assert editor.apply_script("// Shape 1: rectangle\nctx.rect(1);\n")
        assert editor.sketch.shapes == []

    def test_failure_leaves_sketch_untouched(self, editor, monkeypatch):
        draw_rectangle(editor)

        def boom(text, canvas):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr("gridsketch.live.parse_script", boom)
        script = editor.script
        assert not editor.apply_script("anything")
        assert editor.sketch.shapes == [Rectangle(10, 10, 140, 140)]
        assert editor.script == script

    def test_render_failure_restores_drawing(self, editor, monkeypatch):
        draw_rectangle(editor)
        editor.set_background("#00ff00")
        real_refresh = editor.renderer.refresh
        calls = []

        def refresh_once_broken():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("render failed")
            return real_refresh()

        monkeypatch.setattr(editor.renderer, "refresh", refresh_once_broken)
        text = CIRCLE_SCRIPT.replace("canvas.width = 16;", "canvas.width = 32;")
        assert not editor.apply_script(text)
        assert editor.sketch.shapes == [Rectangle(10, 10, 140, 140)]
        assert editor.sketch.background == "#00ff00"
        assert editor.sketch.canvas.target_width == 16
        assert editor.sketch.canvas.source_height == 320.0
        assert editor.preview.shape == (16, 16, 4)
        assert tuple(editor.preview[0, 0]) == (0, 0, 0, 255)

    def test_overflowing_circle_dropped(self, editor):
        draw_rectangle(editor)
        text = CIRCLE_SCRIPT.replace("ctx.arc(8, 8, 3,", "ctx.arc(1, 1, 1e308,")
        assert editor.apply_script(text)
        assert editor.sketch.shapes == []
        assert not editor.preview.any()

    def test_huge_line_width_renders(self, editor):
        text = CIRCLE_SCRIPT.replace("ctx.lineWidth = 1;", "ctx.lineWidth = 1e308;")
        assert editor.apply_script(text)
        assert len(editor.sketch.shapes) == 1
        assert editor.preview[..., 3].any()

    def test_script_without_background_clears_it(self, editor):
        editor.set_background("#ff0000")
        assert editor.preview[0, 0, 3] == 255
        assert editor.apply_script(CIRCLE_SCRIPT)
        assert editor.sketch.background is None
        assert editor.preview[0, 0, 3] == 0

    def test_apply_cancels_gesture(self, editor):
        editor.handle(PointerEvent("down", 10, 10, 0.0))
        editor.apply_script(CIRCLE_SCRIPT)
        assert editor.sketch.pending is None
        assert editor.machine.active.state == "idle"


class TestCommands:
    def test_set_tool(self, editor):
        editor.set_tool(TOOL_MAP["Circle"])
        editor.handle(PointerEvent("down", 160, 160, 0.0))
        shape = editor.handle(PointerEvent("down", 230, 170, 1.0))
        assert shape == Circle(170, 170, 120)

    def test_set_paint(self, editor):
        editor.set_paint(stroke="#ff0000", thickness=2)
        draw_rectangle(editor)
        assert "ctx.strokeStyle = '#ff0000';" in editor.script
        assert "ctx.lineWidth = 2;" in editor.script

    def test_background(self, editor):
        editor.set_background("#00ff00")
        assert "alpha: false" in editor.script
        assert "// Fill background" in editor.script
        editor.set_background(None)
        assert "alpha: true" in editor.script

    def test_bad_background(self, editor):
        with pytest.raises(ValueError):
            editor.set_background("green")
        assert editor.sketch.background is None

    def test_target_size(self, editor):
        assert editor.set_target_size(32, 32)
        assert "canvas.width = 32;" in editor.script
        assert not editor.set_target_size(0, 0)

    def test_resize_keeps_script(self, editor):
        draw_rectangle(editor)
        before = editor.script
        assert editor.resize_surface(640)
        assert editor.surface.shape == (640, 640, 4)
        assert editor.script == before

    def test_toggle_grid(self, editor):
        editor.toggle_grid()
        assert editor.sketch.show_grid
        editor.toggle_grid(False)
        assert not editor.sketch.show_grid

    def test_undo_and_clear(self, editor):
        draw_rectangle(editor)
        draw_rectangle(editor, t=5.0)
        assert editor.undo() == Rectangle(10, 10, 140, 140)
        assert "// Shape 2" not in editor.script
        assert "// Shape 1" in editor.script
        editor.clear()
        assert "// Shape" not in editor.script
        assert editor.undo() is None
