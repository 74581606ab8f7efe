"""Tests for the dual-resolution renderer."""

import math

import numpy as np
import pytest

from gridsketch.document import Sketch
from gridsketch.raster import new_surface
from gridsketch.render import DualRenderer, draw_shape, render, stroke_width
from gridsketch.shapes import Arc, Circle, Paint, Pending, Polyline, Rectangle, Segment

SCALE = 16 / 320


@pytest.fixture
def sketch():
    return Sketch(16, 16, 320)


@pytest.fixture
def renderer(sketch):
    return DualRenderer(sketch)


@pytest.fixture
def preview():
    return new_surface(16, 16)


class TestStrokeWidth:
    def test_grid_pixels(self):
        assert stroke_width(1) == 1
        assert stroke_width(3) == 3

    def test_clamped(self):
        assert stroke_width(0) == 1
        assert stroke_width(1000) == 255


class TestDrawShape:
    def test_rectangle_on_grid(self, preview):
        draw_shape(preview, Rectangle(10, 10, 140, 140, Paint(fill="#ffffff")), SCALE, SCALE)
        assert tuple(preview[0, 0]) == (0, 0, 0, 255)
        assert tuple(preview[7, 7]) == (0, 0, 0, 255)
        assert tuple(preview[3, 3]) == (255, 255, 255, 255)
        assert preview[8, 8, 3] == 0

    def test_negative_extent_rectangle(self, preview):
        draw_shape(preview, Rectangle(150, 150, -140, -140), SCALE, SCALE)
        assert preview[0, 0, 3] == 255
        assert preview[7, 7, 3] == 255

    def test_zero_extent_draws_nothing(self, preview):
        draw_shape(preview, Rectangle(10, 10, 0, 0), SCALE, SCALE)
        draw_shape(preview, Circle(170, 170, 0), SCALE, SCALE)
        draw_shape(preview, Arc(160, 160, 0, 0.0, 1.0), SCALE, SCALE)
        assert not preview.any()

    def test_circle(self, preview):
        draw_shape(preview, Circle(170, 170, 120), SCALE, SCALE)
        assert preview[8, 11, 3] == 255
        assert preview[8, 8, 3] == 0

    def test_segment(self, preview):
        draw_shape(preview, Segment(30, 30, 110, 30), SCALE, SCALE)
        assert preview[1, 1:6, 3].all()

    def test_polyline_fill_ignores_closed_flag(self, preview):
        pts = ((30, 30), (210, 30), (210, 210), (30, 210))
        draw_shape(preview, Polyline(pts, False, Paint(fill="#ff0000")), SCALE, SCALE)
        assert tuple(preview[5, 5]) == (255, 0, 0, 255)

    def test_arc(self, preview):
        draw_shape(preview, Arc(160, 160, 40, 0.0, -math.pi / 2), SCALE, SCALE)
        for x, y in [(10, 8), (8, 10), (6, 8)]:
            assert preview[y, x, 3] == 255
        assert preview[8, 8, 3] == 0

    def test_zero_sweep_arc_draws_nothing(self, preview):
        draw_shape(preview, Arc(160, 160, 40, 1.0, 1.0), SCALE, SCALE)
        draw_shape(preview, Arc(160, 160, 40, 0.5, 0.5, Paint(fill="#ff0000")), SCALE, SCALE)
        assert not preview.any()

    def test_huge_thickness_is_clamped(self, preview):
        draw_shape(preview, Segment(30, 30, 110, 30, Paint(thickness=10 ** 9)), SCALE, SCALE)
        assert preview[..., 3].any()

    def test_unknown_shape(self, preview):
        with pytest.raises(ValueError):
            draw_shape(preview, object(), SCALE, SCALE)


class TestRender:
    def test_background_and_pending(self, preview):
        pending = Pending(Rectangle(10, 10, 140, 140), ((100, 100),))
        render(preview, [], pending, SCALE, background="#0000ff")
        assert tuple(preview[15, 15]) == (0, 0, 255, 255)
        assert tuple(preview[0, 0]) == (0, 0, 0, 255)

    def test_clears_previous_frame(self, preview):
        preview[...] = 255
        render(preview, [], None, SCALE)
        assert not preview.any()


class TestDualRenderer:
    def test_sizes(self, renderer):
        assert renderer.surface.shape == (320, 320, 4)
        assert renderer.preview.shape == (16, 16, 4)

    @pytest.mark.parametrize("shape", [
        Rectangle(10, 10, 140, 140),
        Rectangle(30, 50, 170, 90, Paint(fill="#00ff00")),
        Circle(170, 170, 160),
        Circle(90, 110, 100, Paint(stroke="#0000ff", fill="#ffff00", thickness=2)),
        Segment(10, 10, 150, 90),
        Segment(310, 10, 10, 250, Paint(thickness=3)),
        Polyline(((10, 10), (210, 50), (130, 290), (10, 10)), True),
        Polyline(((30, 30), (290, 30), (170, 250)), False, Paint(fill="#ff0000")),
        Arc(160, 160, 40, 0.0, -math.pi / 2),
        Arc(170, 150, 110, 2.0, 0.5, Paint(fill="#00ffff")),
    ], ids=lambda s: s.kind)
    def test_surface_shows_preview_cells(self, sketch, renderer, shape):
        sketch.commit(shape)
        surface, preview = renderer.refresh()
        assert preview[..., 3].any()
        # one sample per 20x20 cell
        assert np.array_equal(surface[10::20, 10::20], preview)
        for r in range(0, 320, 20):
            for c in range(0, 320, 20):
                cell = surface[r:r + 20, c:c + 20]
                assert (cell == preview[r // 20, c // 20]).all()

    def test_rectangle_stroke_covers_whole_cells(self, sketch, renderer):
        sketch.commit(Rectangle(10, 10, 140, 140))
        surface, preview = renderer.refresh()
        assert preview[0, 0, 3] == 255
        assert surface[0, 0, 3] == 255
        assert surface[159, 159, 3] == 255
        assert surface[80, 80, 3] == 0

    def test_reticle_only_on_surface(self, sketch, renderer):
        sketch.set_pending(None, reticle=[(100, 100)])
        surface, preview = renderer.refresh()
        assert tuple(surface[100, 100]) == (255, 0, 255, 255)
        assert not preview.any()

    def test_grid_overlay(self, sketch, renderer):
        sketch.show_grid = True
        surface, preview = renderer.refresh()
        assert tuple(surface[5, 20]) == (192, 192, 192, 255)
        assert not preview.any()

    def test_background(self, sketch, renderer):
        sketch.background = "#ff0000"
        _, preview = renderer.refresh()
        assert np.all(preview[..., 0] == 255)
        assert np.all(preview[..., 3] == 255)

    def test_reallocates_on_resize(self, sketch, renderer):
        sketch.set_target_size(32, 16)
        renderer.refresh()
        assert renderer.preview.shape == (16, 32, 4)
        assert renderer.surface.shape == (160, 320, 4)
        sketch.resize_surface(640)
        renderer.refresh()
        assert renderer.surface.shape == (320, 640, 4)
