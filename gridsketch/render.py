"""
Dual-resolution renderer.

Shapes are rasterized once, onto the target-grid preview (scale ``tw / sw``):

* positions  -> ``floor(v * scale)``
* extents    -> ``round_half_up(v * scale)``
* thickness  -> target-grid pixels, at least 1

The editing surface is that same cell footprint stretched to surface size
with hard edges, so every surface pixel shows exactly the grid cell it lies
in.  The grid overlay and the construction reticle are drawn on top of the
stretched cells and never reach the preview.
"""

import logging

from gridsketch.config import RETICLE_SIZE
from gridsketch.mapping import emit_extent, emit_position
from gridsketch.raster import (
    MAX_THICKNESS,
    clear_surface,
    draw_grid,
    draw_reticle,
    new_surface,
    rasterize_arc,
    rasterize_circle,
    rasterize_filled_arc,
    rasterize_filled_circle,
    rasterize_filled_polygon,
    rasterize_filled_rectangle,
    rasterize_line,
    rasterize_polyline,
    rasterize_rectangle,
    resize_nearest,
)
from gridsketch.shapes import Arc, Circle, Polyline, Rectangle, Segment

logger = logging.getLogger(__name__)


def stroke_width(thickness):
    return max(1, min(int(thickness), MAX_THICKNESS))


def draw_shape(img, shape, scale_x, scale_y):
    """Rasterize one shape.  Zero-extent shapes are legal and draw nothing."""
    paint = shape.paint
    lw = stroke_width(paint.thickness)

    def pos(x, y):
        return emit_position(x * scale_x), emit_position(y * scale_y)

    if isinstance(shape, Rectangle):
        x, y, w, h = shape.normalized()
        x0, y0 = pos(x, y)
        w, h = emit_extent(w * scale_x), emit_extent(h * scale_y)
        if w == 0 and h == 0:
            return img
        corner = (x0 + w, y0 + h)
        if paint.fill is not None:
            rasterize_filled_rectangle(img, (x0, y0), corner, paint.fill)
        rasterize_rectangle(img, (x0, y0), corner, paint.stroke, lw)

    elif isinstance(shape, Circle):
        center = pos(shape.center_x, shape.center_y)
        radius = emit_extent(shape.diameter * scale_x / 2.0)
        if radius == 0:
            return img
        if paint.fill is not None:
            rasterize_filled_circle(img, center, radius, paint.fill)
        rasterize_circle(img, center, radius, paint.stroke, lw)

    elif isinstance(shape, Segment):
        rasterize_line(img, pos(shape.start_x, shape.start_y),
                       pos(shape.end_x, shape.end_y), paint.stroke, lw)

    elif isinstance(shape, Polyline):
        pts = [pos(x, y) for x, y in shape.points]
        # fill does not depend on is_closed
        if paint.fill is not None:
            rasterize_filled_polygon(img, pts, paint.fill)
        rasterize_polyline(img, pts, paint.stroke, lw)

    elif isinstance(shape, Arc):
        center = pos(shape.center_x, shape.center_y)
        radius = emit_extent(shape.radius * scale_x)
        if radius == 0:
            return img
        if paint.fill is not None:
            rasterize_filled_arc(img, center, radius, shape.start_angle, shape.end_angle,
                                 paint.fill)
        rasterize_arc(img, center, radius, shape.start_angle, shape.end_angle,
                      paint.stroke, lw)

    else:
        raise ValueError(f"unknown shape {shape!r}")
    return img


def render(surface, shapes, pending, scale_x, scale_y=None, background=None):
    """Clear ``surface`` and draw the committed shapes followed by the pending one.

    Parameters
    ----------
    surface : ndarray (H, W, 4) uint8
    shapes : sequence of committed shapes, drawn in order
    pending : Pending or None (only its shape is drawn)
    scale_x, scale_y : surface -> output scale (``scale_y`` defaults to ``scale_x``)
    background : color string, or None to leave the surface transparent
    """
    if scale_y is None:
        scale_y = scale_x
    clear_surface(surface, background)

    for shape in shapes:
        draw_shape(surface, shape, scale_x, scale_y)
    if pending is not None and pending.shape is not None:
        draw_shape(surface, pending.shape, scale_x, scale_y)
    return surface


def draw_overlays(surface, pending, grid=None):
    """Construction aids for the editing surface: cell grid, then reticle marks."""
    if grid is not None:
        draw_grid(surface, *grid)
    if pending is not None:
        for x, y in pending.reticle:
            draw_reticle(surface, emit_position(x), emit_position(y), size=RETICLE_SIZE)
    return surface


class DualRenderer:
    """Keeps the editing surface and the target-grid preview in sync."""

    def __init__(self, sketch):
        self.sketch = sketch
        self.surface = None
        self.preview = None
        self._allocate()

    def _allocate(self):
        c = self.sketch.canvas
        surface_size = (emit_extent(c.source_width), emit_extent(c.source_height))
        preview_size = (c.target_width, c.target_height)
        if self.surface is None or self.surface.shape[1::-1] != surface_size:
            self.surface = new_surface(*surface_size)
            logger.debug("Allocated editing surface %dx%d", *surface_size)
        if self.preview is None or self.preview.shape[1::-1] != preview_size:
            self.preview = new_surface(*preview_size)
            logger.debug("Allocated preview %dx%d", *preview_size)

    def render_preview(self):
        s = self.sketch
        return render(self.preview, s.shapes, s.pending,
                      s.canvas.scale_x, s.canvas.scale_y,
                      background=s.background)

    def render_surface(self):
        """Stretch the preview cells onto the editing surface, then overlay aids.

        Uses the preview as it was last rendered.
        """
        s = self.sketch
        H, W = self.surface.shape[:2]
        self.surface[...] = resize_nearest(self.preview, W, H)
        grid = (s.canvas.target_width, s.canvas.target_height) if s.show_grid else None
        return draw_overlays(self.surface, s.pending, grid)

    def refresh(self):
        """Re-render both surfaces; returns ``(surface, preview)``."""
        self._allocate()
        preview = self.render_preview()
        return self.render_surface(), preview
