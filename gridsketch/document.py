"""
The sketch document: one object that owns every piece of mutable state.

``Sketch`` holds the canvas parameters, the committed shape list, the single
pending-shape slot, the current paint and the background color.  It is passed
by reference to the construction machine, the renderer, the synthesizer and
the parser; nothing is kept in module globals.
"""

import logging
from dataclasses import replace

from gridsketch.config import PRESET_ICON
from gridsketch.mapping import CanvasParams
from gridsketch.shapes import Arc, Circle, Paint, Pending, Polyline, Rectangle, Segment

logger = logging.getLogger(__name__)


def _valid_dimension(value):
    if isinstance(value, bool):
        return False
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return False
    return ivalue == value and ivalue > 0


def scale_shape(shape, fx, fy):
    """Return a copy of ``shape`` with surface coordinates scaled."""
    if isinstance(shape, Rectangle):
        return replace(shape, origin_x=shape.origin_x * fx, origin_y=shape.origin_y * fy,
                       width=shape.width * fx, height=shape.height * fy)
    if isinstance(shape, Circle):
        return replace(shape, center_x=shape.center_x * fx, center_y=shape.center_y * fy,
                       diameter=shape.diameter * fx)
    if isinstance(shape, Segment):
        return replace(shape, start_x=shape.start_x * fx, start_y=shape.start_y * fy,
                       end_x=shape.end_x * fx, end_y=shape.end_y * fy)
    if isinstance(shape, Polyline):
        return replace(shape, points=tuple((x * fx, y * fy) for x, y in shape.points))
    if isinstance(shape, Arc):
        return replace(shape, center_x=shape.center_x * fx, center_y=shape.center_y * fy,
                       radius=shape.radius * fx)
    raise ValueError(f"unknown shape {shape!r}")


class Sketch:
    """Shape list + pending slot + paint state for one drawing."""

    def __init__(self, target_width=PRESET_ICON.target_width,
                 target_height=PRESET_ICON.target_height,
                 surface_width=PRESET_ICON.surface_width):
        if not (_valid_dimension(target_width) and _valid_dimension(target_height)):
            raise ValueError(f"invalid target size {target_width!r}x{target_height!r}")
        if surface_width <= 0:
            raise ValueError(f"invalid surface width {surface_width!r}")
        self.canvas = CanvasParams(
            source_width=float(surface_width),
            source_height=float(surface_width) * target_height / target_width,
            target_width=int(target_width),
            target_height=int(target_height),
        )
        self.shapes = []
        self.pending = None
        self.paint = Paint()
        self.background = None       # None = transparent
        self.show_grid = False

    @classmethod
    def from_preset(cls, preset):
        return cls(preset.target_width, preset.target_height, preset.surface_width)

    # ------------------------------------------------------------------
    # Shape list
    # ------------------------------------------------------------------

    def commit(self, shape):
        """Push a finished shape.  The pending slot is cleared first."""
        self.pending = None
        self.shapes.append(shape)
        logger.debug("Committed %s (%d shapes)", shape.kind, len(self.shapes))

    def undo(self):
        if not self.shapes:
            return None
        return self.shapes.pop()

    def clear(self):
        self.shapes = []
        self.pending = None

    def replace(self, shapes, background):
        """Wholesale replacement from a parsed script."""
        self.pending = None
        self.shapes = list(shapes)
        self.background = background

    def snapshot(self):
        """Everything a script edit can replace, for ``restore``."""
        return list(self.shapes), self.background, self.pending, replace(self.canvas)

    def restore(self, state):
        shapes, background, pending, canvas = state
        self.shapes = list(shapes)
        self.background = background
        self.pending = pending
        # in place: collaborators hold a reference to self.canvas
        self.canvas.source_width = canvas.source_width
        self.canvas.source_height = canvas.source_height
        self.canvas.target_width = canvas.target_width
        self.canvas.target_height = canvas.target_height

    def set_pending(self, shape=None, reticle=()):
        self.pending = Pending(shape, tuple(reticle))

    def clear_pending(self):
        self.pending = None

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------

    def set_target_size(self, width, height):
        """Change the output grid.  Invalid sizes are ignored (returns False)."""
        if not (_valid_dimension(width) and _valid_dimension(height)):
            logger.warning("Ignoring invalid target size %r x %r", width, height)
            return False
        self.canvas.target_width = int(width)
        self.canvas.target_height = int(height)
        # keep the editing surface at the new aspect ratio
        self.canvas.source_height = self.canvas.source_width / self.canvas.aspect_ratio
        return True

    def resize_surface(self, width):
        """Resize the editing surface, keeping the target aspect ratio.

        Committed shapes are re-scaled (replaced, never mutated) so they keep
        their place on the target grid.
        """
        if width <= 0:
            logger.warning("Ignoring invalid surface width %r", width)
            return False
        old_w, old_h = self.canvas.source_width, self.canvas.source_height
        self.canvas.source_width = float(width)
        self.canvas.source_height = float(width) / self.canvas.aspect_ratio
        fx = self.canvas.source_width / old_w
        fy = self.canvas.source_height / old_h
        self.shapes = [scale_shape(s, fx, fy) for s in self.shapes]
        self.pending = None
        return True

    # ------------------------------------------------------------------
    # Paint
    # ------------------------------------------------------------------

    def set_paint(self, stroke=None, fill=..., thickness=None):
        """Update the current paint.  ``fill=None`` selects "no fill"."""
        current = self.paint
        self.paint = Paint(
            stroke=current.stroke if stroke is None else stroke,
            fill=current.fill if fill is ... else fill,
            thickness=current.thickness if thickness is None else thickness,
        )
        return self.paint
