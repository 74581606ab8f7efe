"""
Coordinate mapping between the editing surface and the target grid.

Three coordinate spaces are involved:

* **surface** - editing-surface pixels (floating point, full precision)
* **grid**    - normalised target-grid units, ``grid = surface * tw / sw``
* **emitted** - integers (or one-decimal values for arcs) written to the
  generated script and used for rasterisation

All snapping policy lives here.  Positions are emitted with ``floor`` so they
stay on the sub-pixel anchor chosen by the snap; extents (width, height,
diameter, radius) are emitted rounded half-up so they count whole cells.
"""

import math
from dataclasses import dataclass

from gridsketch.config import SNAP_THRESHOLD


@dataclass
class CanvasParams:
    source_width: float      # editing surface, mutable on resize
    source_height: float
    target_width: int        # output grid, always > 0
    target_height: int

    @property
    def aspect_ratio(self):
        return self.target_width / self.target_height

    @property
    def scale_x(self):
        """Surface -> grid factor along x."""
        return self.target_width / self.source_width

    @property
    def scale_y(self):
        return self.target_height / self.source_height


# ---------------------------------------------------------------------------
# Forward / inverse transforms
# ---------------------------------------------------------------------------

def surface_to_grid(x, y, canvas):
    return x * canvas.target_width / canvas.source_width, y * canvas.target_height / canvas.source_height


def grid_to_surface(gx, gy, canvas):
    return gx * canvas.source_width / canvas.target_width, gy * canvas.source_height / canvas.target_height


def pixels_per_cell(canvas):
    """Editing-surface pixels spanned by one target-grid cell (horizontal)."""
    return canvas.source_width / canvas.target_width


# ---------------------------------------------------------------------------
# Snapping
# ---------------------------------------------------------------------------

def cell_center(g):
    return math.floor(g) + 0.5


def snap_grid_center(x, y, canvas):
    """Snap a surface point to the center of its containing grid cell."""
    gx, gy = surface_to_grid(x, y, canvas)
    return grid_to_surface(cell_center(gx), cell_center(gy), canvas)


def round_half_up(v):
    return math.floor(v + 0.5)


def four_way_candidates(gx, gy):
    """Snap targets of the enclosing cell, in precedence order.

    center > horizontal edge midpoint > vertical edge midpoint > corner
    """
    cx, cy = cell_center(gx), cell_center(gy)
    nx, ny = float(round_half_up(gx)), float(round_half_up(gy))
    return [
        (cx, cy),
        (cx, ny),
        (nx, cy),
        (nx, ny),
    ]


def snap_four_way(gx, gy, threshold=SNAP_THRESHOLD):
    """Arc-only snapping in grid space.

    A candidate within ``threshold`` of the raw point wins outright (first in
    precedence order); otherwise the nearest candidate wins, ties going to the
    earlier one in precedence order.
    """
    candidates = four_way_candidates(gx, gy)
    dists = [math.hypot(px - gx, py - gy) for px, py in candidates]

    for cand, d in zip(candidates, dists):
        if d <= threshold:
            return cand

    best = 0
    for i in range(1, len(candidates)):
        if dists[i] < dists[best]:
            best = i
    return candidates[best]


def snap_four_way_surface(x, y, canvas, threshold=SNAP_THRESHOLD):
    gx, gy = surface_to_grid(x, y, canvas)
    sx, sy = snap_four_way(gx, gy, threshold)
    return grid_to_surface(sx, sy, canvas)


# ---------------------------------------------------------------------------
# Emission rounding
# ---------------------------------------------------------------------------

def emit_position(v):
    """Positions: floor, keeping the snapped sub-pixel anchor."""
    return int(math.floor(v))


def emit_extent(v):
    """Extents: whole-cell counts, rounded half-up like ``Math.round``."""
    return int(round_half_up(v))


def emit_decimal(v, digits=1):
    """Fixed-precision text for fractional values (arc geometry, angles)."""
    r = round(v, digits) + 0.0   # drop negative zero
    return f"{r:.{digits}f}"
