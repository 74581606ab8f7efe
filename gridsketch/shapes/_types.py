"""Shared dataclasses for the shapes package (avoids circular imports)."""

import math
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple

from gridsketch.config import ACTIONS, DEFAULT_LINE_THICKNESS, DEFAULT_STROKE

Point = Tuple[float, float]


@dataclass(frozen=True)
class Paint:
    """Stroke / fill / thickness carried by every shape."""
    stroke: str = DEFAULT_STROKE
    fill: Optional[str] = None              # None = do not fill
    thickness: int = DEFAULT_LINE_THICKNESS  # target-grid pixels

    def __post_init__(self):
        if not self.stroke:
            raise ValueError("stroke color is required")
        if int(self.thickness) != self.thickness or self.thickness < 1:
            raise ValueError(f"line thickness must be a positive integer, got {self.thickness!r}")


# ---------------------------------------------------------------------------
# Shape variants (all coordinates in editing-surface pixels)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rectangle:
    kind: ClassVar[str] = "rectangle"
    origin_x: float
    origin_y: float
    width: float                 # may be negative (drag direction)
    height: float
    paint: Paint = field(default_factory=Paint)

    def normalized(self):
        """Return ``(x, y, w, h)`` with the origin at the top-left corner."""
        x = min(self.origin_x, self.origin_x + self.width)
        y = min(self.origin_y, self.origin_y + self.height)
        return x, y, abs(self.width), abs(self.height)


@dataclass(frozen=True)
class Circle:
    kind: ClassVar[str] = "circle"
    center_x: float
    center_y: float
    diameter: float
    paint: Paint = field(default_factory=Paint)

    def __post_init__(self):
        if self.diameter < 0:
            raise ValueError(f"diameter must be >= 0, got {self.diameter!r}")


@dataclass(frozen=True)
class Segment:
    kind: ClassVar[str] = "line"
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    paint: Paint = field(default_factory=Paint)


@dataclass(frozen=True)
class Polyline:
    kind: ClassVar[str] = "polyline"
    points: Tuple[Point, ...]
    is_closed: bool = False      # advisory only, never changes fill/stroke
    paint: Paint = field(default_factory=Paint)


@dataclass(frozen=True)
class Arc:
    kind: ClassVar[str] = "arc"
    center_x: float
    center_y: float
    radius: float
    start_angle: float           # radians, atan2(dy, dx) from center
    end_angle: float
    paint: Paint = field(default_factory=Paint)


SHAPE_TYPES = (Rectangle, Circle, Segment, Polyline, Arc)
SHAPE_KINDS = {cls.kind: cls for cls in SHAPE_TYPES}


def polyline_is_closed(points, cell_size):
    """True when the last vertex lies within one grid cell of the first."""
    if len(points) < 2:
        return False
    (x0, y0), (x1, y1) = points[0], points[-1]
    return math.hypot(x1 - x0, y1 - y0) <= cell_size


# ---------------------------------------------------------------------------
# Construction-time helpers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Pending:
    """The single in-progress preview: an optional shape plus reticle marks."""
    shape: Optional[object] = None
    reticle: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class PointerEvent:
    """One pointer event, already translated into editing-surface pixels."""
    action: str        # one of config.ACTIONS
    x: float
    y: float
    timestamp: float = 0.0   # seconds

    def __post_init__(self):
        if self.action not in ACTIONS:
            raise ValueError(f"unknown pointer action {self.action!r}")
