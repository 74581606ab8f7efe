"""
Shape model for gridsketch.

Every committed shape is a frozen dataclass tagged with a ``kind`` string
("rectangle", "circle", "line", "polyline", "arc").  Coordinates are stored
in editing-surface pixels at full precision; the paint attributes ride along
in a ``Paint`` record resolved once at construction time.

Usage::

    from gridsketch.shapes import Rectangle, Paint
    rect = Rectangle(10, 10, 140, 140, Paint(fill="#ffffff"))
"""

from gridsketch.shapes._types import (  # noqa: F401
    Arc,
    Circle,
    Paint,
    Pending,
    Point,
    PointerEvent,
    Polyline,
    Rectangle,
    Segment,
    SHAPE_KINDS,
    SHAPE_TYPES,
    polyline_is_closed,
)
