"""
Low-level rasterization utilities backed by OpenCV.

All drawing functions operate on ``uint8`` RGBA numpy arrays of shape
``(H, W, 4)``.  Rendering is deliberately aliased (``LINE_8``): the target
grid is a pixel-art raster and every pixel must be either painted or not.
Coordinates passed in here are already integer pixel positions; the rounding
policy lives in ``gridsketch.mapping`` and ``gridsketch.render``.
"""

import math

import cv2
import numpy as np

LINE_TYPE = cv2.LINE_8
MAX_COORD = 1 << 20          # keeps edited-script outliers inside cv2 int limits
MAX_THICKNESS = 255
FULL_TURN = 2 * math.pi


# ---------------------------------------------------------------------------
# Surfaces and colors
# ---------------------------------------------------------------------------

def new_surface(width, height):
    """Return a fully transparent RGBA surface."""
    return np.zeros((int(height), int(width), 4), dtype=np.uint8)


def parse_color(color):
    """Convert ``#rrggbb`` / ``#rgb`` (optionally with alpha) to an RGBA tuple."""
    if not isinstance(color, str) or not color.startswith("#"):
        raise ValueError(f"unsupported color {color!r}")
    digits = color[1:]
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) == 6:
        digits += "ff"
    if len(digits) != 8:
        raise ValueError(f"unsupported color {color!r}")
    try:
        r, g, b, a = (int(digits[i:i + 2], 16) for i in range(0, 8, 2))
    except ValueError:
        raise ValueError(f"unsupported color {color!r}") from None
    return (r, g, b, a)


def clear_surface(img, color=None):
    """Reset every pixel to transparent, or to ``color`` when given."""
    if color is None:
        img.fill(0)
    else:
        img[...] = parse_color(color)
    return img


# ---------------------------------------------------------------------------
# Core primitives
# ---------------------------------------------------------------------------

def rasterize_line(img, p1, p2, color, thickness=1):
    """Draw an aliased line segment."""
    cv2.line(img, _pt(p1), _pt(p2), parse_color(color), _thickness(thickness),
             lineType=LINE_TYPE)
    return img


def rasterize_rectangle(img, corner1, corner2, color, thickness=1):
    """Draw an axis-aligned rectangle outline (two opposite corners, inclusive)."""
    cv2.rectangle(img, _pt(corner1), _pt(corner2), parse_color(color), _thickness(thickness),
                  lineType=LINE_TYPE)
    return img


def rasterize_filled_rectangle(img, corner1, corner2, color):
    """Draw a filled rectangle (thickness=-1)."""
    cv2.rectangle(img, _pt(corner1), _pt(corner2), parse_color(color), -1, lineType=LINE_TYPE)
    return img


def rasterize_circle(img, center, radius, color, thickness=1):
    """Draw a circle outline."""
    cv2.circle(img, _pt(center), _radius(radius), parse_color(color), _thickness(thickness),
               lineType=LINE_TYPE)
    return img


def rasterize_filled_circle(img, center, radius, color):
    """Draw a filled circle (thickness=-1)."""
    cv2.circle(img, _pt(center), _radius(radius), parse_color(color), -1, lineType=LINE_TYPE)
    return img


def rasterize_polyline(img, points, color, thickness=1, closed=False):
    """Draw connected line segments through a list of points."""
    if len(points) < 2:
        return img
    pts = np.array([_pt(p) for p in points], dtype=np.int32)
    cv2.polylines(img, [pts], bool(closed), parse_color(color), _thickness(thickness),
                  lineType=LINE_TYPE)
    return img


def rasterize_filled_polygon(img, vertices, color):
    """Fill the polygon spanned by ``vertices`` (implicitly closed)."""
    if len(vertices) < 3:
        return img
    pts = np.array([_pt(v) for v in vertices], dtype=np.int32)
    cv2.fillPoly(img, [pts], parse_color(color), lineType=LINE_TYPE)
    return img


def arc_vertices(center, radius, start_angle, end_angle):
    """Vertices of a circular arc swept clockwise (image coordinates).

    Angles are radians as produced by ``atan2(dy, dx)``.  The sweep always
    runs from ``start_angle`` forward to ``end_angle``, wrapping once, which
    matches the canvas ``arc()`` default direction.  A zero sweep has no
    vertices.
    """
    if not (math.isfinite(start_angle) and math.isfinite(end_angle)):
        return []
    sweep = end_angle - start_angle
    if sweep < 0:
        sweep %= FULL_TURN
    sweep = min(sweep, FULL_TURN)
    if sweep == 0:
        return []
    start_deg = math.degrees(math.fmod(start_angle, FULL_TURN))
    end_deg = start_deg + math.degrees(sweep)
    pts = cv2.ellipse2Poly(_pt(center), (_radius(radius), _radius(radius)), 0,
                           int(round(start_deg)), int(round(end_deg)), 2)
    return [tuple(p) for p in pts]


def rasterize_arc(img, center, radius, start_angle, end_angle, color, thickness=1):
    """Draw a circular arc outline."""
    return rasterize_polyline(img, arc_vertices(center, radius, start_angle, end_angle),
                              color, thickness)


def rasterize_filled_arc(img, center, radius, start_angle, end_angle, color):
    """Fill the chord region of an arc, like filling a canvas ``arc()`` path."""
    return rasterize_filled_polygon(img, arc_vertices(center, radius, start_angle, end_angle),
                                    color)


# ---------------------------------------------------------------------------
# Overlays
# ---------------------------------------------------------------------------

def draw_reticle(img, cx, cy, size=6, color="#ff00ff", thickness=1):
    """Draw a '+' crosshair construction marker."""
    cx, cy = int(cx), int(cy)
    rgba = parse_color(color)
    cv2.line(img, (cx, cy - size), (cx, cy + size), rgba, thickness, LINE_TYPE)
    cv2.line(img, (cx - size, cy), (cx + size, cy), rgba, thickness, LINE_TYPE)
    return img


def draw_grid(img, cols, rows, color="#c0c0c0"):
    """Overlay the cell boundaries of a ``cols`` x ``rows`` grid."""
    H, W = img.shape[:2]
    rgba = parse_color(color)
    for c in range(1, cols):
        x = int(math.floor(c * W / cols))
        cv2.line(img, (x, 0), (x, H - 1), rgba, 1, LINE_TYPE)
    for r in range(1, rows):
        y = int(math.floor(r * H / rows))
        cv2.line(img, (0, y), (W - 1, y), rgba, 1, LINE_TYPE)
    return img


def resize_nearest(img, width, height):
    """Stretch a raster to ``width`` x ``height`` with hard pixel edges.

    Output pixel ``(x, y)`` takes source pixel ``(floor(x * w / width),
    floor(y * h / height))``, so each source pixel becomes a solid block.
    """
    H, W = img.shape[:2]
    width, height = int(width), int(height)
    if (width, height) == (W, H):
        return img.copy()
    xs = (np.arange(width) * W) // width
    ys = (np.arange(height) * H) // height
    return img[ys[:, np.newaxis], xs[np.newaxis, :]]


def upscale_nearest(img, factor):
    """Blow up a small raster with hard pixel edges (for display / export)."""
    factor = max(1, int(factor))
    H, W = img.shape[:2]
    return cv2.resize(img, (W * factor, H * factor), interpolation=cv2.INTER_NEAREST)


# ---------------------------------------------------------------------------
# Geometry helpers (internal)
# ---------------------------------------------------------------------------

def _clamp(v, limit=MAX_COORD):
    return max(-limit, min(limit, int(v)))


def _pt(p):
    return (_clamp(p[0]), _clamp(p[1]))


def _radius(r):
    return _clamp(r, MAX_COORD) if r > 0 else 0


def _thickness(t):
    return _clamp(t, MAX_THICKNESS)
