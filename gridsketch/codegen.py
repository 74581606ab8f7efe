"""
Instruction-script synthesis.

The shape list is written out as a standalone JavaScript canvas routine in
target-grid units.  Each shape gets one block that starts with a
``// Shape <n>: <kind>`` marker line, so ``gridsketch.parser`` can split the
script back into blocks.  A background fill, when set, is a dedicated block
introduced by ``// Fill background`` ahead of every shape block.
"""

from gridsketch.mapping import emit_decimal, emit_extent, emit_position
from gridsketch.shapes import Arc, Circle, Polyline, Rectangle, Segment

SHAPE_MARKER = "// Shape"
BACKGROUND_MARKER = "// Fill background"

FULL_TURN = "Math.PI * 2"


def _header(canvas, background):
    return (
        "// Canvas drawing code\n"
        "const canvas = document.getElementById('myCanvas');\n"
        f"const ctx = canvas.getContext('2d', {{ alpha: {'true' if background is None else 'false'} }});\n"
        "\n"
        "// Set canvas size\n"
        f"canvas.width = {canvas.target_width};\n"
        f"canvas.height = {canvas.target_height};\n"
        "\n"
        "// Disable anti-aliasing for crisp rendering\n"
        "ctx.imageSmoothingEnabled = false;\n"
        "\n"
        "// Clear canvas (with transparency)\n"
        "ctx.clearRect(0, 0, canvas.width, canvas.height);\n"
        "\n"
    )


def _background_block(background):
    return (
        f"{BACKGROUND_MARKER}\n"
        f"ctx.fillStyle = '{background}';\n"
        "ctx.fillRect(0, 0, canvas.width, canvas.height);\n"
        "\n"
    )


def geometry_lines(shape, canvas):
    """Drawing calls for one shape, in target-grid units."""
    sx, sy = canvas.scale_x, canvas.scale_y

    def pos(x, y):
        return emit_position(x * sx), emit_position(y * sy)

    if isinstance(shape, Rectangle):
        x, y, w, h = shape.normalized()
        gx, gy = pos(x, y)
        return [f"ctx.rect({gx}, {gy}, {emit_extent(w * sx)}, {emit_extent(h * sy)});"]

    if isinstance(shape, Circle):
        gx, gy = pos(shape.center_x, shape.center_y)
        r = emit_extent(shape.diameter * sx / 2.0)
        return [f"ctx.arc({gx}, {gy}, {r}, 0, {FULL_TURN});"]

    if isinstance(shape, Segment):
        x1, y1 = pos(shape.start_x, shape.start_y)
        x2, y2 = pos(shape.end_x, shape.end_y)
        return [f"ctx.moveTo({x1}, {y1});", f"ctx.lineTo({x2}, {y2});"]

    if isinstance(shape, Polyline):
        (x0, y0), rest = pos(*shape.points[0]), shape.points[1:]
        lines = [f"ctx.moveTo({x0}, {y0});"]
        for px, py in rest:
            x, y = pos(px, py)
            lines.append(f"ctx.lineTo({x}, {y});")
        return lines

    if isinstance(shape, Arc):
        # arcs keep half-cell centers: one decimal instead of floor
        cx = emit_decimal(shape.center_x * sx)
        cy = emit_decimal(shape.center_y * sy)
        r = emit_decimal(shape.radius * sx)
        a0 = emit_decimal(shape.start_angle, 4)
        a1 = emit_decimal(shape.end_angle, 4)
        return [f"ctx.arc({cx}, {cy}, {r}, {a0}, {a1});"]

    raise ValueError(f"unknown shape {shape!r}")


def shape_block(index, shape, canvas):
    paint = shape.paint
    lines = [
        f"{SHAPE_MARKER} {index}: {shape.kind}",
        f"ctx.strokeStyle = '{paint.stroke}';",
    ]
    if paint.fill is not None:
        lines.append(f"ctx.fillStyle = '{paint.fill}';")
    lines.append(f"ctx.lineWidth = {paint.thickness};")
    lines.append("ctx.beginPath();")
    lines.extend(geometry_lines(shape, canvas))
    if paint.fill is not None:
        lines.append("ctx.fill();")
    lines.append("ctx.stroke();")
    return "\n".join(lines) + "\n\n"


def synthesize(canvas, shapes, background=None):
    """Return the instruction script for ``shapes`` on ``canvas``."""
    parts = [_header(canvas, background)]
    if background is not None:
        parts.append(_background_block(background))
    for i, shape in enumerate(shapes, start=1):
        parts.append(shape_block(i, shape, canvas))
    return "".join(parts)


def synthesize_sketch(sketch):
    """Script for the committed shapes of a ``Sketch`` (pending is never emitted)."""
    return synthesize(sketch.canvas, sketch.shapes, sketch.background)
