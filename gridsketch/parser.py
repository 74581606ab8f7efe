"""
Instruction-script parser.

Grammar (one statement per line, ``//`` comments are tokens)::

    script    := header block*
    block     := marker statement*
    marker    := "// Shape" NUMBER ":" KIND | "// Fill background"
    statement := ["const"|"let"|"var"] dotted ( "=" expr | "(" [expr ("," expr)*] ")" ) [";"]
    expr      := term (("+"|"-") term)*
    term      := unary (("*"|"/") unary)*
    unary     := "-" unary | NUMBER | STRING | "true" | "false" | dotted | "(" expr ")"

Error recovery: a line that does not tokenize or parse is dropped on its
own; a shape block whose geometry call does not match the numeric pattern
for its kind is dropped as a whole.  Neither aborts the parse.

Coordinates in the script are target-grid units.  They are mapped back to
editing-surface space with the inverse of the synthesizer's rounding: grid
positions (floored snapped centers) go back to the cell center, extents scale
directly, and arc geometry (already fractional) scales directly without any
snapping.
"""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from gridsketch.codegen import BACKGROUND_MARKER, SHAPE_MARKER
from gridsketch.config import DEFAULT_LINE_THICKNESS, DEFAULT_STROKE
from gridsketch.lexer import Token, tokenize_line
from gridsketch.mapping import CanvasParams, pixels_per_cell, round_half_up
from gridsketch.raster import parse_color
from gridsketch.shapes import (
    Arc, Circle, Paint, Polyline, Rectangle, Segment, polyline_is_closed,
)

logger = logging.getLogger(__name__)

DECLARATIONS = {'const', 'let', 'var'}
CONSTANTS = {'Math.PI': math.pi, 'true': True, 'false': False}

BACKGROUND = 'background'


@dataclass
class Statement:
    target: str                      # dotted name, e.g. "ctx.rect"
    op: str                          # "assign" | "call"
    args: List[Any]                  # expression trees
    line: int


@dataclass
class Block:
    kind: str                        # shape kind or BACKGROUND
    line: int
    statements: List[Statement] = field(default_factory=list)


@dataclass
class ParsedScript:
    canvas: CanvasParams
    background: Optional[str]
    shapes: List[Any]
    dropped: int = 0


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

class Cursor:
    def __init__(self, tokens: List[Token]):
        self.toks = tokens
        self.i = 0

    def peek(self):
        return self.toks[self.i] if self.i < len(self.toks) else None

    def match(self, *types: str):
        if self.i < len(self.toks) and self.toks[self.i][0] in types:
            t = self.toks[self.i]
            self.i += 1
            return t
        return None

    def expect(self, *types: str):
        t = self.peek()
        if t and t[0] in types:
            self.i += 1
            return t
        want = '|'.join(types)
        if t:
            raise SyntaxError(f'[line {t[2]}, col {t[3]}] expected {want}, got {t[0]}')
        raise SyntaxError(f'Unexpected end of line: expected {want}')

    def at_end(self):
        t = self.peek()
        return t is None or t[0] == 'COMMENT'


def parse_dotted(cur: Cursor) -> str:
    parts = [cur.expect('ID')[1]]
    while cur.match('DOT'):
        parts.append(cur.expect('ID')[1])
    return '.'.join(parts)


def parse_unary(cur: Cursor):
    if cur.match('MINUS'):
        return ('neg', parse_unary(cur))
    if cur.match('LPAREN'):
        node = parse_expr(cur)
        cur.expect('RPAREN')
        return node
    t = cur.peek()
    if t and t[0] == 'NUMBER':
        cur.i += 1
        return ('num', float(t[1]))
    if t and t[0] == 'STRING':
        cur.i += 1
        return ('str', t[1])
    return ('name', parse_dotted(cur))


def parse_term(cur: Cursor):
    node = parse_unary(cur)
    while True:
        op = cur.match('STAR', 'SLASH')
        if not op:
            return node
        node = ('bin', op[1], node, parse_unary(cur))


def parse_expr(cur: Cursor):
    node = parse_term(cur)
    while True:
        op = cur.match('PLUS', 'MINUS')
        if not op:
            return node
        node = ('bin', op[1], node, parse_term(cur))


def parse_statement(tokens: List[Token], line_no: int) -> Optional[Statement]:
    """Parse one tokenized line; ``None`` for blank / comment-only lines."""
    cur = Cursor(tokens)
    if cur.at_end():
        return None
    t = cur.peek()
    if t[0] == 'ID' and t[1] in DECLARATIONS:
        cur.i += 1
    target = parse_dotted(cur)
    if cur.match('EQUAL'):
        stmt = Statement(target, 'assign', [parse_expr(cur)], line_no)
    else:
        cur.expect('LPAREN')
        args = []
        if not cur.match('RPAREN'):
            args.append(parse_expr(cur))
            while cur.match('COMMA'):
                args.append(parse_expr(cur))
            cur.expect('RPAREN')
        stmt = Statement(target, 'call', args, line_no)
    cur.match('SEMI')
    if not cur.at_end():
        t = cur.peek()
        raise SyntaxError(f'[line {t[2]}, col {t[3]}] unexpected trailing {t[0]}')
    return stmt


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluate(node, names: Dict[str, Any]):
    tag = node[0]
    if tag in ('num', 'str'):
        return node[1]
    if tag == 'name':
        if node[1] in names:
            return names[node[1]]
        if node[1] in CONSTANTS:
            return CONSTANTS[node[1]]
        raise SyntaxError(f'unknown name {node[1]!r}')
    if tag == 'neg':
        return -_number(evaluate(node[1], names))
    if tag == 'bin':
        a = _number(evaluate(node[2], names))
        b = _number(evaluate(node[3], names))
        if node[1] == '+':
            return a + b
        if node[1] == '-':
            return a - b
        if node[1] == '*':
            return a * b
        if b == 0:
            raise SyntaxError('division by zero')
        return a / b
    raise SyntaxError(f'bad expression node {tag!r}')


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SyntaxError(f'expected a number, got {value!r}')
    return float(value)


def numeric_args(stmt: Statement, names) -> Optional[List[float]]:
    """Arguments of ``stmt`` as finite floats, or None if any is not."""
    try:
        values = [_number(evaluate(a, names)) for a in stmt.args]
    except SyntaxError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def string_value(stmt: Statement, names) -> Optional[str]:
    try:
        value = evaluate(stmt.args[0], names)
    except SyntaxError:
        return None
    return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Block splitting
# ---------------------------------------------------------------------------

def marker_kind(comment: str) -> Optional[str]:
    """``"Shape 3: circle"`` -> ``"circle"``; ``"Fill background"`` -> BACKGROUND."""
    text = comment.strip()
    if text == BACKGROUND_MARKER[2:].strip():
        return BACKGROUND
    try:
        toks = tokenize_line(text, 0)
    except SyntaxError:
        return None
    shape_word = SHAPE_MARKER[2:].strip()
    if (len(toks) == 4 and toks[0][:2] == ('ID', shape_word) and toks[1][0] == 'NUMBER'
            and toks[2][0] == 'COLON' and toks[3][0] == 'ID'):
        # unknown kinds still open a block so their lines are not misattributed
        return toks[3][1].lower()
    return None


def split_blocks(text: str) -> Tuple[List[Statement], List[Block]]:
    header: List[Statement] = []
    blocks: List[Block] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        try:
            tokens = tokenize_line(line, line_no)
        except SyntaxError as exc:
            logger.debug('Skipping line %d: %s', line_no, exc)
            continue
        if tokens and tokens[0][0] == 'COMMENT':
            kind = marker_kind(tokens[0][1])
            if kind is not None:
                blocks.append(Block(kind, line_no))
            continue
        try:
            stmt = parse_statement(tokens, line_no)
        except SyntaxError as exc:
            logger.debug('Skipping statement on line %d: %s', line_no, exc)
            continue
        if stmt is None:
            continue
        (blocks[-1].statements if blocks else header).append(stmt)
    return header, blocks


# ---------------------------------------------------------------------------
# Interpretation
# ---------------------------------------------------------------------------

def _declared_size(statements, canvas):
    """Apply every ``canvas.width/height = N`` in order; invalid values are ignored."""
    size = {'canvas.width': canvas.target_width, 'canvas.height': canvas.target_height}
    for stmt in statements:
        if stmt.op != 'assign' or stmt.target not in size:
            continue
        try:
            value = evaluate(stmt.args[0], {})
        except SyntaxError:
            value = None
        if isinstance(value, float) and math.isfinite(value) and value == int(value) and value > 0:
            size[stmt.target] = int(value)
        else:
            logger.warning('Ignoring invalid %s on line %d', stmt.target, stmt.line)
    return size['canvas.width'], size['canvas.height']


def _color(value):
    if value is None:
        return None
    try:
        parse_color(value)
    except ValueError:
        logger.debug('Ignoring unsupported color %r', value)
        return None
    return value


def _block_paint(block: Block, names) -> Paint:
    stroke = fill = None
    thickness = None
    fills = False
    for stmt in block.statements:
        if stmt.op == 'assign':
            if stmt.target == 'ctx.strokeStyle' and stroke is None:
                stroke = _color(string_value(stmt, names))
            elif stmt.target == 'ctx.fillStyle' and fill is None:
                fill = _color(string_value(stmt, names))
            elif stmt.target == 'ctx.lineWidth' and thickness is None:
                value = numeric_args(stmt, names)
                if value:
                    thickness = int(round_half_up(value[0]))
        elif stmt.target == 'ctx.fill':
            fills = True
    if thickness is None or thickness < 1:
        thickness = DEFAULT_LINE_THICKNESS
    return Paint(stroke=stroke or DEFAULT_STROKE,
                 fill=fill if fills else None,
                 thickness=thickness)


def _calls(block: Block, name: str, names, min_args: int, max_args: Optional[int] = None):
    for stmt in block.statements:
        if stmt.op != 'call' or stmt.target != name:
            continue
        args = numeric_args(stmt, names)
        if args is None or len(args) < min_args:
            continue
        if max_args is not None and len(args) > max_args:
            continue
        yield args


def _first(gen):
    return next(gen, None)


def finite_geometry(shape) -> bool:
    """False when scaling to the editing surface overflowed any coordinate."""
    values = []
    for f in fields(shape):
        value = getattr(shape, f.name)
        if f.name == 'points':
            values.extend(c for point in value for c in point)
        elif isinstance(value, float):
            values.append(value)
    return all(math.isfinite(v) for v in values)


def block_shape(block: Block, canvas: CanvasParams, names):
    """Build the shape for one block, or None when its geometry does not match."""
    paint = _block_paint(block, names)
    ppx = pixels_per_cell(canvas)
    ppy = canvas.source_height / canvas.target_height

    def position(gx, gy):
        return (gx + 0.5) * ppx, (gy + 0.5) * ppy

    if block.kind == 'rectangle':
        args = _first(_calls(block, 'ctx.rect', names, 4, 4))
        if args is None:
            return None
        x, y = position(args[0], args[1])
        return Rectangle(x, y, args[2] * ppx, args[3] * ppy, paint)

    if block.kind == 'circle':
        args = _first(_calls(block, 'ctx.arc', names, 3))
        if args is None or args[2] < 0:
            return None
        x, y = position(args[0], args[1])
        return Circle(x, y, 2.0 * args[2] * ppx, paint)

    if block.kind == 'arc':
        args = _first(_calls(block, 'ctx.arc', names, 5, 5))
        if args is None or args[2] < 0:
            return None
        # arcs keep their fractional center: no cell-center snap
        return Arc(args[0] * ppx, args[1] * ppy, args[2] * ppx, args[3], args[4], paint)

    if block.kind in ('line', 'polyline'):
        start = _first(_calls(block, 'ctx.moveTo', names, 2, 2))
        if start is None:
            return None
        points = [position(*start)]
        for args in _calls(block, 'ctx.lineTo', names, 2, 2):
            points.append(position(*args))
            if block.kind == 'line':
                break
        if len(points) < 2:
            return None
        if block.kind == 'line':
            (x1, y1), (x2, y2) = points
            return Segment(x1, y1, x2, y2, paint)
        return Polyline(tuple(points), polyline_is_closed(points, ppx), paint)

    return None


def parse_script(text: str, canvas: CanvasParams) -> ParsedScript:
    """Rebuild canvas size, background and shapes from an instruction script.

    ``canvas`` supplies the editing-surface width and the dimensions to keep
    when the script does not (validly) declare its own.  The returned canvas
    has the script's target size with the surface height re-derived from the
    new aspect ratio.
    """
    header, blocks = split_blocks(text)
    every = header + [s for b in blocks for s in b.statements]
    width, height = _declared_size(every, canvas)
    parsed_canvas = CanvasParams(
        source_width=canvas.source_width,
        source_height=canvas.source_width * height / width,
        target_width=width,
        target_height=height,
    )
    names = {'canvas.width': float(width), 'canvas.height': float(height)}

    background = None
    shapes = []
    dropped = 0
    for block in blocks:
        if block.kind == BACKGROUND:
            for stmt in block.statements:
                if stmt.op == 'assign' and stmt.target == 'ctx.fillStyle':
                    background = _color(string_value(stmt, names))
                    break
            continue
        try:
            shape = block_shape(block, parsed_canvas, names)
        except ValueError as exc:
            logger.debug('Block at line %d rejected: %s', block.line, exc)
            shape = None
        if shape is not None and not finite_geometry(shape):
            logger.debug('Block at line %d overflows the editing surface', block.line)
            shape = None
        if shape is None:
            logger.debug('Dropped malformed %s block at line %d', block.kind, block.line)
            dropped += 1
            continue
        shapes.append(shape)

    logger.debug('Parsed %d shape(s), dropped %d block(s)', len(shapes), dropped)
    return ParsedScript(parsed_canvas, background, shapes, dropped)
