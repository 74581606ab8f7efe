"""
Construction state machines: pointer events in, shapes out.

Each tool family has its own small state machine.  ``ConstructionMachine``
dispatches events to the machine of the active tool, the same way the
per-tool branches of a CAD environment step function do, but with the state
kept in one object per family so switching tools simply drops it.

All machines write previews into ``sketch.pending`` and push finished shapes
with ``sketch.commit`` (which clears the pending slot first).
"""

import logging
import math

from gridsketch.config import (
    ACTION_DOUBLE,
    ACTION_DOWN,
    ACTION_LEAVE,
    ACTION_MOVE,
    ACTION_SECONDARY,
    DOUBLE_CLICK_WINDOW,
    NUM_TOOLS,
    TOOL_MAP,
    TOOLS,
    TWO_CLICK_TOOLS,
)
from gridsketch.gates import ElapsedGate
from gridsketch.mapping import pixels_per_cell, snap_four_way_surface, snap_grid_center
from gridsketch.shapes import Arc, Circle, Polyline, Rectangle, Segment, polyline_is_closed

logger = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"
COLLECTING = "collecting"
CENTER_SET = "center_set"
START_SET = "start_set"


# ---------------------------------------------------------------------------
# Two-click shapes: rectangle, circle, line
# ---------------------------------------------------------------------------

class TwoClickBuilder:
    """IDLE -(click)-> PENDING(origin) -(click)-> IDLE + committed shape."""

    def __init__(self, sketch, tool):
        self.sketch = sketch
        self.tool = tool
        self.state = IDLE
        self.origin = None

    def _shape_to(self, x, y):
        ox, oy = self.origin
        paint = self.sketch.paint
        if self.tool == TOOL_MAP["Rectangle"]:
            return Rectangle(ox, oy, x - ox, y - oy, paint)
        if self.tool == TOOL_MAP["Circle"]:
            return Circle(ox, oy, 2.0 * math.hypot(x - ox, y - oy), paint)
        return Segment(ox, oy, x, y, paint)

    def step(self, event):
        x, y = snap_grid_center(event.x, event.y, self.sketch.canvas)

        if self.state == IDLE:
            if event.action == ACTION_DOWN:
                self.origin = (x, y)
                self.state = PENDING
                self.sketch.set_pending(self._shape_to(x, y))
            return None

        if event.action == ACTION_MOVE:
            self.sketch.set_pending(self._shape_to(x, y))
        elif event.action == ACTION_DOWN:
            shape = self._shape_to(x, y)
            self.reset()
            self.sketch.commit(shape)
            return shape
        elif event.action in (ACTION_SECONDARY, ACTION_LEAVE):
            logger.debug("Cancelled %s gesture", shape_name(self.tool))
            self.cancel()
        return None

    def reset(self):
        self.state = IDLE
        self.origin = None

    def cancel(self):
        self.reset()
        self.sketch.clear_pending()


# ---------------------------------------------------------------------------
# Polyline
# ---------------------------------------------------------------------------

class PolylineBuilder:
    """IDLE -(click)-> COLLECTING -(double / secondary)-> IDLE.

    A click arriving within ``DOUBLE_CLICK_WINDOW`` of the previous click is
    the first half of the terminating double-click and is ignored.
    """

    def __init__(self, sketch, window=DOUBLE_CLICK_WINDOW):
        self.sketch = sketch
        self.state = IDLE
        self.points = []
        self.click_gate = ElapsedGate(window)

    def _preview(self, points):
        cell = pixels_per_cell(self.sketch.canvas)
        shape = None
        if len(points) >= 2:
            shape = Polyline(tuple(points), polyline_is_closed(points, cell), self.sketch.paint)
        self.sketch.set_pending(shape, reticle=points[:1])

    def step(self, event):
        x, y = snap_grid_center(event.x, event.y, self.sketch.canvas)

        if event.action == ACTION_DOWN:
            debounced = self.click_gate.within(event.timestamp)
            self.click_gate.mark(event.timestamp)
            if self.state == IDLE:
                self.state = COLLECTING
                self.points = [(x, y)]
                self._preview(self.points)
            elif not debounced:
                self.points.append((x, y))
                self._preview(self.points)
            return None

        if self.state != COLLECTING:
            return None

        if event.action == ACTION_MOVE:
            self._preview(self.points + [(x, y)])
        elif event.action in (ACTION_DOUBLE, ACTION_SECONDARY):
            return self._finish()
        return None

    def _finish(self):
        points = tuple(self.points)
        self.cancel()
        if len(points) < 2:
            logger.debug("Discarded polyline with %d point(s)", len(points))
            return None
        cell = pixels_per_cell(self.sketch.canvas)
        shape = Polyline(points, polyline_is_closed(points, cell), self.sketch.paint)
        self.sketch.commit(shape)
        return shape

    def reset(self):
        self.state = IDLE
        self.points = []
        self.click_gate.reset()

    def cancel(self):
        self.reset()
        self.sketch.clear_pending()


# ---------------------------------------------------------------------------
# Arc
# ---------------------------------------------------------------------------

class ArcBuilder:
    """IDLE -(c1)-> CENTER_SET -(c2)-> START_SET -(c3)-> IDLE + committed arc.

    Every click point is four-way snapped.  Click 2 fixes radius and start
    angle; click 3 fixes the end angle.
    """

    def __init__(self, sketch):
        self.sketch = sketch
        self.state = IDLE
        self.center = None
        self.radius = 0.0
        self.start_angle = 0.0
        self.start_point = None

    def _measure(self, x, y):
        cx, cy = self.center
        return math.hypot(x - cx, y - cy), math.atan2(y - cy, x - cx)

    def _arc(self, end_angle):
        cx, cy = self.center
        return Arc(cx, cy, self.radius, self.start_angle, end_angle, self.sketch.paint)

    def step(self, event):
        x, y = snap_four_way_surface(event.x, event.y, self.sketch.canvas)

        if event.action == ACTION_SECONDARY and self.state != IDLE:
            logger.debug("Cancelled arc gesture in state %s", self.state)
            self.cancel()
            return None

        if self.state == IDLE:
            if event.action == ACTION_DOWN:
                self.center = (x, y)
                self.state = CENTER_SET
                self.sketch.set_pending(None, reticle=[self.center])
            return None

        if self.state == CENTER_SET:
            if event.action in (ACTION_MOVE, ACTION_DOWN):
                self.radius, self.start_angle = self._measure(x, y)
                if event.action == ACTION_DOWN:
                    self.start_point = (x, y)
                    self.state = START_SET
                    self.sketch.set_pending(self._arc(self.start_angle),
                                            reticle=[self.center, self.start_point])
                else:
                    guide = self._arc(self.start_angle + 2 * math.pi)
                    self.sketch.set_pending(guide, reticle=[self.center, (x, y)])
            return None

        # START_SET
        if event.action in (ACTION_MOVE, ACTION_DOWN):
            _, end_angle = self._measure(x, y)
            if event.action == ACTION_DOWN:
                shape = self._arc(end_angle)
                self.reset()
                self.sketch.commit(shape)
                return shape
            self.sketch.set_pending(self._arc(end_angle),
                                    reticle=[self.center, self.start_point, (x, y)])
        return None

    def reset(self):
        self.state = IDLE
        self.center = None
        self.radius = 0.0
        self.start_angle = 0.0
        self.start_point = None

    def cancel(self):
        self.reset()
        self.sketch.clear_pending()


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

def shape_name(tool):
    return TOOLS[tool]


class ConstructionMachine:
    """Routes pointer events to the state machine of the selected tool."""

    def __init__(self, sketch, tool=TOOL_MAP["Rectangle"]):
        self.sketch = sketch
        self.builders = {t: TwoClickBuilder(sketch, t) for t in sorted(TWO_CLICK_TOOLS)}
        self.builders[TOOL_MAP["Polyline"]] = PolylineBuilder(sketch)
        self.builders[TOOL_MAP["Arc"]] = ArcBuilder(sketch)
        self.tool = TOOL_MAP["None"]
        self.set_tool(tool)

    @property
    def active(self):
        return self.builders.get(self.tool)

    def set_tool(self, tool):
        """Select a tool.  Any gesture in progress is abandoned uncommitted."""
        tool = int(tool)
        if not 0 <= tool < NUM_TOOLS:
            raise ValueError(f"unknown tool index {tool}")
        if self.active is not None and self.active.state != IDLE:
            logger.debug("Tool switch abandoned %s gesture", shape_name(self.tool))
        self.cancel()
        self.tool = tool

    def cancel(self):
        for builder in self.builders.values():
            builder.reset()
        self.sketch.clear_pending()

    def step(self, event):
        """Feed one pointer event; returns the committed shape or None."""
        builder = self.active
        if builder is None:
            return None
        return builder.step(event)
