"""
The live-edit loop.

``LiveEditor`` ties one ``Sketch`` to its construction machine, its dual
renderer and its instruction script, and implements the two directions of
round-trip editing:

* pointer event -> construction machine -> re-render -> re-synthesize
* text edit -> (parse delay) -> parse -> replace shapes -> re-render

While the synthesizer writes the script, an edit-suppression flag is held so
the resulting text-change notification is not parsed back in.  The flag is
released ``SUPPRESSION_RELEASE_DELAY`` seconds later, by ``poll``.
"""

import logging

from gridsketch.codegen import synthesize_sketch
from gridsketch.config import PARSE_DELAY, SUPPRESSION_RELEASE_DELAY, TOOL_MAP
from gridsketch.document import Sketch
from gridsketch.gates import EditSuppression, ElapsedGate
from gridsketch.parser import parse_script
from gridsketch.raster import parse_color
from gridsketch.render import DualRenderer
from gridsketch.tools import ConstructionMachine

logger = logging.getLogger(__name__)


class LiveEditor:
    """Session object driven by an external UI layer."""

    def __init__(self, sketch=None, tool=TOOL_MAP["Rectangle"],
                 parse_delay=PARSE_DELAY, release_delay=SUPPRESSION_RELEASE_DELAY):
        self.sketch = sketch if sketch is not None else Sketch()
        self.machine = ConstructionMachine(self.sketch, tool)
        self.renderer = DualRenderer(self.sketch)
        self.suppression = EditSuppression(release_delay)
        self.parse_gate = ElapsedGate(parse_delay)
        self.pending_text = None
        self.script = ""
        self._now = 0.0
        self.refresh(self._now)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def surface(self):
        return self.renderer.surface

    @property
    def preview(self):
        return self.renderer.preview

    def _synthesize(self, now):
        self.suppression.hold()
        self.script = synthesize_sketch(self.sketch)
        self.suppression.defer_release(now)
        return self.script

    def refresh(self, now=None, code=True):
        """Re-render both surfaces and, unless ``code`` is False, the script."""
        if now is not None:
            self._now = now
        self.renderer.refresh()
        if code:
            self._synthesize(self._now)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def handle(self, event):
        """Feed one pointer event.  Returns the committed shape, if any."""
        self._now = event.timestamp
        shape = self.machine.step(event)
        # previews only touch the surfaces; the script tracks committed shapes
        self.refresh(event.timestamp, code=shape is not None)
        return shape

    # ------------------------------------------------------------------
    # Text input
    # ------------------------------------------------------------------

    def on_text_changed(self, text, now):
        """Text-box change notification.  Returns False when it was ignored."""
        self._now = now
        if self.suppression.is_held(now):
            logger.debug("Ignoring text change caused by synthesis")
            return False
        self.pending_text = text
        self.parse_gate.mark(now)
        return True

    def poll(self, now):
        """Advance the time gates.  Returns True if a pending edit was applied."""
        self._now = now
        self.suppression.is_held(now)
        if self.pending_text is None or not self.parse_gate.elapsed(now):
            return False
        text, self.pending_text = self.pending_text, None
        self.parse_gate.reset()
        return self.apply_script(text, now)

    def apply_script(self, text, now=None):
        """Parse an edited script and replace the drawing with it.

        Malformed blocks are dropped by the parser.  Any unexpected failure,
        while parsing or while rendering the result, leaves the sketch
        exactly as it was.
        """
        if now is not None:
            self._now = now
        state = self.sketch.snapshot()
        try:
            parsed = parse_script(text, self.sketch.canvas)
            c = parsed.canvas
            if (c.target_width, c.target_height) != (self.sketch.canvas.target_width,
                                                     self.sketch.canvas.target_height):
                self.sketch.set_target_size(c.target_width, c.target_height)
            self.sketch.replace(parsed.shapes, parsed.background)
            self.renderer.refresh()
        except Exception:
            logger.exception("Failed to apply edited script; keeping current drawing")
            self.sketch.restore(state)
            self.renderer.refresh()
            return False

        self.machine.cancel()
        # the text box already holds the user's edit; only the surfaces change
        self.script = text
        logger.info("Applied edited script: %d shape(s), %d block(s) dropped",
                    len(parsed.shapes), parsed.dropped)
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_tool(self, tool):
        self.machine.set_tool(tool)
        self.refresh(code=False)

    def set_paint(self, stroke=None, fill=..., thickness=None):
        return self.sketch.set_paint(stroke, fill, thickness)

    def set_background(self, color):
        """``None`` makes the background transparent."""
        if color is not None:
            parse_color(color)
        self.sketch.background = color
        self.refresh()

    def set_target_size(self, width, height):
        if not self.sketch.set_target_size(width, height):
            return False
        self.machine.cancel()
        self.refresh()
        return True

    def resize_surface(self, width):
        if not self.sketch.resize_surface(width):
            return False
        self.machine.cancel()
        self.refresh()
        return True

    def toggle_grid(self, visible=None):
        self.sketch.show_grid = (not self.sketch.show_grid) if visible is None else bool(visible)
        self.refresh(code=False)

    def undo(self):
        shape = self.sketch.undo()
        self.refresh()
        return shape

    def clear(self):
        self.machine.cancel()
        self.sketch.clear()
        self.refresh()
