"""gridsketch - Sketch vector shapes onto a fixed pixel grid with round-trip drawing code."""

from gridsketch.config import TOOLS, TOOL_MAP, NUM_TOOLS, CANVAS_PRESETS
from gridsketch.document import Sketch
from gridsketch.live import LiveEditor
