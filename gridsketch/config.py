"""
Global configuration: tool registry, paint defaults, timing thresholds and
canvas presets.

Tools are addressed by integer index exactly like the event stream produced
by the surrounding UI layer; ``TOOL_MAP`` maps the human-readable name to
that index.
"""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

TOOLS = [
    "None",         # 0  idle / no tool selected
    "Rectangle",    # 1  two clicks: corner + opposite corner
    "Circle",       # 2  two clicks: center + radius point
    "Line",         # 3  two clicks: start + end (single segment)
    "Polyline",     # 4  click vertices, double-click / secondary to finish
    "Arc",          # 5  three clicks: center, radius+start, end angle
]

TOOL_MAP = {name: i for i, name in enumerate(TOOLS)}
NUM_TOOLS = len(TOOLS)
TWO_CLICK_TOOLS = {TOOL_MAP["Rectangle"], TOOL_MAP["Circle"], TOOL_MAP["Line"]}

# ---------------------------------------------------------------------------
# Pointer actions
# ---------------------------------------------------------------------------

ACTION_DOWN = "down"             # primary click
ACTION_MOVE = "move"             # pointer motion
ACTION_SECONDARY = "secondary"   # right-click / cancel / terminate
ACTION_DOUBLE = "double"         # double-click terminate
ACTION_LEAVE = "leave"           # pointer left the editing surface

ACTIONS = (ACTION_DOWN, ACTION_MOVE, ACTION_SECONDARY, ACTION_DOUBLE, ACTION_LEAVE)

# ---------------------------------------------------------------------------
# Paint defaults
# ---------------------------------------------------------------------------

DEFAULT_STROKE = "#000000"
DEFAULT_LINE_THICKNESS = 1      # target-grid pixels

# ---------------------------------------------------------------------------
# Snapping and timing
# ---------------------------------------------------------------------------

SNAP_THRESHOLD = 0.1                # grid units, four-way snap direct hit
DOUBLE_CLICK_WINDOW = 0.3           # seconds between polyline clicks
PARSE_DELAY = 0.5                   # seconds of typing quiet before parsing
SUPPRESSION_RELEASE_DELAY = 0.1     # seconds before re-enabling text parsing

RETICLE_SIZE = 6                    # editing-surface pixels

# ---------------------------------------------------------------------------
# Canvas presets
# ---------------------------------------------------------------------------

@dataclass
class CanvasPreset:
    name: str
    target_width: int
    target_height: int
    surface_width: int


PRESET_ICON = CanvasPreset(
    name="icon",
    target_width=16,
    target_height=16,
    surface_width=320,
)

PRESET_SPRITE = CanvasPreset(
    name="sprite",
    target_width=32,
    target_height=32,
    surface_width=512,
)

PRESET_BANNER = CanvasPreset(
    name="banner",
    target_width=64,
    target_height=16,
    surface_width=768,
)

CANVAS_PRESETS = {"icon": PRESET_ICON, "sprite": PRESET_SPRITE, "banner": PRESET_BANNER}
