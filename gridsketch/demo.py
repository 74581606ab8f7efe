"""
Command-line demo.

Render an instruction script to a PNG preview, or replay a recorded gesture
file and save an animated GIF of the editing surface next to the preview.

Usage (CLI):
    python -m gridsketch.demo render drawing.js --save-path outputs/preview.png
    python -m gridsketch.demo replay gestures.json --save-path outputs/replay.gif

A gesture file is a JSON list of events::

    [{"tool": "Rectangle"},
     {"action": "down", "x": 10, "y": 10, "t": 0.0},
     {"action": "move", "x": 90, "y": 60, "t": 0.4},
     {"action": "down", "x": 150, "y": 150, "t": 0.9}]

Entries with a ``"tool"`` key switch tools; entries with ``"stroke"``,
``"fill"`` or ``"thickness"`` change the current paint.
"""

import argparse
import json
import logging
import os

from gridsketch.config import CANVAS_PRESETS, TOOL_MAP
from gridsketch.document import Sketch
from gridsketch.live import LiveEditor
from gridsketch.shapes import PointerEvent
from gridsketch.viz import side_by_side, to_pil

logger = logging.getLogger(__name__)


def _configure_logging(level):
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _read(path):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Cannot read input: {path}")
    with open(path) as fin:
        return fin.read()


def render_script(script_path, preset="icon", save_path="outputs/preview.png", scale=16):
    """Parse a script file, save the upscaled preview, return the re-synthesized text.

    Parameters
    ----------
    script_path : str
        Instruction script to load.
    preset : str
        Canvas preset providing the editing-surface width (the script's own
        ``canvas.width`` / ``canvas.height`` win for the grid size).
    save_path : str
        Where to write the PNG.
    scale : int
        Nearest-neighbour enlargement of the preview.
    """
    editor = LiveEditor(Sketch.from_preset(CANVAS_PRESETS[preset]))
    text = _read(script_path)
    if not editor.apply_script(text):
        raise ValueError(f"Could not parse {script_path}")
    editor.refresh()

    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    to_pil(editor.preview, scale).save(save_path)
    logger.info("Preview saved to %s", save_path)
    return editor.script


def replay_gestures(events_path, preset="icon", save_path="outputs/replay.gif",
                    frame_ms=200):
    """Replay a gesture file through the live editor and save a GIF.

    Returns the final instruction script.
    """
    editor = LiveEditor(Sketch.from_preset(CANVAS_PRESETS[preset]))
    entries = json.loads(_read(events_path))
    frames = []

    for entry in entries:
        if "tool" in entry:
            editor.set_tool(TOOL_MAP[entry["tool"]])
        if any(k in entry for k in ("stroke", "fill", "thickness")):
            editor.set_paint(entry.get("stroke"), entry.get("fill", ...), entry.get("thickness"))
        if "background" in entry:
            editor.set_background(entry["background"])
        if "action" in entry:
            event = PointerEvent(entry["action"], float(entry["x"]), float(entry["y"]),
                                 float(entry.get("t", 0.0)))
            editor.handle(event)
            frames.append(to_pil(side_by_side(editor.surface, editor.preview)))

    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    if frames:
        frames[0].save(save_path, save_all=True, append_images=frames[1:],
                       duration=frame_ms, loop=0)
    print(f"Replay saved to {save_path} ({len(frames)} frames)")
    return editor.script


def main(argv=None):
    p = argparse.ArgumentParser(description="gridsketch demo")
    p.add_argument("--log-level", default="WARNING",
                   help="Logging level (DEBUG, INFO, WARNING, ...)")
    p.add_argument("--preset", choices=sorted(CANVAS_PRESETS), default="icon")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render an instruction script to PNG")
    r.add_argument("script")
    r.add_argument("--save-path", default="outputs/preview.png")
    r.add_argument("--scale", type=int, default=16)

    g = sub.add_parser("replay", help="Replay a gesture file to GIF")
    g.add_argument("events")
    g.add_argument("--save-path", default="outputs/replay.gif")
    g.add_argument("--frame-ms", type=int, default=200)

    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    if args.command == "render":
        script = render_script(args.script, args.preset, args.save_path, args.scale)
    else:
        script = replay_gestures(args.events, args.preset, args.save_path, args.frame_ms)
    print(script)


if __name__ == "__main__":
    main()
