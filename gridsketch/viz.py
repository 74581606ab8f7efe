"""
Visualization helpers.

Composes the editing surface, the target-grid preview and the generated
script into a single figure for inspection, and turns RGBA surfaces into
PIL images for GIF / PNG export.

Usage (notebook)::

    from gridsketch.viz import save_session_figure
    save_session_figure(editor, "outputs/session.png")
"""

import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

from gridsketch.raster import upscale_nearest


# -----------------------------------------------------------------------
# Compositing helpers
# -----------------------------------------------------------------------

def checkerboard(height, width, cell=8):
    """Light/dark checkerboard used to show transparent pixels."""
    ys, xs = np.indices((height, width))
    board = ((ys // cell + xs // cell) % 2).astype(np.float32)
    return (0.85 + 0.1 * board)[..., np.newaxis].repeat(3, axis=2)


def composite_rgba(img, cell=8):
    """Alpha-blend an RGBA uint8 surface over a checkerboard -> float RGB [0, 1]."""
    rgb = img[..., :3].astype(np.float32) / 255.0
    alpha = img[..., 3:4].astype(np.float32) / 255.0
    board = checkerboard(img.shape[0], img.shape[1], cell)
    return rgb * alpha + board * (1.0 - alpha)


def to_pil(img, scale=1):
    """RGBA surface -> PIL image, optionally enlarged with hard pixel edges."""
    if scale > 1:
        img = upscale_nearest(img, scale)
    return Image.fromarray(np.ascontiguousarray(img))


def side_by_side(surface, preview, gap=4):
    """Editing surface next to the preview blown up to the same height."""
    H = surface.shape[0]
    factor = max(1, H // max(1, preview.shape[0]))
    big = upscale_nearest(preview, factor)
    if big.shape[0] < H:
        pad = np.zeros((H - big.shape[0], big.shape[1], 4), dtype=np.uint8)
        big = np.concatenate([big, pad], axis=0)
    sep = np.full((H, gap, 4), 255, dtype=np.uint8)
    return np.concatenate([surface, sep, big[:H]], axis=1)


# -----------------------------------------------------------------------
# Figures
# -----------------------------------------------------------------------

def save_session_figure(editor, save_path="outputs/session.png"):
    """Render editing surface | preview | script into one PNG."""
    editor.refresh(code=False)
    surface = composite_rgba(editor.surface)
    preview = composite_rgba(editor.preview, cell=1)

    fig, axes = plt.subplots(1, 3, figsize=(15, 5),
                             gridspec_kw={"width_ratios": [1, 1, 1.2]})
    axes[0].imshow(surface)
    axes[0].set_title("Editing surface")
    axes[1].imshow(preview, interpolation="nearest")
    c = editor.sketch.canvas
    axes[1].set_title(f"Preview {c.target_width}x{c.target_height}")
    axes[2].text(0.0, 1.0, editor.script, family="monospace", fontsize=6,
                 va="top", ha="left", transform=axes[2].transAxes)
    axes[2].set_title("Script")
    for ax in axes:
        ax.axis("off")

    plt.tight_layout()
    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    fig.savefig(save_path, dpi=120)
    plt.close(fig)
    return save_path
