from __future__ import annotations

from PIL import Image, ImageDraw

from floatengine.core.types import Shape
from floatengine.render.recorder import RecordingRenderer


def _trash_layer(size, manager) -> Image.Image:
    w, h = size
    trash = manager.trash
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    d = ImageDraw.Draw(layer)

    # background gradient: transparent at the top, darker toward the bottom edge
    bg_h = trash.background_height
    alpha = trash.alpha
    if alpha > 0.0 and bg_h > 0:
        for row in range(bg_h):
            a = int(0x50 * (row / float(bg_h)) * alpha)
            y = h - bg_h + row
            d.line((0, y, w, y), fill=(0, 0, 0, a))

    # icon content rect, anchor space -> image space
    x, y, iw, ih = trash.icon_box()
    top = h - (y + ih)
    scale = trash.action_scale if trash.has_action_icon() else 1.0
    cx, cy = x + iw / 2.0, top + ih / 2.0
    rw, rh = iw * scale / 2.0, ih * scale / 2.0
    if top < h:
        d.ellipse((cx - rw, cy - rh, cx + rw, cy + rh), outline=(255, 255, 255, 220), width=3)
    return layer


def render_snapshot(manager, renderer: RecordingRenderer, background=(24, 24, 28, 255)) -> Image.Image:
    """Draw the current engine state: floaters as boxes or discs, the trash icon as a ring."""
    g = manager.geometry
    size = (max(1, g.width), max(1, g.height))
    img = Image.new("RGBA", size, background)
    img.alpha_composite(_trash_layer(size, manager))

    d = ImageDraw.Draw(img)
    for floater_id, view in renderer.floaters.items():
        if not view.visible:
            continue
        f = manager.floater(floater_id)
        left, top = g.raw_top_left(view.x, view.y, view.height)
        # scale about the center
        cx, cy = left + view.width / 2.0, top + view.height / 2.0
        hw, hh = view.width * view.scale / 2.0, view.height * view.scale / 2.0
        box = (cx - hw, cy - hh, cx + hw, cy + hh)
        color = (80, 160, 255, 255) if floater_id != manager.active_id else (255, 170, 60, 255)
        if f is not None and f.options.shape == Shape.CIRCLE:
            d.ellipse(box, fill=color)
        else:
            d.rectangle(box, fill=color)
    return img


def save_snapshot(manager, renderer: RecordingRenderer, path) -> None:
    render_snapshot(manager, renderer).save(path)
