from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass
class FloaterView:
    width: int = 0
    height: int = 0
    x: int = 0
    y: int = 0
    scale: float = 1.0
    visible: bool = True


@dataclass
class TrashView:
    alpha: float = 0.0
    dx: float = 0.0
    dy: float = 0.0
    action_scale: float = 1.0
    padding: Tuple[int, int] = (0, 0)


@dataclass
class RecordingRenderer:
    """
    Renderer that keeps the latest visual state plus a log of every call.
    Used by tests, the demo loop and the snapshot renderer.
    """
    floaters: Dict[int, FloaterView] = field(default_factory=dict)
    trash: TrashView = field(default_factory=TrashView)
    calls: List[tuple] = field(default_factory=list)

    def add_floater(self, floater_id: int, width: int, height: int) -> None:
        self.calls.append(("add_floater", floater_id, width, height))
        view = self.floaters.setdefault(floater_id, FloaterView())
        view.width, view.height = width, height

    def remove_floater(self, floater_id: int) -> None:
        self.calls.append(("remove_floater", floater_id))
        self.floaters.pop(floater_id, None)

    def set_position(self, floater_id: int, x: int, y: int) -> None:
        self.calls.append(("set_position", floater_id, x, y))
        view = self.floaters.setdefault(floater_id, FloaterView())
        view.x, view.y = x, y

    def set_scale(self, floater_id: int, scale: float) -> None:
        self.calls.append(("set_scale", floater_id, scale))
        self.floaters.setdefault(floater_id, FloaterView()).scale = scale

    def set_visibility(self, floater_id: int, visible: bool) -> None:
        self.calls.append(("set_visibility", floater_id, visible))
        self.floaters.setdefault(floater_id, FloaterView()).visible = visible

    def trash_set_alpha(self, alpha: float) -> None:
        self.calls.append(("trash_set_alpha", alpha))
        self.trash.alpha = alpha

    def trash_set_icon_translation(self, dx: float, dy: float) -> None:
        self.calls.append(("trash_set_icon_translation", dx, dy))
        self.trash.dx, self.trash.dy = dx, dy

    def trash_set_action_icon_scale(self, scale: float) -> None:
        self.calls.append(("trash_set_action_icon_scale", scale))
        self.trash.action_scale = scale

    def trash_set_action_icon_padding(self, horizontal: int, vertical: int) -> None:
        self.calls.append(("trash_set_action_icon_padding", horizontal, vertical))
        self.trash.padding = (horizontal, vertical)

    def positions(self, floater_id: int) -> List[Tuple[int, int]]:
        return [(c[2], c[3]) for c in self.calls if c[0] == "set_position" and c[1] == floater_id]

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)
