"""Capability interfaces the host implements around the engine."""

from __future__ import annotations

from typing import Protocol


class Renderer(Protocol):
    """Owns all visual state. Positions are in anchor space (bottom-left origin)."""

    def add_floater(self, floater_id: int, width: int, height: int) -> None:
        """A floater was created or re-measured."""

    def remove_floater(self, floater_id: int) -> None:
        """A floater is gone for good."""

    def set_position(self, floater_id: int, x: int, y: int) -> None:
        """Move a floater's anchor."""

    def set_scale(self, floater_id: int, scale: float) -> None:
        """Scale a floater about its center."""

    def set_visibility(self, floater_id: int, visible: bool) -> None:
        """Show or hide a floater."""

    def trash_set_alpha(self, alpha: float) -> None:
        """Trash background alpha in [0, 1]."""

    def trash_set_icon_translation(self, dx: float, dy: float) -> None:
        """Trash icon offset from its resting slot; positive dy is downward."""

    def trash_set_action_icon_scale(self, scale: float) -> None:
        """Scale of the action trash icon."""

    def trash_set_action_icon_padding(self, horizontal: int, vertical: int) -> None:
        """Padding that keeps the enlarged action icon inside its slot."""


class FloatingViewListener(Protocol):
    """Consumer callbacks."""

    def on_click(self, floater_id: int, child_index: int) -> None:
        """A tap on one of the floater's children."""

    def on_long_click(self, floater_id: int, child_index: int) -> None:
        """A long press on one of the floater's children."""

    def on_touch_finished(self, floater_id: int, is_finishing: bool, x: int, y: int) -> None:
        """A gesture ended; x, y is where the floater comes to rest."""

    def on_finish_all(self) -> None:
        """The last floater was removed."""


class Haptics(Protocol):
    def vibrate(self, duration_ms: int) -> None:
        """Short haptic pulse."""


class NullListener:
    """Listener that ignores everything."""

    def on_click(self, floater_id: int, child_index: int) -> None:
        pass

    def on_long_click(self, floater_id: int, child_index: int) -> None:
        pass

    def on_touch_finished(self, floater_id: int, is_finishing: bool, x: int, y: int) -> None:
        pass

    def on_finish_all(self) -> None:
        pass


class NullHaptics:
    def vibrate(self, duration_ms: int) -> None:
        pass
