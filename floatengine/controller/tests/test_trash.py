import pytest

from floatengine.controller.trash import TrashTarget
from floatengine.core.config import TrashTuning
from floatengine.core.looper import Looper
from floatengine.core.types import PointerAction, Shape, TrashAnimation, TrashPhase
from floatengine.render.recorder import RecordingRenderer


class Events:
    def __init__(self):
        self.seen = []

    def on_trash_animation_started(self, animation):
        self.seen.append(("started", animation))

    def on_trash_animation_end(self, animation):
        self.seen.append(("end", animation))


def make():
    looper = Looper(0)
    renderer = RecordingRenderer()
    events = Events()
    box = {}
    trash = TrashTarget(TrashTuning(), 1.0, (1000, 2000), looper, box.get, renderer, events)
    box[-1] = trash
    return trash, looper, renderer, events


def open_fully(trash, looper):
    trash.on_touch_floating_view(PointerAction.DOWN, 0, 1900, 400)
    looper.tick(400)
    looper.tick(1000)


def test_starts_hidden_below_slot():
    trash, looper, renderer, events = make()
    assert trash.phase == TrashPhase.HIDDEN
    assert trash.ty == 56
    assert trash.alpha == 0.0


def test_move_limit():
    trash, *_ = make()
    lim = trash.limit
    assert (lim.left, lim.top, lim.right, lim.bottom) == (-22, -50, 22, 56)


def test_down_schedules_open_after_timeout():
    trash, looper, renderer, events = make()
    trash.on_touch_floating_view(PointerAction.DOWN, 0, 1900, 400)
    assert trash.phase == TrashPhase.OPENING
    looper.tick(399)
    assert events.seen == []
    looper.tick(400)
    assert events.seen == [("started", TrashAnimation.OPEN)]


def test_open_then_close():
    trash, looper, renderer, events = make()
    open_fully(trash, looper)
    assert trash.phase == TrashPhase.OPEN
    assert trash.alpha == 1.0
    assert trash.ty == pytest.approx(-50)
    assert trash.tx == pytest.approx(-22)
    assert renderer.trash.alpha == 1.0

    trash.on_touch_floating_view(PointerAction.UP, 0, 1900, 400)
    looper.tick(1000)
    assert trash.phase == TrashPhase.CLOSING
    looper.tick(1200)
    assert trash.phase == TrashPhase.HIDDEN
    assert trash.alpha == 0.0
    assert trash.ty == 56
    assert events.seen == [
        ("started", TrashAnimation.OPEN),
        ("started", TrashAnimation.CLOSE),
        ("end", TrashAnimation.CLOSE),
    ]
    assert len(looper) == 0


def test_move_opens_without_waiting():
    trash, looper, renderer, events = make()
    trash.on_touch_floating_view(PointerAction.DOWN, 0, 1900, 400)
    looper.tick(100)
    trash.on_touch_floating_view(PointerAction.MOVE, 10, 1800, 400)
    looper.tick(100)
    assert events.seen == [("started", TrashAnimation.OPEN)]
    looper.tick(500)
    assert events.seen.count(("started", TrashAnimation.OPEN)) == 1


def test_release_before_open_cancels_it():
    trash, looper, renderer, events = make()
    trash.on_touch_floating_view(PointerAction.DOWN, 0, 1900, 400)
    looper.tick(100)
    trash.on_touch_floating_view(PointerAction.UP, 0, 1900, 400)
    looper.tick(1000)
    looper.tick(1300)
    assert ("started", TrashAnimation.OPEN) not in events.seen
    assert trash.phase == TrashPhase.HIDDEN


def test_hit_rect_follows_icon():
    trash, looper, renderer, events = make()
    hidden = trash.hit_rect()
    assert hidden.top == -164
    assert hidden.bottom == 4

    open_fully(trash, looper)
    cx, cy = trash.icon_center()
    assert (cx, cy) == pytest.approx((478, 78))
    assert trash.hit_rect().contains(cx, cy)


def test_dismiss_is_synchronous():
    trash, looper, renderer, events = make()
    open_fully(trash, looper)
    events.seen.clear()

    trash.dismiss()
    assert events.seen == [("started", TrashAnimation.FORCE_CLOSE), ("end", TrashAnimation.FORCE_CLOSE)]
    assert trash.alpha == 0.0
    assert trash.ty == trash.limit.bottom
    assert trash.phase == TrashPhase.HIDDEN
    assert len(looper) == 0


def test_disabled_trash_ignores_touches():
    trash, looper, renderer, events = make()
    trash.set_enabled(False)
    assert events.seen[0] == ("started", TrashAnimation.FORCE_CLOSE)
    events.seen.clear()

    trash.on_touch_floating_view(PointerAction.DOWN, 0, 1900, 400)
    assert len(looper) == 0
    looper.tick(1000)
    assert events.seen == []


def test_action_icon_padding_covers_target():
    trash, looper, renderer, events = make()
    trash.set_action_icon(56, 56)
    trash.set_target_size(100, 100, Shape.CIRCLE)
    assert trash.action_max_scale == pytest.approx(100 / 56)
    assert trash.action_padding == (22, 22)
    assert renderer.trash.padding == (22, 22)

    trash.set_target_size(100, 100, Shape.CIRCLE)
    assert renderer.count("trash_set_action_icon_padding") == 1

    trash.set_target_size(100, 100, Shape.RECTANGLE)
    assert trash.action_padding[0] > 22


def test_fixed_icon_only_has_no_padding():
    trash, looper, renderer, events = make()
    trash.set_target_size(100, 100, Shape.CIRCLE)
    assert trash.action_padding == (0, 0)
    assert renderer.count("trash_set_action_icon_padding") == 0


def test_action_icon_scale_tween():
    trash, looper, renderer, events = make()
    trash.set_action_icon(56, 56)
    trash.set_target_size(100, 100, Shape.CIRCLE)

    trash.set_scale_icon(True)
    looper.tick(0)
    looper.tick(100)
    assert trash.action_scale > trash.action_max_scale
    looper.tick(200)
    assert trash.action_scale == pytest.approx(trash.action_max_scale)

    trash.set_scale_icon(False)
    looper.tick(400)
    looper.tick(600)
    assert trash.action_scale == 1.0
