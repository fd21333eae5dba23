import pytest

from floatengine.core.config import CaptureTuning, EdgeTuning, PhysicsTuning
from floatengine.core.interpolators import OvershootInterpolator
from floatengine.core.types import FloaterPhase, MoveDirection, Rect
from floatengine.motion.animators import (
    X,
    Y,
    CaptureAnimator,
    EdgeTween,
    FlingAnimator,
    SpringAnimator,
)
from floatengine.motion.motion import FloaterMotion, plan_release

LIMIT = Rect(0, 0, 900, 1900)


def run(animator, start_ms=0, frame_ms=10, max_frames=1000):
    """Tick until done; returns every emitted value of the animator's axis."""
    values = []
    t = start_ms
    for _ in range(max_frames):
        step = animator.tick(t)
        values.append(step.x if animator.axes == (X,) else step.y)
        if step.done:
            return values
        t += frame_ms
    raise AssertionError("animator never finished")


def capture():
    return CaptureAnimator(CaptureTuning(), (0, 0), Rect(-100, -200, 1100, 2100), (100, 100))


# ---------------------- capture ----------------------

def test_capture_lands_on_touch_immediately():
    cap = capture()
    cap.update_touch(300, 400)
    step = cap.tick(0)
    assert (step.x, step.y) == (300, 400)
    assert not step.done


def test_capture_clamps_to_move_limit():
    cap = capture()
    cap.update_touch(5000, 400)
    assert cap.tick(0).x == 1100


def test_capture_phase_change_restarts_curve():
    cap = capture()
    cap.update_target_center(500, 100)
    assert cap.set_phase(FloaterPhase.INTERSECTING, 1000, (300, 400))
    assert not cap.set_phase(FloaterPhase.INTERSECTING, 1010, (300, 400))

    first = cap.tick(1000)
    assert (first.x, first.y) == (300, 400)
    # the curve overshoots the icon before settling
    assert cap.tick(1120).x > 450
    last = cap.tick(1300)
    assert (last.x, last.y) == (450, 50)


def test_capture_centres_odd_sizes_exactly():
    cap = CaptureAnimator(CaptureTuning(), (0, 0), Rect(-100, -200, 1100, 2100), (101, 101))
    cap.update_target_center(500, 100)
    cap.set_phase(FloaterPhase.INTERSECTING, 1000, (300, 400))
    last = cap.tick(1300)
    # target is (449.5, 49.5); the step truncates
    assert (last.x, last.y) == (449, 49)


def test_capture_finishing_is_done():
    cap = capture()
    cap.set_phase(FloaterPhase.FINISHING, 0, (0, 0))
    assert cap.tick(10).done


# ---------------------- edge tween ----------------------

def test_edge_tween_overshoots_and_ends_exactly():
    tween = EdgeTween(X, 200, 0, 0, 450, OvershootInterpolator(1.25))
    values = run(tween, frame_ms=17)
    assert values[0] == 200
    assert values[-1] == 0
    assert min(values) < 0


def test_edge_tween_zero_duration():
    tween = EdgeTween(Y, 50, 0, 0, 0, OvershootInterpolator(1.25))
    step = tween.tick(0)
    assert step.y == 0 and step.done


# ---------------------- spring ----------------------

@pytest.mark.parametrize("damping", [0.7, 1.0, 1.5])
def test_spring_settles_on_final_position(damping):
    spring = SpringAnimator(X, 200, 0, 0, damping, 350.0, 0)
    values = run(spring)
    assert values[-1] == 0


def test_underdamped_spring_crosses_target():
    values = run(SpringAnimator(X, 200, 0, 0, 0.7, 350.0, 0))
    assert min(values) < 0


def test_critically_damped_spring_does_not_cross():
    values = run(SpringAnimator(X, 200, 0, 0, 1.0, 350.0, 0))
    assert min(values) >= 0


def test_spring_goal():
    spring = SpringAnimator(Y, 10, 0, 1900, 0.75, 200.0, 0)
    assert spring.goal() == (None, 1900)


# ---------------------- fling ----------------------

def test_fling_decays_and_stops():
    values = run(FlingAnimator(X, 100, 888.0, 1.7, 0, 900, 0))
    assert 210 <= values[-1] <= 225
    assert values == sorted(values)


def test_fling_stops_at_bound():
    values = run(FlingAnimator(X, 880, 888.0, 1.7, 0, 900, 0))
    assert values[-1] == 900
    assert max(values) == 900


def test_fling_without_velocity_is_done_at_once():
    step = FlingAnimator(Y, 500, 0.0, 1.7, 0, 1900, 0).tick(0)
    assert step.done and step.y == 500


# ---------------------- slots ----------------------

def test_one_animator_per_axis():
    motion = FloaterMotion()
    cap = capture()
    motion.start(cap)
    assert motion.capture is cap

    tween = EdgeTween(X, 0, 900, 0, 450, OvershootInterpolator(1.25))
    motion.start(tween)
    assert motion.capture is None
    assert motion.on_axis(X) is tween
    assert motion.on_axis(Y) is None

    spring = SpringAnimator(Y, 0, 0, 100, 0.75, 200.0, 0)
    motion.start(spring)
    assert motion.animators() == [tween, spring]

    replacement = EdgeTween(X, 0, 0, 0, 450, OvershootInterpolator(1.25))
    motion.start(replacement)
    assert motion.animators() == [replacement, spring]


def test_step_evicts_finished_animators():
    motion = FloaterMotion()
    motion.start(EdgeTween(X, 200, 0, 0, 100, OvershootInterpolator(1.25)))
    motion.start(FlingAnimator(Y, 500, 0.0, 1.7, 0, 1900, 0, frame_ms=10))
    assert motion.frame_interval_ms() == 10

    assert motion.step(0, (200, 500)) == (200, 500)
    assert motion.on_axis(Y) is None
    assert motion.step(100, (200, 500)) == (0, 500)
    assert not motion.is_active()


def test_cancel_release_keeps_capture():
    motion = FloaterMotion()
    motion.start(capture())
    motion.cancel_release()
    assert motion.is_active("capture")
    motion.stop_capture()
    assert not motion.is_active()


# ---------------------- release planning ----------------------

def plan(direction, start, anchor, velocity=None, use_physics=False):
    return plan_release(direction, use_physics, start, anchor, LIMIT, velocity, 8000, 0,
                        EdgeTuning(), PhysicsTuning())


def test_tween_release_moves_x():
    immediate, anims = plan(MoveDirection.DEFAULT, (200, 1400), (150, 1400))
    assert immediate == (200, 1400)
    assert [(a.kind, a.axes) for a in anims] == [("edge", (X,))]
    assert anims[0].goal() == (0, None)


def test_tween_release_vertical_snap():
    immediate, anims = plan(MoveDirection.NEAREST, (450, 50), (450, 50))
    assert immediate == (450, 50)
    assert [(a.kind, a.axes) for a in anims] == [("edge", (Y,))]
    assert anims[0].goal() == (None, 0)


def test_physics_without_velocity_falls_back_to_tween():
    _, anims = plan(MoveDirection.DEFAULT, (200, 1400), (200, 1400), velocity=None, use_physics=True)
    assert [a.kind for a in anims] == ["edge"]


def test_physics_ignored_for_nearest():
    _, anims = plan(MoveDirection.NEAREST, (100, 1000), (100, 1000), velocity=(500.0, 0.0), use_physics=True)
    assert [a.kind for a in anims] == ["edge"]


def test_physics_free_release_flings_both_axes():
    immediate, anims = plan(MoveDirection.NONE, (750, 950), (630, 950), velocity=(6000.0, 0.0), use_physics=True)
    assert immediate == (630, 950)
    assert [(a.kind, a.axis) for a in anims] == [("fling", X), ("fling", Y)]
    assert anims[0].velocity == pytest.approx(8000 / 9.0)


def test_physics_edge_release_springs_x():
    _, anims = plan(MoveDirection.DEFAULT, (200, 1000), (200, 1000), velocity=(-300.0, 0.0), use_physics=True)
    spring = anims[0]
    assert (spring.kind, spring.axis) == ("spring", X)
    assert spring.final_position == 0
    assert spring.velocity == -300.0


def test_physics_free_release_on_edge_springs():
    _, anims = plan(MoveDirection.NONE, (0, 950), (0, 950), velocity=(100.0, 0.0), use_physics=True)
    assert anims[0].kind == "spring"


def test_physics_y_outside_springs_to_nearer_bound():
    _, anims = plan(MoveDirection.NONE, (450, 1900), (450, 1900), velocity=(0.0, 200.0), use_physics=True)
    spring_y = anims[1]
    assert (spring_y.kind, spring_y.axis) == ("spring", Y)
    assert spring_y.final_position == 1900
    # pointer moved down, anchor moves down
    assert spring_y.velocity == -200.0
