import pytest

from floatengine.core.velocity import VelocityTracker


def test_needs_two_samples():
    vt = VelocityTracker()
    assert vt.compute() is None
    vt.add_movement(0, 10, 10)
    assert vt.compute() is None


def test_linear_motion():
    vt = VelocityTracker()
    for i in range(6):
        vt.add_movement(i * 10, 500 + 60 * i, 1000)
    vx, vy = vt.compute()
    assert vx == pytest.approx(6000.0)
    assert vy == pytest.approx(0.0)


def test_clamped_to_max():
    vt = VelocityTracker()
    vt.add_movement(0, 0, 0)
    vt.add_movement(10, 1000, -1000)
    vx, vy = vt.compute(max_velocity=8000)
    assert vx == 8000
    assert vy == -8000


def test_old_samples_fall_out_of_horizon():
    vt = VelocityTracker(horizon_ms=100)
    vt.add_movement(0, 0, 0)
    vt.add_movement(500, 100, 0)
    # only the newest sample is inside the horizon
    assert vt.compute() == (0.0, 0.0)


def test_out_of_order_sample_resets():
    vt = VelocityTracker()
    vt.add_movement(100, 0, 0)
    vt.add_movement(110, 10, 0)
    vt.add_movement(50, 0, 0)
    assert len(vt) == 1
