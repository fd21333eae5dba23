import pytest

from floatengine.core.types import MoveDirection, Rect
from floatengine.motion.edge import goal_for, nearer

LIMIT = Rect(0, 0, 900, 1900)
THROW = 8000 / 9.0


@pytest.mark.parametrize("x, expected", [(449, 0), (450, 0), (451, 900)])
def test_default_picks_nearer_side(x, expected):
    assert goal_for(MoveDirection.DEFAULT, x, 700, LIMIT) == (expected, 700)


def test_fixed_sides():
    assert goal_for(MoveDirection.LEFT, 800, 700, LIMIT) == (0, 700)
    assert goal_for(MoveDirection.RIGHT, 10, 700, LIMIT) == (900, 700)


def test_none_stays_but_is_clamped():
    assert goal_for(MoveDirection.NONE, 300, 700, LIMIT) == (300, 700)
    assert goal_for(MoveDirection.NONE, -50, 2500, LIMIT) == (0, 1900)


def test_nearest_horizontal():
    assert goal_for(MoveDirection.NEAREST, 100, 1000, LIMIT) == (0, 1000)


def test_nearest_vertical():
    assert goal_for(MoveDirection.NEAREST, 450, 50, LIMIT) == (450, 0)
    assert goal_for(MoveDirection.NEAREST, 450, 1880, LIMIT) == (450, 1900)


def test_thrown_follows_fast_release():
    assert goal_for(MoveDirection.THROWN, 100, 700, LIMIT, 1000.0, THROW) == (900, 700)
    assert goal_for(MoveDirection.THROWN, 800, 700, LIMIT, -1000.0, THROW) == (0, 700)


def test_thrown_slow_release_behaves_like_default():
    assert goal_for(MoveDirection.THROWN, 800, 700, LIMIT, 100.0, THROW) == (900, 700)
    assert goal_for(MoveDirection.THROWN, 100, 700, LIMIT, None, THROW) == (0, 700)


def test_zero_width_limit():
    assert goal_for(MoveDirection.DEFAULT, 0, 10, Rect(0, 0, 0, 1900)) == (0, 10)


def test_nearer_midpoint_goes_low():
    assert nearer(5, 0, 10) == 0
    assert nearer(5.5, 0, 10) == 10


def test_default_from_an_edge_stays_on_it():
    assert goal_for(MoveDirection.DEFAULT, 0, 700, LIMIT) == (0, 700)
    assert goal_for(MoveDirection.DEFAULT, 900, 700, LIMIT) == (900, 700)
