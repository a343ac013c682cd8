import math

import numpy as np
import pytest

from lift_modules.angle_utils import (
    cal_angle,
    cal_distance,
    horizontal_offset,
    inclination_deg,
    midpoint,
    safe_ratio,
)
from lift_modules.pose_types import Landmark


def test_right_angle():
    assert cal_angle([1, 0], [0, 0], [0, 1]) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert cal_angle([0, 0], [0, 0.5], [0, 1]) == pytest.approx(180.0)


def test_accepts_landmarks():
    a, b, c = Landmark(0.3, 0.3), Landmark(0.3, 0.5), Landmark(0.5, 0.5)
    assert cal_angle(a, b, c) == pytest.approx(90.0)


def test_zero_length_vector_returns_zero():
    assert cal_angle([0.5, 0.5], [0.5, 0.5], [0.7, 0.5]) == 0.0
    assert cal_angle([0.1, 0.2], [0.5, 0.5], [0.5, 0.5]) == 0.0


def test_nan_input_returns_zero():
    assert cal_angle([math.nan, 0.1], [0.5, 0.5], [0.7, 0.5]) == 0.0
    assert cal_distance([math.nan, 0.0], [0.0, 0.0]) == 0.0


def test_angle_always_in_range():
    rng = np.random.default_rng(7)
    for pts in rng.uniform(0.0, 1.0, size=(200, 3, 2)):
        angle = cal_angle(*pts)
        assert 0.0 <= angle <= 180.0


def test_distance():
    assert cal_distance([0, 0], [0.3, 0.4]) == pytest.approx(0.5)


def test_midpoint_and_offset():
    assert midpoint([0.2, 0.4], [0.6, 0.8]) == pytest.approx([0.4, 0.6])
    assert horizontal_offset([0.2, 0.9], [0.5, 0.1]) == pytest.approx(0.3)


def test_inclination():
    # y축이 아래로 증가하므로 위쪽을 향하는 벡터는 -90°
    assert inclination_deg([0.5, 0.2], [0.5, 0.5]) == pytest.approx(-90.0)
    assert inclination_deg([0.8, 0.5], [0.5, 0.5]) == pytest.approx(0.0)


def test_safe_ratio_zero_denominator():
    assert safe_ratio(0.2, 0.0) == 0.0
    assert safe_ratio(0.2, 0.4) == pytest.approx(0.5)
