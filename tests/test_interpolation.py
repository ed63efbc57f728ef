import numpy as np
import pytest

from emucheck.utils.interpolation import interpolate_linear


def test_interpolate_midpoint():
    assert interpolate_linear(1.5, 1.0, 2.0, 10.0, 20.0) == pytest.approx(15.0)


def test_interpolate_decreasing_values():
    assert interpolate_linear(97.3, 97.0, 98.0, 0.818, 0.792) == pytest.approx(0.8102)


def test_interpolate_endpoints_return_bracket_values():
    assert interpolate_linear(1.0, 1.0, 2.0, 10.0, 20.0) == 10.0
    assert interpolate_linear(2.0, 1.0, 2.0, 10.0, 20.0) == pytest.approx(20.0)


def test_degenerate_bracket_returns_left_value():
    assert interpolate_linear(5.0, 2.0, 2.0, 1.0, 9.0) == 1.0
    assert interpolate_linear(2.0, 2.0, 2.0 + 1e-17, 1.0, 9.0) == 1.0


def test_no_clamping_outside_bracket():
    # The caller is responsible for choosing the bracket.
    assert interpolate_linear(3.0, 1.0, 2.0, 10.0, 20.0) == pytest.approx(30.0)


def test_reversed_bracket():
    assert interpolate_linear(1.5, 2.0, 1.0, 20.0, 10.0) == pytest.approx(15.0)


def test_monotonic_between_endpoints():
    xs = np.linspace(99.0, 100.0, 21)
    ys = [interpolate_linear(x, 99.0, 100.0, 0.926, 0.899) for x in xs]
    assert np.all(np.diff(ys) <= 0)
    assert ys[0] == 0.926
    assert ys[-1] == pytest.approx(0.899)
