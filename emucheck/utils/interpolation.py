"""
Linear interpolation between two tabulated points.

This module defines :func:`interpolate_linear`, used by
:class:`~emucheck.io.output_factor.OutputFactorTable` to resolve output
factors between two calibrated SSD rows.

Examples
--------

>>> interpolate_linear(97.3, 97.0, 98.0, 0.818, 0.792)
0.8102
"""

import numpy as np

EPSILON = np.finfo(float).eps


def interpolate_linear(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    """
    Linearly interpolate the ordinate at ``x`` on the line through (x0, y0) and (x1, y1).

    No bounds check is made on ``x``; callers select the bracketing points.
    A bracket narrower than machine epsilon returns ``y0``.

    :param x: Query abscissa.
    :type x: float
    :param x0: Left abscissa of the bracket.
    :type x0: float
    :param x1: Right abscissa of the bracket.
    :type x1: float
    :param y0: Ordinate at ``x0``.
    :type y0: float
    :param y1: Ordinate at ``x1``.
    :type y1: float

    :returns: Interpolated ordinate.
    :rtype: float
    """
    dx = x1 - x0
    if abs(dx) <= EPSILON:
        return y0
    return y0 + (x - x0) * (y1 - y0) / dx
