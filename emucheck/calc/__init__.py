"""
MU calculation for emucheck.

The typical workflow:

.. code-block:: python

    from emucheck.calc import CalcParam, load_and_compute

    param = CalcParam(machine="Synergy1", applicator="A10", energy=12.0,
                      ssd=99.2, aperture_id=2, dose_zref=100.0, planned_mu=110.8)
    mu, resolved = load_and_compute("calibration/", param)

Modules
-------

- :mod:`core`:
  Defines :class:`~emucheck.calc.core.CalcParam` and :class:`~emucheck.calc.core.MUResult`.

- :mod:`compute`:
  Implements :func:`~emucheck.calc.compute.compute_mu`,
  :func:`~emucheck.calc.compute.calculate_mu`,
  :func:`~emucheck.calc.compute.resolve_calc_param` and
  :func:`~emucheck.calc.compute.load_and_compute`.

- :mod:`prompts`:
  Defines the :class:`~emucheck.calc.prompts.InputProvider` interface and its
  console implementation.
"""

from .core import CalcParam, MUResult
from .compute import calculate_mu, compute_mu, load_and_compute, resolve_calc_param
from .prompts import ConsoleInputProvider, InputProvider

__all__ = [
    "CalcParam",
    "MUResult",
    "compute_mu",
    "calculate_mu",
    "resolve_calc_param",
    "load_and_compute",
    "InputProvider",
    "ConsoleInputProvider",
]
