"""
Utility submodule for emucheck.

Modules
-------

- :mod:`interpolation`:
  Provides :func:`~emucheck.utils.interpolation.interpolate_linear`, the
  two-point linear interpolation used for SSD lookups.

- :mod:`parallel`:
  Defines :func:`~emucheck.utils.parallel.optimal_worker_count` to size the
  thread pool that parses calibration files.
"""

from .interpolation import interpolate_linear
from .parallel import optimal_worker_count

__all__ = ["interpolate_linear", "optimal_worker_count"]
