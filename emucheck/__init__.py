"""
emucheck: independent monitor unit check for electron beam radiotherapy.

emucheck recomputes the monitor units (MU) of a planned electron beam from
calibration tables and compares them with the treatment plan. It provides:

- Output factor tables per machine/applicator, interpolated linearly in SSD
- Field defining aperture corrections per energy and aperture id
- Concurrent loading and validation of calibration directories
- Queries listing the machines, energies, applicators and apertures available
- MU computation from the dose at the reference depth

Main subpackages
----------------

- :mod:`emucheck.io`: Calibration tables, directory loader and the queryable data set.
- :mod:`emucheck.calc`: Calculation parameters, MU computation and input providers.
- :mod:`emucheck.utils`: Interpolation and worker sizing helpers.

No extrapolation is ever performed: energies, SSDs and apertures outside the
calibration data raise an error.
"""

from .io import CorrectionData, CorrectionDataSet, CalibrationLoader
from .calc import CalcParam, MUResult, compute_mu, calculate_mu, load_and_compute
from .config import LoaderSettings

__all__ = [
    "CorrectionData",
    "CorrectionDataSet",
    "CalibrationLoader",
    "CalcParam",
    "MUResult",
    "compute_mu",
    "calculate_mu",
    "load_and_compute",
    "LoaderSettings",
]
