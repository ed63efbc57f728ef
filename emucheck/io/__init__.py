"""
I/O submodule for emucheck.

This package holds the calibration data model and everything needed to load
it from disk: output factor and aperture tables, their pairing per
machine/applicator, the concurrent directory loader, and the queryable set of
loaded tables.

Modules
-------

- :mod:`calibration_file`:
  CSV reading and header validation shared by both calibration file types.

- :mod:`output_factor`:
  Defines :class:`~emucheck.io.output_factor.OutputFactorTable`, output
  factors per (energy, SSD) with linear interpolation in SSD.

- :mod:`aperture`:
  Defines :class:`~emucheck.io.aperture.FieldDefiningApertureTable`,
  corrections per (energy, aperture id).

- :mod:`correction_data`:
  Defines :class:`~emucheck.io.correction_data.CorrectionData`, the pair of
  tables for one machine/applicator.

- :mod:`loader`:
  Provides :class:`~emucheck.io.loader.CalibrationLoader`, which discovers,
  parses (concurrently), pairs and validates the files of a directory.

- :mod:`data_set`:
  Provides :class:`~emucheck.io.data_set.CorrectionDataSet`, the read-only
  query surface over the loaded tables.
"""

from .output_factor import OutputFactorTable
from .aperture import FieldDefiningApertureTable
from .correction_data import CorrectionData
from .loader import CalibrationLoader, load_data
from .data_set import CorrectionDataSet

__all__ = [
    "OutputFactorTable",
    "FieldDefiningApertureTable",
    "CorrectionData",
    "CalibrationLoader",
    "load_data",
    "CorrectionDataSet",
]
