#!/usr/bin/env python
"""
Example MU check of an electron beam.

The first check is fully specified. The second one leaves the applicator,
aperture, dose and planned MU unset; they are asked on the console.
"""

import logging
from pathlib import Path

from emucheck.calc import CalcParam, ConsoleInputProvider, calculate_mu, resolve_calc_param
from emucheck.io import CorrectionDataSet

DATA_DIR = Path(__file__).parent / "data"


def main():
    logging.basicConfig(level=logging.INFO)
    data_set = CorrectionDataSet.from_directory(DATA_DIR)

    ## Fully specified beam
    params = CalcParam(
        machine="Synergy1",
        applicator="A10",
        energy=12.0,        # MeV
        ssd=99.2,           # cm
        aperture_id=2,      # 10x10
        dose_zref=100.0,    # cGy
        planned_mu=110.8,
    )
    param, cd = resolve_calc_param(data_set, params)
    result = calculate_mu(param, cd)
    result.summary()

    ## Partially specified beam, completed on the console
    partial = CalcParam(machine="Synergy1", energy=6.0, ssd=100.0)
    param, cd = resolve_calc_param(data_set, partial, ConsoleInputProvider())
    result = calculate_mu(param, cd)
    result.summary()


if __name__ == "__main__":
    main()
