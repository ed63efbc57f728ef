#!/usr/bin/env python
"""
Example usage of CorrectionDataSet using the calibration files in examples/data.

This script demonstrates:
  • Loading a calibration directory (output factor and aperture tables).
  • Listing the machines, energies, applicators and apertures available.
  • Resolving the correction data of one applicator and querying it.
  • Serializing the data set to a JSON file and loading it back.
  • Plotting the output factor curves of an applicator.
"""

from pathlib import Path

import matplotlib.pyplot as plt

from emucheck import CorrectionDataSet, LoaderSettings

DATA_DIR = Path(__file__).parent / "data"


def main():
    # --- Load the calibration directory ---
    settings = LoaderSettings(show_progress=True)
    data_set = CorrectionDataSet.from_directory(DATA_DIR, settings)
    print(f"Loaded {len(data_set)} machine/applicator pairs from {DATA_DIR}")
    data_set.summary()

    # --- Discovery queries ---
    machine = data_set.list_machines()[0]
    energies = data_set.list_energies(machine)
    print(f"\nEnergies of {machine}: {energies}")
    for energy in energies:
        print(f"  {energy:g} MeV -> applicators {data_set.list_applicators(machine, energy)}")

    apertures = data_set.list_apertures(machine, 12.0, "A10")
    print(f"\nApertures of A10 at 12 MeV: {apertures}")

    # --- Lookups ---
    cd = data_set.resolve(machine, "A10")
    print(f"\nCorrection data: {cd}")
    print(f"  zref at 12 MeV: {cd.get_zref(12.0)} cm")
    print(f"  CF(12 MeV, SSD 99.2 cm, FDA id 2) = {cd.get_correction_factor(12.0, 99.2, 2):.6f}")
    print(cd.output_factors.to_dataframe())

    # --- Serialization ---
    json_filename = "emucheck_snapshot.json"
    data_set.save(json_filename)
    print(f"\nSaved data set to JSON file: {json_filename}")
    reloaded = CorrectionDataSet.load(json_filename)
    print("Reloaded data set. Machines:", reloaded.list_machines())

    # --- Plotting ---
    cd.output_factors.plot(show=False)
    plt.show()


if __name__ == "__main__":
    main()
