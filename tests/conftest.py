import matplotlib
import pytest

matplotlib.use("Agg")

ENERGIES = [4.0, 6.0, 8.0, 10.0, 12.0]
ZREFS = [0.89, 1.36, 1.81, 2.31, 2.78]
OF_ROWS = [
    (95.0, [0.865, 0.953, 0.994, 1.006, 1.037]),
    (95.5, [0.856, 0.945, 0.986, 0.995, 1.026]),
    (96.0, [0.843, 0.931, 0.973, 0.982, 1.011]),
    (97.0, [0.818, 0.902, 0.946, 0.957, 0.982]),
    (98.0, [0.792, 0.874, 0.919, 0.932, 0.953]),
    (99.0, [0.764, 0.846, 0.892, 0.906, 0.926]),
    (100.0, [0.736, 0.818, 0.865, 0.88, 0.899]),
    (105.0, [0.619, 0.704, 0.753, 0.775, 0.791]),
    (110.0, [0.526, 0.613, 0.663, 0.688, 0.706]),
    (115.0, [0.442, 0.533, 0.584, 0.614, 0.63]),
]
FDA_ROWS = [
    ("6x6", 1, [0.9, 0.8, 0.7, 0.6, 0.5]),
    ("10x10", 2, [1.0, 1.0, 0.99, 0.985, 0.98]),
    ("4x6", 3, [1.9, 1.8, 1.7, 1.6, 1.5]),
    ("4x4", 10, [2.9, 2.8, 2.7, 2.6, 2.5]),
]


def _fmt(values):
    return ",".join(f"{v:g}" for v in values)


def write_of_file(path, machine, applicator, energies=ENERGIES, rows=OF_ROWS, zrefs=ZREFS):
    pad = "," * (len(energies) + 1)
    lines = [
        f"{machine}{pad}",
        f"Applicator,{applicator}" + "," * len(energies),
        f"Dimensions,id,{_fmt(energies)}",
    ]
    if zrefs is not None:
        lines.append(f"Zref,,{_fmt(zrefs)}")
    lines += [f"{ssd:g},,{_fmt(values)}" for ssd, values in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


def write_fda_file(path, machine, applicator, energies=ENERGIES, rows=FDA_ROWS):
    pad = "," * (len(energies) + 1)
    lines = [
        f"{machine}{pad}",
        f"Applicator,{applicator}" + "," * len(energies),
        f"Dimensions,id,{_fmt(energies)}",
    ]
    lines += [f"{name},{aperture_id},{_fmt(values)}" for name, aperture_id, values in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def calibration_dir(tmp_path):
    """Two applicators of one machine, as shipped in examples/data."""
    write_of_file(tmp_path / "of_synergy1_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_synergy1_a10.csv", "Synergy1", "A10")
    write_of_file(
        tmp_path / "of_synergy1_a14.csv", "Synergy1", "A14",
        energies=[6.0, 9.0, 12.0],
        rows=[
            (95.0, [0.961, 0.998, 1.041]),
            (100.0, [0.829, 0.871, 0.905]),
            (105.0, [0.712, 0.758, 0.797]),
        ],
        zrefs=[1.36, 2.05, 2.78],
    )
    write_fda_file(
        tmp_path / "fda_synergy1_a14.csv", "Synergy1", "A14",
        energies=[6.0, 9.0, 12.0],
        rows=[("14x14", 4, [1.0, 1.0, 1.0]), ("8x8", 5, [0.97, 0.975, 0.982])],
    )
    return tmp_path
