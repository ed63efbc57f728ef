"""
Queryable collection of correction data.

This module defines the :class:`CorrectionDataSet`, a read-only container of
:class:`~emucheck.io.correction_data.CorrectionData` with one entry per
(machine, applicator) pair.

Main features
-------------

- Discovery queries: machines, energies, applicators and aperture fitments
  available for a partially specified setup
- Resolution of the single table matching a machine and applicator
- Loading from a calibration directory (see :mod:`~emucheck.io.loader`)
- JSON snapshots and a tabulated summary

Examples
--------

>>> s = CorrectionDataSet.from_directory("calibration/")
>>> s.list_machines()
['Synergy1']
>>> s.list_energies("Synergy1")
[4.0, 6.0, 8.0, 10.0, 12.0]
>>> s.resolve("Synergy1", "A10").get_correction_factor(12.0, 99.2, 10)
2.3015
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from tabulate import tabulate

from emucheck.config import LoaderSettings
from emucheck.errors import AmbiguousMatchError, CorrectionDataNotFoundError, TableMismatchError
from emucheck.io.correction_data import CorrectionData
from emucheck.io.loader import CalibrationLoader


def _unique(values: Iterable) -> list:
    out = []
    for v in values:
        if v not in out:
            out.append(v)
    return out


class CorrectionDataSet:
    """
    An ordered, read-only collection of CorrectionData.

    Entries keep the order in which they were loaded, and list queries return
    values in first-seen order without duplicates.

    :param data: Correction data, at most one per (machine, applicator) pair.
    :type data: Iterable[CorrectionData], optional

    :raises TableMismatchError: If two entries share the same machine and applicator.
    """

    def __init__(self, data: Optional[Iterable[CorrectionData]] = None):
        self.data: List[CorrectionData] = list(data) if data is not None else []
        self.source_info: Optional[str] = None

        seen = set()
        for cd in self.data:
            if cd.key in seen:
                raise TableMismatchError(cd.machine, cd.applicator, "duplicate correction data entry")
            seen.add(cd.key)

    def __repr__(self):
        return f"<CorrectionDataSet entries={len(self.data)}, source={self.source_info}>"

    def __len__(self):
        return len(self.data)

    def __iter__(self):
        return iter(self.data)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return any(cd.key == tuple(key) for cd in self.data)

    def __getitem__(self, key: Tuple[str, str]) -> CorrectionData:
        machine, applicator = key
        return self.resolve(machine, applicator)

    # --- Queries -----------------------------------------------------------

    def list_machines(self) -> List[str]:
        """
        Machines present in the set.

        :rtype: list[str]
        """
        return _unique(cd.machine for cd in self.data)

    def list_energies(self, machine: str) -> List[float]:
        """
        Energies available on a machine, across all of its applicators.

        :param machine: Machine name.
        :type machine: str

        :rtype: list[float]
        """
        return _unique(
            energy
            for cd in self.data if cd.machine == machine
            for energy in cd.energies
        )

    def list_applicators(self, machine: str, energy: float) -> List[str]:
        """
        Applicators of a machine that are calibrated for an energy.

        :rtype: list[str]
        """
        return _unique(
            cd.applicator for cd in self.data
            if cd.machine == machine and energy in cd.energies
        )

    def _matching(self, machine: str, energy: float, applicator: str) -> List[CorrectionData]:
        return [
            cd for cd in self.data
            if cd.machine == machine and cd.applicator == applicator and energy in cd.energies
        ]

    def list_aperture_fitments(self, machine: str, energy: float, applicator: str) -> List[str]:
        """
        Aperture labels available for a machine, energy and applicator.

        :rtype: list[str]
        """
        return _unique(
            name
            for cd in self._matching(machine, energy, applicator)
            for name in cd.fda.names
        )

    def list_apertures(self, machine: str, energy: float, applicator: str) -> List[Tuple[str, int]]:
        """
        Apertures available for a machine, energy and applicator.

        :returns: (name, id) pairs in table order.
        :rtype: list[tuple[str, int]]
        """
        return _unique(
            (name, aperture_id)
            for cd in self._matching(machine, energy, applicator)
            for name, aperture_id in zip(cd.fda.names, cd.fda.ids)
        )

    def resolve(self, machine: str, applicator: str) -> CorrectionData:
        """
        The correction data of a machine and applicator.

        :param machine: Machine name.
        :type machine: str
        :param applicator: Applicator name.
        :type applicator: str

        :returns: The single matching entry.
        :rtype: CorrectionData

        :raises CorrectionDataNotFoundError: If no entry matches.
        :raises AmbiguousMatchError: If more than one entry matches.
        """
        matches = [cd for cd in self.data if cd.machine == machine and cd.applicator == applicator]
        if not matches:
            raise CorrectionDataNotFoundError(machine, applicator)
        if len(matches) > 1:
            raise AmbiguousMatchError(machine, applicator, len(matches))
        return matches[0]

    def get_zref(self, machine: str, applicator: str, energy: float) -> Optional[float]:
        """
        Reference depth for a machine, applicator and energy.

        :returns: The zref, or None if the combination is unknown or carries no zref.
        :rtype: float or None
        """
        for cd in self.data:
            if cd.machine == machine and cd.applicator == applicator and energy in cd.energies:
                return cd.get_zref(energy)
        return None

    # --- Construction and serialization --------------------------------------

    @classmethod
    def from_directory(cls, directory: Union[str, Path],
                       settings: Optional[LoaderSettings] = None) -> "CorrectionDataSet":
        """
        Load all calibration tables of a directory.

        :param directory: Calibration directory.
        :type directory: str or Path
        :param settings: Loader settings.
        :type settings: LoaderSettings, optional

        :returns: The loaded set.
        :rtype: CorrectionDataSet
        """
        instance = cls(CalibrationLoader(settings).load(directory))
        instance.source_info = f"directory:{directory}"
        return instance

    def to_dict(self) -> Dict[str, list]:
        return {"data": [cd.to_dict() for cd in self.data]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def save(self, filepath: Union[str, Path]):
        """
        Save a snapshot of the set to a JSON file.

        :param filepath: Output file path.
        :type filepath: str or Path
        """
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, list]) -> "CorrectionDataSet":
        """
        Create a set from a dictionary produced by :meth:`to_dict`.

        :raises ValueError: If the dictionary has no ``data`` entry, or an entry
                            is incomplete or its energies do not match.
        """
        if "data" not in data:
            raise ValueError("Missing required field in dictionary: data")
        entries = [CorrectionData.from_dict(item) for item in data["data"]]
        for cd in entries:
            if not cd.validate():
                raise TableMismatchError(
                    cd.machine, cd.applicator,
                    "mismatch between the energies in the output factor and field defining aperture tables",
                )
        instance = cls(entries)
        instance.source_info = "dict"
        return instance

    @classmethod
    def from_json(cls, json_str: str) -> "CorrectionDataSet":
        instance = cls.from_dict(json.loads(json_str))
        instance.source_info = "json"
        return instance

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "CorrectionDataSet":
        """
        Load a set from a JSON snapshot written by :meth:`save`.

        :param filepath: Path to the JSON file.
        :type filepath: str or Path

        :rtype: CorrectionDataSet
        """
        with open(filepath, 'r') as f:
            data = json.load(f)
        instance = cls.from_dict(data)
        instance.source_info = f"loaded:{filepath}"
        return instance

    def summary(self):
        """
        Print one line per machine/applicator pair: energies, SSD range and apertures.
        """
        rows = []
        for cd in self.data:
            ssd_range = cd.output_factors.ssd_range()
            rows.append((
                cd.machine,
                cd.applicator,
                ", ".join(f"{e:g}" for e in cd.energies),
                f"{ssd_range[0]:g} - {ssd_range[1]:g}" if ssd_range else "-",
                ", ".join(cd.fda.labels()),
            ))
        print(f"\nCorrection data ({self.source_info or 'in memory'}):")
        print(tabulate(rows, headers=["Machine", "Applicator", "Energies [MeV]", "SSD [cm]", "Apertures"],
                       tablefmt="fancy_grid"))
