"""
Output factor tables for one machine/applicator pair.

This module defines the :class:`OutputFactorTable`, which stores the output
factor of each beam energy as a function of the source-to-skin distance (SSD),
together with the reference depth (zref) of each energy.

Main features
-------------

- Row-wise construction from calibration files (one row per SSD)
- Correction factor lookup: exact energy match, linear interpolation in SSD
- No extrapolation: SSDs outside the calibrated envelope are rejected
- Serialization to dictionaries and pandas DataFrames
- Plotting

Examples
--------

>>> table = OutputFactorTable()
>>> table.set_energies([4.0, 6.0])
>>> table.add_row(95.0, [0.865, 0.953])
>>> table.add_row(100.0, [0.736, 0.818])
>>> table.get_correction_factor(6.0, 95.0)
0.953
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from emucheck.errors import (
    DuplicateEntryError,
    DuplicateSSDError,
    EnergyNotFoundError,
    FormatError,
    ShapeMismatchError,
    SSDNotFoundError,
)
from emucheck.io.calibration_file import (
    ZREF_LABEL,
    ParsedTable,
    is_label_row,
    parse_float,
    parse_header,
    parse_values,
    read_rows,
)
from emucheck.utils.interpolation import interpolate_linear


class OutputFactorTable:
    """
    Output factors indexed by (energy, SSD).

    ``table[e][s]`` is the output factor for ``energies[e]`` at ``ssds[s]``.
    SSD rows are kept in insertion order and need not be sorted.
    """

    REQUIRED_DICT_KEYS = ["energies", "zrefs", "ssds", "table"]

    def __init__(self):
        self.energies: List[float] = []
        self.zrefs: List[float] = []
        self.ssds: List[float] = []
        self.table: List[List[float]] = []

    def __repr__(self):
        return f"<OutputFactorTable energies={self.energies}, n_ssd={len(self.ssds)}>"

    def set_energies(self, values: Sequence[float]):
        self.energies = [float(v) for v in values]

    def set_zrefs(self, values: Sequence[float]):
        self.zrefs = [float(v) for v in values]

    def add_row(self, ssd: float, values: Sequence[float]):
        """
        Append the output factors measured at one SSD, one value per energy.

        :param ssd: Source-to-skin distance [cm].
        :type ssd: float
        :param values: Output factors aligned with :attr:`energies`.
        :type values: Sequence[float]

        :raises ShapeMismatchError: If the number of values differs from the
                                    number of energies (or of zrefs, when set).
        :raises DuplicateSSDError: If a row for this SSD already exists.
        """
        if len(values) != len(self.energies):
            raise ShapeMismatchError("energies", len(self.energies), len(values))
        if self.zrefs and len(values) != len(self.zrefs):
            raise ShapeMismatchError("zrefs", len(self.zrefs), len(values))
        if ssd in self.ssds:
            raise DuplicateSSDError(ssd)

        if not self.table:
            self.table = [[] for _ in self.energies]
        self.ssds.append(float(ssd))
        for column, value in zip(self.table, values):
            column.append(float(value))

    def _energy_index(self, energy: float) -> int:
        for idx, e in enumerate(self.energies):
            if e == energy:
                return idx
        raise EnergyNotFoundError(energy, self.energies)

    def get_zref(self, energy: float) -> Optional[float]:
        """
        Reference depth of an energy.

        :returns: The zref aligned with the first occurrence of ``energy``,
                  or None if the energy (or the zrefs) are not present.
        :rtype: float or None
        """
        for e, zref in zip(self.energies, self.zrefs):
            if e == energy:
                return zref
        return None

    def ssd_range(self) -> Optional[Tuple[float, float]]:
        """
        Calibrated SSD envelope.

        :returns: (min, max) SSD, or None if the table has no rows.
        :rtype: tuple[float, float] or None
        """
        if not self.ssds:
            return None
        return min(self.ssds), max(self.ssds)

    def get_correction_factor(self, energy: float, ssd: float) -> float:
        """
        Output factor for an energy at an SSD.

        The energy must match a calibrated energy exactly. The SSD is bracketed
        by the closest calibrated SSD on each side; an exact SSD match returns
        the stored value, otherwise the two bracketing values are linearly
        interpolated.

        :param energy: Beam energy [MeV].
        :type energy: float
        :param ssd: Source-to-skin distance [cm].
        :type ssd: float

        :returns: Output factor.
        :rtype: float

        :raises EnergyNotFoundError: If the energy is not in the table.
        :raises SSDNotFoundError: If the SSD lies outside the calibrated range.
        """
        idx = self._energy_index(energy)
        ssds = np.asarray(self.ssds, dtype=float)
        values = np.asarray(self.table[idx] if self.table else [], dtype=float)

        below = np.flatnonzero(ssds <= ssd)
        above = np.flatnonzero(ssds >= ssd)
        if below.size == 0 or above.size == 0:
            raise SSDNotFoundError(ssd, energy, self.ssd_range())

        i0 = below[np.argmax(ssds[below])]
        i1 = above[np.argmin(ssds[above])]
        x0, x1 = ssds[i0], ssds[i1]
        y0, y1 = values[i0], values[i1]

        if x0 == x1:
            return float(y0)
        return float(interpolate_linear(ssd, x0, x1, y0, y1))

    def to_dict(self) -> Dict:
        """
        Serialize the table to a dictionary.

        :returns: Dictionary with energies, zrefs, SSDs and the column table.
        :rtype: dict
        """
        return {
            "energies": list(self.energies),
            "zrefs": list(self.zrefs),
            "ssds": list(self.ssds),
            "table": [list(column) for column in self.table],
        }

    @staticmethod
    def from_dict(data: Dict) -> "OutputFactorTable":
        """
        Create an :class:`OutputFactorTable` from a serialized dictionary.

        The table is rebuilt row by row so the usual shape checks apply.

        :param data: Dictionary as produced by :meth:`to_dict`.
        :type data: dict

        :returns: A new table.
        :rtype: OutputFactorTable

        :raises ValueError: If required fields are missing.
        """
        missing = [key for key in OutputFactorTable.REQUIRED_DICT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing required field(s) in dictionary: {', '.join(missing)}")

        table = OutputFactorTable()
        table.set_energies(data["energies"])
        table.set_zrefs(data["zrefs"])
        columns = data["table"]
        if len(columns) != len(table.energies) and data["ssds"]:
            raise ShapeMismatchError("energies", len(table.energies), len(columns))
        for column in columns:
            if len(column) != len(data["ssds"]):
                raise ShapeMismatchError("SSDs", len(data["ssds"]), len(column))
        for row_idx, ssd in enumerate(data["ssds"]):
            table.add_row(ssd, [column[row_idx] for column in columns])
        return table

    def to_dataframe(self) -> pd.DataFrame:
        """
        Output factors as a DataFrame, one row per SSD and one column per energy.

        Rows are sorted by SSD.

        :rtype: pd.DataFrame
        """
        df = pd.DataFrame(
            {energy: column for energy, column in zip(self.energies, self.table)},
            index=pd.Index(self.ssds, name="ssd"),
            columns=self.energies,
        )
        return df.sort_index()

    def plot(
        self,
        energies: Optional[Sequence[float]] = None,
        show: bool = True,
        ax: Optional[plt.Axes] = None
    ):
        """
        Plot output factor as a function of SSD, one curve per energy.

        :param energies: Energies to plot. If None, all are plotted.
        :type energies: Optional[Sequence[float]]
        :param show: Whether to call plt.show().
        :type show: bool
        :param ax: Matplotlib Axes object to draw on. If None, a new figure is created.
        :type ax: Optional[matplotlib.axes.Axes]
        """
        created_fig = False
        if ax is None:
            _, ax = plt.subplots()
            created_fig = True

        df = self.to_dataframe()
        for energy in (energies if energies is not None else self.energies):
            if energy not in df.columns:
                raise EnergyNotFoundError(energy, self.energies)
            ax.plot(df.index, df[energy], marker="o", label=f"{energy:g} MeV")

        ax.set_title("Output Factor vs SSD")
        ax.set_xlabel("SSD [cm]")
        ax.set_ylabel("Output factor")
        ax.grid(True)
        ax.legend()

        if show and created_fig:
            plt.tight_layout()
            plt.show()

    @staticmethod
    def from_csv(filepath: Union[str, Path]) -> ParsedTable:
        """
        Parse an output factor calibration file.

        *Example file*::

            Synergy1,,,
            Applicator,A10,,
            Dimensions,id,4,6
            Zref,,0.89,1.36
            95.0,,0.865,0.953
            100.0,,0.736,0.818

        The ``Zref`` row is optional. Each data row holds the SSD [cm] in the
        first column; the second column is unused; the output factors follow,
        aligned with the energy columns.

        :param filepath: Path to the ``of_*`` file.
        :type filepath: str or Path

        :returns: Machine, applicator and the populated table.
        :rtype: ParsedTable

        :raises FormatError: If the file does not follow the format above.
        """
        rows = read_rows(filepath)
        header, start = parse_header(filepath, rows)

        table = OutputFactorTable()
        table.set_energies(header.energies)

        if start < len(rows) and is_label_row(rows[start], ZREF_LABEL):
            table.set_zrefs(parse_values(filepath, rows[start], "zref"))
            start += 1

        data_rows = rows[start:]
        if not data_rows:
            raise FormatError("no SSD rows found", path=filepath)

        for row in data_rows:
            ssd = parse_float(filepath, row, 0, "SSD")
            values = parse_values(filepath, row, "output factor")
            try:
                table.add_row(ssd, values)
            except DuplicateEntryError as e:
                raise FormatError(str(e), path=filepath, row=row.number) from e

        return ParsedTable(header.machine, header.applicator, table, str(filepath))
