"""
Field defining aperture (FDA) correction tables.

This module defines the :class:`FieldDefiningApertureTable`, which stores a
correction factor per (energy, aperture) for one machine/applicator pair.
Apertures are physical inserts identified by a display name and a unique
integer id; lookups are exact on both energy and id.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from emucheck.errors import (
    ApertureNotFoundError,
    DuplicateEntryError,
    DuplicateIdError,
    EnergyNotFoundError,
    FormatError,
    ShapeMismatchError,
)
from emucheck.io.calibration_file import ParsedTable, parse_header, parse_int, parse_values, read_rows


class FieldDefiningApertureTable:
    """
    Aperture correction factors indexed by (energy, aperture id).

    ``table[e][a]`` is the correction for ``energies[e]`` and ``ids[a]``;
    ``names[a]`` is the label of that aperture.
    """

    REQUIRED_DICT_KEYS = ["names", "ids", "energies", "table"]

    def __init__(self):
        self.names: List[str] = []
        self.ids: List[int] = []
        self.energies: List[float] = []
        self.table: List[List[float]] = []

    def __repr__(self):
        return f"<FieldDefiningApertureTable energies={self.energies}, ids={self.ids}>"

    def set_energies(self, values: Sequence[float]):
        self.energies = [float(v) for v in values]

    def add_row(self, name: str, aperture_id: int, values: Sequence[float]):
        """
        Append the corrections of one aperture, one value per energy.

        :param name: Display label of the aperture, e.g. ``"6x6"``.
        :type name: str
        :param aperture_id: Unique aperture identifier.
        :type aperture_id: int
        :param values: Correction factors aligned with :attr:`energies`.
        :type values: Sequence[float]

        :raises ShapeMismatchError: If the number of values differs from the number of energies.
        :raises DuplicateIdError: If the id is already present.
        """
        if len(values) != len(self.energies):
            raise ShapeMismatchError("energies", len(self.energies), len(values))
        if aperture_id in self.ids:
            raise DuplicateIdError(aperture_id)

        if not self.table:
            self.table = [[] for _ in self.energies]
        self.names.append(name)
        self.ids.append(int(aperture_id))
        for column, value in zip(self.table, values):
            column.append(float(value))

    def get_correction_factor(self, energy: float, aperture_id: int) -> float:
        """
        Correction factor of an aperture at an energy.

        :raises EnergyNotFoundError: If the energy is not in the table.
        :raises ApertureNotFoundError: If the aperture id is not in the table.
        """
        try:
            energy_idx = self.energies.index(energy)
        except ValueError:
            raise EnergyNotFoundError(energy, self.energies) from None
        try:
            aperture_idx = self.ids.index(aperture_id)
        except ValueError:
            raise ApertureNotFoundError(aperture_id) from None
        return self.table[energy_idx][aperture_idx]

    def get_name(self, aperture_id: int) -> Optional[str]:
        for name, id_ in zip(self.names, self.ids):
            if id_ == aperture_id:
                return name
        return None

    def labels(self) -> List[str]:
        """Display labels of the form ``"<name> [id=<id>]"``, in row order."""
        return [f"{name} [id={id_}]" for name, id_ in zip(self.names, self.ids)]

    def to_dict(self) -> Dict:
        return {
            "names": list(self.names),
            "ids": list(self.ids),
            "energies": list(self.energies),
            "table": [list(column) for column in self.table],
        }

    @staticmethod
    def from_dict(data: Dict) -> "FieldDefiningApertureTable":
        """
        Create a table from a dictionary produced by :meth:`to_dict`.

        :raises ValueError: If required fields are missing or the shapes are inconsistent.
        """
        missing = [key for key in FieldDefiningApertureTable.REQUIRED_DICT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing required field(s) in dictionary: {', '.join(missing)}")
        if len(data["names"]) != len(data["ids"]):
            raise ShapeMismatchError("aperture names", len(data["names"]), len(data["ids"]))

        table = FieldDefiningApertureTable()
        table.set_energies(data["energies"])
        columns = data["table"]
        if len(columns) != len(table.energies) and data["ids"]:
            raise ShapeMismatchError("energies", len(table.energies), len(columns))
        for column in columns:
            if len(column) != len(data["ids"]):
                raise ShapeMismatchError("aperture ids", len(data["ids"]), len(column))
        for row_idx, (name, aperture_id) in enumerate(zip(data["names"], data["ids"])):
            table.add_row(name, aperture_id, [column[row_idx] for column in columns])
        return table

    def to_dataframe(self) -> pd.DataFrame:
        """
        Corrections as a DataFrame with one row per aperture.

        The ``name`` and ``id`` columns are followed by one column per energy.

        :rtype: pd.DataFrame
        """
        df = pd.DataFrame({"name": self.names, "id": self.ids})
        for energy, column in zip(self.energies, self.table):
            df[energy] = column
        return df

    @staticmethod
    def from_csv(filepath: Union[str, Path]) -> ParsedTable:
        """
        Parse a field defining aperture calibration file.

        *Example file*::

            Synergy1,,,
            Applicator,A10,,
            Dimensions,id,4,6
            6x6,1,0.9,0.8
            4x4,10,2.9,2.8

        Each data row holds the aperture name, its integer id and one
        correction factor per energy column.

        :param filepath: Path to the ``fda_*`` file.
        :type filepath: str or Path

        :returns: Machine, applicator and the populated table.
        :rtype: ParsedTable

        :raises FormatError: If the file does not follow the format above.
        """
        rows = read_rows(filepath)
        header, start = parse_header(filepath, rows)

        table = FieldDefiningApertureTable()
        table.set_energies(header.energies)

        data_rows = rows[start:]
        if not data_rows:
            raise FormatError("no aperture rows found", path=filepath)

        for row in data_rows:
            name = row.cells[0].strip()
            if not name:
                raise FormatError("missing aperture name in column 1", path=filepath, row=row.number)
            aperture_id = parse_int(filepath, row, 1, "aperture id")
            values = parse_values(filepath, row, "aperture correction")
            try:
                table.add_row(name, aperture_id, values)
            except DuplicateEntryError as e:
                raise FormatError(str(e), path=filepath, row=row.number) from e

        return ParsedTable(header.machine, header.applicator, table, str(filepath))
