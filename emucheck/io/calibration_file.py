"""
Reading and validation of calibration CSV files.

Both calibration file types share the same three header rows::

    <machine>,,...
    Applicator,<applicator>,...
    Dimensions,id,<E1>,<E2>,...

followed by table-specific data rows. This module provides the pieces both
parsers need:

- :func:`read_rows`: read the non-empty rows of a file and enforce a constant width
- :func:`parse_header`: validate the header rows and extract machine, applicator and energies
- :func:`parse_float` / :func:`parse_int`: numeric cell conversion with file/row context

Rows are reported 1-based, as a spreadsheet shows them. Every failure raises
:class:`~emucheck.errors.FormatError`.
"""

import csv
import math
from pathlib import Path
from typing import Any, List, NamedTuple, Sequence, Tuple, Union

from emucheck.errors import FormatError

APPLICATOR_LABEL = "Applicator"
DIMENSIONS_LABEL = "Dimensions"
ID_LABEL = "id"
ZREF_LABEL = "Zref"

# Column holding the first energy (and first value of every data row).
FIRST_VALUE_COLUMN = 2


class Row(NamedTuple):
    """A non-empty CSV row and its 1-based line number in the file."""
    number: int
    cells: List[str]


class Header(NamedTuple):
    machine: str
    applicator: str
    energies: List[float]


class ParsedTable(NamedTuple):
    """Raw result of parsing one calibration file, before pairing."""
    machine: str
    applicator: str
    table: Any
    path: str


def read_rows(path: Union[str, Path]) -> List[Row]:
    """
    Read all non-empty rows of a calibration file.

    Blank lines (and rows made only of empty cells) are skipped. Every other
    row must have the same number of columns as the first one.

    :param path: Calibration file.
    :type path: str or Path

    :returns: Non-empty rows in file order.
    :rtype: list[Row]

    :raises FormatError: If row widths differ or the file is not valid UTF-8 CSV.
    """
    rows = []
    width = None
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        try:
            for cells in reader:
                if not any(cell.strip() for cell in cells):
                    continue
                if width is None:
                    width = len(cells)
                elif len(cells) != width:
                    raise FormatError(
                        f"expected {width} columns, found {len(cells)}",
                        path=path, row=reader.line_num,
                    )
                rows.append(Row(reader.line_num, cells))
        except UnicodeDecodeError as e:
            raise FormatError(f"file is not valid UTF-8 text ({e.reason})", path=path) from e
        except csv.Error as e:
            raise FormatError(str(e), path=path, row=reader.line_num) from e
    return rows


def _label_matches(cell: str, expected: str) -> bool:
    return cell.strip().lower() == expected.lower()


def expect_label(path, row: Row, column: int, expected: str):
    """
    Check that a header cell carries the expected label.

    :raises FormatError: Naming the expected label and its position.
    """
    found = row.cells[column] if column < len(row.cells) else ""
    if not _label_matches(found, expected):
        raise FormatError(
            f"expected label '{expected}' in column {column + 1}, found '{found}'",
            path=path, row=row.number,
        )


def is_label_row(row: Row, label: str) -> bool:
    return _label_matches(row.cells[0], label)


def parse_float(path, row: Row, column: int, what: str) -> float:
    """
    Convert a cell to a finite float.

    :param path: File the cell belongs to (for the error message).
    :param row: Row holding the cell.
    :param column: 0-based column index.
    :param what: Human readable name of the quantity, e.g. ``"energy"``.

    :raises FormatError: If the cell is not a finite number.
    """
    text = row.cells[column].strip()
    try:
        value = float(text)
    except ValueError:
        raise FormatError(
            f"{what} in column {column + 1} is not a number: '{text}'",
            path=path, row=row.number,
        ) from None
    if not math.isfinite(value):
        raise FormatError(
            f"{what} in column {column + 1} must be finite, found '{text}'",
            path=path, row=row.number,
        )
    return value


def parse_int(path, row: Row, column: int, what: str) -> int:
    """
    Convert a cell to a non-negative integer.

    Integral floats such as ``"10.0"`` are accepted.

    :raises FormatError: If the cell is not a non-negative integer.
    """
    text = row.cells[column].strip()
    try:
        value = int(text)
    except ValueError:
        try:
            as_float = float(text)
        except ValueError:
            as_float = math.nan
        if not (math.isfinite(as_float) and as_float.is_integer()):
            raise FormatError(
                f"{what} in column {column + 1} is not an integer: '{text}'",
                path=path, row=row.number,
            ) from None
        value = int(as_float)
    if value < 0:
        raise FormatError(
            f"{what} in column {column + 1} must be non-negative, found {value}",
            path=path, row=row.number,
        )
    return value


def parse_values(path, row: Row, what: str) -> List[float]:
    """Parse every cell from the first value column onward as a float."""
    return [
        parse_float(path, row, col, what)
        for col in range(FIRST_VALUE_COLUMN, len(row.cells))
    ]


def parse_header(path, rows: Sequence[Row]) -> Tuple[Header, int]:
    """
    Validate the three header rows shared by both calibration file types.

    :param path: Calibration file (for error messages).
    :param rows: Non-empty rows as returned by :func:`read_rows`.

    :returns: The parsed header and the index of the first row after it.
    :rtype: tuple[Header, int]

    :raises FormatError: On a missing row, a missing or wrong label, an
                         empty machine or applicator name, or invalid energies.
    """
    if len(rows) < 3:
        raise FormatError(
            f"expected 3 header rows (machine, applicator, energies), found {len(rows)}",
            path=path,
        )
    if len(rows[0].cells) <= FIRST_VALUE_COLUMN:
        raise FormatError(
            f"expected at least {FIRST_VALUE_COLUMN + 1} columns, found {len(rows[0].cells)}",
            path=path, row=rows[0].number,
        )

    machine_row, applicator_row, energy_row = rows[0], rows[1], rows[2]

    machine = machine_row.cells[0]
    if not machine.strip():
        raise FormatError("missing machine name in column 1", path=path, row=machine_row.number)

    expect_label(path, applicator_row, 0, APPLICATOR_LABEL)
    applicator = applicator_row.cells[1]
    if not applicator.strip():
        raise FormatError("missing applicator name in column 2", path=path, row=applicator_row.number)

    expect_label(path, energy_row, 0, DIMENSIONS_LABEL)
    expect_label(path, energy_row, 1, ID_LABEL)
    energies = parse_values(path, energy_row, "energy")
    if len(set(energies)) != len(energies):
        raise FormatError(f"duplicate energies {energies}", path=path, row=energy_row.number)

    return Header(machine, applicator, energies), 3
