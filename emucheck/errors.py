"""
Exception hierarchy for emucheck.

All exceptions derive from :class:`EmuError`. Two families matter to callers:

- :class:`NotFoundError` (a :class:`LookupError`): a requested machine,
  applicator, energy, SSD or aperture is not covered by the calibration data.
  The caller can recover by asking for different input.
- :class:`CalibrationError` (a :class:`ValueError`): the calibration files
  themselves are malformed or inconsistent. The loaded data cannot be trusted
  and the load must be aborted.

Every exception keeps the offending values as attributes so that a caller can
report them without parsing the message.
"""

from typing import Optional, Sequence


class EmuError(Exception):
    """Base class for all emucheck errors."""


# --- Lookup failures --------------------------------------------------------

class NotFoundError(EmuError, LookupError):
    """A requested key is not present in the calibration data."""


class MachineNotFoundError(NotFoundError):
    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(f"Machine [{machine}] was not found")


class ApplicatorNotFoundError(NotFoundError):
    def __init__(self, machine: str, applicator: str, energy: Optional[float] = None):
        self.machine = machine
        self.applicator = applicator
        self.energy = energy
        msg = f"Applicator [{applicator}] not found for machine [{machine}]"
        if energy is not None:
            msg += f" at energy [{energy}]"
        super().__init__(msg)


class EnergyNotFoundError(NotFoundError):
    def __init__(self, energy: float, available: Optional[Sequence[float]] = None):
        self.energy = energy
        self.available = list(available) if available is not None else None
        msg = f"Energy [{energy}] not found"
        if self.available is not None:
            msg += f" (available: {self.available})"
        super().__init__(msg)


class SSDNotFoundError(NotFoundError):
    def __init__(self, ssd: float, energy: Optional[float] = None,
                 ssd_range: Optional[Sequence[float]] = None):
        self.ssd = ssd
        self.energy = energy
        self.ssd_range = tuple(ssd_range) if ssd_range is not None else None
        msg = f"SSD [{ssd}] is out of range"
        if energy is not None:
            msg += f" for energy [{energy}]"
        if self.ssd_range is not None:
            msg += f" (calibrated: {self.ssd_range[0]} - {self.ssd_range[1]})"
        super().__init__(msg)


class ApertureNotFoundError(NotFoundError):
    def __init__(self, aperture_id: int):
        self.aperture_id = aperture_id
        super().__init__(f"FDA id [{aperture_id}] not found")


class CorrectionDataNotFoundError(NotFoundError):
    def __init__(self, machine: str, applicator: str):
        self.machine = machine
        self.applicator = applicator
        super().__init__(
            f"No correction data found for [machine: {machine}, applicator: {applicator}]"
        )


class AmbiguousMatchError(NotFoundError):
    def __init__(self, machine: str, applicator: str, count: int):
        self.machine = machine
        self.applicator = applicator
        self.count = count
        super().__init__(
            f"Multiple correction data matches ({count}) found for "
            f"[machine: {machine}, applicator: {applicator}]"
        )


# --- Calibration data errors ------------------------------------------------

class CalibrationError(EmuError, ValueError):
    """The calibration data is malformed or structurally inconsistent."""


class FormatError(CalibrationError):
    def __init__(self, message: str, path: Optional[str] = None, row: Optional[int] = None):
        self.path = str(path) if path is not None else None
        self.row = row
        location = ""
        if self.path is not None:
            location = f"{self.path}"
            if row is not None:
                location += f", row {row}"
            location += ": "
        super().__init__(f"Invalid format: {location}{message}")


class ShapeMismatchError(CalibrationError):
    def __init__(self, what: str, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Mismatch between the number of {what} [{expected}] "
            f"and the number of values [{actual}]"
        )


class DuplicateEntryError(CalibrationError):
    """A key that must be unique within a table was added twice."""


class DuplicateIdError(DuplicateEntryError):
    def __init__(self, aperture_id: int):
        self.aperture_id = aperture_id
        super().__init__(f"FDA id [{aperture_id}] is already present in the table")


class DuplicateSSDError(DuplicateEntryError):
    def __init__(self, ssd: float):
        self.ssd = ssd
        super().__init__(f"SSD [{ssd}] is already present in the table")


class TableMismatchError(CalibrationError):
    def __init__(self, machine: str, applicator: str, reason: str):
        self.machine = machine
        self.applicator = applicator
        super().__init__(f"[machine: {machine}, applicator: {applicator}] {reason}")


class CountMismatchError(CalibrationError):
    def __init__(self, n_output_factor: int, n_aperture: int):
        self.n_output_factor = n_output_factor
        self.n_aperture = n_aperture
        super().__init__(
            "Number of files with output factors must be identical to the number of "
            f"files with field defining apertures (got {n_output_factor} and {n_aperture})."
        )


class EmptyResultError(CalibrationError):
    def __init__(self, directory: str):
        self.directory = str(directory)
        super().__init__(f"No configuration data was loaded from '{directory}'.")


class DirectoryNotFoundError(EmuError, FileNotFoundError):
    def __init__(self, directory: str):
        self.directory = str(directory)
        super().__init__(f"Directory '{directory}' not found")


# --- Calculation errors -----------------------------------------------------

class ZeroCorrectionFactorError(EmuError, ZeroDivisionError):
    def __init__(self):
        super().__init__(
            "Correction factor is zero; the calibration table contains a zero entry."
        )


class IncompleteParametersError(EmuError, ValueError):
    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing calculation parameter(s): {', '.join(self.missing)}")
