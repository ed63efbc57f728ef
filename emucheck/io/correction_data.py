"""
Combined correction data for one machine/applicator pair.

:class:`CorrectionData` owns one
:class:`~emucheck.io.output_factor.OutputFactorTable` and one
:class:`~emucheck.io.aperture.FieldDefiningApertureTable` and resolves the
total correction factor as their product:

    CF = OF(energy, SSD) * FDA(energy, aperture id)
"""

from typing import Dict, List, Optional, Sequence, Tuple

from emucheck.io.aperture import FieldDefiningApertureTable
from emucheck.io.output_factor import OutputFactorTable


class CorrectionData:
    """
    Output factor and aperture tables of one (machine, applicator) pair.

    Machine and applicator names are exact keys: comparisons are case and
    whitespace sensitive.
    """

    REQUIRED_DICT_KEYS = ["machine", "applicator", "output_factors", "fda"]

    def __init__(self, machine: str = "", applicator: str = "",
                 output_factors: Optional[OutputFactorTable] = None,
                 fda: Optional[FieldDefiningApertureTable] = None):
        self.machine = machine
        self.applicator = applicator
        self.output_factors = output_factors if output_factors is not None else OutputFactorTable()
        self.fda = fda if fda is not None else FieldDefiningApertureTable()

    def __repr__(self):
        return (f"<CorrectionData machine={self.machine!r}, applicator={self.applicator!r}, "
                f"energies={self.energies}>")

    @property
    def key(self) -> Tuple[str, str]:
        return self.machine, self.applicator

    @property
    def energies(self) -> List[float]:
        """Energies of the output factor table, in calibration column order."""
        return self.output_factors.energies

    def set_energies(self, values: Sequence[float]):
        self.output_factors.set_energies(values)
        self.fda.set_energies(values)

    def set_zrefs(self, values: Sequence[float]):
        self.output_factors.set_zrefs(values)

    def add_output_factor_row(self, ssd: float, values: Sequence[float]):
        self.output_factors.add_row(ssd, values)

    def add_aperture_row(self, name: str, aperture_id: int, values: Sequence[float]):
        self.fda.add_row(name, aperture_id, values)

    def get_zref(self, energy: float) -> Optional[float]:
        return self.output_factors.get_zref(energy)

    def validate(self) -> bool:
        """
        Check that both tables cover the same energies.

        The comparison ignores column order but not multiplicity: both tables
        must hold the same number of energies and the same set of values.

        :returns: True if the energy sets match.
        :rtype: bool
        """
        of_energies = self.output_factors.energies
        fda_energies = self.fda.energies
        return len(of_energies) == len(fda_energies) and set(of_energies) == set(fda_energies)

    def get_correction_factor(self, energy: float, ssd: float, aperture_id: int) -> float:
        """
        Total correction factor for an energy, SSD and aperture.

        :param energy: Beam energy [MeV].
        :type energy: float
        :param ssd: Source-to-skin distance [cm].
        :type ssd: float
        :param aperture_id: Field defining aperture id.
        :type aperture_id: int

        :returns: Output factor times aperture correction.
        :rtype: float

        :raises EnergyNotFoundError: If the energy is not calibrated.
        :raises SSDNotFoundError: If the SSD is outside the calibrated range.
        :raises ApertureNotFoundError: If the aperture id is unknown.
        """
        cf_of = self.output_factors.get_correction_factor(energy, ssd)
        cf_fda = self.fda.get_correction_factor(energy, aperture_id)
        return cf_of * cf_fda

    def to_dict(self) -> Dict:
        return {
            "machine": self.machine,
            "applicator": self.applicator,
            "output_factors": self.output_factors.to_dict(),
            "fda": self.fda.to_dict(),
        }

    @staticmethod
    def from_dict(data: Dict) -> "CorrectionData":
        """
        Create a :class:`CorrectionData` from a dictionary produced by :meth:`to_dict`.

        :raises ValueError: If required fields are missing.
        """
        missing = [key for key in CorrectionData.REQUIRED_DICT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing required field(s) in dictionary: {', '.join(missing)}")
        return CorrectionData(
            machine=data["machine"],
            applicator=data["applicator"],
            output_factors=OutputFactorTable.from_dict(data["output_factors"]),
            fda=FieldDefiningApertureTable.from_dict(data["fda"]),
        )
