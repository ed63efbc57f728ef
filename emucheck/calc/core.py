"""
Parameter and result containers for the MU check.

This module defines:
- :class:`CalcParam`: the (possibly partial) description of the beam to verify
- :class:`MUResult`: the recomputed MU and its deviation from the plan

Every :class:`CalcParam` field is optional; ``None`` means "not supplied yet".
A zero is a real value, never a placeholder.
"""

from dataclasses import asdict, dataclass, fields
from typing import List, Optional

from tabulate import tabulate


@dataclass
class CalcParam:
    """
    Setup of the beam whose monitor units are verified.

    :ivar machine: Treatment machine name.
    :ivar applicator: Electron applicator name.
    :ivar energy: Beam energy [MeV].
    :ivar ssd: Source-to-skin distance [cm].
    :ivar aperture_id: Field defining aperture id.
    :ivar dose_zref: Prescribed dose at the reference depth [cGy].
    :ivar depth_zref: Reference depth [cm], informational.
    :ivar planned_mu: MU of the beam in the treatment plan.
    """

    @classmethod
    def from_dict(cls, config: dict) -> "CalcParam":
        """
        Create a CalcParam from a dictionary.

        :param config: Dictionary of field values; absent fields stay unset.
        :type config: dict

        :returns: Populated CalcParam.
        :rtype: CalcParam

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        extra_keys = set(config.keys()) - set(cls.__dataclass_fields__.keys())
        if extra_keys:
            raise ValueError(f"Unrecognized keys in CalcParam config: {sorted(extra_keys)}")
        return cls(**config)

    machine: Optional[str] = None
    applicator: Optional[str] = None
    energy: Optional[float] = None
    ssd: Optional[float] = None
    aperture_id: Optional[int] = None
    dose_zref: Optional[float] = None
    depth_zref: Optional[float] = None
    planned_mu: Optional[float] = None

    # Needed to compute an MU value; depth_zref and planned_mu are informational.
    REQUIRED_FIELDS = ("machine", "applicator", "energy", "ssd", "aperture_id", "dose_zref")

    def missing_fields(self, required: bool = True) -> List[str]:
        """
        Names of the unset fields.

        :param required: If True, only fields needed to compute MU are reported.
        :type required: bool

        :rtype: list[str]
        """
        names = self.REQUIRED_FIELDS if required else [f.name for f in fields(self)]
        return [name for name in names if getattr(self, name) is None]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def to_dict(self) -> dict:
        return asdict(self)

    def summary(self):
        rows = [
            ("Machine", self.machine),
            ("Applicator", self.applicator),
            ("Energy [MeV]", self.energy),
            ("SSD [cm]", self.ssd),
            ("FDA id", self.aperture_id),
            ("Dose at zref [cGy]", self.dose_zref),
            ("zref [cm]", self.depth_zref),
            ("Planned MU", self.planned_mu),
        ]
        print(tabulate(rows, headers=["Parameter", "Value"], tablefmt="fancy_grid", missingval="-"))


@dataclass
class MUResult:
    """
    Outcome of an MU check.

    :ivar mu: Recomputed monitor units.
    :ivar correction_factor: Combined correction factor used.
    :ivar calc_param: Fully resolved parameters.
    """
    mu: float
    correction_factor: float
    calc_param: CalcParam

    @property
    def difference_percent(self) -> Optional[float]:
        """
        Deviation of the planned MU from the check, ``(1 - planned / check) * 100``.

        :returns: Percentage, or None when the planned MU is unknown or the
                  check gives zero MU (zero dose at zref).
        :rtype: float or None
        """
        if self.calc_param.planned_mu is None or self.mu == 0:
            return None
        return (1.0 - self.calc_param.planned_mu / self.mu) * 100.0

    def summary(self):
        """Print the parameters and the check result."""
        self.calc_param.summary()
        rows = [
            ("Correction factor", f"{self.correction_factor:.6f}"),
            ("MU (check)", f"{self.mu:.4f}"),
        ]
        if self.difference_percent is not None:
            rows.append(("Difference [%]", f"{self.difference_percent:.6f}"))
        print(tabulate(rows, headers=["Result", "Value"], tablefmt="fancy_grid", disable_numparse=True))
