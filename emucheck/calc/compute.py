"""
Monitor unit computation.

- :func:`compute_mu`: MU from a reference dose and a correction factor
- :func:`calculate_mu`: MU check for a complete :class:`~emucheck.calc.core.CalcParam`
- :func:`resolve_calc_param`: complete a partial CalcParam from the loaded data
  and an :class:`~emucheck.calc.prompts.InputProvider`
- :func:`load_and_compute`: load a calibration directory and run the check

The recomputed MU is::

    MU = dose(zref) / (OF(energy, SSD) * FDA(energy, aperture))
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple, Union

from emucheck.calc.core import CalcParam, MUResult
from emucheck.calc.prompts import InputProvider
from emucheck.config import LoaderSettings, default_data_dir
from emucheck.errors import (
    ApplicatorNotFoundError,
    EnergyNotFoundError,
    IncompleteParametersError,
    MachineNotFoundError,
    ZeroCorrectionFactorError,
)
from emucheck.io.correction_data import CorrectionData
from emucheck.io.data_set import CorrectionDataSet

logger = logging.getLogger(__name__)


def compute_mu(reference_dose: float, correction_factor: float) -> float:
    """
    Monitor units delivering ``reference_dose`` for a given correction factor.

    :param reference_dose: Dose at the reference depth [cGy].
    :type reference_dose: float
    :param correction_factor: Combined correction factor.
    :type correction_factor: float

    :returns: Monitor units.
    :rtype: float

    :raises ZeroCorrectionFactorError: If the correction factor is zero.
    """
    if correction_factor == 0:
        raise ZeroCorrectionFactorError()
    return reference_dose / correction_factor


def calculate_mu(calc_param: CalcParam, correction_data: CorrectionData) -> MUResult:
    """
    Recompute the MU of a fully specified beam.

    :param calc_param: Complete calculation parameters.
    :type calc_param: CalcParam
    :param correction_data: Tables of the beam's machine and applicator.
    :type correction_data: CorrectionData

    :returns: The MU check result.
    :rtype: MUResult

    :raises IncompleteParametersError: If a required parameter is unset.
    """
    missing = calc_param.missing_fields()
    if missing:
        raise IncompleteParametersError(missing)

    cf = correction_data.get_correction_factor(calc_param.energy, calc_param.ssd, calc_param.aperture_id)
    mu = compute_mu(calc_param.dose_zref, cf)
    logger.info("MU check [%s / %s, %g MeV, SSD %g cm, FDA id %d]: CF=%.6f, MU=%.4f",
                calc_param.machine, calc_param.applicator, calc_param.energy,
                calc_param.ssd, calc_param.aperture_id, cf, mu)
    return MUResult(mu=mu, correction_factor=cf, calc_param=calc_param)


def _choose(provider: InputProvider, message: str, options: list, labels: list):
    return options[provider.choose(message, labels)]


def resolve_calc_param(
    data_set: CorrectionDataSet,
    calc_param: Optional[CalcParam] = None,
    provider: Optional[InputProvider] = None
) -> Tuple[CalcParam, CorrectionData]:
    """
    Fill in the missing parameters of a calculation request.

    Missing values are asked from ``provider`` in the order machine, energy,
    applicator, aperture, SSD, dose at zref and planned MU. The choices
    offered are those available in ``data_set`` for the values already known.
    Supplied values are checked against the data set. ``depth_zref`` is
    taken from the resolved table when unset.

    :param data_set: Loaded correction data.
    :type data_set: CorrectionDataSet
    :param calc_param: Partial parameters. The object is not modified.
    :type calc_param: CalcParam, optional
    :param provider: Source of the missing values.
    :type provider: InputProvider, optional

    :returns: The completed parameters and the matching correction data.
    :rtype: tuple[CalcParam, CorrectionData]

    :raises IncompleteParametersError: If parameters are missing and there is no provider.
    :raises MachineNotFoundError: If the machine is not in the data set.
    :raises EnergyNotFoundError: If the machine has no such energy.
    :raises ApplicatorNotFoundError: If the applicator does not offer the energy.
    """
    param = replace(calc_param) if calc_param is not None else CalcParam()
    if provider is None and not param.is_complete():
        raise IncompleteParametersError(param.missing_fields())

    machines = data_set.list_machines()
    if param.machine is None:
        param.machine = _choose(provider, "Select a machine", machines, machines)
    elif param.machine not in machines:
        raise MachineNotFoundError(param.machine)

    energies = data_set.list_energies(param.machine)
    if param.energy is None:
        param.energy = _choose(provider, "Select energy", energies, [f"{e:g} MeV" for e in energies])
    elif param.energy not in energies:
        raise EnergyNotFoundError(param.energy, energies)

    applicators = data_set.list_applicators(param.machine, param.energy)
    if param.applicator is None:
        param.applicator = _choose(provider, "Select applicator", applicators, applicators)
    elif param.applicator not in applicators:
        raise ApplicatorNotFoundError(param.machine, param.applicator, param.energy)

    correction_data = data_set.resolve(param.machine, param.applicator)

    if param.aperture_id is None:
        apertures = data_set.list_apertures(param.machine, param.energy, param.applicator)
        param.aperture_id = _choose(
            provider, "Select FDA",
            [aperture_id for _, aperture_id in apertures],
            [f"{name} [id={aperture_id}]" for name, aperture_id in apertures],
        )

    if param.depth_zref is None:
        param.depth_zref = correction_data.get_zref(param.energy)

    if param.ssd is None:
        param.ssd = provider.ask_float("SSD [cm]")

    if param.dose_zref is None:
        zref = f"{param.depth_zref:g} cm" if param.depth_zref is not None else "n/a"
        param.dose_zref = provider.ask_float(f"Dose (cGy) [zref: {zref}]")

    if param.planned_mu is None and provider is not None:
        param.planned_mu = provider.ask_float("Planned beam MUs")

    return param, correction_data


def load_and_compute(
    directory: Optional[Union[str, Path]] = None,
    calc_param: Optional[CalcParam] = None,
    provider: Optional[InputProvider] = None,
    settings: Optional[LoaderSettings] = None
) -> Tuple[float, CalcParam]:
    """
    Load a calibration directory and verify the MU of one beam.

    :param directory: Calibration directory. Defaults to :func:`~emucheck.config.default_data_dir`.
    :type directory: str or Path, optional
    :param calc_param: Partial or complete parameters.
    :type calc_param: CalcParam, optional
    :param provider: Source of missing parameters.
    :type provider: InputProvider, optional
    :param settings: Loader settings.
    :type settings: LoaderSettings, optional

    :returns: The recomputed MU and the resolved parameters.
    :rtype: tuple[float, CalcParam]
    """
    directory = directory if directory is not None else default_data_dir()
    data_set = CorrectionDataSet.from_directory(directory, settings)
    param, correction_data = resolve_calc_param(data_set, calc_param, provider)
    result = calculate_mu(param, correction_data)
    return result.mu, result.calc_param
