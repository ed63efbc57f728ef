"""
Loading of calibration directories.

This module defines the :class:`CalibrationLoader`, which turns a directory
of calibration files into a list of validated
:class:`~emucheck.io.correction_data.CorrectionData`.

The load runs in four steps:

1. **Discover** the ``of_*`` and ``fda_*`` files (non-recursive); their counts
   must match, one pair per machine/applicator.
2. **Parse** every file on a thread pool. Tasks share no state; all of them
   are joined before anything else happens, and the first failure aborts the load.
3. **Pair** each output factor table with the aperture table of the same
   machine and applicator whose energies match.
4. **Assemble** the validated pairs. An empty result is an error.

A partially loaded calibration set is never returned.

Examples
--------

>>> loader = CalibrationLoader()
>>> data = loader.load("calibration/")
>>> [cd.key for cd in data]
[('Synergy1', 'A10'), ('Synergy1', 'A14')]
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from emucheck.config import LoaderSettings
from emucheck.errors import (
    CountMismatchError,
    DirectoryNotFoundError,
    EmptyResultError,
    TableMismatchError,
)
from emucheck.io.aperture import FieldDefiningApertureTable
from emucheck.io.calibration_file import ParsedTable
from emucheck.io.correction_data import CorrectionData
from emucheck.io.output_factor import OutputFactorTable
from emucheck.utils.parallel import optimal_worker_count

logger = logging.getLogger(__name__)

ParseJob = Tuple[Callable[[Path], ParsedTable], Path]


class CalibrationLoader:
    """
    Discover, parse, pair and validate the calibration files of a directory.

    :param settings: File naming and concurrency settings. Defaults to
                     :class:`~emucheck.config.LoaderSettings` defaults.
    :type settings: LoaderSettings, optional
    """

    def __init__(self, settings: Optional[LoaderSettings] = None):
        self.settings = settings if settings is not None else LoaderSettings()

    def discover(self, directory: Union[str, Path]) -> Tuple[List[Path], List[Path]]:
        """
        List the output factor and aperture files of a directory.

        Only regular files directly inside ``directory`` are considered; files
        without a known prefix are ignored. Both lists are sorted by name.

        :param directory: Calibration directory.
        :type directory: str or Path

        :returns: (output factor files, aperture files).
        :rtype: tuple[list[Path], list[Path]]

        :raises DirectoryNotFoundError: If ``directory`` is not a directory.
        :raises CountMismatchError: If the two file counts differ.
        """
        path = Path(directory)
        if not path.is_dir():
            raise DirectoryNotFoundError(directory)

        of_files, fda_files = [], []
        for entry in sorted(path.iterdir()):
            if not entry.is_file():
                continue
            if entry.name.startswith(self.settings.of_prefix):
                of_files.append(entry)
            elif entry.name.startswith(self.settings.fda_prefix):
                fda_files.append(entry)
            else:
                logger.debug("Ignoring %s (no calibration prefix)", entry)

        logger.debug("Found %d output factor and %d aperture files in %s",
                     len(of_files), len(fda_files), path)
        if len(of_files) != len(fda_files):
            raise CountMismatchError(len(of_files), len(fda_files))
        return of_files, fda_files

    def parse_all(self, jobs: Sequence[ParseJob]) -> List[ParsedTable]:
        """
        Run the parse jobs concurrently and return their results in job order.

        All jobs are joined before returning. If any job fails, pending jobs
        are cancelled and the first error observed is raised.

        :param jobs: (parser, path) pairs.
        :type jobs: Sequence[tuple[callable, Path]]

        :returns: Parsed tables, aligned with ``jobs``.
        :rtype: list[ParsedTable]
        """
        if not jobs:
            return []

        workers = optimal_worker_count(jobs, self.settings.max_workers)
        results: List[Optional[ParsedTable]] = [None] * len(jobs)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(parser, path): idx for idx, (parser, path) in enumerate(jobs)}
            completed = as_completed(futures)
            if self.settings.show_progress:
                completed = tqdm(completed, total=len(futures),
                                 desc=f"[{workers} workers] calibration files", unit="file")
            try:
                for future in completed:
                    results[futures[future]] = future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise
            finally:
                if isinstance(completed, tqdm):
                    completed.close()

        return results

    @staticmethod
    def _reject_duplicates(parsed: Sequence[ParsedTable], kind: str):
        seen = {}
        for item in parsed:
            key = (item.machine, item.applicator)
            if key in seen:
                raise TableMismatchError(
                    item.machine, item.applicator,
                    f"duplicate {kind} tables: '{seen[key]}' and '{item.path}'",
                )
            seen[key] = item.path

    def pair(self, of_tables: Sequence[ParsedTable],
             fda_tables: Sequence[ParsedTable]) -> List[CorrectionData]:
        """
        Combine each output factor table with its aperture table.

        An aperture table matches when its machine and applicator are equal to
        those of the output factor table and the resulting
        :class:`CorrectionData` validates. The first match is used.

        :param of_tables: Parsed output factor files.
        :param fda_tables: Parsed aperture files.

        :returns: Validated correction data, in output factor file order.
        :rtype: list[CorrectionData]

        :raises TableMismatchError: On a duplicate pair, a missing aperture
                                    table or an energy mismatch.
        """
        self._reject_duplicates(of_tables, "output factor")
        self._reject_duplicates(fda_tables, "field defining aperture")

        result = []
        for of in of_tables:
            candidates = [fda for fda in fda_tables
                          if fda.machine == of.machine and fda.applicator == of.applicator]
            if not candidates:
                raise TableMismatchError(
                    of.machine, of.applicator,
                    f"no field defining aperture table found for '{of.path}'",
                )

            for fda in candidates:
                cd = CorrectionData(of.machine, of.applicator, output_factors=of.table, fda=fda.table)
                if cd.validate():
                    break
            else:
                raise TableMismatchError(
                    of.machine, of.applicator,
                    "mismatch between the energies in the output factor table "
                    f"{of.table.energies} ('{of.path}') and the field defining aperture table "
                    f"{candidates[0].table.energies} ('{candidates[0].path}')",
                )

            logger.debug("Paired '%s' with '%s'", of.path, fda.path)
            result.append(cd)
        return result

    def load(self, directory: Union[str, Path]) -> List[CorrectionData]:
        """
        Load and validate all correction data of a calibration directory.

        :param directory: Calibration directory.
        :type directory: str or Path

        :returns: One CorrectionData per machine/applicator pair.
        :rtype: list[CorrectionData]

        :raises DirectoryNotFoundError: If the directory does not exist.
        :raises CountMismatchError: If the file counts differ.
        :raises FormatError: If a file is malformed.
        :raises TableMismatchError: If tables cannot be paired.
        :raises EmptyResultError: If no correction data was found.
        """
        of_files, fda_files = self.discover(directory)

        jobs = [(OutputFactorTable.from_csv, p) for p in of_files]
        jobs += [(FieldDefiningApertureTable.from_csv, p) for p in fda_files]
        parsed = self.parse_all(jobs)
        of_tables, fda_tables = parsed[:len(of_files)], parsed[len(of_files):]

        data = self.pair(of_tables, fda_tables)
        if not data:
            raise EmptyResultError(directory)

        logger.info("Loaded %d correction data table(s) from %s", len(data), directory)
        return data


def load_data(directory: Union[str, Path], settings: Optional[LoaderSettings] = None) -> List[CorrectionData]:
    """
    Load the correction data of a calibration directory.

    Shortcut for ``CalibrationLoader(settings).load(directory)``.
    """
    return CalibrationLoader(settings).load(directory)
