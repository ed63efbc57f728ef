"""
Loader configuration and default locations.

- :class:`LoaderSettings`: file naming convention and concurrency settings
  used by :class:`~emucheck.io.loader.CalibrationLoader`.
- :func:`default_data_dir`: where calibration files are looked for when the
  caller does not name a directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DATA_DIR_ENV = "EMUCHECK_DATA_DIR"


@dataclass
class LoaderSettings:
    """
    Settings for discovering and parsing calibration files.

    :ivar of_prefix: Filename prefix of output factor tables.
    :ivar fda_prefix: Filename prefix of field defining aperture tables.
    :ivar max_workers: Number of parse threads. If None, sized from the workload.
    :ivar show_progress: Display a progress bar while files are parsed.
    """

    @classmethod
    def from_dict(cls, config: dict) -> "LoaderSettings":
        """
        Create a LoaderSettings instance from a dictionary.

        :param config: Dictionary of configuration fields.
        :type config: dict

        :returns: Populated LoaderSettings instance.
        :rtype: LoaderSettings

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        extra_keys = set(config.keys()) - set(cls.__dataclass_fields__.keys())
        if extra_keys:
            raise ValueError(
                f"Unrecognized keys in LoaderSettings config: {sorted(extra_keys)}"
            )
        return cls(**config)

    of_prefix: str = "of_"
    fda_prefix: str = "fda_"
    max_workers: Optional[int] = None
    show_progress: bool = False

    def __post_init__(self):
        if not self.of_prefix or not self.fda_prefix:
            raise ValueError("File prefixes must be non-empty.")
        if self.of_prefix.startswith(self.fda_prefix) or self.fda_prefix.startswith(self.of_prefix):
            raise ValueError(
                f"File prefixes '{self.of_prefix}' and '{self.fda_prefix}' must not overlap."
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1.")


def default_data_dir() -> Path:
    """
    Default directory holding the calibration files.

    ``$EMUCHECK_DATA_DIR`` when set, otherwise ``~/.emucheck``.

    :returns: Path to the calibration directory (not guaranteed to exist).
    :rtype: Path
    """
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".emucheck"
