"""
Worker sizing for the concurrent calibration file parser.

- :func:`optimal_worker_count`: number of threads to use when parsing a batch
  of calibration files.

Parsing is dominated by file I/O, so the ceiling follows the thread pool
convention of ``min(32, cpu_count + 4)`` rather than the CPU count alone.
"""

import os
import warnings

MAX_IO_WORKERS = 32


def max_worker_count() -> int:
    """
    Upper bound on the number of parse threads for this host.

    :returns: ``min(32, cpu_count + 4)``.
    :rtype: int
    """
    return min(MAX_IO_WORKERS, (os.cpu_count() or 1) + 4)


def optimal_worker_count(workload, user_requested: int = None) -> int:
    """
    Determine how many threads should parse a set of calibration files.

    One thread per file, never more than :func:`max_worker_count`, never fewer
    than one. A user request is honoured but capped at the same bound.

    :param workload: Files to parse, as a sized iterable or a count.
    :type workload: iterable or int
    :param user_requested: Optional user-defined number of workers.
    :type user_requested: int or None

    :returns: Number of worker threads (always at least 1).
    :rtype: int
    """
    ceiling = max_worker_count()
    size = len(workload) if hasattr(workload, '__len__') else int(workload)

    if size == 0:
        return 1

    if user_requested is not None:
        capped = max(1, min(user_requested, ceiling))
        if user_requested > ceiling:
            warnings.warn(
                f"Requested {user_requested} parse workers, but at most {ceiling} are allowed "
                f"on this host. Using {capped} workers instead."
            )
        return capped

    return min(size, ceiling)
