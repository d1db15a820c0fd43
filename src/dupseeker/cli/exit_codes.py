"""Exit codes of the ``dupseeker`` command.

- 0: duplicates marked and metrics written
- 1: the run failed (unreadable input, write error, ...)
- 2: bad command line or configuration
- 130 / 143: stopped by SIGINT / SIGTERM; no metrics are written
"""

import signal

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_SIGINT = 128 + signal.SIGINT
EXIT_SIGTERM = 128 + signal.SIGTERM


def signal_exit_code(signum: int) -> int:
    """Shell convention for a process ended by ``signum``."""
    return 128 + int(signum)
