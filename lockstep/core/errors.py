"""Error codes for CLI exit status.

Values are used as process exit codes and should remain stable:
- 0: Success
- 1: User error (bad input, malformed manifest or changelog, version drift)
- 2: Environment error (not a project directory, unreadable config)
- 5: I/O error (file not readable or not writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5
