"""Exit codes for the extpub CLI.

The numeric values are part of the CLI contract and should remain stable:
- 0: Success
- 1: User error (unreadable or invalid build description)
- 2: Environment error (plugins applied in the wrong order, bad wiring)
- 3: Build error (a simulated task failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        """Check if this code indicates an error."""
        return self != ErrorCode.OK
