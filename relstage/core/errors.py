"""Exit codes for the staging CLI.

The numeric values are process exit codes and should remain stable:
- 0: Success
- 1: User error (invalid release type, branch or build version)
- 2: Environment error (missing tools, unreachable bucket)
- 3: Build error (artifact build or changelog generation failed)
- 4: Network error (upload, image push or remote submission failed)
- 5: I/O error (git plumbing, workspace preparation)
- 6: Conflict (repository already carries the requested tag)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    CONFLICT = 6

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
