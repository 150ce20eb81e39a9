"""Process exit codes.

Every command maps its failure to one of these codes so that CI jobs can
tell a bad invocation apart from a failed test run or a git problem.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for relprep commands.

    The numeric values are part of the CLI contract:
    - 0: Success
    - 1: User error (bad version string, invalid arguments, bad config)
    - 2: Environment error (dirty working tree, missing tools)
    - 3: Verification error (tests failed, changelog generation failed)
    - 4: Git error (push rejected, merge conflict, remote unreachable)
    - 5: I/O error (file unreadable or unwritable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    VERIFY_ERROR = 3
    GIT_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
