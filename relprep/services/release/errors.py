from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "parse_error",
    "generator_error",
    "test_failure",
    "merge_conflict",
    "git_failed",
    "dirty_worktree",
    "invalid_input",
    "config_error",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    ``stage`` is filled in by the pipeline driver with the stage that was
    running when the error happened.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    stage: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
