"""Collaborators the release pipeline talks to.

The pipeline only sees these protocols; production wires in
``relprep.git.Repository`` and ``relprep.platform.process.run_silent``,
tests wire in in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relprep.core.config import Config
from relprep.core.result import Result
from relprep.git.repository import GitError
from relprep.output.console import ConsoleProtocol
from relprep.platform.process import ProcessError
from relprep.services.release.errors import ReleaseError

CommandRunner = Callable[[list[str], Path], Result[None, ProcessError]]


class SourceControl(Protocol):
    path: Path
    remote: str

    def dirty_paths(self) -> Result[tuple[str, ...], GitError]: ...

    def resolve_commit(self, ref: str) -> Result[str, GitError]: ...

    def head_sha(self) -> Result[str, GitError]: ...

    def fetch(self, ref: str) -> Result[None, GitError]: ...

    def file_exists(self, ref: str, path: str) -> bool: ...

    def read_file(self, ref: str, path: str) -> Result[str, GitError]: ...

    def create_branch(self, name: str, start: str) -> Result[None, GitError]: ...

    def checkout_tracking(self, branch: str) -> Result[None, GitError]: ...

    def push(self, branch: str, *, set_upstream: bool = False) -> Result[None, GitError]: ...

    def commit_all(self, message: str) -> Result[str | None, GitError]: ...

    def merge(self, branch: str) -> Result[None, GitError]: ...

    def abort_merge(self) -> Result[None, GitError]: ...

    def delete_branch(self, name: str) -> Result[None, GitError]: ...


@dataclass(frozen=True, slots=True)
class PipelineDeps:
    repo: SourceControl
    config: Config
    console: ConsoleProtocol
    run_command: CommandRunner


def git_failure(error: GitError, *, message: str) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=message, hint=error.message or None)
