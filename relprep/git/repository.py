"""Git repository abstraction.

``Repository`` wraps the git plumbing the release pipeline needs: resolving
refs, reading files at a commit without checking it out, creating and
pushing branches, committing, merging and deleting branches. Every
operation returns a Result so callers decide which failures are fatal.

Usage:
    repo = Repository(Path("."), remote="origin")

    match repo.resolve_commit("origin/main"):
        case Ok(sha):
            print(sha)
        case Err(e):
            print(f"{e.command}: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relprep.core.result import Err, Ok, Result
from relprep.platform.process import ProcessError
from relprep.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push")
        message: Error message, usually git's stderr
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A local clone with one configured remote.

    Attributes:
        path: Path to the working tree root
        remote: Remote name used for fetch/push
    """

    def __init__(self, path: Path, *, remote: str = "origin") -> None:
        self.path = path
        self.remote = remote

    def exists(self) -> bool:
        """True if ``path`` holds a git checkout (directory or worktree file)."""
        return (self.path / ".git").exists()

    def dirty_paths(self) -> Result[tuple[str, ...], GitError]:
        """Paths with staged, unstaged or untracked changes."""
        result = self._git("status", "--porcelain=v1")
        if isinstance(result, Err):
            return result
        # Renames are reported as "R  old -> new".
        paths = tuple(
            line[3:].split(" -> ")[-1] for line in result.value.splitlines() if len(line) > 3
        )
        return Ok(paths)

    def resolve_commit(self, ref: str) -> Result[str, GitError]:
        """Full commit sha for ``ref`` (branch, tag, remote ref or sha)."""
        result = self._git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        if isinstance(result, Err):
            return Err(GitError(command="rev-parse", message=f"unknown revision: {ref}"))
        return Ok(result.value.strip())

    def head_sha(self) -> Result[str, GitError]:
        return self.resolve_commit("HEAD")

    def fetch(self, ref: str) -> Result[None, GitError]:
        result = self._git("fetch", self.remote, ref)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def file_exists(self, ref: str, path: str) -> bool:
        """True if ``path`` is tracked at ``ref``."""
        return isinstance(self._git("cat-file", "-e", f"{ref}:{path}"), Ok)

    def read_file(self, ref: str, path: str) -> Result[str, GitError]:
        """Content of ``path`` as of ``ref``."""
        return self._git("show", f"{ref}:{path}")

    def create_branch(self, name: str, start: str) -> Result[None, GitError]:
        """Create ``name`` at ``start`` and check it out."""
        result = self._git("checkout", "-b", name, start)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def checkout_tracking(self, branch: str) -> Result[None, GitError]:
        """Check out ``branch`` reset to its remote counterpart."""
        result = self._git("checkout", "-B", branch, f"{self.remote}/{branch}")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def push(self, branch: str, *, set_upstream: bool = False) -> Result[None, GitError]:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        result = self._git(*args, self.remote, branch)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def commit_all(self, message: str) -> Result[str | None, GitError]:
        """Stage every change and commit it.

        Returns:
            Ok(sha) of the new commit, Ok(None) when there was nothing to commit.
        """
        added = self._git("add", "-A")
        if isinstance(added, Err):
            return added

        staged = self._git("diff", "--cached", "--name-only")
        if isinstance(staged, Err):
            return staged
        if not staged.value.strip():
            return Ok(None)

        committed = self._git("commit", "-m", message)
        if isinstance(committed, Err):
            return committed
        return self.head_sha()

    def merge(self, branch: str) -> Result[None, GitError]:
        """Merge ``branch`` into HEAD, fast-forwarding when possible."""
        result = self._git("merge", "--no-edit", branch)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def abort_merge(self) -> Result[None, GitError]:
        result = self._git("merge", "--abort")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def delete_branch(self, name: str) -> Result[None, GitError]:
        """Delete ``name`` on the remote, then locally."""
        remote = self._git("push", self.remote, "--delete", name)
        if isinstance(remote, Err):
            return remote
        local = self._git("branch", "-D", name)
        if isinstance(local, Err):
            return local
        return Ok(None)

    def _git(self, *args: str) -> Result[str, GitError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        result = run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
        if isinstance(result, Err):
            return Err(_to_git_error(command, result.error))
        return Ok(result.value)


def _to_git_error(command: str, error: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=error.detail or f"git {command} failed",
        returncode=error.returncode,
    )
