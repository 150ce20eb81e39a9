"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path

import pytest

import relprep.git.repository as repository_module
from relprep.core.result import Err, Ok, Result
from relprep.git.repository import GitError, Repository
from relprep.platform.process import ProcessError


class FakeGit:
    """Stands in for ``run_process``; answers by git subcommand."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self.responses: dict[tuple[str, ...], Result[str, ProcessError]] = {}

    def respond(self, *args: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        if returncode == 0:
            self.responses[args] = Ok(stdout)
        else:
            self.responses[args] = Err(
                ProcessError(command=("git", *args), returncode=returncode, stdout="", stderr=stderr)
            )

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.calls.append(cmd)
        self.timeouts.append(timeout)
        args = tuple(cmd[3:])  # drop "git -C <path>"
        matches = [k for k in self.responses if args[: len(k)] == k]
        if not matches:
            return Ok("")
        return self.responses[max(matches, key=len)]

    def git_args(self) -> list[list[str]]:
        return [c[3:] for c in self.calls]


@pytest.fixture
def git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    fake = FakeGit()
    monkeypatch.setattr(repository_module, "run_process", fake)
    return fake


@pytest.fixture
def repo(tmp_path: Path) -> Repository:
    return Repository(tmp_path, remote="upstream")


SHA = "0123456789abcdef0123456789abcdef01234567"


class TestRepositoryExists:
    def test_exists_with_git_dir(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        assert Repository(tmp_path).exists() is True

    def test_exists_with_worktree_file(self, tmp_path: Path) -> None:
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n", encoding="utf-8")
        assert Repository(tmp_path).exists() is True

    def test_missing(self, tmp_path: Path) -> None:
        assert Repository(tmp_path).exists() is False


class TestReadOperations:
    def test_runs_git_in_repo(self, git: FakeGit, repo: Repository, tmp_path: Path) -> None:
        repo.head_sha()
        assert git.calls[0][:3] == ["git", "-C", str(tmp_path)]

    def test_resolve_commit(self, git: FakeGit, repo: Repository) -> None:
        git.respond("rev-parse", stdout=f"{SHA}\n")

        assert repo.resolve_commit("upstream/main") == Ok(SHA)
        assert git.git_args()[0] == ["rev-parse", "--verify", "--quiet", "upstream/main^{commit}"]

    def test_resolve_commit_unknown(self, git: FakeGit, repo: Repository) -> None:
        git.respond("rev-parse", returncode=1)

        result = repo.resolve_commit("nope")

        assert isinstance(result, Err)
        assert result.error.command == "rev-parse"
        assert "nope" in result.error.message

    def test_dirty_paths(self, git: FakeGit, repo: Repository) -> None:
        git.respond("status", stdout=" M setup.cfg\n?? notes.txt\n")
        assert repo.dirty_paths() == Ok(("setup.cfg", "notes.txt"))

    def test_dirty_paths_rename_reports_new_path(self, git: FakeGit, repo: Repository) -> None:
        git.respond("status", stdout="R  old_name.py -> new_name.py\n")
        assert repo.dirty_paths() == Ok(("new_name.py",))

    def test_clean(self, git: FakeGit, repo: Repository) -> None:
        assert repo.dirty_paths() == Ok(())

    def test_file_exists(self, git: FakeGit, repo: Repository) -> None:
        git.respond("cat-file", "-e", f"{SHA}:.changes/1.0.0.md")
        git.respond("cat-file", "-e", f"{SHA}:.changes/2.0.0.md", returncode=128)

        assert repo.file_exists(SHA, ".changes/1.0.0.md") is True
        assert repo.file_exists(SHA, ".changes/2.0.0.md") is False

    def test_read_file(self, git: FakeGit, repo: Repository) -> None:
        git.respond("show", stdout="[bumpversion]\ncurrent_version = 1.0.0\n")

        result = repo.read_file(SHA, ".bumpversion.cfg")

        assert isinstance(result, Ok)
        assert "current_version" in result.value
        assert git.git_args()[0] == ["show", f"{SHA}:.bumpversion.cfg"]


class TestWriteOperations:
    def test_create_branch(self, git: FakeGit, repo: Repository) -> None:
        assert repo.create_branch("prep-release/1.0.0_1", SHA) == Ok(None)
        assert git.git_args() == [["checkout", "-b", "prep-release/1.0.0_1", SHA]]

    def test_push_with_upstream_uses_remote(self, git: FakeGit, repo: Repository) -> None:
        repo.push("prep-release/1.0.0_1", set_upstream=True)
        assert git.git_args() == [["push", "-u", "upstream", "prep-release/1.0.0_1"]]

    def test_push_rejected(self, git: FakeGit, repo: Repository) -> None:
        git.respond("push", returncode=1, stderr="! [rejected] main -> main (fetch first)")

        result = repo.push("main")

        assert result == Err(
            GitError(command="push", message="! [rejected] main -> main (fetch first)", returncode=1)
        )

    def test_network_commands_get_longer_timeout(self, git: FakeGit, repo: Repository) -> None:
        repo.fetch("main")
        repo.head_sha()
        assert git.timeouts[0] is not None and git.timeouts[1] is not None
        assert git.timeouts[0] > git.timeouts[1]

    def test_checkout_tracking(self, git: FakeGit, repo: Repository) -> None:
        repo.checkout_tracking("main")
        assert git.git_args() == [["checkout", "-B", "main", "upstream/main"]]

    def test_commit_all(self, git: FakeGit, repo: Repository) -> None:
        git.respond("diff", stdout="CHANGELOG.md\n")
        git.respond("rev-parse", stdout=f"{SHA}\n")

        assert repo.commit_all("Add changelog for 1.0.0") == Ok(SHA)
        assert ["commit", "-m", "Add changelog for 1.0.0"] in git.git_args()

    def test_commit_all_nothing_staged(self, git: FakeGit, repo: Repository) -> None:
        assert repo.commit_all("Bumping version to 1.0.0") == Ok(None)
        assert all(args[0] != "commit" for args in git.git_args())

    def test_merge(self, git: FakeGit, repo: Repository) -> None:
        repo.merge("prep-release/1.0.0_1")
        assert git.git_args() == [["merge", "--no-edit", "prep-release/1.0.0_1"]]

    def test_merge_conflict(self, git: FakeGit, repo: Repository) -> None:
        git.respond("merge", "--no-edit", returncode=1, stderr="CONFLICT (content)")

        result = repo.merge("prep-release/1.0.0_1")

        assert isinstance(result, Err)
        assert result.error.message == "CONFLICT (content)"

    def test_delete_branch_remote_then_local(self, git: FakeGit, repo: Repository) -> None:
        repo.delete_branch("prep-release/1.0.0_1")
        assert git.git_args() == [
            ["push", "upstream", "--delete", "prep-release/1.0.0_1"],
            ["branch", "-D", "prep-release/1.0.0_1"],
        ]

    def test_delete_branch_stops_on_remote_failure(self, git: FakeGit, repo: Repository) -> None:
        git.respond("push", returncode=1, stderr="remote ref does not exist")

        result = repo.delete_branch("gone")

        assert isinstance(result, Err)
        assert len(git.calls) == 1
