"""Changelog generation with changie.

Fragments under ``<changes_dir>/unreleased`` are batched into a versioned
file, then ``changie merge`` rebuilds ``CHANGELOG.md``. Which batch flags
are used depends on whether this is a prerelease and whether earlier
prereleases of the same base version exist.
"""

from __future__ import annotations

import shlex
from pathlib import Path

from relprep.core.result import Err, Ok, Result
from relprep.output.console import Style
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.errors import ReleaseError
from relprep.services.release.model import ChangelogAudit, ChangelogMode


def select_changelog_mode(audit: ChangelogAudit, *, prereleases_exist: bool) -> ChangelogMode:
    if audit.is_prerelease:
        return "prerelease"
    if prereleases_exist:
        return "final_with_prereleases"
    return "final"


def batch_command(tool: str, audit: ChangelogAudit, mode: ChangelogMode) -> list[str]:
    base = audit.base_version
    match mode:
        case "prerelease":
            assert audit.prerelease_tag is not None
            return [tool, "batch", base, "--move-dir", base, "--prerelease", audit.prerelease_tag]
        case "final_with_prereleases":
            return [tool, "batch", base, "--include", base, "--remove-prereleases"]
        case "final":
            return [tool, "batch", base]
        case _:
            raise AssertionError(f"unexpected changelog mode: {mode}")


def generate_changelog(
    deps: PipelineDeps,
    *,
    audit: ChangelogAudit,
    version: str,
) -> Result[str | None, ReleaseError]:
    """Generate, verify and commit the changelog on the checked-out branch.

    Returns:
        Ok(sha) of the changelog commit, Ok(None) if nothing changed.
    """
    root = deps.repo.path
    config = deps.config
    tool = config.changelog_tool

    prereleases_exist = (root / config.changes_dir / audit.base_version).is_dir()
    mode = select_changelog_mode(audit, prereleases_exist=prereleases_exist)
    deps.console.print(f"changelog mode: {mode}", Style.DIM)

    for cmd in (batch_command(tool, audit, mode), [tool, "merge"]):
        ran = _run(deps, cmd, root)
        if isinstance(ran, Err):
            return ran

    if config.cleanup_command:
        cleanup = shlex.split(config.cleanup_command)
        deps.console.command(cleanup)
        # Formatters such as pre-commit exit non-zero after fixing files.
        cleaned = deps.run_command(cleanup, root)
        if isinstance(cleaned, Err):
            deps.console.print(f"cleanup: {cleaned.error}", Style.DIM)

    if not (root / audit.computed_path).is_file():
        return Err(
            ReleaseError(
                kind="generator_error",
                message=f"changelog was not generated: {audit.computed_path}",
                hint=f"Check {config.changes_dir}/unreleased and the {tool} configuration.",
            )
        )

    committed = deps.repo.commit_all(f"Add changelog for {version}")
    if isinstance(committed, Err):
        return Err(git_failure(committed.error, message="failed to commit changelog"))
    return Ok(committed.value)


def _run(deps: PipelineDeps, cmd: list[str], root: Path) -> Result[None, ReleaseError]:
    deps.console.command(cmd)
    result = deps.run_command(cmd, root)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="generator_error",
                message=f"{cmd[0]} {cmd[1]} failed (exit {result.error.returncode})",
                hint=result.error.detail,
            )
        )
    return Ok(None)
