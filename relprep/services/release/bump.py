from __future__ import annotations

import shlex

from relprep.core.result import Err, Ok, Result
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.errors import ReleaseError
from relprep.services.release.version_files import apply_version


def bump_command(template: str, version: str) -> list[str]:
    """Split ``template`` and substitute ``{version}`` in each argument."""
    return [arg.replace("{version}", version) for arg in shlex.split(template)]


def bump_version(deps: PipelineDeps, *, version: str) -> Result[str, ReleaseError]:
    """Set the declared version on the checked-out branch and commit it.

    Uses ``bump_command`` when configured, otherwise rewrites the version
    files directly.

    Returns:
        Ok(sha) of the bump commit.
    """
    root = deps.repo.path
    config = deps.config

    if config.bump_command:
        cmd = bump_command(config.bump_command, version)
        deps.console.command(cmd)
        ran = deps.run_command(cmd, root)
        if isinstance(ran, Err):
            return Err(
                ReleaseError(
                    kind="generator_error",
                    message=f"version bump failed (exit {ran.error.returncode})",
                    hint=ran.error.detail,
                )
            )
    else:
        applied = apply_version(root=root, files=config.version_files, version=version)
        if isinstance(applied, Err):
            return applied
        for path in applied.value:
            deps.console.print(f"updated {path.relative_to(root)}")

    committed = deps.repo.commit_all(f"Bumping version to {version}")
    if isinstance(committed, Err):
        return Err(git_failure(committed.error, message="failed to commit version bump"))
    if committed.value is None:
        return Err(
            ReleaseError(
                kind="generator_error",
                message=f"version bump to {version} changed no files",
            )
        )
    return Ok(committed.value)
