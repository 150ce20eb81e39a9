from __future__ import annotations

from relprep.core.result import Err, Ok, Result
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.errors import ReleaseError
from relprep.services.release.model import ReleaseRequest, ScratchBranch


def scratch_branch_name(request: ReleaseRequest, *, prefix: str = "prep-release") -> str:
    """``<prefix>/[nightly-release|test-run|<deploy-target>/]<version>_<run_id>``."""
    parts = [prefix.strip("/")]
    if request.nightly:
        parts.append("nightly-release")
    elif request.trial_run:
        parts.append("test-run")
    elif request.deploy_target:
        parts.append(request.deploy_target.strip("/"))
    parts.append(f"{request.version}_{request.run_id}")
    return "/".join(parts)


def materialize_branch(
    deps: PipelineDeps,
    *,
    request: ReleaseRequest,
    start_sha: str,
) -> Result[ScratchBranch, ReleaseError]:
    """Create the scratch branch at ``start_sha`` and push it."""
    name = scratch_branch_name(request, prefix=deps.config.branch_prefix)
    repo = deps.repo

    deps.console.command(["git", "checkout", "-b", name, start_sha])
    created = repo.create_branch(name, start_sha)
    if isinstance(created, Err):
        return Err(git_failure(created.error, message=f"failed to create branch: {name}"))

    deps.console.command(["git", "push", "-u", repo.remote, name])
    pushed = repo.push(name, set_upstream=True)
    if isinstance(pushed, Err):
        return Err(git_failure(pushed.error, message=f"failed to push branch: {name}"))

    deps.console.success(f"scratch branch: {name}")
    return Ok(ScratchBranch(name=name, created=True))
