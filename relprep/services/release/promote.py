from __future__ import annotations

from relprep.core.result import Err, Ok, Result
from relprep.output.console import Style
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.errors import ReleaseError


def promote_branch(
    deps: PipelineDeps,
    *,
    branch: str,
    target_branch: str,
) -> Result[str, ReleaseError]:
    """Merge ``branch`` into ``target_branch``, push it, delete ``branch``.

    Returns:
        Ok(sha) of the target branch HEAD after the merge.
    """
    repo = deps.repo
    console = deps.console

    console.command(["git", "fetch", repo.remote, target_branch])
    fetched = repo.fetch(target_branch)
    if isinstance(fetched, Err):
        return Err(git_failure(fetched.error, message=f"failed to fetch {target_branch}"))

    console.command(["git", "checkout", "-B", target_branch, f"{repo.remote}/{target_branch}"])
    checked_out = repo.checkout_tracking(target_branch)
    if isinstance(checked_out, Err):
        return Err(git_failure(checked_out.error, message=f"failed to check out {target_branch}"))

    console.command(["git", "merge", "--no-edit", branch])
    merged = repo.merge(branch)
    if isinstance(merged, Err):
        aborted = repo.abort_merge()
        if isinstance(aborted, Err):
            console.print(f"git merge --abort: {aborted.error.message}", Style.DIM)
        return Err(
            ReleaseError(
                kind="merge_conflict",
                message=f"failed to merge {branch} into {target_branch}",
                hint=merged.error.message or "Resolve the conflict manually, then rerun.",
            )
        )

    console.command(["git", "push", repo.remote, target_branch])
    pushed = repo.push(target_branch)
    if isinstance(pushed, Err):
        return Err(git_failure(pushed.error, message=f"failed to push {target_branch}"))

    head = repo.head_sha()
    if isinstance(head, Err):
        return Err(git_failure(head.error, message="failed to resolve merged HEAD"))

    console.command(["git", "push", repo.remote, "--delete", branch])
    deleted = repo.delete_branch(branch)
    console.success(f"merged {branch} into {target_branch}")
    if isinstance(deleted, Err):
        # The release is already on the target branch.
        console.warning(f"could not delete {branch}: {deleted.error.message}")
    return Ok(head.value)
