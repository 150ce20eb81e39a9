"""Release preparation pipeline.

    start -> audited -> skipped ----------------------------------> resolved
                     -> branched -> mutated -> verified -> promoted -> resolved
                                                        -> retained -> resolved

Each arrow is a row in ``TRANSITIONS``; the work done on entering a stage
lives in ``_actions``. A failure in any stage aborts the run and is reported
with that stage's name. Commits already pushed to the scratch branch are
left in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from relprep.core.result import Err, Ok, Result
from relprep.output.console import Style
from relprep.services.release.audit import AuditReport, run_audits
from relprep.services.release.branch import materialize_branch
from relprep.services.release.bump import bump_version
from relprep.services.release.changelog import generate_changelog
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.errors import ReleaseError
from relprep.services.release.fsm import StageAction, Transition, always, run_state_machine
from relprep.services.release.gate import run_gate
from relprep.services.release.model import GateReport, ReleaseOutcome, ReleaseRequest, ScratchBranch
from relprep.services.release.promote import promote_branch


@dataclass(frozen=True, slots=True)
class PipelineState:
    request: ReleaseRequest
    start_sha: str = ""
    audits: AuditReport | None = None
    branch: ScratchBranch | None = None
    changelog_commit: str | None = None
    bump_commit: str | None = None
    gate: GateReport | None = None
    final_sha: str = ""
    promoted: bool = False


def needs_mutation(state: PipelineState) -> bool:
    return state.audits is not None and state.audits.needs_branch


def nothing_to_do(state: PipelineState) -> bool:
    return state.audits is not None and not state.audits.needs_branch


def is_trial_run(state: PipelineState) -> bool:
    return state.request.trial_run


def may_promote(state: PipelineState) -> bool:
    return (
        not state.request.trial_run
        and state.branch is not None
        and state.branch.created
        and state.gate is not None
        and state.gate.passed
    )


TRANSITIONS: dict[str, tuple[Transition[PipelineState], ...]] = {
    "start": (Transition("audited", always),),
    "audited": (Transition("skipped", nothing_to_do), Transition("branched", needs_mutation)),
    "branched": (Transition("mutated", always),),
    "mutated": (Transition("verified", always),),
    "verified": (Transition("retained", is_trial_run), Transition("promoted", may_promote)),
    "promoted": (Transition("resolved", always),),
    "retained": (Transition("resolved", always),),
    "skipped": (Transition("resolved", always),),
    "resolved": (),
}

STAGE_TITLES = {
    "audited": "Audit",
    "skipped": "Nothing to prepare",
    "branched": "Scratch branch",
    "mutated": "Changelog and version",
    "verified": "Verification",
    "promoted": "Promote",
    "retained": "Trial run",
    "resolved": "Release commit",
}


def resolve_start_sha(deps: PipelineDeps, request: ReleaseRequest) -> Result[str, ReleaseError]:
    repo = deps.repo
    if request.sha:
        resolved = repo.resolve_commit(request.sha)
        if isinstance(resolved, Err):
            return Err(git_failure(resolved.error, message=f"unknown commit: {request.sha}"))
        return Ok(resolved.value)

    deps.console.command(["git", "fetch", repo.remote, request.source_branch])
    fetched = repo.fetch(request.source_branch)
    if isinstance(fetched, Err):
        return Err(git_failure(fetched.error, message=f"failed to fetch {request.source_branch}"))
    resolved = repo.resolve_commit(f"{repo.remote}/{request.source_branch}")
    if isinstance(resolved, Err):
        return Err(git_failure(resolved.error, message=f"unknown branch: {request.source_branch}"))
    return Ok(resolved.value)


def ensure_clean_worktree(deps: PipelineDeps) -> Result[None, ReleaseError]:
    dirty = deps.repo.dirty_paths()
    if isinstance(dirty, Err):
        return Err(git_failure(dirty.error, message="failed to check git status"))
    if dirty.value:
        shown = ", ".join(dirty.value[:5])
        if len(dirty.value) > 5:
            shown += ", ..."
        return Err(
            ReleaseError(
                kind="dirty_worktree",
                message=f"working tree is dirty: {shown}",
                hint="Commit or stash local changes, then retry.",
            )
        )
    return Ok(None)


def _actions(deps: PipelineDeps) -> dict[str, StageAction[PipelineState]]:
    console = deps.console
    repo = deps.repo

    def audit(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        request = state.request
        sha = resolve_start_sha(deps, request)
        if isinstance(sha, Err):
            return sha
        report = run_audits(deps, version=request.version, ref=sha.value)
        if isinstance(report, Err):
            return report

        v, c = report.value.version, report.value.changelog
        console.print(f"commit: {sha.value}")
        console.print(f"declared version: {v.current_value} (requested {v.requested_value})")
        console.print(f"changelog: {c.computed_path} ({'present' if c.exists else 'missing'})")
        return Ok(replace(state, start_sha=sha.value, audits=report.value))

    def branch(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        clean = ensure_clean_worktree(deps)
        if isinstance(clean, Err):
            return clean
        created = materialize_branch(deps, request=state.request, start_sha=state.start_sha)
        if isinstance(created, Err):
            return created
        return Ok(replace(state, branch=created.value))

    def mutate(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        assert state.audits is not None and state.branch is not None
        version = state.request.version
        changelog_commit: str | None = None
        bump_commit: str | None = None

        if not state.audits.changelog.exists:
            generated = generate_changelog(deps, audit=state.audits.changelog, version=version)
            if isinstance(generated, Err):
                return generated
            changelog_commit = generated.value
            pushed = _push(deps, state.branch.name)
            if isinstance(pushed, Err):
                return pushed
        else:
            console.print("changelog present; generation skipped", Style.DIM)

        if not state.audits.version.is_current:
            bumped = bump_version(deps, version=version)
            if isinstance(bumped, Err):
                return bumped
            bump_commit = bumped.value
            pushed = _push(deps, state.branch.name)
            if isinstance(pushed, Err):
                return pushed
        else:
            console.print(f"version already {version}; bump skipped", Style.DIM)

        return Ok(replace(state, changelog_commit=changelog_commit, bump_commit=bump_commit))

    def verify(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        report = run_gate(deps)
        if isinstance(report, Err):
            return report
        return Ok(replace(state, gate=report.value))

    def promote(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        assert state.branch is not None
        merged = promote_branch(
            deps, branch=state.branch.name, target_branch=state.request.target_branch
        )
        if isinstance(merged, Err):
            return merged
        return Ok(replace(state, final_sha=merged.value, promoted=True))

    def retain(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        assert state.branch is not None
        head = repo.head_sha()
        if isinstance(head, Err):
            return Err(git_failure(head.error, message="failed to resolve scratch branch HEAD"))
        console.info(f"trial run: keeping {state.branch.name}")
        return Ok(replace(state, final_sha=head.value))

    def skip(state: PipelineState) -> Result[PipelineState, ReleaseError]:
        console.success("version and changelog already up to date")
        return Ok(replace(state, final_sha=state.start_sha))

    return {
        "audited": audit,
        "branched": branch,
        "mutated": mutate,
        "verified": verify,
        "promoted": promote,
        "retained": retain,
        "skipped": skip,
    }


def _push(deps: PipelineDeps, branch: str) -> Result[None, ReleaseError]:
    deps.console.command(["git", "push", deps.repo.remote, branch])
    pushed = deps.repo.push(branch)
    if isinstance(pushed, Err):
        return Err(git_failure(pushed.error, message=f"failed to push {branch}"))
    return Ok(None)


def run_pipeline(deps: PipelineDeps, request: ReleaseRequest) -> Result[ReleaseOutcome, ReleaseError]:
    """Prepare ``request`` and resolve the commit to release."""
    run = run_state_machine(
        initial_state=PipelineState(request=request),
        initial_stage="start",
        transitions=TRANSITIONS,
        actions=_actions(deps),
        on_enter=lambda stage: deps.console.header(STAGE_TITLES.get(stage, stage)),
    )
    if isinstance(run, Err):
        return run

    state = run.value.state
    assert state.audits is not None
    outcome = ReleaseOutcome(
        final_commit_sha=state.final_sha,
        changelog_path=state.audits.changelog.computed_path,
        branch=state.branch.name if state.branch else None,
        promoted=state.promoted,
        stages=run.value.stages,
    )
    deps.console.print(f"final_sha: {outcome.final_commit_sha}")
    deps.console.print(f"changelog_path: {outcome.changelog_path}")
    return Ok(outcome)
