from __future__ import annotations

import os
from pathlib import Path
from uuid import uuid4

import typer

from relprep.cli.commands.common import exit_release
from relprep.cli.context import build_context
from relprep.core.result import Err
from relprep.output.console import Style
from relprep.platform.process import run_silent
from relprep.services.release.deps import PipelineDeps
from relprep.services.release.model import ReleaseRequest
from relprep.services.release.outputs import output_file_from_env, write_outputs
from relprep.services.release.pipeline import run_pipeline


def default_run_id() -> str:
    return os.environ.get("GITHUB_RUN_ID", "").strip() or uuid4().hex[:12]


def prepare(
    version: str = typer.Argument(..., help="Version to release, e.g. 1.9.0 or 1.9.0rc1"),
    sha: str | None = typer.Option(None, "--sha", help="Commit to release (default: source branch HEAD)"),
    source_branch: str = typer.Option("main", "--source-branch", help="Branch the release starts from"),
    target_branch: str = typer.Option("main", "--target-branch", help="Branch to merge release changes into"),
    test_run: bool = typer.Option(False, "--test-run", help="Prepare changes without merging them"),
    nightly: bool = typer.Option(False, "--nightly", help="Nightly release (nightly-release branch segment)"),
    deploy_target: str | None = typer.Option(None, "--deploy-target", help="Label for the scratch branch name"),
    run_id: str | None = typer.Option(None, "--run-id", help="Unique run id (default: $GITHUB_RUN_ID)"),
    output_file: Path | None = typer.Option(
        None, "--output-file", help="Append final_sha/changelog_path here (default: $GITHUB_OUTPUT)"
    ),
    repo_path: Path = typer.Option(Path("."), "--repo", help="Repository checkout"),
) -> None:
    """Audit, prepare, verify and promote a release."""
    ctx = build_context(repo_path)
    request = ReleaseRequest(
        version=version.strip(),
        source_branch=source_branch,
        target_branch=target_branch,
        trial_run=test_run,
        nightly=nightly,
        sha=sha,
        run_id=run_id or default_run_id(),
        deploy_target=deploy_target,
    )
    deps = PipelineDeps(
        repo=ctx.repo,
        config=ctx.config,
        console=ctx.console,
        run_command=lambda cmd, cwd: run_silent(cmd, cwd=cwd),
    )

    outcome = run_pipeline(deps, request)
    if isinstance(outcome, Err):
        exit_release(outcome.error, console=ctx.console)

    target = output_file or output_file_from_env()
    if target is not None:
        try:
            write_outputs(target, outcome.value)
        except OSError as e:
            ctx.console.warning(f"could not write outputs to {target}: {e}")
        else:
            ctx.console.print(f"outputs written to {target}", Style.DIM)
