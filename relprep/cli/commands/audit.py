from __future__ import annotations

from pathlib import Path

import typer

from relprep.cli.commands.common import exit_release
from relprep.cli.context import build_context
from relprep.core.result import Err
from relprep.output.console import RichConsole
from relprep.platform.process import run_silent
from relprep.services.release.audit import changelog_path, run_audits
from relprep.services.release.deps import PipelineDeps, git_failure
from relprep.services.release.semver import parse_version


def audit(
    version: str = typer.Argument(..., help="Version to audit"),
    ref: str = typer.Option("HEAD", "--ref", help="Commit or branch to inspect"),
    repo_path: Path = typer.Option(Path("."), "--repo", help="Repository checkout"),
) -> None:
    """Show what `prepare` would do for VERSION, without changing anything."""
    ctx = build_context(repo_path)
    console = ctx.console
    deps = PipelineDeps(
        repo=ctx.repo,
        config=ctx.config,
        console=console,
        run_command=lambda cmd, cwd: run_silent(cmd, cwd=cwd),
    )

    resolved = ctx.repo.resolve_commit(ref)
    if isinstance(resolved, Err):
        exit_release(git_failure(resolved.error, message=f"unknown ref: {ref}"), console=console)

    report = run_audits(deps, version=version, ref=resolved.value)
    if isinstance(report, Err):
        exit_release(report.error, console=console)

    v, c = report.value.version, report.value.changelog
    console.header(f"Audit {v.requested_value} @ {resolved.value[:8]}")
    console.print(f"declared version: {v.current_value}")
    console.print(f"version current: {'yes' if v.is_current else 'no'}")
    console.print(f"changelog: {c.computed_path}")
    console.print(f"changelog exists: {'yes' if c.exists else 'no'}")
    if c.is_prerelease:
        console.print(f"prerelease: {c.prerelease_tag} (base {c.base_version})")
    if report.value.needs_branch:
        console.info("a scratch branch would be created")
    else:
        console.success("nothing to prepare")


def changelog_path_cmd(
    version: str = typer.Argument(..., help="Version to compute the changelog path for"),
    changes_dir: str = typer.Option(".changes", "--changes-dir", help="Changelog directory"),
) -> None:
    """Print the changelog file path for VERSION."""
    parsed = parse_version(version)
    if isinstance(parsed, Err):
        exit_release(parsed.error, console=RichConsole(stderr=True))
    typer.echo(changelog_path(parsed.value, changes_dir=changes_dir))
