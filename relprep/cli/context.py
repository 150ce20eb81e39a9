from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relprep.core.config import Config, load_project_config
from relprep.core.errors import ErrorCode
from relprep.core.result import Err
from relprep.git.repository import Repository
from relprep.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    repo: Repository
    console: ConsoleProtocol


def build_context(repo_path: Path) -> CLIContext:
    try:
        root = repo_path.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    repo = Repository(root)
    if not root.is_dir() or not repo.exists():
        typer.echo(f"error: not a git checkout: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_project_config(root)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = config_result.value
    return CLIContext(
        root=root,
        config=config,
        repo=Repository(root, remote=config.remote),
        console=RichConsole(),
    )
