from __future__ import annotations

from typing import NoReturn

import typer

from relprep.core.errors import ErrorCode
from relprep.output.console import ConsoleProtocol, Style
from relprep.services.release.errors import ReleaseError

_EXIT_CODES: dict[str, ErrorCode] = {
    "parse_error": ErrorCode.USER_ERROR,
    "invalid_input": ErrorCode.USER_ERROR,
    "config_error": ErrorCode.USER_ERROR,
    "dirty_worktree": ErrorCode.ENV_ERROR,
    "generator_error": ErrorCode.VERIFY_ERROR,
    "test_failure": ErrorCode.VERIFY_ERROR,
    "merge_conflict": ErrorCode.GIT_ERROR,
    "git_failed": ErrorCode.GIT_ERROR,
}


def release_error_code(kind: str) -> ErrorCode:
    return _EXIT_CODES.get(kind, ErrorCode.USER_ERROR)


def exit_release(error: ReleaseError, *, console: ConsoleProtocol) -> NoReturn:
    if error.stage:
        console.error(f"[{error.stage}] {error.message}")
    else:
        console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error.kind)))
