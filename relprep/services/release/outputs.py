from __future__ import annotations

import os
from pathlib import Path

from relprep.platform.files import append_lines
from relprep.services.release.model import ReleaseOutcome

GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"


def outcome_lines(outcome: ReleaseOutcome) -> list[str]:
    return [
        f"final_sha={outcome.final_commit_sha}",
        f"changelog_path={outcome.changelog_path}",
    ]


def output_file_from_env() -> Path | None:
    value = os.environ.get(GITHUB_OUTPUT_ENV, "").strip()
    return Path(value) if value else None


def write_outputs(path: Path, outcome: ReleaseOutcome) -> None:
    """Append ``key=value`` outputs for downstream publish jobs."""
    append_lines(path, outcome_lines(outcome))
