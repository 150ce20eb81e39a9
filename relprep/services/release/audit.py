"""Version and changelog audits.

Both audits are read-only: they look at the requested commit through git
(``cat-file``/``show``) and never touch the working tree.
"""

from __future__ import annotations

from dataclasses import dataclass

from relprep.core.result import Err, Ok, Result
from relprep.services.release.deps import PipelineDeps
from relprep.services.release.errors import ReleaseError
from relprep.services.release.model import ChangelogAudit, ParsedVersion, VersionAudit
from relprep.services.release.semver import changelog_file_name, parse_version
from relprep.services.release.version_files import declared_version


@dataclass(frozen=True, slots=True)
class AuditReport:
    version: VersionAudit
    changelog: ChangelogAudit

    @property
    def needs_branch(self) -> bool:
        return needs_scratch_branch(self.version, self.changelog)


def changelog_path(parsed: ParsedVersion, *, changes_dir: str = ".changes") -> str:
    """Path of the versioned changelog file, relative to the repo root."""
    return f"{changes_dir.rstrip('/')}/{changelog_file_name(parsed)}"


def audit_version(*, requested: str, declared: str) -> VersionAudit:
    # Exact match on purpose: "1.0.0rc1" and "1.0.0-rc1" are different strings.
    return VersionAudit(
        current_value=declared,
        requested_value=requested,
        is_current=declared == requested,
    )


def audit_changelog(
    parsed: ParsedVersion,
    *,
    exists: bool,
    changes_dir: str = ".changes",
) -> ChangelogAudit:
    return ChangelogAudit(
        computed_path=changelog_path(parsed, changes_dir=changes_dir),
        exists=exists,
        base_version=parsed.base_version,
        prerelease_tag=parsed.prerelease,
        is_prerelease=parsed.is_prerelease,
    )


def needs_scratch_branch(version: VersionAudit, changelog: ChangelogAudit) -> bool:
    return not changelog.exists or not version.is_current


def run_audits(
    deps: PipelineDeps,
    *,
    version: str,
    ref: str,
) -> Result[AuditReport, ReleaseError]:
    """Audit ``version`` against the repository state at ``ref``."""
    parsed = parse_version(version)
    if isinstance(parsed, Err):
        return parsed

    repo = deps.repo
    config = deps.config

    def read_at_ref(path: str) -> str | None:
        if not repo.file_exists(ref, path):
            return None
        content = repo.read_file(ref, path)
        return content.value if isinstance(content, Ok) else None

    declared = declared_version(files=config.version_files, read_file=read_at_ref)
    if isinstance(declared, Err):
        return declared
    version_audit = audit_version(requested=parsed.value.raw, declared=declared.value)

    path = changelog_path(parsed.value, changes_dir=config.changes_dir)
    exists = repo.file_exists(ref, path)
    changelog_audit = audit_changelog(parsed.value, exists=exists, changes_dir=config.changes_dir)

    return Ok(AuditReport(version=version_audit, changelog=changelog_audit))
