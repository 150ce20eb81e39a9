from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ChangelogMode = Literal["prerelease", "final_with_prereleases", "final"]


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """One invocation of the release preparation pipeline."""

    version: str
    source_branch: str
    target_branch: str
    trial_run: bool = False
    nightly: bool = False
    # Requested commit; resolved from source_branch when None.
    sha: str | None = None
    run_id: str = ""
    deploy_target: str | None = None


@dataclass(frozen=True, slots=True)
class ParsedVersion:
    raw: str
    base_version: str
    prerelease: str | None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None


@dataclass(frozen=True, slots=True)
class VersionAudit:
    current_value: str
    requested_value: str
    is_current: bool


@dataclass(frozen=True, slots=True)
class ChangelogAudit:
    computed_path: str
    exists: bool
    base_version: str
    prerelease_tag: str | None
    is_prerelease: bool


@dataclass(frozen=True, slots=True)
class ScratchBranch:
    name: str
    created: bool


@dataclass(frozen=True, slots=True)
class SuiteResult:
    name: str
    ran: bool
    passed: bool
    returncode: int = 0


SKIPPED_SUITE = SuiteResult(name="", ran=False, passed=True)


@dataclass(frozen=True, slots=True)
class GateReport:
    unit: SuiteResult
    integration: SuiteResult
    flaky: SuiteResult

    @property
    def passed(self) -> bool:
        # Flaky failures are reported but never block promotion.
        return self.unit.passed and self.integration.passed

    @property
    def flaky_failed(self) -> bool:
        return self.flaky.ran and not self.flaky.passed


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    final_commit_sha: str
    changelog_path: str
    branch: str | None
    promoted: bool
    stages: tuple[str, ...]
