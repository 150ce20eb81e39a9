"""Verification gate: unit suite, then integration primary and flaky passes.

The flaky pass only starts once the primary integration pass succeeded and
runs with fewer workers, so flaky tests never compete with the main run
for the same resources.
"""

from __future__ import annotations

import shlex

from relprep.core.result import Err, Ok, Result
from relprep.output.console import Style
from relprep.platform.process import NO_TESTS_COLLECTED
from relprep.services.release.deps import PipelineDeps
from relprep.services.release.errors import ReleaseError
from relprep.services.release.model import SKIPPED_SUITE, GateReport, SuiteResult


def integration_commands(
    *,
    command: str,
    env_setup_script: str,
    marker: str,
    workers: str,
    flaky_workers: int,
) -> tuple[list[str], list[str]]:
    """Argv for the primary and the flaky integration passes."""
    base = shlex.split(command)
    primary = [*base, "-m", f"not {marker}"]
    if workers:
        primary.extend(["-n", workers])
    flaky = [*base, "-m", marker, "-n", str(flaky_workers)]
    return (_with_env_setup(primary, env_setup_script), _with_env_setup(flaky, env_setup_script))


def _with_env_setup(cmd: list[str], script: str) -> list[str]:
    return ["bash", "-c", f"source {shlex.quote(script)} && exec {shlex.join(cmd)}"]


def run_suite(deps: PipelineDeps, *, name: str, cmd: list[str]) -> SuiteResult:
    deps.console.print(f"{name} tests", Style.BOLD)
    deps.console.command(cmd)
    result = deps.run_command(cmd, deps.repo.path)
    if isinstance(result, Ok):
        return SuiteResult(name=name, ran=True, passed=True)

    rc = result.error.returncode
    if rc == NO_TESTS_COLLECTED:
        deps.console.print(f"{name}: no tests collected", Style.DIM)
        return SuiteResult(name=name, ran=True, passed=True, returncode=rc)
    return SuiteResult(name=name, ran=True, passed=False, returncode=rc)


def run_gate(deps: PipelineDeps) -> Result[GateReport, ReleaseError]:
    """Run the configured suites against the checked-out scratch branch."""
    config = deps.config

    unit = SKIPPED_SUITE
    if config.unit_test_command:
        unit = run_suite(deps, name="unit", cmd=shlex.split(config.unit_test_command))
        if not unit.passed:
            return Err(_test_failure(unit))

    integration = SKIPPED_SUITE
    flaky = SKIPPED_SUITE
    if config.env_setup_script and config.integration_test_command:
        primary_cmd, flaky_cmd = integration_commands(
            command=config.integration_test_command,
            env_setup_script=config.env_setup_script,
            marker=config.flaky_marker,
            workers=config.integration_workers,
            flaky_workers=config.flaky_workers,
        )
        integration = run_suite(deps, name="integration", cmd=primary_cmd)
        if not integration.passed:
            return Err(_test_failure(integration))

        flaky = run_suite(deps, name="flaky", cmd=flaky_cmd)
        if not flaky.passed:
            deps.console.warning(f"flaky tests failed (exit {flaky.returncode}); not blocking")
    else:
        deps.console.print("integration tests skipped: no env_setup_script", Style.DIM)

    report = GateReport(unit=unit, integration=integration, flaky=flaky)
    deps.console.success("verification gate passed")
    return Ok(report)


def _test_failure(suite: SuiteResult) -> ReleaseError:
    return ReleaseError(
        kind="test_failure",
        message=f"{suite.name} tests failed (exit {suite.returncode})",
        hint="Fix the failures on the scratch branch or rerun the release.",
    )
