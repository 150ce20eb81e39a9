from __future__ import annotations

from pathlib import Path

from relprep.core.config import Config
from relprep.core.result import Err, Ok
from relprep.services.release.bump import bump_command, bump_version
from relprep.test.services._fakes import BUMPVERSION_CFG, FakeCommands, FakeRepo, make_deps, seed


def test_bump_command_substitutes_version() -> None:
    assert bump_command("hatch version {version}", "1.2.0") == ["hatch", "version", "1.2.0"]
    assert bump_command("bumpversion --allow-dirty --new-version {version} major", "2.0.0rc1") == [
        "bumpversion", "--allow-dirty", "--new-version", "2.0.0rc1", "major",
    ]


def test_bump_version_builtin_rewrite(tmp_path: Path) -> None:
    repo = FakeRepo(path=tmp_path)
    seed(repo, ".bumpversion.cfg", BUMPVERSION_CFG.format(version="1.0.0"))

    result = bump_version(make_deps(repo), version="1.1.0")

    assert isinstance(result, Ok)
    assert "current_version = 1.1.0" in (tmp_path / ".bumpversion.cfg").read_text(encoding="utf-8")
    assert repo.commits == ["Bumping version to 1.1.0"]


def test_bump_version_with_command(tmp_path: Path) -> None:
    repo = FakeRepo(path=tmp_path)
    commands = FakeCommands()
    deps = make_deps(repo, config=Config(bump_command="hatch version {version}"), commands=commands)

    result = bump_version(deps, version="1.1.0")

    assert isinstance(result, Ok)
    assert commands.calls == [["hatch", "version", "1.1.0"]]


def test_bump_command_failure(tmp_path: Path) -> None:
    commands = FakeCommands()
    commands.on("hatch", returncode=2)
    deps = make_deps(
        FakeRepo(path=tmp_path), config=Config(bump_command="hatch version {version}"), commands=commands
    )

    result = bump_version(deps, version="1.1.0")

    assert isinstance(result, Err)
    assert result.error.kind == "generator_error"


def test_bump_without_version_files(tmp_path: Path) -> None:
    result = bump_version(make_deps(FakeRepo(path=tmp_path)), version="1.1.0")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
