from __future__ import annotations

from pathlib import Path

from relprep.core.result import Err, Ok
from relprep.services.release.version_files import (
    apply_version,
    declared_version,
    detect_version_files,
    read_version_text,
    replace_version_text,
    version_file_kind,
)

BUMPVERSION = """[bumpversion]
current_version = 1.8.0
parse = (?P<major>\\d+)\\.(?P<minor>\\d+)\\.(?P<patch>\\d+)

[bumpversion:file:setup.py]
"""

PYPROJECT = """[project]
name = "demo"
version = "1.8.0"

[tool.other]
version = "9.9.9"
"""

ABOUT = '__version__ = "1.8.0"\n'


def test_version_file_kind() -> None:
    assert version_file_kind(".bumpversion.cfg") == "bumpversion"
    assert version_file_kind("pyproject.toml") == "pyproject"
    assert version_file_kind("src/demo/__about__.py") == "python"
    assert version_file_kind("setup.cfg") is None


def test_read_version_text_each_kind() -> None:
    assert read_version_text("bumpversion", BUMPVERSION) == "1.8.0"
    assert read_version_text("pyproject", PYPROJECT) == "1.8.0"
    assert read_version_text("python", ABOUT) == "1.8.0"
    assert read_version_text("python", 'version = "2.0.0b1"\n') == "2.0.0b1"


def test_read_version_text_missing_declaration() -> None:
    assert read_version_text("pyproject", '[project]\nname = "demo"\ndynamic = ["version"]\n') is None
    assert read_version_text("bumpversion", "[other]\nkey = 1\n") is None
    assert read_version_text("python", "VERSION_INFO = (1, 0)\n") is None


def test_replace_pyproject_only_touches_project_table() -> None:
    updated = replace_version_text("pyproject", PYPROJECT, "1.9.0")
    assert updated is not None
    assert 'version = "1.9.0"' in updated
    assert 'version = "9.9.9"' in updated


def test_replace_bumpversion_keeps_other_keys() -> None:
    updated = replace_version_text("bumpversion", BUMPVERSION, "1.9.0rc1")
    assert updated is not None
    assert "current_version = 1.9.0rc1" in updated
    assert "[bumpversion:file:setup.py]" in updated


def test_replace_python_keeps_quote_style() -> None:
    assert replace_version_text("python", "__version__ = '1.0.0'\n", "1.1.0") == "__version__ = '1.1.0'\n"


def test_detect_version_files_skips_dynamic_pyproject() -> None:
    files = {
        ".bumpversion.cfg": BUMPVERSION,
        "pyproject.toml": '[project]\nname = "demo"\ndynamic = ["version"]\n',
    }
    assert detect_version_files(files.get) == (".bumpversion.cfg",)


def test_declared_version_agreeing_files() -> None:
    files = {".bumpversion.cfg": BUMPVERSION, "pyproject.toml": PYPROJECT}
    result = declared_version(files=(), read_file=files.get)
    assert isinstance(result, Ok)
    assert result.value == "1.8.0"


def test_declared_version_out_of_sync() -> None:
    files = {".bumpversion.cfg": BUMPVERSION, "pyproject.toml": PYPROJECT.replace("1.8.0", "1.7.0")}
    result = declared_version(files=(), read_file=files.get)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert "out of sync" in result.error.message


def test_declared_version_no_files() -> None:
    result = declared_version(files=(), read_file=lambda _path: None)
    assert isinstance(result, Err)
    assert result.error.message == "no version file found"


def test_declared_version_unsupported_configured_file() -> None:
    result = declared_version(files=("setup.cfg",), read_file=lambda _path: "")
    assert isinstance(result, Err)
    assert result.error.kind == "config_error"


def test_apply_version_rewrites_configured_files(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "__about__.py").write_text(ABOUT, encoding="utf-8")
    (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")

    result = apply_version(
        root=tmp_path, files=("pyproject.toml", "src/__about__.py"), version="1.9.0"
    )

    assert isinstance(result, Ok)
    assert len(result.value) == 2
    assert (tmp_path / "src" / "__about__.py").read_text(encoding="utf-8") == '__version__ = "1.9.0"\n'


def test_apply_version_reports_only_changed_files(tmp_path: Path) -> None:
    (tmp_path / ".bumpversion.cfg").write_text(BUMPVERSION, encoding="utf-8")

    result = apply_version(root=tmp_path, files=(), version="1.8.0")

    assert isinstance(result, Ok)
    assert result.value == []
