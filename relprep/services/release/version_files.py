"""Declared version lookup and rewrite across project metadata files.

Supported files:
- ``.bumpversion.cfg``: ``current_version`` in the ``[bumpversion]`` section
- ``pyproject.toml``: static ``[project].version``
- ``*.py``: a module-level ``__version__ = "X"`` or ``version = "X"``
  (hatch keeps it in ``__about__.py``)
"""

from __future__ import annotations

import configparser
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from relprep.core.result import Err, Ok, Result
from relprep.core.structured import as_str_dict, get_str, get_table
from relprep.platform.files import atomic_write_text
from relprep.services.release.errors import ReleaseError

VersionFileKind = Literal["bumpversion", "pyproject", "python"]

BUMPVERSION_CFG = ".bumpversion.cfg"
PYPROJECT_TOML = "pyproject.toml"

_AUTO_DETECT: tuple[str, ...] = (BUMPVERSION_CFG, PYPROJECT_TOML)

_BUMPVERSION_RE = re.compile(r"^(current_version\s*=\s*)(\S+)[ \t]*$", re.MULTILINE)
_PY_VERSION_RE = re.compile(
    r"""^((?:__version__|version)\s*(?::\s*str\s*)?=\s*)(["'])([^"'\n]+)\2""",
    re.MULTILINE,
)
_TOML_VERSION_RE = re.compile(r"""^(version\s*=\s*)(["'])([^"'\n]*)\2""", re.MULTILINE)
_TOML_TABLE_RE = re.compile(r"^\[", re.MULTILINE)

ReadFile = Callable[[str], str | None]


def version_file_kind(path: str) -> VersionFileKind | None:
    name = Path(path).name
    if name == BUMPVERSION_CFG:
        return "bumpversion"
    if name == PYPROJECT_TOML:
        return "pyproject"
    if name.endswith(".py"):
        return "python"
    return None


def read_version_text(kind: VersionFileKind, text: str) -> str | None:
    """Version declared in ``text``, or None if the file does not declare one."""
    match kind:
        case "bumpversion":
            parser = configparser.ConfigParser(interpolation=None)
            try:
                parser.read_string(text)
            except configparser.Error:
                return None
            value = parser.get("bumpversion", "current_version", fallback="").strip()
            return value or None
        case "pyproject":
            try:
                data = as_str_dict(tomllib.loads(text))
            except tomllib.TOMLDecodeError:
                return None
            project = get_table(data or {}, "project") or {}
            return get_str(project, "version")
        case "python":
            m = _PY_VERSION_RE.search(text)
            return m.group(3).strip() if m else None


def replace_version_text(kind: VersionFileKind, text: str, version: str) -> str | None:
    """``text`` with its declared version set to ``version``; None if undeclared."""
    match kind:
        case "bumpversion":
            if _BUMPVERSION_RE.search(text) is None:
                return None
            return _BUMPVERSION_RE.sub(lambda m: f"{m.group(1)}{version}", text, count=1)
        case "pyproject":
            return _replace_project_version(text, version)
        case "python":
            if _PY_VERSION_RE.search(text) is None:
                return None
            return _PY_VERSION_RE.sub(
                lambda m: f"{m.group(1)}{m.group(2)}{version}{m.group(2)}", text, count=1
            )


def _replace_project_version(text: str, version: str) -> str | None:
    header = re.search(r"^\[project\][ \t]*$", text, re.MULTILINE)
    if header is None:
        return None
    start = header.end()
    next_table = _TOML_TABLE_RE.search(text, start)
    end = next_table.start() if next_table else len(text)

    section = text[start:end]
    if _TOML_VERSION_RE.search(section) is None:
        return None
    section = _TOML_VERSION_RE.sub(
        lambda m: f"{m.group(1)}{m.group(2)}{version}{m.group(2)}", section, count=1
    )
    return text[:start] + section + text[end:]


def detect_version_files(read_file: ReadFile) -> tuple[str, ...]:
    """Known metadata files that exist and declare a version."""
    found: list[str] = []
    for path in _AUTO_DETECT:
        kind = version_file_kind(path)
        text = read_file(path)
        if kind is None or text is None:
            continue
        if read_version_text(kind, text) is not None:
            found.append(path)
    return tuple(found)


def declared_version(
    *,
    files: tuple[str, ...],
    read_file: ReadFile,
) -> Result[str, ReleaseError]:
    """The single version declared by ``files`` (auto-detected when empty)."""
    paths = files or detect_version_files(read_file)
    if not paths:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="no version file found",
                hint=f"Add {BUMPVERSION_CFG} or a static [project].version, "
                "or set version_files in [tool.relprep].",
            )
        )

    values: dict[str, str] = {}
    for path in paths:
        kind = version_file_kind(path)
        if kind is None:
            return Err(
                ReleaseError(
                    kind="config_error",
                    message=f"unsupported version file: {path}",
                    hint="Use .bumpversion.cfg, pyproject.toml or a .py module.",
                )
            )
        text = read_file(path)
        if text is None:
            return Err(ReleaseError(kind="invalid_input", message=f"version file missing: {path}"))
        value = read_version_text(kind, text)
        if value is None:
            return Err(
                ReleaseError(kind="invalid_input", message=f"no version declared in {path}")
            )
        values[path] = value

    distinct = set(values.values())
    if len(distinct) != 1:
        detail = ", ".join(f"{p}={v}" for p, v in values.items())
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="version files are out of sync",
                hint=detail,
            )
        )
    return Ok(distinct.pop())


def apply_version(
    *,
    root: Path,
    files: tuple[str, ...],
    version: str,
) -> Result[list[Path], ReleaseError]:
    """Rewrite the declared version in the working tree.

    Returns:
        Ok(paths actually changed)
    """

    def read_local(rel: str) -> str | None:
        path = root / rel
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    paths = files or detect_version_files(read_local)
    if not paths:
        return Err(ReleaseError(kind="invalid_input", message="no version file found"))

    changed: list[Path] = []
    for rel in paths:
        kind = version_file_kind(rel)
        path = root / rel
        if kind is None:
            return Err(ReleaseError(kind="config_error", message=f"unsupported version file: {rel}"))
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(
                ReleaseError(kind="invalid_input", message=f"failed to read {rel}: {e}", hint=str(path))
            )

        updated = replace_version_text(kind, text, version)
        if updated is None:
            return Err(ReleaseError(kind="invalid_input", message=f"no version declared in {rel}"))
        if updated == text:
            continue

        try:
            atomic_write_text(path, updated)
        except OSError as e:
            return Err(
                ReleaseError(kind="invalid_input", message=f"failed to write {rel}: {e}", hint=str(path))
            )
        changed.append(path)

    return Ok(changed)
