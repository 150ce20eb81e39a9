"""Typed relprep configuration.

Settings live either in ``relprep.toml`` (root table) or under
``[tool.relprep]`` in the project's ``pyproject.toml``. Every key is
optional; missing keys fall back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "CONFIG_FILE_NAME",
    "load_config",
    "load_project_config",
]

CONFIG_FILE_NAME = "relprep.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"

DEFAULT_UNIT_TEST_COMMAND = "python -m pytest tests/unit"
DEFAULT_INTEGRATION_TEST_COMMAND = "python -m pytest tests/functional"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config could not be read or has the wrong shape."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Release preparation settings for one project."""

    remote: str = "origin"
    branch_prefix: str = "prep-release"
    changes_dir: str = ".changes"
    changelog_tool: str = "changie"
    cleanup_command: str = ""
    version_files: tuple[str, ...] = field(default_factory=tuple)
    bump_command: str = ""
    unit_test_command: str = DEFAULT_UNIT_TEST_COMMAND
    integration_test_command: str = DEFAULT_INTEGRATION_TEST_COMMAND
    env_setup_script: str = ""
    flaky_marker: str = "flaky"
    integration_workers: str = ""
    flaky_workers: int = 1

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Build a Config from a parsed TOML table.

        Raises:
            ValueError: a key is present with a value of the wrong type.
        """
        defaults = cls()

        def text(key: str, default: str) -> str:
            if key not in data:
                return default
            value = data[key]
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
            return value.strip()

        files: tuple[str, ...] = defaults.version_files
        if "version_files" in data:
            listed = get_str_list(data, "version_files")
            if listed is None:
                raise ValueError("version_files must be a list of strings")
            files = tuple(f.strip() for f in listed if f.strip())

        flaky_workers = defaults.flaky_workers
        if "flaky_workers" in data:
            parsed = get_int(data, "flaky_workers")
            if parsed is None or parsed < 1:
                raise ValueError("flaky_workers must be a positive integer")
            flaky_workers = parsed

        workers = data.get("integration_workers")
        if isinstance(workers, int) and not isinstance(workers, bool):
            integration_workers = str(workers)
        else:
            integration_workers = text("integration_workers", defaults.integration_workers)

        prefix = text("branch_prefix", defaults.branch_prefix).strip("/")
        changes_dir = text("changes_dir", defaults.changes_dir).rstrip("/")

        return cls(
            remote=text("remote", defaults.remote) or defaults.remote,
            branch_prefix=prefix or defaults.branch_prefix,
            changes_dir=changes_dir or defaults.changes_dir,
            changelog_tool=(
                text("changelog_tool", defaults.changelog_tool) or defaults.changelog_tool
            ),
            cleanup_command=text("cleanup_command", defaults.cleanup_command),
            version_files=files,
            bump_command=text("bump_command", defaults.bump_command),
            unit_test_command=text("unit_test_command", defaults.unit_test_command),
            integration_test_command=text(
                "integration_test_command", defaults.integration_test_command
            ),
            env_setup_script=text("env_setup_script", defaults.env_setup_script),
            flaky_marker=text("flaky_marker", defaults.flaky_marker) or defaults.flaky_marker,
            integration_workers=integration_workers,
            flaky_workers=flaky_workers,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def _build(table: Mapping[str, object], path: Path) -> Result[Config, ConfigError]:
    try:
        return Ok(Config.from_dict(table))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load a standalone ``relprep.toml``.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return _build(result.value, path)


def load_project_config(root: Path) -> Result[Config, ConfigError]:
    """Load settings for the project checked out at ``root``.

    ``relprep.toml`` wins over ``[tool.relprep]`` in ``pyproject.toml``.
    Without either, the defaults apply.
    """
    standalone = root / CONFIG_FILE_NAME
    if standalone.is_file():
        return load_config(standalone)

    pyproject = root / PYPROJECT_FILE_NAME
    if not pyproject.is_file():
        return Ok(Config())

    parsed = _parse_toml(pyproject)
    if isinstance(parsed, Err):
        return parsed

    tool = get_table(parsed.value, "tool") or {}
    if "relprep" in tool and get_table(tool, "relprep") is None:
        return Err(ConfigError("[tool.relprep] must be a table", path=pyproject))
    table = get_table(tool, "relprep") or {}
    return _build(table, pyproject)
