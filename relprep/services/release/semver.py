from __future__ import annotations

import re

from relprep.core.result import Err, Ok, Result
from relprep.services.release.errors import ReleaseError
from relprep.services.release.model import ParsedVersion

# MAJOR.MINOR.PATCH, then an optional prerelease that starts with a letter:
# 1.9.0rc1, 1.9.0-rc.1, 1.8.0b2, 1.10.0a1.dev20240101
_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-.]?([A-Za-z][0-9A-Za-z]*(?:\.[0-9A-Za-z]+)*))?$"
)


def parse_version(version: str) -> Result[ParsedVersion, ReleaseError]:
    """Split ``version`` into its base version and prerelease tag."""
    raw = version.strip()
    m = _VERSION_RE.match(raw)
    if m is None:
        return Err(
            ReleaseError(
                kind="parse_error",
                message=f"invalid version: {version!r}",
                hint="Expected MAJOR.MINOR.PATCH with an optional prerelease, e.g. 1.9.0rc1",
            )
        )

    base = f"{m.group(1)}.{m.group(2)}.{m.group(3)}"
    return Ok(ParsedVersion(raw=raw, base_version=base, prerelease=m.group(4)))


def changelog_file_name(parsed: ParsedVersion) -> str:
    if parsed.prerelease is None:
        return f"{parsed.base_version}.md"
    return f"{parsed.base_version}-{parsed.prerelease}.md"
