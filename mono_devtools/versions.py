"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
"""

from __future__ import annotations

import re

import semver

RELEASE_TYPES = ("major", "minor", "patch")

# "## [1.2.0](https://...) (2019-01-01)" or "## 1.2.0 (2019-01-01)"
CHANGELOG_VERSION_RE = re.compile(
    r"^## \[?v?(\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?)", re.MULTILINE
)


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Full versions keep their prerelease and build metadata. Incomplete
    versions are padded with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    """
    if semver.Version.is_valid(version_str):
        return semver.Version.parse(version_str)

    parts = version_str.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


def bump(version_str: str, release_type: str) -> str:
    """Increment the given component of a version.

    Examples:
        bump("1.2.3", "minor") → "1.3.0"
        bump("1.2.3", "major") → "2.0.0"

    Raises:
        ValueError: If the release type is not major, minor or patch.
    """
    if release_type not in RELEASE_TYPES:
        raise ValueError(f"Unknown release type: {release_type}")
    version = parse_version(version_str)
    return str(getattr(version, f"bump_{release_type}")())


def bump_internal(version_str: str) -> str:
    """Compute the version of an internal release.

    Prereleases move to the next prerelease, anything else to the next
    patch version. The last numeric prerelease identifier is incremented;
    without one a ``0`` is appended, the way npm does it:
        "1.2.0-alpha.0" → "1.2.0-alpha.1"
        "1.2.0-beta" → "1.2.0-beta.0"
        "1.2.0" → "1.2.1"
    """
    version = parse_version(version_str)
    if not version.prerelease:
        return str(version.bump_patch())

    identifiers = version.prerelease.split(".")
    for index in range(len(identifiers) - 1, -1, -1):
        if identifiers[index].isdigit():
            identifiers[index] = str(int(identifiers[index]) + 1)
            break
    else:
        identifiers.append("0")
    return str(version.replace(prerelease=".".join(identifiers), build=None))


def get_last_from_changelog(changelog: str) -> str | None:
    """Return the most recent version listed in a changelog.

    Entries are written newest first, so this is the first version heading.
    Returns None for a changelog without entries.
    """
    match = CHANGELOG_VERSION_RE.search(changelog)
    return match.group(1) if match else None
