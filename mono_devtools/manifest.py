"""mgit.json construction for multi-repository test checkouts.

A testing project lists the packages it needs in its package.json. This
module turns that dependency list into an ``mgit.json`` manifest so that
mgit can clone the matching repositories, optionally pinning the package
under test to the commit CI is building.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from .models import CommitOverride, MgitJson
from .settings import Environment, Settings
from .shell import info, step

HASHED_VERSION_RE = re.compile(r"#[0-9a-f]+$")


def is_hashed_dependency(version: str) -> bool:
    """Return True if the version specifier already pins a commit.

    Examples:
        "ckeditor/ckeditor5-engine#1a2b3c" → True
        "^11.0.0" → False
    """
    return HASHED_VERSION_RE.search(version) is not None


def _is_project_dependency(name: str, version: str, settings: Settings) -> bool:
    # The tooling's own packages never take part in a test checkout.
    if settings.excluded_name_marker in name:
        return False
    # Either condition is enough on its own.
    return (
        name.startswith(settings.package_scope_prefix)
        or settings.host_marker in version
    )


def create_mgit_json_content(
    package_json: Mapping[str, Any],
    override: CommitOverride | None = None,
    settings: Settings | None = None,
) -> MgitJson:
    """Create the ``mgit.json`` content from a parsed package.json.

    Runtime and development dependencies are merged. Only the project's own
    packages (by name prefix, excluding the tooling's sibling packages) and
    dependencies hosted on the alternate host (by version marker) are kept.
    Hashed versions are copied verbatim; every other dependency resolves to
    its repository name, i.e. the package name without the scope's ``@``.

    Args:
        package_json: Parsed package.json of the testing project.
        override: Pins ``override.package_name`` to ``override.commit``.
        settings: Project naming conventions; defaults when omitted.

    Returns:
        The manifest to write as mgit.json.
    """
    settings = settings or Settings()
    dependencies: dict[str, str] = {
        **package_json.get("dependencies", {}),
        **package_json.get("devDependencies", {}),
    }

    mgit = MgitJson(packages=settings.packages_dir)
    for name, version in dependencies.items():
        if not _is_project_dependency(name, version, settings):
            continue

        if is_hashed_dependency(version):
            mgit.dependencies[name] = version
        else:
            mgit.dependencies[name] = name.removeprefix("@")

    if override and override.package_name in mgit.dependencies:
        repository = mgit.dependencies[override.package_name].split("#", 1)[0]
        mgit.dependencies[override.package_name] = f"{repository}#{override.commit}"

    return mgit


def load_json(path: Path) -> Any:
    """Load and parse a JSON file."""
    return json.loads(path.read_text())


def update_json_file(path: Path, update: Callable[[Any], Any]) -> None:
    """Rewrite a JSON file with the result of ``update``.

    ``update`` receives the current content (an empty dict when the file
    does not exist yet). Output uses 2-space indentation and ends with a
    newline, matching what npm writes.
    """
    current = load_json(path) if path.exists() else {}
    path.write_text(json.dumps(update(current), indent=2) + "\n")


def prepare_mgit_json(
    test_dir: Path,
    env: Environment,
    settings: Settings,
    cwd: Path | None = None,
) -> MgitJson:
    """Write ``<test_dir>/mgit.json`` for testing the current package.

    The package in ``cwd`` is the one under test: its entry in the testing
    project's manifest is pinned to the commit CI builds. ``packages`` and
    ``dependencies`` are replaced; other keys of an existing mgit.json stay.

    Args:
        test_dir: Directory of the testing project (holds its package.json).
        env: CI environment supplying the commit to pin.
        settings: Project naming conventions.
        cwd: Root of the package under test; defaults to the working directory.
    """
    step("Preparing mgit.json")
    cwd = cwd or Path.cwd()

    package_name = load_json(cwd / "package.json")["name"]
    testing_package_json = load_json(test_dir / "package.json")

    commit = env.checkout_commit
    override = (
        CommitOverride(package_name=package_name, commit=commit) if commit else None
    )
    mgit = create_mgit_json_content(testing_package_json, override, settings)

    # Other keys of an existing mgit.json are kept
    update_json_file(
        test_dir / "mgit.json", lambda current: {**current, **mgit.model_dump()}
    )

    for name, repository in mgit.dependencies.items():
        info(f"{name} → {repository}")
    return mgit
