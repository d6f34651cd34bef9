"""Project settings and process environment.

Settings are read from the ``[tool.mono-devtools]`` table of the project's
pyproject.toml using tomlkit. The process environment is captured once, when
the CLI starts, into an :class:`Environment` that is passed explicitly to the
commands that branch on CI state.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, ValidationError

from .shell import fatal

TOOL_TABLE = "mono-devtools"


class Settings(BaseModel):
    """Naming conventions and paths of the project the tools run against.

    Attributes:
        package_scope_prefix: Name prefix shared by the project's packages.
        excluded_name_marker: Name fragment of the tooling's own packages,
                              which never go into a checkout manifest.
        host_marker: Version fragment marking a dependency hosted on the
                     alternate repository host.
        packages_dir: Directory mgit clones repositories into.
        repository_prefix: Directory prefix of package repositories under
                           node_modules/.
        changelog_file: Changelog path, relative to the package root.
        repository_url: Base URL for compare/commit links in the changelog.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    package_scope_prefix: str = "@ckeditor/ckeditor5"
    excluded_name_marker: str = "/ckeditor5-dev"
    host_marker: str = "cksource/ckeditor"
    packages_dir: str = "packages/"
    repository_prefix: str = "ckeditor5-"
    changelog_file: str = "CHANGELOG.md"
    repository_url: str | None = None


class Environment(BaseModel):
    """CI-related state of the process environment.

    Attributes:
        ci: True when running on a CI server.
        commit: Commit the CI build runs for (a merge commit for PR builds).
        pull_request_commit: Head commit of the pull request, if any.
    """

    model_config = ConfigDict(frozen=True)

    ci: bool = False
    commit: str | None = None
    pull_request_commit: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> Environment:
        """Capture the CI variables from an environment mapping."""
        return cls(
            ci=bool(environ.get("TRAVIS") or environ.get("CI")),
            commit=environ.get("TRAVIS_COMMIT") or None,
            pull_request_commit=environ.get("TRAVIS_PULL_REQUEST_SHA") or None,
        )

    @property
    def checkout_commit(self) -> str | None:
        """Commit a testing checkout should pin.

        PR builds use the head commit of the pull request rather than the
        merge commit CI creates.
        """
        return self.pull_request_commit or self.commit


def load_settings(path: Path) -> Settings:
    """Load settings from ``[tool.mono-devtools]`` in a pyproject.toml.

    Keys are written in kebab-case (``changelog-file``). A missing file or
    table yields the defaults.

    Raises:
        SystemExit: If the table holds unknown keys or invalid values.
    """
    if not path.exists():
        return Settings()

    doc = tomlkit.parse(path.read_text())
    table = doc.unwrap().get("tool", {}).get(TOOL_TABLE, {})
    values = {key.replace("-", "_"): value for key, value in table.items()}
    try:
        return Settings(**values)
    except ValidationError as exc:
        fatal(f"Invalid [tool.{TOOL_TABLE}] in {path}:\n{exc}")
