"""Changelog generation for a single package release.

Flow: find last release → classify commits → ask for a version → write the
changelog entry → commit it. A "skip" answer ends the flow without touching
anything; an "internal" answer bumps the version without listing commits.

Nothing is rolled back on failure: a changelog written before a failing
git command stays on disk.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import click
import semver

from .changelog import generate_changelog_from_commits, get_changelog
from .commits import display_commits, get_new_release_type, transform_commit
from .manifest import load_json
from .models import ChangelogContext, Commit
from .settings import Settings
from .shell import info, sh_exec, step
from .versions import RELEASE_TYPES, bump, bump_internal, get_last_from_changelog

SKIP = "skip"
INTERNAL = "internal"
COMMIT_MESSAGE = "Docs: Changelog. [skip ci]"

VersionPrompt = Callable[[str, str | None], str]


def _check_answer(answer: str) -> str:
    answer = answer.strip()
    if answer in (SKIP, INTERNAL) or semver.Version.is_valid(answer):
        return answer
    raise click.BadParameter(
        f'"{answer}" is not a valid version. Type a version, "skip" or "internal".'
    )


def provide_version(current_version: str, release_type: str | None) -> str:
    """Ask the user which version to release.

    The suggestion follows the proposed release type: the bumped version for
    major/minor/patch, "internal" for internal releases and "skip" when
    nothing was proposed. Invalid answers are asked again.

    Raises:
        click.Abort: If the prompt is cancelled.
    """
    if release_type in RELEASE_TYPES:
        suggested = bump(current_version, release_type)
    else:
        suggested = release_type or SKIP

    return click.prompt(
        f'Type the new version (current: "{current_version}", '
        f'suggested: "{suggested}", or "{INTERNAL}" for an internal changes only '
        f'release, "{SKIP}" to skip)',
        default=suggested,
        value_proc=_check_answer,
    )


def generate_changelog_for_single_package(
    new_version: str | None = None,
    skip_links: bool = False,
    cwd: Path | None = None,
    settings: Settings | None = None,
    prompt: VersionPrompt = provide_version,
) -> str | None:
    """Generate the changelog entry for the package in ``cwd`` and commit it.

    Args:
        new_version: Version to release; asked for interactively if omitted.
            May also be "skip" or "internal".
        skip_links: Leave compare and commit links out of the entry.
        cwd: Package root; defaults to the working directory.
        settings: Project settings (changelog path, repository URL).
        prompt: Asks for the version given the current version and the
            proposed release type.

    Returns:
        The released version, or None when the release was skipped.
    """
    cwd = cwd or Path.cwd()
    settings = settings or Settings()
    package_json = load_json(cwd / "package.json")

    last_version = get_last_from_changelog(get_changelog(cwd, settings))
    tag_name = f"v{last_version}" if last_version else None

    step(f'Generating changelog for "{package_json["name"]}"')

    commits: list[Commit] | None = None
    version = new_version
    if not version:
        result = get_new_release_type(transform_commit, tag_name)
        display_commits(result.commits)
        commits = result.commits
        release_type = result.release_type if result.release_type != SKIP else None
        version = prompt(package_json["version"], release_type)

    if version == SKIP:
        info("Skipped")
        return None

    is_internal_release = version == INTERNAL
    if is_internal_release:
        version = bump_internal(package_json["version"])

    context = ChangelogContext(
        version=version,
        tag_name=tag_name,
        new_tag_name=f"v{version}",
        is_internal_release=is_internal_release,
        skip_links=skip_links,
        transform_commit=transform_commit,
    )
    generate_changelog_from_commits(context, cwd, settings, commits=commits)

    sh_exec("git", "add", settings.changelog_file, cwd=cwd)
    sh_exec("git", "commit", "-m", COMMIT_MESSAGE, cwd=cwd)

    info(f'Changelog for "{package_json["name"]}" (v{version}) has been generated.')
    return version
