"""Changelog file handling and entry formatting.

The changelog lists releases newest first below a fixed header:

    Changelog
    =========

    ## [1.1.0](https://github.com/org/repo/compare/v1.0.0...v1.1.0) (2019-03-01)

    ### Features

    * Added the thing. ([1a2b3c4](https://github.com/org/repo/commit/1a2b3c4...))
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from pathlib import Path

from .commits import PUBLIC_GROUPS, get_commits, transform_commit
from .models import ChangelogContext, Commit
from .settings import Settings

CHANGELOG_HEADER = "Changelog\n=========\n\n"
INTERNAL_RELEASE_NOTE = (
    "Internal changes only (updated dependencies, documentation, etc.)."
)


def changelog_path(cwd: Path, settings: Settings) -> Path:
    return cwd / settings.changelog_file


def get_changelog(cwd: Path, settings: Settings) -> str:
    """Return the changelog content, or an empty string if there is none."""
    path = changelog_path(cwd, settings)
    return path.read_text() if path.exists() else ""


def save_changelog(content: str, cwd: Path, settings: Settings) -> None:
    changelog_path(cwd, settings).write_text(content)


def _heading(context: ChangelogContext, repository_url: str | None, today: date) -> str:
    day = today.isoformat()
    if context.skip_links or not repository_url or not context.tag_name:
        return f"## {context.version} ({day})"
    compare = f"{repository_url}/compare/{context.tag_name}...{context.new_tag_name}"
    return f"## [{context.version}]({compare}) ({day})"


def _commit_line(commit: Commit, repository_url: str | None, skip_links: bool) -> str:
    if skip_links or not repository_url:
        return f"* {commit.subject} ({commit.short_hash})"
    link = f"{repository_url}/commit/{commit.hash}"
    return f"* {commit.subject} ([{commit.short_hash}]({link}))"


def format_entry(
    context: ChangelogContext,
    commits: Iterable[Commit],
    repository_url: str | None = None,
    today: date | None = None,
) -> str:
    """Format the changelog entry for one release.

    Args:
        context: Version, tags and flags of the release.
        commits: Transformed commits; only public ones are listed.
        repository_url: Base URL for compare and commit links.
        today: Release date; defaults to the current date.
    """
    lines = [_heading(context, repository_url, today or date.today()), ""]

    if context.is_internal_release:
        lines += [INTERNAL_RELEASE_NOTE, ""]
        return "\n".join(lines) + "\n"

    commits = [commit for commit in commits if commit.public]
    # Groups appear in a fixed order, commits newest first within a group
    for group in PUBLIC_GROUPS.values():
        grouped = [commit for commit in commits if commit.group == group]
        if not grouped:
            continue
        lines += [f"### {group}", ""]
        lines += [
            _commit_line(commit, repository_url, context.skip_links)
            for commit in grouped
        ]
        lines.append("")

    breaking = [commit for commit in commits if commit.breaking]
    if breaking:
        lines += ["### BREAKING CHANGES", ""]
        lines += [
            _commit_line(commit, repository_url, context.skip_links)
            for commit in breaking
        ]
        lines.append("")

    return "\n".join(lines) + "\n"


def insert_entry(changelog: str, entry: str) -> str:
    """Insert an entry directly below the header, creating it if missing."""
    body = changelog.removeprefix(CHANGELOG_HEADER).lstrip("\n")
    content = f"{CHANGELOG_HEADER}{entry.rstrip()}\n\n{body}"
    return content.rstrip("\n") + "\n"


def generate_changelog_from_commits(
    context: ChangelogContext,
    cwd: Path,
    settings: Settings,
    commits: list[Commit] | None = None,
    today: date | None = None,
) -> str:
    """Write the entry for ``context`` into the changelog file.

    Commits made since ``context.tag_name`` are read from git unless given.
    Internal releases do not read commits at all.

    Returns:
        The new changelog content.
    """
    if context.is_internal_release:
        commits = []
    elif commits is None:
        transform = context.transform_commit or transform_commit
        commits = [
            transformed
            for transformed in map(transform, get_commits(context.tag_name))
            if transformed is not None
        ]

    entry = format_entry(context, commits, settings.repository_url, today)
    content = insert_entry(get_changelog(cwd, settings), entry)
    save_changelog(content, cwd, settings)
    return content
