"""Commit collection and release-type classification.

Commit subjects follow the ``Type: Subject`` convention. Only some types
are public, i.e. worth a changelog entry:

- ``Feature`` → "Features"
- ``Fix`` → "Bug fixes"
- ``Other`` → "Other changes"

Everything else (``Docs``, ``Internal``, ``Tests``, unprefixed subjects) is
recorded but stays out of the changelog. A ``BREAKING CHANGE:`` note in the
message body marks a breaking commit.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from .models import Commit, ReleaseTypeResult
from .shell import git, info, step

PUBLIC_GROUPS = {
    "Feature": "Features",
    "Fix": "Bug fixes",
    "Other": "Other changes",
}

# Separators git emits for %x00 and %x01; neither counts as whitespace
FIELD_SEP = "\x00"
RECORD_SEP = "\x01"
LOG_FORMAT = "--format=%H%x00%s%x00%b%x01"

SUBJECT_RE = re.compile(r"^(?P<type>[A-Z][a-z]+): *(?P<subject>.+)$")
BREAKING_RE = re.compile(r"^BREAKING CHANGES?:", re.MULTILINE)

TransformCommit = Callable[[Commit], Commit | None]


def parse_log(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
    commits: list[Commit] = []
    for record in output.split(RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        hash_, subject, body = record.split(FIELD_SEP, 2)
        commits.append(Commit(hash=hash_, subject=subject, body=body.strip()))
    return commits


def get_commits(tag_name: str | None) -> list[Commit]:
    """Return the commits made since ``tag_name``, newest first.

    Without a tag the whole history of HEAD is read. Merge commits are
    skipped.
    """
    revision = f"{tag_name}..HEAD" if tag_name else "HEAD"
    return parse_log(git("log", "--no-merges", LOG_FORMAT, revision))


def transform_commit(commit: Commit) -> Commit:
    """Classify a raw commit by its ``Type: Subject`` prefix."""
    match = SUBJECT_RE.match(commit.subject)
    if not match:
        return commit

    commit_type = match.group("type")
    group = PUBLIC_GROUPS.get(commit_type)
    return commit.model_copy(
        update={
            "type": commit_type,
            "subject": match.group("subject"),
            "group": group,
            "public": group is not None,
            "breaking": bool(BREAKING_RE.search(commit.body)),
        }
    )


def get_new_release_type(
    transform: TransformCommit, tag_name: str | None
) -> ReleaseTypeResult:
    """Propose a release type for the commits made since the last release.

    - no commits at all → "skip"
    - no public commits → "internal"
    - a breaking change → "major"
    - a feature → "minor"
    - otherwise → "patch"
    """
    commits = [
        transformed
        for transformed in (transform(commit) for commit in get_commits(tag_name))
        if transformed is not None
    ]
    public = [commit for commit in commits if commit.public]

    if not commits:
        release_type = "skip"
    elif not public:
        release_type = "internal"
    elif any(commit.breaking for commit in public):
        release_type = "major"
    elif any(commit.type == "Feature" for commit in public):
        release_type = "minor"
    else:
        release_type = "patch"

    return ReleaseTypeResult(release_type=release_type, commits=commits)


def display_commits(commits: list[Commit]) -> None:
    """Print the commits, marking the ones that go into the changelog."""
    step("Commits since the last release")
    if not commits:
        info("<none>")
        return

    for commit in commits:
        marker = "+" if commit.public else "-"
        label = f"{commit.type}: " if commit.type else ""
        breaking = " (BREAKING)" if commit.breaking else ""
        info(f"{marker} {commit.short_hash} {label}{commit.subject}{breaking}")
