"""Data models for mono-devtools.

These Pydantic models represent the transient records passed between the
commands: manifests, test-runner options, commits and changelog contexts.
None of them outlive a single command invocation.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


class MgitJson(BaseModel):
    """Content of an ``mgit.json`` multi-repository checkout manifest.

    Attributes:
        packages: Directory the repositories are cloned into.
        dependencies: Map of package name → repository (optionally with a
                      ``#<commit>`` suffix selecting the revision).
    """

    packages: str
    dependencies: dict[str, str] = Field(default_factory=dict)


class CommitOverride(BaseModel):
    """Pins one package of a manifest to a specific commit.

    Attributes:
        package_name: Name of the package whose revision is pinned.
        commit: Commit hash appended to the package's repository.
    """

    package_name: str
    commit: str


class KarmaOptions(BaseModel):
    """User-supplied options for assembling a Karma configuration."""

    files: list[str] = Field(default_factory=list)
    reporter: str = "mocha"
    source_map: bool = False
    coverage: bool = False
    theme_path: str | None = None
    browsers: list[str] | None = None
    watch: bool = False
    server: bool = False
    verbose: bool = False
    browser_stack: bool = False
    username: str | None = None
    access_key: str | None = None


class Commit(BaseModel):
    """A single commit read from git history.

    Attributes:
        hash: Full commit hash.
        subject: First line of the commit message (type prefix removed once
                 the commit has been transformed).
        body: Remaining lines of the commit message.
        type: Commit type parsed from the ``Type: Subject`` convention.
        group: Changelog section the commit belongs to, if it is public.
        public: Whether the commit qualifies for the changelog.
        breaking: Whether the commit message carries a breaking change note.
    """

    model_config = ConfigDict(frozen=True)

    hash: str
    subject: str
    body: str = ""
    type: str | None = None
    group: str | None = None
    public: bool = False
    breaking: bool = False

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class ReleaseTypeResult(BaseModel):
    """Outcome of classifying the commits made since the last release."""

    release_type: str
    commits: list[Commit] = Field(default_factory=list)


class ChangelogContext(BaseModel):
    """Everything needed to format one changelog entry.

    Attributes:
        version: Version the entry is written for.
        tag_name: Tag of the previous release, or None for the first one.
        new_tag_name: Tag the new release will receive.
        is_internal_release: True when the release carries no public commits.
        skip_links: Omit compare and commit links from the entry.
        transform_commit: Function turning raw commits into changelog commits.
    """

    version: str
    tag_name: str | None = None
    new_tag_name: str
    is_internal_release: bool = False
    skip_links: bool = False
    transform_commit: Callable[[Commit], Commit | None] | None = Field(
        default=None, exclude=True
    )
