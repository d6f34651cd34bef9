"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mono_devtools.models import Commit
from mono_devtools.settings import Settings


@pytest.fixture
def settings() -> Settings:
    """Default project settings."""
    return Settings()


@pytest.fixture
def linked_settings() -> Settings:
    """Settings with a repository URL, so changelog entries carry links."""
    return Settings(repository_url="https://github.com/org/repo")


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """Create a package root holding a package.json."""
    root = tmp_path / "ckeditor5-engine"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps({"name": "@ckeditor/ckeditor5-engine", "version": "1.2.0"})
    )
    return root


@pytest.fixture
def testing_package_json() -> dict:
    """package.json of a project that tests several packages together."""
    return {
        "name": "ckeditor5-testing",
        "dependencies": {
            "@ckeditor/ckeditor5-engine": "^11.0.0",
            "@ckeditor/ckeditor5-utils": "ckeditor/ckeditor5-utils#1a2b3c4",
            "lodash-es": "^4.17.10",
        },
        "devDependencies": {
            "@ckeditor/ckeditor5-dev-tests": "^13.0.0",
            "ckeditor5-private": "cksource/ckeditor5-private#stable",
            "eslint": "^5.5.0",
        },
    }


@pytest.fixture
def sample_commits() -> list[Commit]:
    """Raw commits, newest first."""
    return [
        Commit(hash="a" * 40, subject="Feature: Added the toolbar."),
        Commit(hash="b" * 40, subject="Fix: Fixed the caret position."),
        Commit(hash="c" * 40, subject="Docs: Improved the guide."),
        Commit(
            hash="d" * 40,
            subject="Other: Renamed the view API.",
            body="BREAKING CHANGE: The `view` property is now `editingView`.",
        ),
    ]
