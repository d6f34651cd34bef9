"""Tests for mono_devtools.globs."""

from __future__ import annotations

from pathlib import Path

import pytest

from mono_devtools.globs import (
    get_relative_file_path,
    transform_file_option_to_test_glob,
)
from mono_devtools.settings import Settings

CWD = Path("/work/ckeditor5")
MODULES = "/work/ckeditor5/node_modules"


class TestTransformFileOptionToTestGlob:
    @pytest.mark.parametrize(
        ("option", "expected"),
        [
            ("/", "/work/ckeditor5/tests/**/*.js"),
            ("engine", f"{MODULES}/ckeditor5-engine/tests/**/*.js"),
            ("engine/view/", f"{MODULES}/ckeditor5-engine/tests/view/**/*.js"),
            (
                "engine/view/document",
                f"{MODULES}/ckeditor5-engine/tests/view/document.js",
            ),
        ],
    )
    def test_automated(self, option: str, expected: str, settings: Settings) -> None:
        assert transform_file_option_to_test_glob(option, CWD, settings) == expected

    @pytest.mark.parametrize(
        ("option", "expected"),
        [
            ("/", "/work/ckeditor5/tests/manual/**/*.js"),
            ("engine", f"{MODULES}/ckeditor5-engine/tests/manual/**/*.js"),
            (
                "engine/view/",
                f"{MODULES}/ckeditor5-engine/tests/manual/view/**/*.js",
            ),
        ],
    )
    def test_manual(self, option: str, expected: str, settings: Settings) -> None:
        result = transform_file_option_to_test_glob(option, CWD, settings, manual=True)
        assert result == expected

    def test_relative_path_passes_through(self, settings: Settings) -> None:
        result = transform_file_option_to_test_glob("tests/a.js", CWD, settings)
        assert result == "/work/ckeditor5/tests/a.js"

    def test_absolute_glob_passes_through(self, settings: Settings) -> None:
        result = transform_file_option_to_test_glob("/other/**/*.js", CWD, settings)
        assert result == "/other/**/*.js"

    def test_uses_repository_prefix(self) -> None:
        settings = Settings(repository_prefix="widget-")
        result = transform_file_option_to_test_glob("core", CWD, settings)
        assert result == f"{MODULES}/widget-core/tests/**/*.js"


class TestGetRelativeFilePath:
    def test_inside_package_repository(self, settings: Settings) -> None:
        path = "/w/node_modules/ckeditor5-engine/tests/manual/a.js"
        result = get_relative_file_path(path, Path("/w"), settings)
        assert result == "ckeditor5-engine/tests/manual/a.js"

    def test_uses_innermost_repository(self, settings: Settings) -> None:
        path = "/w/ckeditor5-x/node_modules/ckeditor5-engine/tests/a.js"
        result = get_relative_file_path(path, Path("/w/ckeditor5-x"), settings)
        assert result == "ckeditor5-engine/tests/a.js"

    def test_outside_package_repository(self, settings: Settings) -> None:
        path = "/w/app/tests/manual/b.js"
        result = get_relative_file_path(path, Path("/w/app"), settings)
        assert result == "tests/manual/b.js"

    def test_outside_working_directory(self, settings: Settings) -> None:
        path = "/other/tests/manual/c.js"
        result = get_relative_file_path(path, Path("/w/app"), settings)
        assert result == "other/tests/manual/c.js"
