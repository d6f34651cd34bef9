"""Resolution of test file options to glob patterns.

Test commands accept short file options rather than paths:

- ``/`` → every test of the package in the working directory
- ``engine`` → every test of the ``engine`` package repository
- ``engine/view/`` → every test under ``tests/view/`` of that repository
- ``engine/view/document`` → the single ``tests/view/document.js`` file

Anything that already looks like a path or a glob is passed through.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from .settings import Settings

GLOB_CHARS = frozenset("*?[{")


def _is_path_like(option: str) -> bool:
    return option.endswith(".js") or any(c in GLOB_CHARS for c in option)


def transform_file_option_to_test_glob(
    option: str,
    cwd: Path,
    settings: Settings,
    manual: bool = False,
) -> str:
    """Convert a test file option into an absolute glob pattern.

    Args:
        option: File option given on the command line.
        cwd: Root of the package the tests run from.
        settings: Supplies the repository directory prefix.
        manual: Resolve manual tests (``tests/manual/``) instead of
                automated ones.

    Examples (repository prefix "ckeditor5-"):
        "/" → "<cwd>/tests/**/*.js"
        "engine" → "<cwd>/node_modules/ckeditor5-engine/tests/**/*.js"
        "engine/view/" → ".../ckeditor5-engine/tests/view/**/*.js"
        "engine/view/document" → ".../ckeditor5-engine/tests/view/document.js"
    """
    if _is_path_like(option):
        return str(cwd / option)

    suffix = ["tests", "manual"] if manual else ["tests"]

    if option.strip("/") == "":
        return str(cwd.joinpath(*suffix, "**", "*.js"))

    package, *chunks = [chunk for chunk in option.split("/") if chunk]
    root = cwd / "node_modules" / f"{settings.repository_prefix}{package}"

    if not chunks:
        suffix += ["**", "*.js"]
    elif option.endswith("/"):
        # A trailing slash selects a whole directory
        suffix += [*chunks, "**", "*.js"]
    else:
        suffix += [*chunks[:-1], f"{chunks[-1]}.js"]

    return str(root.joinpath(*suffix))


def get_relative_file_path(path: str, cwd: Path, settings: Settings) -> str:
    """Return a test file path relative to the directory holding its package.

    The package is the last path segment starting with the repository
    prefix; other files are made relative to ``cwd``, and files outside
    ``cwd`` keep their absolute path without its root. The result always
    uses forward slashes.

    Examples:
        "/w/node_modules/ckeditor5-engine/tests/manual/a.js"
            → "ckeditor5-engine/tests/manual/a.js"
        "<cwd>/tests/manual/b.js" → "tests/manual/b.js"
        "/other/tests/manual/c.js" → "other/tests/manual/c.js"
    """
    file = Path(path)
    parts = file.parts
    for index in range(len(parts) - 1, -1, -1):
        if parts[index].startswith(settings.repository_prefix):
            return str(PurePosixPath(*parts[index:]))

    if file.is_relative_to(cwd):
        return file.relative_to(cwd).as_posix()
    return str(PurePosixPath(*file.parts[1:]))
