"""webpack configuration for automated and manual tests.

Configs are plain dicts rendered to a CommonJS module by
:mod:`mono_devtools.javascript`. Running webpack itself is delegated to the
webpack CLI through npx.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Any

from .javascript import render_module
from .shell import info, run, step

THEME_IMPORTER = "@ckeditor/ckeditor5-dev-utils/lib/styles/themeimporter"
WEBPACK_CONFIG_NAME = "webpack.config.js"


class BundlerError(RuntimeError):
    """Raised when a webpack run fails."""


def _loader_rules(theme_path: str | None) -> list[dict[str, Any]]:
    postcss_plugins: list[Any] = [
        "postcss-import",
        "postcss-mixins",
        "postcss-nesting",
    ]
    if theme_path:
        postcss_plugins.insert(0, [THEME_IMPORTER, {"themePath": theme_path}])

    return [
        {
            "test": re.compile(r"\.svg$"),
            "use": ["raw-loader"],
        },
        {
            "test": re.compile(r"\.css$"),
            "use": [
                {
                    "loader": "style-loader",
                    "options": {"injectType": "singletonStyleTag"},
                },
                {
                    "loader": "postcss-loader",
                    "options": {"postcssOptions": {"plugins": postcss_plugins}},
                },
            ],
        },
    ]


def _source_dirs(files: list[str]) -> list[str]:
    """Map test globs to the ``src/`` directories of their packages."""
    dirs: list[str] = []
    for file in files:
        head, sep, _ = file.partition("/tests/")
        if sep:
            src = f"{head}/src"
            if src not in dirs:
                dirs.append(src)
    return dirs


def get_webpack_config_for_automated_tests(
    files: list[str],
    source_map: bool = False,
    coverage: bool = False,
    theme_path: str | None = None,
) -> dict[str, Any]:
    """Build the webpack config Karma's webpack preprocessor bundles tests with.

    Args:
        files: Test file globs.
        source_map: Emit inline source maps.
        coverage: Instrument the tested packages' sources for coverage.
        theme_path: Theme the PostCSS theme importer loads.
    """
    rules = _loader_rules(theme_path)

    if coverage:
        rules.append(
            {
                "test": re.compile(r"\.js$"),
                "loader": "istanbul-instrumenter-loader",
                "include": _source_dirs(files),
                "exclude": [re.compile(r"/tests/")],
                "enforce": "post",
                "options": {"esModules": True},
            }
        )

    config: dict[str, Any] = {
        "mode": "development",
        "module": {"rules": rules},
        "resolveLoader": {"modules": ["node_modules"]},
    }

    if source_map:
        config["devtool"] = "inline-source-map"

    return config


def get_webpack_config_for_manual_tests(
    entries: dict[str, str],
    build_dir: str,
    theme_path: str | None = None,
) -> dict[str, Any]:
    """Build the webpack config compiling manual test scripts.

    Args:
        entries: Map of entry name → script path.
        build_dir: Directory the bundles are written to.
        theme_path: Theme the PostCSS theme importer loads.
    """
    return {
        "mode": "development",
        "devtool": "inline-source-map",
        "entry": entries,
        "output": {"path": build_dir, "filename": "[name].js"},
        "module": {"rules": _loader_rules(theme_path)},
        "resolveLoader": {"modules": ["node_modules"]},
    }


def run_webpack(config: dict[str, Any], work_dir: Path) -> None:
    """Write the config into ``work_dir`` and run webpack once.

    Raises:
        BundlerError: If webpack exits with a non-zero status.
    """
    step("Running webpack")
    work_dir.mkdir(parents=True, exist_ok=True)
    config_path = work_dir / WEBPACK_CONFIG_NAME
    config_path.write_text(render_module(config))
    info(f"Config: {config_path}")

    try:
        run("npx", "webpack", "--config", str(config_path))
    except subprocess.CalledProcessError as exc:
        raise BundlerError(f"webpack failed with exit code {exc.returncode}") from exc
