"""CLI entry point for mono-devtools."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from pathlib import Path

import click
from pydantic import BaseModel

from .globs import transform_file_option_to_test_glob
from .javascript import render_karma_module
from .karma import KarmaConfigError, get_karma_config
from .manifest import prepare_mgit_json
from .manual_tests import compile_manual_test_scripts
from .models import KarmaOptions
from .release import generate_changelog_for_single_package
from .settings import Environment, Settings, load_settings
from .shell import run, step
from .webpack import BundlerError

KARMA_CONFIG_NAME = "karma.conf.js"


class CliState(BaseModel):
    """Settings and environment, loaded once when the CLI starts."""

    settings: Settings
    env: Environment


def _split_browsers(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> list[str] | None:
    if value is None:
        return None
    return [browser.strip() for browser in value.split(",") if browser.strip()]


def karma_options(func):
    """Attach the options shared by the Karma commands."""
    options = [
        click.option(
            "-f",
            "--files",
            multiple=True,
            help="Test file option or glob (repeatable), e.g. -f engine -f /.",
        ),
        click.option(
            "-r",
            "--reporter",
            default="mocha",
            show_default=True,
            help="Mocha reporter: mocha or dots.",
        ),
        click.option("-s", "--source-map", is_flag=True, help="Emit source maps."),
        click.option("-c", "--coverage", is_flag=True, help="Collect code coverage."),
        click.option("--theme-path", default=None, help="Theme for PostCSS to load."),
        click.option(
            "-b",
            "--browsers",
            default=None,
            callback=_split_browsers,
            help="Comma-separated browsers to run the tests in (default: Chrome).",
        ),
        click.option("-w", "--watch", is_flag=True, help="Re-run tests on changes."),
        click.option("--server", is_flag=True, help="Start the server only."),
        click.option("-v", "--verbose", is_flag=True, help="Verbose webpack output."),
        click.option(
            "--browser-stack", is_flag=True, help="Run the tests on BrowserStack."
        ),
        click.option("--username", envvar="BROWSER_STACK_USERNAME", default=None),
        click.option("--access-key", envvar="BROWSER_STACK_ACCESS_KEY", default=None),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _karma_config(state: CliState, options: KarmaOptions) -> dict:
    try:
        return get_karma_config(options, state.env, Path.cwd(), state.settings)
    except KarmaConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="mono-devtools")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default="pyproject.toml",
    show_default=True,
    help="pyproject.toml holding the [tool.mono-devtools] settings.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """Developer tools for a multi-package repository."""
    ctx.obj = CliState(
        settings=load_settings(config_path),
        env=Environment.from_environ(os.environ),
    )


@cli.command()
@click.option("--new-version", default=None, help="Version to release.")
@click.option("--skip-links", is_flag=True, help="Omit links from the entry.")
@click.pass_obj
def changelog(state: CliState, new_version: str | None, skip_links: bool) -> None:
    """Generate the changelog entry for the package and commit it."""
    generate_changelog_for_single_package(
        new_version=new_version,
        skip_links=skip_links,
        settings=state.settings,
    )


@cli.command("prepare-mgit-json")
@click.argument(
    "test_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.pass_obj
def prepare_mgit_json_cmd(state: CliState, test_dir: Path) -> None:
    """Write TEST_DIR/mgit.json pinning this package to the CI commit."""
    prepare_mgit_json(test_dir, state.env, state.settings)


@cli.command("karma-config")
@karma_options
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File to write the config to (default: stdout).",
)
@click.pass_obj
def karma_config_cmd(state: CliState, output: Path | None, **kwargs) -> None:
    """Print the Karma configuration for the given test options."""
    module = render_karma_module(_karma_config(state, KarmaOptions(**kwargs)))
    if output:
        output.write_text(module)
    else:
        click.echo(module, nl=False)


@cli.command("automated-tests")
@karma_options
@click.pass_obj
def automated_tests_cmd(state: CliState, **kwargs) -> None:
    """Run the automated tests with Karma."""
    config = _karma_config(state, KarmaOptions(**kwargs))

    step("Running automated tests")
    with tempfile.TemporaryDirectory() as tmp_dir:
        config_path = Path(tmp_dir) / KARMA_CONFIG_NAME
        config_path.write_text(render_karma_module(config))
        result = run("npx", "karma", "start", str(config_path), check=False)

    if result.returncode != 0:
        sys.exit(result.returncode)


@cli.command("compile-manual-tests")
@click.option(
    "-d",
    "--build-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory the compiled scripts are written to.",
)
@click.option(
    "-f",
    "--files",
    multiple=True,
    help="Test file option or glob (repeatable); defaults to this package.",
)
@click.option("--theme-path", default=None, help="Theme for PostCSS to load.")
@click.pass_obj
def compile_manual_tests_cmd(
    state: CliState, build_dir: Path, files: tuple[str, ...], theme_path: str | None
) -> None:
    """Bundle the manual test scripts."""
    cwd = Path.cwd()
    patterns = [
        transform_file_option_to_test_glob(file, cwd, state.settings, manual=True)
        for file in files or ("/",)
    ]
    try:
        compile_manual_test_scripts(
            build_dir.resolve(), patterns, theme_path, cwd, state.settings
        )
    except BundlerError as exc:
        raise click.ClickException(str(exc)) from exc


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except subprocess.CalledProcessError as exc:
        command = " ".join(str(arg) for arg in exc.cmd)
        click.echo(
            f"ERROR: `{command}` failed with exit code {exc.returncode}", err=True
        )
        sys.exit(exc.returncode)
