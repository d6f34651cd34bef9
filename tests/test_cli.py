"""Tests for the mono-devtools CLI."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from mono_devtools.cli import cli, main
from mono_devtools.webpack import BundlerError

LOCAL_ENV = {
    "CI": "",
    "TRAVIS": "",
    "TRAVIS_COMMIT": "",
    "TRAVIS_PULL_REQUEST_SHA": "",
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestKarmaConfig:
    def test_prints_module(
        self, runner: CliRunner, package_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(package_dir)

        result = runner.invoke(cli, ["karma-config", "-f", "/"], env=LOCAL_ENV)

        assert result.exit_code == 0, result.output
        assert result.output.startswith("'use strict';")
        assert "config.set(" in result.output
        assert '"CHROME_LOCAL"' in result.output
        assert "Infinity" in result.output

    def test_writes_output_file(
        self, runner: CliRunner, package_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(package_dir)
        output = package_dir / "karma.conf.js"

        result = runner.invoke(
            cli,
            ["karma-config", "-f", "/", "-r", "dots", "-o", str(output)],
            env=LOCAL_ENV,
        )

        assert result.exit_code == 0, result.output
        assert '"dots"' in output.read_text()

    def test_browser_stack_chrome_request(
        self, runner: CliRunner, package_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(package_dir)

        result = runner.invoke(
            cli,
            ["karma-config", "-f", "/", "--browser-stack", "-b", "Chrome"],
            env=LOCAL_ENV,
        )

        assert result.exit_code == 0, result.output
        assert '"Mavericks_Chrome"' in result.output
        assert '"Windows_Edge"' not in result.output.split("customLaunchers")[0]

    def test_invalid_reporter(
        self, runner: CliRunner, package_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(package_dir)

        result = runner.invoke(
            cli, ["karma-config", "-f", "/", "-r", "spec"], env=LOCAL_ENV
        )

        assert result.exit_code == 1
        assert "Available reporters: mocha, dots." in result.output

    def test_files_required(
        self, runner: CliRunner, package_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(package_dir)

        result = runner.invoke(cli, ["karma-config"], env=LOCAL_ENV)

        assert result.exit_code == 1
        assert "non-empty list" in result.output


class TestAutomatedTests:
    @patch("mono_devtools.cli.run")
    def test_propagates_karma_exit_code(
        self,
        mock_run: MagicMock,
        runner: CliRunner,
        package_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(package_dir)
        mock_run.return_value = subprocess.CompletedProcess([], 3)

        result = runner.invoke(cli, ["automated-tests", "-f", "/"], env=LOCAL_ENV)

        assert result.exit_code == 3
        args = mock_run.call_args.args
        assert args[:3] == ("npx", "karma", "start")
        assert args[3].endswith("karma.conf.js")


class TestPrepareMgitJson:
    def test_pins_package_to_ci_commit(
        self,
        runner: CliRunner,
        package_dir: Path,
        tmp_path: Path,
        testing_package_json: dict,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        test_dir = tmp_path / "testing"
        test_dir.mkdir()
        (test_dir / "package.json").write_text(json.dumps(testing_package_json))
        monkeypatch.chdir(package_dir)

        result = runner.invoke(
            cli,
            ["prepare-mgit-json", str(test_dir)],
            env={**LOCAL_ENV, "TRAVIS": "true", "TRAVIS_COMMIT": "f00d"},
        )

        assert result.exit_code == 0, result.output
        mgit = json.loads((test_dir / "mgit.json").read_text())
        assert mgit["dependencies"]["@ckeditor/ckeditor5-engine"] == (
            "ckeditor/ckeditor5-engine#f00d"
        )

    def test_missing_test_dir(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["prepare-mgit-json", str(tmp_path / "nope")])

        assert result.exit_code == 2


class TestCompileManualTests:
    @patch("mono_devtools.cli.compile_manual_test_scripts")
    def test_defaults_to_current_package(
        self,
        mock_compile: MagicMock,
        runner: CliRunner,
        package_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(package_dir)

        result = runner.invoke(cli, ["compile-manual-tests", "-d", "build"])

        assert result.exit_code == 0, result.output
        build_dir, patterns = mock_compile.call_args.args[:2]
        assert build_dir == (package_dir / "build").resolve()
        assert patterns == [str(Path.cwd() / "tests" / "manual" / "**" / "*.js")]

    @patch("mono_devtools.cli.compile_manual_test_scripts")
    def test_bundler_failure(
        self,
        mock_compile: MagicMock,
        runner: CliRunner,
        package_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(package_dir)
        mock_compile.side_effect = BundlerError("webpack failed with exit code 2")

        result = runner.invoke(cli, ["compile-manual-tests", "-d", "build"])

        assert result.exit_code == 1
        assert "webpack failed with exit code 2" in result.output

    def test_build_dir_required(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["compile-manual-tests"])

        assert result.exit_code == 2


class TestChangelog:
    @patch("mono_devtools.cli.generate_changelog_for_single_package")
    def test_passes_options(
        self,
        mock_generate: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "pyproject.toml").write_text(
            '[tool.mono-devtools]\nrepository-url = "https://github.com/org/repo"\n'
        )

        result = runner.invoke(
            cli, ["changelog", "--new-version", "2.0.0", "--skip-links"]
        )

        assert result.exit_code == 0, result.output
        kwargs = mock_generate.call_args.kwargs
        assert kwargs["new_version"] == "2.0.0"
        assert kwargs["skip_links"] is True
        assert kwargs["settings"].repository_url == "https://github.com/org/repo"


class TestMain:
    @patch("mono_devtools.cli.cli")
    def test_reports_failed_command(
        self, mock_cli: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        mock_cli.side_effect = subprocess.CalledProcessError(128, ["git", "commit"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 128
        assert "`git commit` failed with exit code 128" in capsys.readouterr().err
