"""Karma configuration for automated tests.

The configuration is assembled from a base config followed by independent
transformations, one per option that changes it (watch mode, verbose
output, BrowserStack, coverage). Each transformation returns a new dict and
never mutates its input.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .globs import transform_file_option_to_test_glob
from .models import KarmaOptions
from .settings import Environment, Settings
from .webpack import get_webpack_config_for_automated_tests

Config = dict[str, Any]

REPORTERS = ("mocha", "dots")

CI_BROWSER = "CHROME_TRAVIS_CI"
LOCAL_CHROME = "CHROME_LOCAL"
BROWSER_STACK = "BrowserStack"

CUSTOM_LAUNCHERS: dict[str, dict[str, Any]] = {
    CI_BROWSER: {
        "base": "Chrome",
        "flags": ["--no-sandbox", "--disable-background-timer-throttling"],
    },
    LOCAL_CHROME: {
        "base": "Chrome",
        "flags": ["--disable-background-timer-throttling"],
    },
    "Windows_Edge": {
        "base": BROWSER_STACK,
        "os": "Windows",
        "os_version": "10",
        "browser": "edge",
        "browser_version": "16.0",
    },
    "Mavericks_Chrome": {
        "base": BROWSER_STACK,
        "os": "OS X",
        "os_version": "Mavericks",
        "browser": "chrome",
        "browser_version": "62.0",
    },
    "Yosemite_Firefox": {
        "base": BROWSER_STACK,
        "os": "OS X",
        "os_version": "Yosemite",
        "browser": "firefox",
        "browser_version": "57.0",
    },
    "HighSierra_Safari": {
        "base": BROWSER_STACK,
        "os": "OS X",
        "os_version": "High Sierra",
        "browser": "safari",
        "browser_version": "11.0",
    },
}


class KarmaConfigError(ValueError):
    """Raised when the options cannot produce a Karma configuration."""


def _validate(options: KarmaOptions) -> None:
    if not options.files:
        raise KarmaConfigError(
            "Karma requires files to tests. `files` has to be a non-empty list."
        )

    if options.reporter not in REPORTERS:
        raise KarmaConfigError(
            "Given Mocha reporter is not supported. "
            f"Available reporters: {', '.join(REPORTERS)}."
        )


def get_browsers(options: KarmaOptions, env: Environment) -> list[str] | None:
    """Return the value of Karma's ``browsers`` option.

    On CI a single fixed launcher is used whatever was requested. In server
    mode (or with an empty browser list) Karma waits for browsers to connect
    and the value is None. Without a request the local Chrome launcher is
    used; ``Chrome`` maps to it as well.
    """
    if env.ci:
        return [CI_BROWSER]

    if options.server or options.browsers == []:
        return None

    requested = options.browsers if options.browsers is not None else ["Chrome"]
    return [LOCAL_CHROME if browser == "Chrome" else browser for browser in requested]


def _base_config(
    options: KarmaOptions, env: Environment, cwd: Path, settings: Settings
) -> Config:
    files = [
        transform_file_option_to_test_glob(file, cwd, settings)
        for file in options.files
    ]

    preprocessors = {
        file: ["webpack", "sourcemap"] if options.source_map else ["webpack"]
        for file in files
    }

    return {
        # Base path used to resolve all patterns (files, exclude)
        "basePath": str(cwd),
        "frameworks": ["mocha", "chai", "sinon"],
        "files": files,
        "exclude": [
            # Utils which aren't tests
            "**/tests/**/_utils/**/*.js",
            # Manual tests
            "**/tests/**/manual/**/*.js",
        ],
        "preprocessors": preprocessors,
        "webpack": get_webpack_config_for_automated_tests(
            files,
            source_map=options.source_map,
            coverage=options.coverage,
            theme_path=options.theme_path,
        ),
        "webpackMiddleware": {"noInfo": True, "stats": {"chunks": False}},
        "reporters": [options.reporter],
        "port": 9876,
        "colors": True,
        "logLevel": "INFO",
        "browsers": get_browsers(options, env),
        "customLaunchers": copy.deepcopy(CUSTOM_LAUNCHERS),
        # Capture browsers, run the tests and exit
        "singleRun": True,
        "concurrency": math.inf,
        # Never disconnect an idle browser
        "browserNoActivityTimeout": 0,
        "mochaReporter": {"showDiff": True},
    }


def with_watch(config: Config, options: KarmaOptions) -> Config:
    """Keep Karma running and re-run tests whenever a file changes."""
    if not (options.watch or options.server):
        return config
    return {**config, "autoWatch": True, "singleRun": False}


def with_verbose(config: Config, options: KarmaOptions) -> Config:
    """Let the webpack middleware print its full output."""
    if not options.verbose:
        return config
    return {**config, "webpackMiddleware": {"noInfo": False}}


def browser_stack_browsers(requested: list[str] | None) -> list[str]:
    """Select the BrowserStack launchers to run.

    Launcher names follow the ``OperatingSystem_Browser`` format; requested
    names are matched case-insensitively against the browser part. With no
    request (or only the local Chrome launcher) every launcher is used; an
    explicit ``Chrome`` selects the Chrome preset.
    """
    launchers = [
        name
        for name, launcher in CUSTOM_LAUNCHERS.items()
        if launcher["base"] == BROWSER_STACK
    ]

    if not requested or requested == [LOCAL_CHROME]:
        return launchers

    wanted = {browser.lower() for browser in requested}
    return [name for name in launchers if name.split("_")[-1].lower() in wanted]


def with_browser_stack(config: Config, options: KarmaOptions) -> Config:
    """Run the tests on BrowserStack instead of local browsers."""
    if not options.browser_stack:
        return config
    return {
        **config,
        "browserStack": {
            "username": options.username,
            "accessKey": options.access_key,
        },
        "reporters": ["dots", BROWSER_STACK],
        "browsers": browser_stack_browsers(options.browsers),
    }


def with_coverage(config: Config, options: KarmaOptions, cwd: Path) -> Config:
    """Add the coverage reporter and its outputs."""
    if not options.coverage:
        return config

    coverage_dir = str(cwd / "coverage")
    return {
        **config,
        "reporters": [*config["reporters"], "coverage"],
        "coverageReporter": {
            "reporters": [
                {"type": "text-summary"},
                {"dir": coverage_dir, "type": "html"},
                # Generates coverage/lcov.info for external coverage services
                {"type": "lcovonly", "subdir": ".", "dir": coverage_dir},
            ]
        },
    }


def get_karma_config(
    options: KarmaOptions,
    env: Environment | None = None,
    cwd: Path | None = None,
    settings: Settings | None = None,
) -> Config:
    """Assemble the complete Karma configuration.

    Args:
        options: User-supplied test options.
        env: CI environment; CI forces the CI browser launcher.
        cwd: Package root; defaults to the working directory.
        settings: Project naming conventions used to resolve file options.

    Returns:
        The configuration passed to ``config.set()`` in a Karma config file.

    Raises:
        KarmaConfigError: If ``files`` is empty or the reporter is unsupported.
    """
    _validate(options)

    env = env or Environment()
    cwd = cwd or Path.cwd()
    settings = settings or Settings()

    transforms: list[Callable[[Config], Config]] = [
        lambda config: with_watch(config, options),
        lambda config: with_verbose(config, options),
        lambda config: with_browser_stack(config, options),
        lambda config: with_coverage(config, options, cwd),
    ]

    config = _base_config(options, env, cwd, settings)
    for transform in transforms:
        config = transform(config)
    return config
