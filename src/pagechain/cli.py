"""
pagechain Runner CLI

Serves the configured tests directory and runs its UI tests with pytest.

Usage:
    pagechain
    pagechain --port 9000 --verbose -- -k focus -x
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import pytest

from pagechain.config import RunnerConfigError, RunnerSettings, configure_logging, load_runner_settings
from pagechain.server import FixtureServer
from pagechain.tui import get_console

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pagechain",
        description="Run pagechain UI tests against a local fixture server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    pagechain
    pagechain --config ui/pagechain.config.json
    pagechain --port 9000 -- -k keyboard -x
        """,
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to pagechain.config.json (default: search the current directory)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Fixture server port (default: from config, PORT env var, or 8080)",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Detailed log format with timestamps",
    )

    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode with debug output",
    )

    parser.add_argument(
        "pytest_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed through to pytest (after --)",
    )

    return parser.parse_args(argv)


def build_pytest_args(settings: RunnerSettings, extra: list[str]) -> list[str]:
    """pytest command line for a run over the tests directory."""
    args = [
        str(settings.tests_dir),
        "--rootdir",
        str(settings.tests_dir),
        "-o",
        f"python_files={' '.join(settings.test_patterns)}",
    ]
    if extra and extra[0] == "--":
        extra = extra[1:]
    return args + list(extra)


def run_tests(settings: RunnerSettings, port: int, pytest_args: list[str]) -> int:
    """
    Run the test suite with the fixture server up.

    Returns:
        pytest's exit code
    """
    console = get_console()

    with FixtureServer(settings.tests_dir, port=port) as server:
        os.environ["PAGECHAIN_HOST"] = server.host
        os.environ["PAGECHAIN_PORT"] = str(server.port)
        os.environ["PAGECHAIN_TESTS_DIR"] = str(settings.tests_dir)

        console.print_info(
            f"Serving {settings.tests_dir} at {server.url}\n"
            f"Test files: {', '.join(settings.test_patterns)}",
            title="[PAGECHAIN]",
        )

        return int(pytest.main(build_pytest_args(settings, pytest_args)))


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.dev else None,
        verbose=args.verbose,
    )

    console = get_console()

    try:
        settings = load_runner_settings(config_path=args.config)
    except RunnerConfigError as e:
        console.print_error(str(e), error_type="ConfigError")
        return 1

    port = args.port if args.port is not None else settings.port

    try:
        exit_code = run_tests(settings, port, args.pytest_args)
    except OSError as e:
        console.print_error(f"Could not start fixture server on port {port}: {e}", error_type="ServerError")
        return 1

    success = exit_code == 0
    console.print_summary(success, exit_code)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
