"""
Configuration and Logging Setup

Provides centralized configuration and logging for pagechain.
Reads LOG_LEVEL and PAGECHAIN_* variables from the environment (a .env
file in the working directory is loaded first).

Usage:
    from pagechain.config import configure_logging, ChainConfig

    # Configure at application startup
    configure_logging()

    # Chain settings, read once per chain
    config = ChainConfig.from_env()
"""

import json
import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load environment variables
load_dotenv()

# Default configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"

# Valid log levels
VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

DEFAULT_PORT = 8080
CONFIG_FILENAME = "pagechain.config.json"
PYPROJECT_FILENAME = "pyproject.toml"


def get_log_level() -> int:
    """
    Get the log level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (e.g., logging.INFO)

    Supported values:
        DEBUG, INFO, WARNING, ERROR, CRITICAL
    """
    level_str = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LEVELS:
        # Warn about invalid level and use default
        print(
            f"Warning: Invalid LOG_LEVEL '{level_str}'. "
            f"Valid values: {', '.join(VALID_LEVELS.keys())}. "
            f"Using {DEFAULT_LOG_LEVEL}.",
            file=sys.stderr,
        )
        return VALID_LEVELS[DEFAULT_LOG_LEVEL]

    return VALID_LEVELS[level_str]


def configure_logging(
    level: Optional[int] = None,
    verbose: bool = False,
) -> None:
    """
    Configure logging for pagechain.

    Should be called once at startup (the CLI does this before running
    pytest).

    Args:
        level: Override log level (default: from LOG_LEVEL env var)
        verbose: Use detailed format with timestamps (default: simple format)
    """
    if level is None:
        level = get_log_level()

    log_format = LOG_FORMAT if verbose else LOG_FORMAT_SIMPLE

    logging.basicConfig(
        level=level,
        format=log_format,
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("pagechain").setLevel(level)

    # Quiet noisy third-party loggers in non-debug mode
    if level > logging.DEBUG:
        logging.getLogger("playwright").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class ChainConfig:
    """
    Settings a chain reads once at construction.

    Attributes:
        host: Host the fixture server listens on
        port: Port the fixture server listens on
        tests_dir: Filesystem root of the fixture pages (used in messages)
        load_retries: Page-load attempts before giving up
        retry_delay: Seconds to sleep between page-load attempts
        html_settle_ms: Pause after injecting markup, in milliseconds
    """

    host: str = "localhost"
    port: int = DEFAULT_PORT
    tests_dir: Path = field(default_factory=lambda: Path("."))
    load_retries: int = 4
    retry_delay: float = 3.0
    html_settle_ms: int = 100

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "ChainConfig":
        """
        Create ChainConfig from environment variables.

        Environment variables:
            PAGECHAIN_HOST: fixture server host (default: localhost)
            PAGECHAIN_PORT: fixture server port (default: 8080)
            PAGECHAIN_TESTS_DIR: fixture root directory (default: .)
            PAGECHAIN_LOAD_RETRIES: page-load attempts (default: 4)
            PAGECHAIN_RETRY_DELAY: seconds between attempts (default: 3.0)
            PAGECHAIN_HTML_SETTLE_MS: pause after html() in ms (default: 100)
        """
        return cls(
            host=os.getenv("PAGECHAIN_HOST", "localhost"),
            port=int(os.getenv("PAGECHAIN_PORT", str(DEFAULT_PORT))),
            tests_dir=Path(os.getenv("PAGECHAIN_TESTS_DIR", ".")),
            load_retries=int(os.getenv("PAGECHAIN_LOAD_RETRIES", "4")),
            retry_delay=float(os.getenv("PAGECHAIN_RETRY_DELAY", "3.0")),
            html_settle_ms=int(os.getenv("PAGECHAIN_HTML_SETTLE_MS", "100")),
        )


class RunnerConfigError(Exception):
    """No usable runner configuration was found."""


class RunnerSettings(BaseModel):
    """Settings for the pagechain runner CLI.

    Read from pagechain.config.json or the [tool.pagechain] table of
    pyproject.toml.
    """

    tests_dir: Path
    """Directory holding fixture pages and test modules."""

    test_patterns: list[str] = Field(default_factory=lambda: ["test_*.py"])
    """Glob patterns for test module names (pytest python_files)."""

    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    """Fixture server port. The PORT environment variable overrides it."""

    @field_validator("test_patterns", mode="before")
    @classmethod
    def _single_pattern(cls, value):
        if isinstance(value, str):
            return [value]
        return value


def _read_config_file(directory: Path) -> Optional[dict]:
    config_path = directory / CONFIG_FILENAME
    if config_path.is_file():
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)

    pyproject_path = directory / PYPROJECT_FILENAME
    if pyproject_path.is_file():
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data.get("tool", {}).get("pagechain")

    return None


def load_runner_settings(
    directory: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> RunnerSettings:
    """
    Load runner settings.

    Args:
        directory: Directory searched for pagechain.config.json, then
            pyproject.toml (default: current directory)
        config_path: Explicit JSON config file (skips the search)

    Returns:
        Validated RunnerSettings. A relative tests_dir is resolved against
        the directory the configuration came from.

    Raises:
        RunnerConfigError: If no configuration exists or it is invalid
    """
    if config_path is not None:
        if not config_path.is_file():
            raise RunnerConfigError(f"Config file not found: {config_path}")
        with open(config_path, encoding="utf-8") as f:
            raw = json.load(f)
        base_dir = config_path.parent
    else:
        base_dir = directory or Path.cwd()
        raw = _read_config_file(base_dir)

    if not raw:
        raise RunnerConfigError("No pagechain config found.")

    port_env = os.getenv("PORT")
    if port_env and port_env.isdigit() and int(port_env) > 0:
        raw = {**raw, "port": int(port_env)}

    try:
        settings = RunnerSettings.model_validate(raw)
    except ValidationError as e:
        raise RunnerConfigError(f"Invalid pagechain config: {e}") from e

    if not settings.tests_dir.is_absolute():
        settings.tests_dir = (base_dir / settings.tests_dir).resolve()

    return settings
