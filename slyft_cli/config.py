"""
Process-wide configuration.

Settings are read once at startup (after loading an optional ``.env``) and
handed to the client explicitly; nothing below the CLI reads the
environment on its own.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from slyft_cli.core.auth import CREDENTIALS_FILE

BACKEND_ENV = "SLYFTBACKEND"
LOG_LEVEL_ENV = "DEBUGLEVEL"
CONFIG_DIR_ENV = "SLYFT_CONFIG_DIR"

DEFAULT_CONFIG_DIR = Path.home() / ".slyft"
DEFAULT_LOG_LEVEL = logging.WARNING
LOCK_FILE = ".slyftlock"

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(funcName)s ▶ %(levelname).4s %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


class ConfigError(Exception):
    """Startup configuration is unusable."""


@dataclass(frozen=True)
class Settings:
    """Read-only settings shared by the whole process."""

    base_url: str
    log_level: int = DEFAULT_LOG_LEVEL
    config_dir: Path = DEFAULT_CONFIG_DIR

    @property
    def credentials_path(self) -> Path:
        return self.config_dir / CREDENTIALS_FILE


def parse_log_level(value: str | None) -> int:
    """Map a level name to a logging level, falling back to WARNING."""
    if not value:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: Optional .env file; defaults to one in the working directory

    Raises:
        ConfigError: SLYFTBACKEND is not set

    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)

    base_url = (os.environ.get(BACKEND_ENV) or "").strip()
    if not base_url:
        raise ConfigError("Backend URL missing, please contact tech support")

    config_dir = os.environ.get(CONFIG_DIR_ENV)
    return Settings(
        base_url=base_url,
        log_level=parse_log_level(os.environ.get(LOG_LEVEL_ENV)),
        config_dir=Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR,
    )


def setup_logging(level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Install a single stderr handler on the package logger."""
    log = logging.getLogger("slyft_cli")
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        log.addHandler(handler)
    log.setLevel(level)
    return log


# =============================================================================
# Project lock
# =============================================================================


def read_project_lock(directory: str | Path = ".") -> str:
    """Return the project name locked for ``directory``, or "" if none."""
    try:
        return (Path(directory) / LOCK_FILE).read_text().strip()
    except FileNotFoundError:
        return ""


def write_project_lock(name: str, directory: str | Path = ".") -> Path:
    """Remember ``name`` as the default project for ``directory``."""
    path = Path(directory) / LOCK_FILE
    path.write_text(name.strip() + "\n")
    return path
