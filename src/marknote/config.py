"""Configuration management for Marknote."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .errors import ConfigError

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


DEFAULT_SCAN_CONCURRENCY = 64
DEFAULT_SCAN_HEAD_BYTES = 16384
DEFAULT_EXCERPT_LENGTH = 150


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .marknote/config.toml if it exists."""
    config_file = repo_root / ".marknote" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _nested_get(data: Optional[dict], keys: list[str]):
    """Safely get a nested repo config value."""
    current = data or {}
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def _positive_int(name: str, value, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid config: {name} must be an integer, got {value!r}")
    if number <= 0:
        raise ConfigError(f"Invalid config: {name} must be positive, got {number}")
    return number


def resolve_notes_root(cli_root: Optional[str] = None) -> Optional[Path]:
    """Resolve the notes root with the following precedence:

    1. CLI --root option (if provided)
    2. repo-local .marknote/config.toml (walk upward from CWD)
    3. MARKNOTE_ROOT environment variable

    Returns:
        Absolute path to the notes root, or None when nothing is configured.
        Existence is not checked here.
    """
    if cli_root:
        return Path(cli_root).expanduser().resolve()

    repo_config = _load_repo_config_data(_find_repo_root(Path.cwd()))
    repo_root_value = _nested_get(repo_config, ["notes_root"])
    if isinstance(repo_root_value, str) and repo_root_value.strip():
        return Path(repo_root_value).expanduser().resolve()

    env_root = os.environ.get("MARKNOTE_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    return None


class MarknoteConfig(BaseModel):
    """Runtime settings for scanning and note management."""

    notes_root: Optional[Path] = Field(default=None, description="Default notes root directory")
    scan_concurrency: int = Field(default=DEFAULT_SCAN_CONCURRENCY, gt=0)
    scan_head_bytes: int = Field(default=DEFAULT_SCAN_HEAD_BYTES, gt=0)
    excerpt_length: int = Field(default=DEFAULT_EXCERPT_LENGTH, gt=0)
    log_level: str = Field(default="WARNING")

    model_config = {"frozen": False}

    @classmethod
    def from_env(cls, cli_root: Optional[str] = None) -> "MarknoteConfig":
        """Load configuration from CLI override, repo config, environment, then defaults.

        Args:
            cli_root: Notes root from the CLI --root option (highest precedence)

        Raises:
            ConfigError: If a numeric setting is not a positive integer
        """
        repo_config = _load_repo_config_data(_find_repo_root(Path.cwd()))

        def pick(env_name: str, keys: list[str]):
            repo_value = _nested_get(repo_config, keys)
            if repo_value is not None:
                return repo_value
            return os.environ.get(env_name)

        log_level = pick("MARKNOTE_LOG_LEVEL", ["log_level"]) or "WARNING"

        return cls(
            notes_root=resolve_notes_root(cli_root),
            scan_concurrency=_positive_int(
                "scan.concurrency",
                pick("MARKNOTE_SCAN_CONCURRENCY", ["scan", "concurrency"]),
                DEFAULT_SCAN_CONCURRENCY,
            ),
            scan_head_bytes=_positive_int(
                "scan.head_bytes",
                pick("MARKNOTE_SCAN_HEAD_BYTES", ["scan", "head_bytes"]),
                DEFAULT_SCAN_HEAD_BYTES,
            ),
            excerpt_length=_positive_int(
                "scan.excerpt_length",
                pick("MARKNOTE_EXCERPT_LENGTH", ["scan", "excerpt_length"]),
                DEFAULT_EXCERPT_LENGTH,
            ),
            log_level=str(log_level).upper(),
        )
