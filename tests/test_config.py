"""Tests for configuration loading."""

import pytest

from marknote.config import (
    DEFAULT_EXCERPT_LENGTH,
    DEFAULT_SCAN_CONCURRENCY,
    MarknoteConfig,
    resolve_notes_root,
)
from marknote.errors import ConfigError, RootNotFoundError
from marknote.paths import NotePaths

ENV_VARS = [
    "MARKNOTE_ROOT",
    "MARKNOTE_SCAN_CONCURRENCY",
    "MARKNOTE_SCAN_HEAD_BYTES",
    "MARKNOTE_EXCERPT_LENGTH",
    "MARKNOTE_LOG_LEVEL",
]


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    """Run from an empty repo directory with no Marknote env vars set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / ".git").mkdir()
    monkeypatch.chdir(repo)
    return repo


def _write_repo_config(repo, text):
    config_dir = repo / ".marknote"
    config_dir.mkdir()
    (config_dir / "config.toml").write_text(text)


def test_defaults(clean_env):
    config = MarknoteConfig.from_env()

    assert config.notes_root is None
    assert config.scan_concurrency == DEFAULT_SCAN_CONCURRENCY
    assert config.excerpt_length == DEFAULT_EXCERPT_LENGTH
    assert config.log_level == "WARNING"


def test_env_values(clean_env, tmp_path, monkeypatch):
    monkeypatch.setenv("MARKNOTE_ROOT", str(tmp_path / "env_notes"))
    monkeypatch.setenv("MARKNOTE_SCAN_CONCURRENCY", "8")
    monkeypatch.setenv("MARKNOTE_LOG_LEVEL", "debug")

    config = MarknoteConfig.from_env()

    assert config.notes_root == (tmp_path / "env_notes").resolve()
    assert config.scan_concurrency == 8
    assert config.log_level == "DEBUG"


def test_repo_config_overrides_env(clean_env, tmp_path, monkeypatch):
    """Test that .marknote/config.toml wins over environment variables."""
    monkeypatch.setenv("MARKNOTE_ROOT", str(tmp_path / "env_notes"))
    monkeypatch.setenv("MARKNOTE_EXCERPT_LENGTH", "10")
    _write_repo_config(
        clean_env,
        f'notes_root = "{(tmp_path / "repo_notes").as_posix()}"\n\n[scan]\nexcerpt_length = 40\n',
    )

    config = MarknoteConfig.from_env()

    assert config.notes_root == (tmp_path / "repo_notes").resolve()
    assert config.excerpt_length == 40


def test_cli_root_wins(clean_env, tmp_path, monkeypatch):
    monkeypatch.setenv("MARKNOTE_ROOT", str(tmp_path / "env_notes"))

    assert resolve_notes_root(str(tmp_path / "cli_notes")) == (tmp_path / "cli_notes").resolve()


def test_malformed_repo_config_is_ignored(clean_env):
    _write_repo_config(clean_env, "this is = not [valid toml")

    config = MarknoteConfig.from_env()

    assert config.scan_concurrency == DEFAULT_SCAN_CONCURRENCY


@pytest.mark.parametrize("value", ["zero", "0", "-3"])
def test_invalid_numbers_raise_config_error(clean_env, monkeypatch, value):
    monkeypatch.setenv("MARKNOTE_SCAN_CONCURRENCY", value)

    with pytest.raises(ConfigError):
        MarknoteConfig.from_env()


def test_require_root(tmp_path):
    with pytest.raises(RootNotFoundError):
        NotePaths.require(MarknoteConfig())

    with pytest.raises(RootNotFoundError):
        NotePaths.require(MarknoteConfig(notes_root=tmp_path / "missing"))

    paths = NotePaths.require(MarknoteConfig(notes_root=tmp_path))
    assert paths.images == tmp_path / "images"
