"""Pytest fixtures for Marknote tests."""

from pathlib import Path

import pytest

from marknote.config import MarknoteConfig
from marknote.paths import NotePaths


@pytest.fixture
def notes_root(tmp_path):
    """Create a temporary notes root for testing.

    Args:
        tmp_path: pytest's built-in temporary directory fixture

    Returns:
        Path to temporary notes root
    """
    root = tmp_path / "notes"
    root.mkdir()
    return root


@pytest.fixture
def notes_config(notes_root):
    """Create MarknoteConfig pointing to the temporary notes root."""
    return MarknoteConfig(notes_root=notes_root)


@pytest.fixture
def note_paths(notes_config):
    return NotePaths.from_config(notes_config)


@pytest.fixture
def write_note(notes_root):
    """Return a helper that writes a note at a path relative to the root."""

    def _write(relative_path: str, text: str) -> Path:
        path = notes_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def images_dir(notes_root):
    """Create the root images directory."""
    directory = notes_root / "images"
    directory.mkdir()
    return directory
