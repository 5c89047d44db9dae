"""Filename sanitizing and collision-free naming."""

import re
from pathlib import Path

INVALID_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
WHITESPACE_RE = re.compile(r"\s+")


def sanitize_note_filename(title: str) -> str:
    """Convert a note title into the base of its Markdown filename.

    Forbidden characters and whitespace runs become ``-`` and the result is
    lowercased. No length limit is applied.
    """
    name = INVALID_CHARS_RE.sub("-", title)
    name = WHITESPACE_RE.sub("-", name)
    return name.lower()


def sanitize_note_base(name: str) -> str:
    """Convert a note base name into the prefix used for its image files.

    Forbidden characters and whitespace runs become ``_``; case is preserved.
    """
    name = INVALID_CHARS_RE.sub("_", name)
    return WHITESPACE_RE.sub("_", name)


def note_id_from_path(relative_path: str) -> str:
    """Derive a note id from its path relative to the root."""
    normalized = relative_path.replace("\\", "/")
    if normalized.endswith(".md"):
        normalized = normalized[: -len(".md")]
    return normalized


def generate_unique_filename(directory: Path, base_name: str, extension: str = "") -> Path:
    """Generate a unique filename by adding suffix if collision occurs.

    Args:
        directory: Target directory
        base_name: Base filename (without extension)
        extension: File extension (including dot, e.g., '.md')

    Returns:
        Path object with unique filename
    """
    candidate = directory / f"{base_name}{extension}"
    if not candidate.exists():
        return candidate

    # Try suffixes: -1, -2, -3, ...
    counter = 1
    while True:
        candidate = directory / f"{base_name}-{counter}{extension}"
        if not candidate.exists():
            return candidate
        counter += 1
