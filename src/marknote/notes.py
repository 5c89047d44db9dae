"""Note lifecycle operations.

Every operation catches expected filesystem errors, logs them and returns a
negative value (``None`` or ``False``) instead of raising.
"""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import frontmatter
from .filenames import generate_unique_filename, sanitize_note_filename
from .models import NoteContent
from .paths import NOTE_SUFFIX, NotePaths
from .scanner import build_note_metadata

logger = logging.getLogger(__name__)

UNTITLED_BASE = "untitled"


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2026-01-11T09:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _note_base(title: str) -> str:
    return sanitize_note_filename(title) or UNTITLED_BASE


def _split_note_name(name: str) -> tuple[str, str]:
    if name.endswith(NOTE_SUFFIX):
        return name[: -len(NOTE_SUFFIX)], NOTE_SUFFIX
    path = Path(name)
    return path.stem, path.suffix


def check_root_exists(root: Path) -> bool:
    """True only when ``root`` exists and is a directory."""
    try:
        return Path(root).is_dir()
    except OSError:
        return False


def read_note(path: Path) -> Optional[NoteContent]:
    """Read a whole note and decode its front matter.

    Returns None if the file cannot be read. The metadata's relative path is
    the bare file name since no root is known here.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, ValueError) as e:
        logger.error(f"Error reading note content {path}: {e}")
        return None

    doc = frontmatter.decode(raw)
    meta = build_note_metadata(path.parent, path, raw)
    return NoteContent(meta=meta, content=doc.body, raw_content=raw)


def save_note(path: Path, body: str, front_matter: Optional[dict] = None) -> bool:
    """Write a note; ``body`` is written verbatim when no front matter is given."""
    path = Path(path)
    text = frontmatter.encode(body, front_matter) if front_matter is not None else body
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error(f"Error saving note {path}: {e}")
        return False
    return True


def create_note(root: Path, folder_path: str, title: str) -> Optional[Path]:
    """Create a new note in ``folder_path`` and return its path.

    The file name comes from the sanitized title; an existing name gets a
    ``-1``, ``-2``, ... suffix.
    """
    try:
        target_dir = NotePaths(root).folder(folder_path)
        target_dir.mkdir(parents=True, exist_ok=True)

        path = generate_unique_filename(target_dir, _note_base(title), NOTE_SUFFIX)

        timestamp = now_iso()
        metadata = {
            "title": title,
            "createdAt": timestamp,
            "updatedAt": timestamp,
            "tags": [],
        }
        path.write_text(frontmatter.encode(f"# {title}\n\n", metadata), encoding="utf-8")
    except OSError as e:
        logger.error(f"Error creating note {title!r} in {folder_path!r}: {e}")
        return None

    logger.info(f"Created note {path}")
    return path


def create_folder(root: Path, folder_path: str) -> bool:
    try:
        NotePaths(root).folder(folder_path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating folder {folder_path!r}: {e}")
        return False
    return True


def rename_note(old_path: Path, new_title: str) -> Optional[Path]:
    """Retitle a note and rename its file to match, in the same directory.

    An existing file at the new name is overwritten.
    """
    old_path = Path(old_path)
    new_path = old_path.parent / f"{_note_base(new_title)}{NOTE_SUFFIX}"

    try:
        doc = frontmatter.decode(old_path.read_text(encoding="utf-8"))
        metadata = dict(doc.metadata)
        metadata["title"] = new_title
        metadata["updatedAt"] = now_iso()
        text = frontmatter.encode(doc.body, metadata)

        if new_path == old_path:
            old_path.write_text(text, encoding="utf-8")
            return new_path

        if new_path.exists():
            if os.path.samefile(old_path, new_path):
                # Case-only rename on a case-insensitive filesystem
                old_path.write_text(text, encoding="utf-8")
                old_path.rename(new_path)
                return new_path
            logger.warning(f"Renaming {old_path} overwrites existing note {new_path}")

        new_path.write_text(text, encoding="utf-8")
        old_path.unlink()
    except (OSError, ValueError) as e:
        logger.error(f"Error renaming note {old_path}: {e}")
        return None

    return new_path


def delete_note(path: Path) -> bool:
    try:
        Path(path).unlink()
    except OSError as e:
        logger.error(f"Error deleting note {path}: {e}")
        return False
    return True


def move_note(root: Path, current_path: Path, target_folder: str) -> Optional[Path]:
    """Move a note into ``target_folder`` ('' for the root).

    The file is copied and the original removed afterwards, so a failure in
    between leaves both copies on disk. Moving a note onto its own location
    returns the current path without touching the filesystem.
    """
    current_path = Path(current_path)
    target_dir = NotePaths(root).folder(target_folder)
    new_path = target_dir / current_path.name

    if os.path.normpath(current_path) == os.path.normpath(new_path):
        return current_path

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        base, ext = _split_note_name(current_path.name)
        final_path = generate_unique_filename(target_dir, base, ext)

        shutil.copy2(current_path, final_path)
        current_path.unlink()
    except OSError as e:
        logger.error(f"Error moving note {current_path}: {e}")
        return None

    return final_path


def delete_folder(root: Path, folder_path: str) -> bool:
    """Recursively delete a folder and everything in it.

    A missing folder counts as deleted. The root itself is never deleted.
    """
    root = Path(root)
    target = NotePaths(root).folder(folder_path)
    try:
        if target.resolve() == root.resolve():
            logger.error(f"Refusing to delete the notes root {root}")
            return False
        if target.exists():
            shutil.rmtree(target)
    except OSError as e:
        logger.error(f"Error deleting folder {folder_path!r}: {e}")
        return False
    return True
