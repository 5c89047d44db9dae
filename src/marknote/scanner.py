"""Note metadata scanning.

A scan runs in two phases: collect every ``.md`` path under the root (one
task per subdirectory), then read the head of each file through a bounded
worker pool and decode its front matter. Nothing is cached between scans.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from . import frontmatter
from .concurrency import map_concurrent
from .config import DEFAULT_EXCERPT_LENGTH, DEFAULT_SCAN_CONCURRENCY, DEFAULT_SCAN_HEAD_BYTES
from .filenames import note_id_from_path
from .models import NoteMetadata
from .paths import NOTE_SUFFIX
from .walk import list_directory

logger = logging.getLogger(__name__)


async def collect_markdown_paths(root: Path) -> list[Path]:
    """Return every file under ``root`` whose name ends with ``.md``.

    The suffix match is case-sensitive. Subdirectories are traversed
    concurrently, so the order of the result is not stable.
    """
    paths: list[Path] = []

    async def visit(directory: Path) -> None:
        listing = await list_directory(directory)
        for path in listing.files:
            if path.name.endswith(NOTE_SUFFIX):
                paths.append(path)
        await asyncio.gather(*(visit(sub) for sub in listing.dirs))

    await visit(Path(root))
    return paths


def _read_head_sync(path: Path, size: int) -> str:
    with open(path, "rb") as fh:
        data = fh.read(size)
    # A multibyte character cut at the boundary decodes to U+FFFD
    return data.decode("utf-8", errors="replace")


async def read_note_head(path: Path, size: int = DEFAULT_SCAN_HEAD_BYTES) -> str:
    """Read at most ``size`` bytes from the start of a note as text."""
    return await asyncio.to_thread(_read_head_sync, Path(path), size)


def make_excerpt(body: str, length: int = DEFAULT_EXCERPT_LENGTH) -> Optional[str]:
    excerpt = body.strip()[:length]
    return excerpt or None


def build_note_metadata(
    root: Path,
    path: Path,
    text: str,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> NoteMetadata:
    """Merge decoded front matter with path-derived defaults."""
    doc = frontmatter.decode(text)
    meta = doc.metadata
    relative_path = os.path.relpath(path, root)

    return NoteMetadata(
        id=frontmatter.get_text(meta, "id") or note_id_from_path(relative_path),
        title=frontmatter.get_text(meta, "title") or Path(path).name[: -len(NOTE_SUFFIX)],
        absolute_path=Path(path),
        relative_path=relative_path,
        tags=frontmatter.coerce_tags(meta.get("tags")),
        created_at=frontmatter.get_text(meta, "createdAt"),
        updated_at=frontmatter.get_text(meta, "updatedAt"),
        excerpt=make_excerpt(doc.body, excerpt_length),
    )


async def scan_notes(
    root: Path,
    *,
    concurrency: int = DEFAULT_SCAN_CONCURRENCY,
    head_bytes: int = DEFAULT_SCAN_HEAD_BYTES,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> list[NoteMetadata]:
    """Scan ``root`` recursively and return metadata for every note.

    Files that cannot be read are logged and left out. The returned list is
    unordered.
    """
    root = Path(root)
    paths = await collect_markdown_paths(root)

    async def load(path: Path) -> Optional[NoteMetadata]:
        try:
            text = await read_note_head(path, head_bytes)
            return build_note_metadata(root, path, text, excerpt_length)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading note {path}: {e}")
            return None

    results = await map_concurrent(paths, load, concurrency)
    notes = [meta for meta in results if meta is not None]
    logger.debug(f"Scanned {len(notes)} notes under {root}")
    return notes
