"""Folder tree building and note list helpers."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, Literal

from .models import FolderNode, NoteMetadata
from .walk import list_directory

logger = logging.getLogger(__name__)

SortKey = Literal["title", "created", "updated"]


def note_directory(relative_path: str) -> str:
    """Return the '/'-joined parent directory of a note path ('' at the root)."""
    normalized = relative_path.replace("\\", "/")
    if "/" not in normalized:
        return ""
    parent = normalized.rsplit("/", 1)[0]
    return "" if parent == "." else parent


async def _discover_folders(root: Path, folder_map: dict[str, FolderNode]) -> None:
    async def visit(directory: Path) -> None:
        listing = await list_directory(directory, root=root)
        for sub in listing.dirs:
            rel = sub.relative_to(root).as_posix()
            if rel in folder_map:
                continue
            node = FolderNode(name=sub.name, relative_path=rel)
            folder_map[rel] = node
            parent = folder_map.get(note_directory(rel))
            if parent is not None:
                parent.children.append(node)
        # Children register only after this level is wired into its parent
        await asyncio.gather(*(visit(sub) for sub in listing.dirs))

    await visit(root)


async def build_folder_tree(root: Path, notes: Iterable[NoteMetadata]) -> FolderNode:
    """Build a snapshot of the directory tree under ``root`` with notes attached.

    The walk is independent of any scan. Only the root-level ``images``
    directory is skipped. A note whose parent directory was not found by the
    walk is dropped from the tree.
    """
    root = Path(root)
    root_node = FolderNode(name=root.name, relative_path="")
    folder_map: dict[str, FolderNode] = {"": root_node}

    await _discover_folders(root, folder_map)

    dropped = 0
    for note in notes:
        folder = folder_map.get(note_directory(note.relative_path))
        if folder is None:
            dropped += 1
            continue
        folder.notes.append(note)

    if dropped:
        logger.warning(f"{dropped} note(s) had no matching folder under {root}")
    return root_node


def filter_notes_by_folder(notes: Iterable[NoteMetadata], folder_path: str) -> list[NoteMetadata]:
    """Return the notes directly inside ``folder_path`` ('' for the root)."""
    wanted = folder_path.replace("\\", "/").strip("/")
    return [note for note in notes if note_directory(note.relative_path) == wanted]


def filter_notes_by_tag(notes: Iterable[NoteMetadata], tag: str) -> list[NoteMetadata]:
    return [note for note in notes if tag in note.tags]


def collect_tags(notes: Iterable[NoteMetadata]) -> list[tuple[str, int]]:
    """Return ``(tag, note_count)`` pairs sorted by tag."""
    counts: Counter[str] = Counter()
    for note in notes:
        counts.update(set(note.tags))
    return sorted(counts.items())


def sort_notes(
    notes: Iterable[NoteMetadata],
    key: SortKey = "updated",
    descending: bool = True,
) -> list[NoteMetadata]:
    """Sort notes by title or timestamp; notes without the timestamp go last."""
    notes = list(notes)
    if key == "title":
        return sorted(notes, key=lambda n: n.title.lower(), reverse=descending)

    attr = "created_at" if key == "created" else "updated_at"
    with_value = [n for n in notes if getattr(n, attr)]
    without_value = [n for n in notes if not getattr(n, attr)]
    with_value.sort(key=lambda n: getattr(n, attr), reverse=descending)
    return with_value + without_value
