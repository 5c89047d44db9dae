"""Directory listing primitive shared by the note, folder and image walks.

Each walk does its own recursion; this module only lists one directory at a
time and filters the reserved root ``images`` directory when asked to.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .paths import IMAGES_DIR_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirListing:
    directory: Path
    dirs: list[Path] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


def _list(directory: Path, skip_images_dir: bool) -> DirListing:
    dirs: list[Path] = []
    files: list[Path] = []
    with os.scandir(directory) as it:
        for entry in it:
            # Symlinked directories are not followed so the walk stays acyclic
            if entry.is_dir(follow_symlinks=False):
                if skip_images_dir and entry.name == IMAGES_DIR_NAME:
                    continue
                dirs.append(Path(entry.path))
            elif entry.is_file():
                files.append(Path(entry.path))
    return DirListing(directory=directory, dirs=dirs, files=files)


def list_directory_sync(directory: Path, *, root: Path | None = None) -> DirListing:
    """List subdirectories and files of ``directory`` in scan order.

    When ``root`` is given and equals ``directory``, the reserved ``images``
    subdirectory is left out. A directory that cannot be listed is logged and
    reported as empty.
    """
    directory = Path(directory)
    skip_images_dir = root is not None and Path(root) == directory
    try:
        return _list(directory, skip_images_dir)
    except OSError as e:
        logger.error(f"Error listing directory {directory}: {e}")
        return DirListing(directory=directory)


async def list_directory(directory: Path, *, root: Path | None = None) -> DirListing:
    """Async form of :func:`list_directory_sync`, run in a worker thread."""
    return await asyncio.to_thread(list_directory_sync, directory, root=root)
