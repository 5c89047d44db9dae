"""Session facade over the note, folder and image operations.

A host process (desktop shell, CLI, tests) creates one ``NoteSession`` and
calls its async methods. The session remembers the last root that was
scanned or received an image so that ``shutdown()`` can sweep unused images
for it; this is the only state it keeps, and it holds no cached note data.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from . import images, notes
from .config import MarknoteConfig
from .folders import build_folder_tree
from .models import CleanupResult, FolderNode, ImageSaveResult, NoteContent, NoteMetadata
from .paths import NOTE_SUFFIX
from .scanner import scan_notes

logger = logging.getLogger(__name__)


def note_base_name(path: Path) -> str:
    """File name of a note without ``.md``, the key its images are named after."""
    name = Path(path).name
    return name[: -len(NOTE_SUFFIX)] if name.endswith(NOTE_SUFFIX) else Path(name).stem


class NoteSession:
    """Async operation set exposed to a user interface layer."""

    def __init__(self, config: Optional[MarknoteConfig] = None):
        self.config = config or MarknoteConfig()
        self.last_root: Optional[Path] = None

    # ------------------------------------------------------------------
    # Notes and folders
    # ------------------------------------------------------------------

    async def check_root_exists(self, root: Path) -> bool:
        return await asyncio.to_thread(notes.check_root_exists, root)

    async def scan_notes(self, root: Path) -> list[NoteMetadata]:
        self.last_root = Path(root)
        return await scan_notes(
            root,
            concurrency=self.config.scan_concurrency,
            head_bytes=self.config.scan_head_bytes,
            excerpt_length=self.config.excerpt_length,
        )

    async def build_folder_tree(self, root: Path, note_list: Iterable[NoteMetadata]) -> FolderNode:
        return await build_folder_tree(root, note_list)

    async def get_note_content(self, path: Path) -> Optional[NoteContent]:
        return await asyncio.to_thread(notes.read_note, path)

    async def save_note(self, path: Path, content: str, front_matter: Optional[dict] = None) -> bool:
        return await asyncio.to_thread(notes.save_note, path, content, front_matter)

    async def create_note(self, root: Path, folder_path: str, title: str) -> Optional[Path]:
        return await asyncio.to_thread(notes.create_note, root, folder_path, title)

    async def create_folder(self, root: Path, folder_path: str) -> bool:
        return await asyncio.to_thread(notes.create_folder, root, folder_path)

    async def rename_note(self, old_path: Path, new_title: str) -> Optional[Path]:
        return await asyncio.to_thread(notes.rename_note, old_path, new_title)

    async def delete_note(
        self,
        path: Path,
        *,
        root: Optional[Path] = None,
        with_images: bool = False,
    ) -> bool:
        """Delete a note, optionally removing its images that nothing else uses.

        Image cleanup runs after the note file is gone so the note's own
        references no longer protect its images.
        """
        if with_images and root is None:
            raise ValueError("root is required when with_images=True")

        deleted = await asyncio.to_thread(notes.delete_note, path)
        if deleted and with_images:
            await self.images_delete_note_images(root, note_base_name(path))
        return deleted

    async def move_note(self, root: Path, current_path: Path, target_folder: str) -> Optional[Path]:
        return await asyncio.to_thread(notes.move_note, root, current_path, target_folder)

    async def delete_folder(self, root: Path, folder_path: str) -> bool:
        return await asyncio.to_thread(notes.delete_folder, root, folder_path)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def images_save_from_file(self, root: Path, note_base: str, source_path: Path) -> ImageSaveResult:
        self.last_root = Path(root)
        return await asyncio.to_thread(images.save_image_from_file, root, note_base, source_path)

    async def images_save_from_buffer(
        self, root: Path, note_base: str, data: bytes, extension: str
    ) -> ImageSaveResult:
        self.last_root = Path(root)
        return await asyncio.to_thread(images.save_image_from_buffer, root, note_base, data, extension)

    async def images_cleanup_unused(self, root: Path, note_base: str, markdown: str) -> CleanupResult:
        return await asyncio.to_thread(images.cleanup_unused_images, root, note_base, markdown)

    async def images_delete_note_images(self, root: Path, note_base: str) -> CleanupResult:
        return await asyncio.to_thread(images.delete_note_images, root, note_base)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def shutdown(self) -> Optional[CleanupResult]:
        """Sweep unused images under the last scanned root, once.

        Returns None when no root was used during the session.
        """
        root = self.last_root
        if root is None:
            return None
        # Cleared first so a repeated shutdown does not sweep again
        self.last_root = None

        result = await asyncio.to_thread(images.cleanup_all_unused_images, root)
        logger.info(
            f"Shutdown cleanup for {root}: {len(result.deleted_files)} deleted, "
            f"{len(result.errors)} error(s)"
        )
        return result
