"""Image attachments stored under ``<root>/images``.

Image files are named ``<sanitized note base>_<YYYYMMDDHHmmssSSS>_<seq>.<ext>``.
A note owns the images whose names start with its sanitized base followed by
``_``; nothing else records the relation. Before an image is deleted every
note under the root is checked for a reference to it, so an image shared by
two notes survives until neither mentions it.
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .filenames import sanitize_note_base
from .models import CleanupResult, ImageSaveResult
from .paths import IMAGES_DIR_NAME, NOTE_SUFFIX, NotePaths
from .walk import list_directory_sync

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg")

# ![alt](path)
_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")
# <img ... src="path" ...>
_HTML_IMG_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>")
# Optional title after the path: ![alt](path "title")
_MD_TITLE_RE = re.compile(r"\s+(?:\"[^\"]*\"|'[^']*')\s*$")


def _extension(path: Path | str) -> str:
    return Path(path).suffix[1:].lower()


def is_image_file(path: Path | str) -> bool:
    return _extension(path) in SUPPORTED_IMAGE_EXTENSIONS


def generate_image_filename(
    note_base: str,
    extension: str,
    sequence: int,
    now: Optional[datetime] = None,
) -> str:
    """Build an image file name from a note base, local time and sequence number."""
    now = now or datetime.now()
    timestamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    return f"{sanitize_note_base(note_base)}_{timestamp}_{sequence:03d}.{extension}"


def find_unique_image_filename(images_dir: Path, note_base: str, extension: str) -> str:
    """Probe sequence numbers 1, 2, ... until the generated name is free.

    The timestamp is regenerated on every probe.
    """
    sequence = 1
    while True:
        file_name = generate_image_filename(note_base, extension, sequence)
        if not (images_dir / file_name).exists():
            return file_name
        sequence += 1


def ensure_images_dir(root: Path) -> Path:
    images_dir = NotePaths(root).images
    images_dir.mkdir(parents=True, exist_ok=True)
    return images_dir


def save_image_from_file(root: Path, note_base: str, source_path: Path) -> ImageSaveResult:
    """Copy an image file into the attachments directory."""
    source_path = Path(source_path)
    if not is_image_file(source_path):
        return ImageSaveResult.failed(f"Unsupported image format: {source_path.suffix}")

    try:
        images_dir = ensure_images_dir(root)
        file_name = find_unique_image_filename(images_dir, note_base, _extension(source_path))
        shutil.copyfile(source_path, images_dir / file_name)
    except OSError as e:
        logger.error(f"Error saving image {source_path}: {e}")
        return ImageSaveResult.failed(str(e))

    return ImageSaveResult.ok(f"{IMAGES_DIR_NAME}/{file_name}")


def save_image_from_buffer(root: Path, note_base: str, data: bytes, extension: str) -> ImageSaveResult:
    """Write raw image bytes into the attachments directory."""
    ext = extension.lower().lstrip(".")
    if ext not in SUPPORTED_IMAGE_EXTENSIONS:
        return ImageSaveResult.failed(f"Unsupported image format: {extension}")

    try:
        images_dir = ensure_images_dir(root)
        file_name = find_unique_image_filename(images_dir, note_base, ext)
        (images_dir / file_name).write_bytes(data)
    except OSError as e:
        logger.error(f"Error saving image buffer for {note_base!r}: {e}")
        return ImageSaveResult.failed(str(e))

    return ImageSaveResult.ok(f"{IMAGES_DIR_NAME}/{file_name}")


def parse_image_references(markdown: str) -> list[str]:
    """Return image paths from ``![alt](path)`` and ``<img src="path">``.

    Markdown references come first, then HTML ones, each in order of
    appearance. Duplicates are kept. A quoted title after a Markdown image
    path is dropped.
    """
    refs = [_MD_TITLE_RE.sub("", m.group(1)).strip() for m in _MD_IMAGE_RE.finditer(markdown)]
    refs = [ref for ref in refs if ref]
    refs.extend(m.group(1) for m in _HTML_IMG_RE.finditer(markdown) if m.group(1))
    return refs


def _reference_names(refs: Iterable[str]) -> set[str]:
    return {Path(ref.replace("\\", "/")).name for ref in refs}


def scan_all_note_references(root: Path) -> set[str]:
    """Collect the file names of every image referenced by any note under ``root``.

    The root ``images`` directory is not descended into. Unreadable notes
    are skipped.
    """
    root = Path(root)
    referenced: set[str] = set()
    pending = [root]
    while pending:
        listing = list_directory_sync(pending.pop(), root=root)
        for path in listing.files:
            if not path.name.endswith(NOTE_SUFFIX):
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable note {path}: {e}")
                continue
            referenced |= _reference_names(parse_image_references(text))
        pending.extend(listing.dirs)
    return referenced


def _list_images(root: Path) -> Optional[list[str]]:
    images_dir = NotePaths(root).images
    try:
        return sorted(p.name for p in images_dir.iterdir() if p.is_file())
    except OSError:
        # No images directory yet: nothing to clean
        return None


def _delete_unreferenced(root: Path, candidates: list[str], keep: set[str]) -> CleanupResult:
    result = CleanupResult()
    paths = NotePaths(root)
    for file_name in candidates:
        if file_name in keep:
            continue
        try:
            paths.image_path(file_name).unlink()
        except OSError as e:
            logger.error(f"Failed to delete image {file_name}: {e}")
            result.errors.append(f"Failed to delete {file_name}: {e}")
            continue
        result.deleted_files.append(file_name)

    if result.deleted_files:
        logger.info(f"Deleted {len(result.deleted_files)} unused image(s) under {root}")
    return result


def _note_images(root: Path, note_base: str) -> list[str]:
    prefix = f"{sanitize_note_base(note_base)}_"
    return [name for name in _list_images(root) or [] if name.startswith(prefix)]


def cleanup_unused_images(root: Path, note_base: str, markdown: str) -> CleanupResult:
    """Delete a note's images that neither its new content nor any note references."""
    note_files = _note_images(root, note_base)
    if not note_files:
        return CleanupResult()

    current_refs = _reference_names(parse_image_references(markdown))
    unreferenced = [name for name in note_files if name not in current_refs]
    if not unreferenced:
        return CleanupResult()

    return _delete_unreferenced(root, unreferenced, scan_all_note_references(root))


def delete_note_images(root: Path, note_base: str) -> CleanupResult:
    """Delete all of a note's images that no remaining note references."""
    note_files = _note_images(root, note_base)
    if not note_files:
        return CleanupResult()

    return _delete_unreferenced(root, note_files, scan_all_note_references(root))


def cleanup_all_unused_images(root: Path) -> CleanupResult:
    """Delete every file in the images directory that no note references."""
    all_files = _list_images(root)
    if not all_files:
        return CleanupResult()

    return _delete_unreferenced(root, all_files, scan_all_note_references(root))
