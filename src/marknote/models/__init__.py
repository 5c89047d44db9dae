"""Pydantic models for Marknote."""

from .images import CleanupResult, ImageSaveResult
from .notes import FolderNode, NoteContent, NoteMetadata

__all__ = [
    "NoteMetadata",
    "NoteContent",
    "FolderNode",
    # Images
    "ImageSaveResult",
    "CleanupResult",
]
