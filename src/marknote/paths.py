"""Path management for a Marknote notes root."""

from pathlib import Path
from typing import Optional

from .config import MarknoteConfig
from .errors import RootNotFoundError

IMAGES_DIR_NAME = "images"
NOTE_SUFFIX = ".md"


class NotePaths:
    """Manages paths within a notes root."""

    def __init__(self, root: Path):
        """Initialize note paths from root directory.

        Args:
            root: Root directory of the note collection
        """
        self.root = Path(root)

        # Reserved attachment directory (never part of the folder tree)
        self.images = self.root / IMAGES_DIR_NAME

    @classmethod
    def from_config(cls, config: MarknoteConfig) -> Optional["NotePaths"]:
        """Create NotePaths from a MarknoteConfig, or None if no root is configured."""
        if config.notes_root is None:
            return None
        return cls(config.notes_root)

    def folder(self, folder_path: str) -> Path:
        """Get absolute path for a folder relative to the root.

        Args:
            folder_path: Folder path relative to root ('' means the root itself)

        Returns:
            Absolute folder path
        """
        if not folder_path:
            return self.root
        return self.root / folder_path

    def relative(self, path: Path) -> str:
        """Get the '/'-joined path of ``path`` relative to the root."""
        return Path(path).relative_to(self.root).as_posix()

    def image_path(self, file_name: str) -> Path:
        """Get path to an attachment file in the images directory."""
        return self.images / file_name

    @classmethod
    def require(cls, config: MarknoteConfig) -> "NotePaths":
        """Create NotePaths for a root that must already exist.

        Raises:
            RootNotFoundError: If no root is configured or it is not a directory
        """
        paths = cls.from_config(config)
        if paths is None:
            raise RootNotFoundError("No notes root configured (use --root or MARKNOTE_ROOT)")
        if not paths.root.is_dir():
            raise RootNotFoundError(f"Notes root not found: {paths.root}")
        return paths
