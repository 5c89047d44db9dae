"""Pydantic models for notes and folders."""

from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class NoteMetadata(BaseModel):
    """Summary of one Markdown note.

    Field precedence: front matter values override defaults derived from the
    file path (``title`` from the file name, ``id`` from the relative path).
    """

    id: str = Field(description="Front matter id, else relative path without .md")
    title: str = Field(description="Front matter title, else file name without extension")
    absolute_path: Path = Field(description="Platform path of the note file")
    relative_path: str = Field(description="Path from the root; separator depends on platform")
    tags: list[str] = Field(default_factory=list, description="Front matter tags in order")
    created_at: Optional[str] = Field(default=None, description="Opaque ISO-8601 string")
    updated_at: Optional[str] = Field(default=None, description="Opaque ISO-8601 string")
    excerpt: Optional[str] = Field(default=None, description="Start of the trimmed body")

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class NoteContent(BaseModel):
    """Full contents of one note."""

    meta: NoteMetadata
    content: str = Field(description="Body with the front matter block removed")
    raw_content: str = Field(description="File contents as stored on disk")

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class FolderNode(BaseModel):
    """One directory in a folder tree snapshot.

    ``notes`` holds only notes whose immediate parent is this directory.
    """

    name: str
    relative_path: str = Field(default="", description="'' for the root, else '/'-joined path")
    children: list["FolderNode"] = Field(default_factory=list)
    notes: list[NoteMetadata] = Field(default_factory=list)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def iter_nodes(self) -> Iterator["FolderNode"]:
        """Yield this node and every descendant, parents before children."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find(self, relative_path: str) -> Optional["FolderNode"]:
        """Return the node with the given relative path, or None."""
        wanted = relative_path.replace("\\", "/").strip("/")
        for node in self.iter_nodes():
            if node.relative_path == wanted:
                return node
        return None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


FolderNode.model_rebuild()
