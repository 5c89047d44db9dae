"""Pydantic models for image attachment results."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ImageSaveResult(BaseModel):
    """Outcome of saving an image into the attachments directory."""

    success: bool
    relative_path: Optional[str] = Field(default=None, description="images/<file> on success")
    error: Optional[str] = Field(default=None, description="Reason on failure")

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @classmethod
    def ok(cls, relative_path: str) -> "ImageSaveResult":
        return cls(success=True, relative_path=relative_path)

    @classmethod
    def failed(cls, error: str) -> "ImageSaveResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CleanupResult(BaseModel):
    """Outcome of an image cleanup.

    ``success`` reports that the scan completed; individual unlink failures
    are listed in ``errors`` without flipping it.
    """

    success: bool = True
    deleted_files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
