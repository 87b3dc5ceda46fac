"""Pydantic models describing screenshots, compositions and upload attempts."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Set

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CaptureRegion(BaseModel):
    """Captured rectangle in screen coordinates."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class Screenshot(BaseModel):
    """Single captured image as reported by the backend.

    The backend serialises ``captured_at`` as ``timestamp`` and the payload as
    ``base64_data``; both spellings are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    captured_at: int = Field(
        ..., ge=0, validation_alias=AliasChoices("captured_at", "timestamp")
    )
    image_data: str = Field(
        ..., validation_alias=AliasChoices("image_data", "base64_data")
    )
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    region: CaptureRegion


class Layout(str, Enum):
    """Arrangement used when combining selected screenshots."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    GRID = "grid"


class CompositionRequest(BaseModel):
    """Ordered ids and layout sent to the backend compositor."""

    selected_ids: List[str] = Field(..., min_length=1)
    layout: Layout


class ComposedImage(BaseModel):
    """Handle to the image returned by the backend compositor."""

    model_config = ConfigDict(frozen=True)

    data: str
    layout: Layout
    source_ids: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


UploadStatus = Literal["idle", "uploading", "succeeded", "failed"]


class UploadAttempt(BaseModel):
    """Transient state of the current upload."""

    token: int = 0
    status: UploadStatus = "idle"
    progress: int = Field(default=0, ge=0, le=100)
    result_message: Optional[str] = None


class UploadConfiguration(BaseModel):
    """Destination settings persisted between sessions."""

    model_config = ConfigDict(validate_assignment=True)

    destination_url: str = ""
    download_dir: str = ""


class WorkspaceState(BaseModel):
    """Snapshot of everything the workspace controllers manage."""

    model_config = ConfigDict(validate_assignment=True)

    screenshots: List[Screenshot] = Field(default_factory=list)
    selected_ids: Set[str] = Field(default_factory=set)
    display_order: List[str] = Field(default_factory=list)
    composed_image: Optional[ComposedImage] = None
    upload: UploadAttempt = Field(default_factory=UploadAttempt)

    @field_validator("display_order")
    @classmethod
    def _unique_order(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("display order must not repeat ids")
        return value

    def ids(self) -> List[str]:
        """Return collection ids in authoritative order."""

        return [shot.id for shot in self.screenshots]


__all__ = [
    "CaptureRegion",
    "Screenshot",
    "Layout",
    "CompositionRequest",
    "ComposedImage",
    "UploadStatus",
    "UploadAttempt",
    "UploadConfiguration",
    "WorkspaceState",
]
