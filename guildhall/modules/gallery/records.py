"""
Read-only gallery record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from guildhall.database.models import GalleryImage


@dataclass(frozen=True, slots=True)
class GalleryImageRecord:
    id: int
    title: str
    description: Optional[str]
    image_url: str
    uploaded_by: int
    tags: Tuple[str, ...]
    created_at: datetime

    @classmethod
    def from_model(cls, image: GalleryImage) -> "GalleryImageRecord":
        # Rows written outside this service may hold a non-list
        tags = image.tags if isinstance(image.tags, list) else []
        return cls(
            id=image.id,
            title=image.title,
            description=image.description,
            image_url=image.image_url,
            uploaded_by=image.uploaded_by,
            tags=tuple(tags),
            created_at=image.created_at,
        )
