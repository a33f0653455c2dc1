"""
GalleryImage: a screenshot shared in the guild gallery.
Pure schema.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin


class GalleryImage(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - title / description
    - image_url (opaque; never fetched or checked)
    - uploaded_by (FK to users)
    - tags (JSON array of strings; JSONB on PostgreSQL)
    """

    __tablename__ = "gallery_images"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), default=None)
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    uploaded_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    tags: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
