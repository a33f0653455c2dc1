"""
Gallery Module
==============

Exports:
- GalleryService: Image uploads (by URL) and paged listing
"""

from .records import GalleryImageRecord
from .service import GalleryService

__all__ = ["GalleryService", "GalleryImageRecord"]
