from __future__ import annotations
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from medialib.db.errors import EntityKind, NotFound
from medialib.db.models import GalleryImage, ImageGallery, Media, MediaFolder

_MODELS: dict[EntityKind, type] = {
    EntityKind.folder: MediaFolder,
    EntityKind.media: Media,
    EntityKind.gallery: ImageGallery,
    EntityKind.gallery_image: GalleryImage,
}


class ReferentialValidator:
    """Existence checks run before any dependent write."""

    def exists(self, s: Session, kind: EntityKind, entity_id: int) -> bool:
        model = _MODELS[EntityKind(kind)]
        return s.execute(select(model.id).where(model.id == entity_id)).first() is not None

    def require(self, s: Session, kind: EntityKind, entity_id: int) -> Any:
        """Return the row, or raise NotFound(kind, entity_id)."""
        row = s.get(_MODELS[EntityKind(kind)], entity_id)
        if row is None:
            raise NotFound(kind, entity_id)
        return row
