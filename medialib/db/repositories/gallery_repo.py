from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from medialib.db.models import GalleryImage


class GalleryImageRepo:
    def get(self, s: Session, gallery_image_id: int) -> GalleryImage | None:
        return s.get(GalleryImage, gallery_image_id)

    def link(self, s: Session, gallery_id: int, media_id: int, *,
             caption: Optional[str], sort_order: int) -> GalleryImage:
        l = GalleryImage(gallery_id=gallery_id, media_id=media_id, caption=caption, sort_order=sort_order)
        s.add(l)
        s.flush()
        return l

    def unlink(self, s: Session, link: GalleryImage) -> None:
        s.delete(link)
        s.flush()

    def links_for_gallery(self, s: Session, gallery_id: int) -> list[GalleryImage]:
        """Display order: sort_order, then creation order."""
        stmt = (
            select(GalleryImage)
            .where(GalleryImage.gallery_id == gallery_id)
            .order_by(GalleryImage.sort_order, GalleryImage.id)
        )
        return list(s.execute(stmt).scalars().all())

    def by_ids_for_update(self, s: Session, ids: Iterable[int]) -> dict[int, GalleryImage]:
        ids = list(ids)
        if not ids:
            return {}
        rows = s.execute(
            select(GalleryImage).where(GalleryImage.id.in_(ids)).with_for_update()
        ).scalars().all()
        return {l.id: l for l in rows}

    def set_sort_order(self, s: Session, link: GalleryImage, sort_order: int) -> None:
        link.sort_order = sort_order
        s.flush()
