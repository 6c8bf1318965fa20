from __future__ import annotations
import logging
from typing import Iterable, NamedTuple, Optional

from medialib.db.errors import EntityKind, Mismatch, NotFound
from medialib.db.manager import DatabaseManager
from medialib.db.models import GalleryImage
from medialib.db.repositories import GalleryImageRepo
from medialib.db.services.validator import ReferentialValidator

log = logging.getLogger(__name__)


class OrderEntry(NamedTuple):
    id: int
    sort_order: int


class GalleryService:
    """Ordered, captioned membership of media in image galleries."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.gallery_img_repo = GalleryImageRepo()
        self.validator = ReferentialValidator()

    # --- Getters
    def get_image(self, gallery_image_id: int) -> GalleryImage | None:
        with self.db.session() as s:
            return self.gallery_img_repo.get(s, gallery_image_id)

    def list_images(self, gallery_id: int) -> list[GalleryImage]:
        """Gallery images in display order (sort_order, then creation order)."""
        with self.db.session() as s:
            self.validator.require(s, EntityKind.gallery, gallery_id)
            return self.gallery_img_repo.links_for_gallery(s, gallery_id)

    # --- Add / Remove
    def add_image(self, gallery_id: int, media_id: int, caption: Optional[str] = None,
                  sort_order: int = 0) -> GalleryImage:
        """Place media_id in the gallery at sort_order. Other rows keep their order values."""
        with self.db.session() as s:
            self.validator.require(s, EntityKind.gallery, gallery_id)
            self.validator.require(s, EntityKind.media, media_id)
            lnk = self.gallery_img_repo.link(s, gallery_id, media_id, caption=caption, sort_order=sort_order)
            s.refresh(lnk)
            log.info("Added media %s to gallery %s as %s (order %s)", media_id, gallery_id, lnk.id, sort_order)
            return lnk

    def remove_image(self, gallery_image_id: int) -> None:
        """Drop the association row only; the media row stays."""
        with self.db.session() as s:
            lnk = self.validator.require(s, EntityKind.gallery_image, gallery_image_id)
            self.gallery_img_repo.unlink(s, lnk)
            log.info("Removed gallery image %s from gallery %s", gallery_image_id, lnk.gallery_id)

    # --- Order / Caption
    def reorder(self, gallery_id: int, entries: Iterable[OrderEntry | tuple[int, int]]) -> None:
        """
        Apply new sort_order values to rows of one gallery. Every entry is checked
        before anything is written, so a bad entry leaves the whole gallery as it was.
        If an id appears twice, its last entry wins.
        """
        pairs = [OrderEntry(int(i), int(o)) for i, o in entries]
        with self.db.session() as s:
            self.validator.require(s, EntityKind.gallery, gallery_id)
            rows = self.gallery_img_repo.by_ids_for_update(s, {e.id for e in pairs})
            for e in pairs:
                row = rows.get(e.id)
                if row is None:
                    raise NotFound(EntityKind.gallery_image, e.id)
                if row.gallery_id != gallery_id:
                    log.warning("Reorder of gallery %s named image %s from gallery %s",
                                gallery_id, e.id, row.gallery_id)
                    raise Mismatch(e.id, gallery_id, row.gallery_id)

            for e in pairs:
                self.gallery_img_repo.set_sort_order(s, rows[e.id], e.sort_order)
            log.info("Reordered %d image(s) in gallery %s", len(pairs), gallery_id)

    def update_caption(self, gallery_image_id: int, caption: Optional[str]) -> GalleryImage:
        with self.db.session() as s:
            lnk = self.validator.require(s, EntityKind.gallery_image, gallery_image_id)
            lnk.caption = caption
            s.flush()
            log.info("Updated caption of gallery image %s", gallery_image_id)
            return lnk
