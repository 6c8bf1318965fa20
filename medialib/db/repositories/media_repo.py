from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from medialib.db.models import Media


class MediaRepo:
    """Access to the upload subsystem's media table; only folder_id is ever written."""

    def get(self, s: Session, media_id: int) -> Media | None:
        return s.get(Media, media_id)

    def in_folder(self, s: Session, folder_id: Optional[int]) -> list[Media]:
        """Media filed directly in folder_id (root when None), newest first."""
        cond = Media.folder_id.is_(None) if folder_id is None else Media.folder_id == folder_id
        stmt = select(Media).where(cond).order_by(Media.created_at.desc(), Media.id.desc())
        return list(s.execute(stmt).scalars().all())

    def existing_ids_for_update(self, s: Session, media_ids: Iterable[int]) -> set[int]:
        ids = list(media_ids)
        if not ids:
            return set()
        rows = s.execute(
            select(Media.id).where(Media.id.in_(ids)).with_for_update()
        ).scalars().all()
        return set(rows)

    def reassign_folder(self, s: Session, from_folder_id: int, to_folder_id: Optional[int]) -> int:
        """Re-point every media row in from_folder_id at to_folder_id. Returns rows moved."""
        res = s.execute(
            update(Media)
            .where(Media.folder_id == from_folder_id)
            .values(folder_id=to_folder_id)
            .execution_options(synchronize_session="fetch")
        )
        return res.rowcount

    def move(self, s: Session, media_ids: Iterable[int], folder_id: Optional[int]) -> int:
        ids = list(media_ids)
        if not ids:
            return 0
        res = s.execute(
            update(Media)
            .where(Media.id.in_(ids))
            .values(folder_id=folder_id)
            .execution_options(synchronize_session="fetch")
        )
        return res.rowcount
