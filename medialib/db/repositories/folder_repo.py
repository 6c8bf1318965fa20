from __future__ import annotations
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from medialib.db.models import MediaFolder


class FolderRepo:
    def get(self, s: Session, folder_id: int) -> MediaFolder | None:
        return s.get(MediaFolder, folder_id)

    def get_for_update(self, s: Session, folder_id: int) -> MediaFolder | None:
        return s.execute(
            select(MediaFolder).where(MediaFolder.id == folder_id).with_for_update()
        ).scalar_one_or_none()

    def list(self, s: Session) -> list[MediaFolder]:
        return list(s.execute(select(MediaFolder).order_by(MediaFolder.id)).scalars().all())

    def children(self, s: Session, parent_id: Optional[int]) -> list[MediaFolder]:
        stmt = select(MediaFolder).where(MediaFolder.parent_id.is_(None) if parent_id is None
                                         else MediaFolder.parent_id == parent_id)
        return list(s.execute(stmt.order_by(MediaFolder.name, MediaFolder.id)).scalars().all())

    def count(self, s: Session) -> int:
        return s.execute(select(func.count(MediaFolder.id))).scalar_one()

    def count_children(self, s: Session, folder_id: int) -> int:
        return s.execute(
            select(func.count(MediaFolder.id)).where(MediaFolder.parent_id == folder_id)
        ).scalar_one()

    def parent_id_of(self, s: Session, folder_id: int, *, for_update: bool = False) -> Optional[int]:
        stmt = select(MediaFolder.parent_id).where(MediaFolder.id == folder_id)
        if for_update:
            stmt = stmt.with_for_update()
        return s.execute(stmt).scalar_one_or_none()

    def create(self, s: Session, parent_id: Optional[int], name: str) -> MediaFolder:
        f = MediaFolder(parent_id=parent_id, name=name)
        s.add(f)
        s.flush()
        return f

    def delete(self, s: Session, folder: MediaFolder) -> None:
        s.delete(folder)
        s.flush()
