from __future__ import annotations
from typing import List, Optional
from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .mixins import Base, TimestampMixin


class MediaFolder(TimestampMixin, Base):
    """
    One node of the folder forest. Folders are flat rows linked by parent_id;
    subfolders are never removed implicitly, so no delete cascade is declared.
    """
    __tablename__ = "media_folder"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("media_folder.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    parent: Mapped[Optional["MediaFolder"]] = relationship(
        back_populates="subfolders", remote_side="MediaFolder.id"
    )
    subfolders: Mapped[List["MediaFolder"]] = relationship(
        back_populates="parent",
        order_by="MediaFolder.id",
        passive_deletes="all",
    )

    __table_args__ = (
        Index("idx_media_folder_parent", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<MediaFolder id={self.id} name='{self.name}' parent={self.parent_id}>"
