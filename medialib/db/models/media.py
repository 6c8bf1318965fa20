from __future__ import annotations
from typing import Optional
from sqlalchemy import String, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .mixins import Base, TimestampMixin
from .folder import MediaFolder


class Media(TimestampMixin, Base):
    """
    An uploaded file. The upload subsystem owns every column except folder_id,
    which is the only one this package writes.
    """
    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    filename: Mapped[str] = mapped_column(String, nullable=False)
    original_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    alt_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    folder_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("media_folder.id"), nullable=True
    )

    folder: Mapped[Optional[MediaFolder]] = relationship()

    __table_args__ = (Index("idx_media_folder", "folder_id"),)

    def __repr__(self) -> str:
        return f"<Media id={self.id} filename='{self.filename}' folder={self.folder_id}>"
