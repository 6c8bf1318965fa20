from __future__ import annotations
from typing import List, Optional
from sqlalchemy import String, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .mixins import Base, TimestampMixin, CreatedAtMixin
from .media import Media


class ImageGallery(TimestampMixin, Base):
    """A gallery page. Only its id matters here; the content subsystem owns the rest."""
    __tablename__ = "image_gallery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    gallery_images: Mapped[List["GalleryImage"]] = relationship(
        back_populates="gallery",
        cascade="all, delete-orphan",
        order_by=lambda: (GalleryImage.sort_order, GalleryImage.id),
    )

    def __repr__(self) -> str:
        return f"<ImageGallery id={self.id} slug='{self.slug}'>"


class GalleryImage(CreatedAtMixin, Base):
    """
    Association object placing one media item in one gallery.
    sort_order is only meaningful against rows of the same gallery; ties fall back to id.
    """
    __tablename__ = "gallery_image"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    gallery_id: Mapped[int] = mapped_column(
        ForeignKey("image_gallery.id", ondelete="CASCADE"), nullable=False
    )
    media_id: Mapped[int] = mapped_column(
        ForeignKey("media.id", ondelete="CASCADE"), nullable=False
    )
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    gallery: Mapped[ImageGallery] = relationship(back_populates="gallery_images")
    media: Mapped[Media] = relationship()

    __table_args__ = (
        Index("idx_gallery_image_gallery_order", "gallery_id", "sort_order"),
        Index("idx_gallery_image_media", "media_id"),
    )

    def __repr__(self) -> str:
        return f"<GalleryImage gallery={self.gallery_id} media={self.media_id} order={self.sort_order}>"
