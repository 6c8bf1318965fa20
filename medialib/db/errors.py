from __future__ import annotations
from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    folder = "folder"
    media = "media"
    gallery = "gallery"
    gallery_image = "gallery_image"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


# Domain errors: expected, caller-recoverable outcomes of a request.
class MediaLibraryError(Exception):
    kind = "error"

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self), **self.details()}


class NotFound(MediaLibraryError):
    kind = "not_found"

    def __init__(self, entity: EntityKind, entity_id: int):
        self.entity = EntityKind(entity)
        self.entity_id = entity_id
        super().__init__(f"{self.entity.label} with id {entity_id} not found")

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity.value, "id": self.entity_id}


class InvalidParent(MediaLibraryError):
    """Re-parenting would make a folder its own ancestor."""
    kind = "invalid_parent"

    def __init__(self, folder_id: int, parent_id: int):
        self.folder_id = folder_id
        self.parent_id = parent_id
        if folder_id == parent_id:
            msg = f"folder {folder_id} cannot be its own parent"
        else:
            msg = f"folder {parent_id} is inside folder {folder_id} and cannot become its parent"
        super().__init__(msg)

    def details(self) -> dict[str, Any]:
        return {"folder_id": self.folder_id, "parent_id": self.parent_id}


class Conflict(MediaLibraryError):
    kind = "conflict"

    def __init__(self, folder_id: int, subfolder_count: int, reason: str = "has_subfolders"):
        self.folder_id = folder_id
        self.subfolder_count = subfolder_count
        self.reason = reason
        super().__init__(
            f"folder {folder_id} still has {subfolder_count} subfolder(s); remove them first"
        )

    def details(self) -> dict[str, Any]:
        return {"folder_id": self.folder_id, "reason": self.reason,
                "subfolder_count": self.subfolder_count}


class Mismatch(MediaLibraryError):
    """A gallery image was addressed through a gallery it does not belong to."""
    kind = "mismatch"

    def __init__(self, gallery_image_id: int, gallery_id: int, actual_gallery_id: int):
        self.gallery_image_id = gallery_image_id
        self.gallery_id = gallery_id
        self.actual_gallery_id = actual_gallery_id
        self.reason = "wrong_gallery"
        super().__init__(
            f"gallery image {gallery_image_id} belongs to gallery {actual_gallery_id}, not {gallery_id}"
        )

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "gallery_image_id": self.gallery_image_id,
                "gallery_id": self.gallery_id, "actual_gallery_id": self.actual_gallery_id}


# Not a MediaLibraryError: the store itself failed and the request cannot be answered.
class StorageError(Exception): ...
