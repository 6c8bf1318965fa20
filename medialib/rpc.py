"""
Request/response boundary for the CMS RPC layer.

Each method takes a params mapping, validates it with a pydantic model, calls one
service operation and answers with {"ok": True, "result": ...} or
{"ok": False, "error": {"kind": ..., "message": ...}}. Store failures are not answered;
StorageError propagates to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from medialib.db.errors import MediaLibraryError
from medialib.db.services import UNSET, FolderService, GalleryService, OrderEntry

log = logging.getLogger(__name__)


# ---- Results -----------------------------------------------------------------
class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class FolderOut(_Out):
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: Optional[str] = None


class MediaOut(_Out):
    id: int
    filename: str
    mime_type: Optional[str] = None
    folder_id: Optional[int] = None
    created_at: Optional[str] = None


class GalleryImageOut(_Out):
    id: int
    gallery_id: int
    media_id: int
    caption: Optional[str] = None
    sort_order: int
    created_at: Optional[str] = None


# ---- Requests ----------------------------------------------------------------
class _In(BaseModel):
    model_config = ConfigDict(extra="forbid")


class _NamedIn(_In):
    @field_validator("name", check_fields=False)
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("name must not be empty")
        return v


class IdIn(_In):
    id: int


class CreateFolderIn(_NamedIn):
    name: str
    parent_id: Optional[int] = None


class UpdateFolderIn(_NamedIn):
    id: int
    name: Optional[str] = None
    parent_id: Optional[int] = None


class AddGalleryImageIn(_In):
    gallery_id: int
    media_id: int
    caption: Optional[str] = None
    sort_order: int


class ReorderEntryIn(_In):
    id: int
    sort_order: int


class ReorderGalleryImagesIn(_In):
    gallery_id: int
    entries: list[ReorderEntryIn] = Field(default_factory=list)


class UpdateCaptionIn(_In):
    id: int
    caption: Optional[str] = None


class MoveMediaIn(_In):
    media_ids: list[int]
    folder_id: Optional[int] = None


class FolderMediaIn(_In):
    folder_id: Optional[int] = None


class GalleryIn(_In):
    gallery_id: int


# ---- Dispatcher --------------------------------------------------------------
class MediaRpc:
    def __init__(self, folders: FolderService, galleries: GalleryService):
        self.folders = folders
        self.galleries = galleries
        self._methods: dict[str, tuple[type[_In] | None, Callable[[Any], Any]]] = {
            "createFolder": (CreateFolderIn, self._create_folder),
            "listFolders": (None, self._list_folders),
            "getFolder": (IdIn, self._get_folder),
            "updateFolder": (UpdateFolderIn, self._update_folder),
            "deleteFolder": (IdIn, self._delete_folder),
            "addGalleryImage": (AddGalleryImageIn, self._add_gallery_image),
            "removeGalleryImage": (IdIn, self._remove_gallery_image),
            "reorderGalleryImages": (ReorderGalleryImagesIn, self._reorder_gallery_images),
            "updateGalleryImageCaption": (UpdateCaptionIn, self._update_caption),
            "moveMedia": (MoveMediaIn, self._move_media),
            "getFolderMedia": (FolderMediaIn, self._folder_media),
            "getFolderPath": (IdIn, self._folder_path),
            "getGalleryImages": (GalleryIn, self._gallery_images),
        }

    @property
    def methods(self) -> list[str]:
        return sorted(self._methods)

    def call(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        entry = self._methods.get(method)
        if entry is None:
            return _error("invalid_request", f"unknown method '{method}'")
        model, handler = entry
        try:
            req = model.model_validate(params or {}) if model is not None else None
            result = handler(req)
        except ValidationError as e:
            log.warning("Invalid %s request: %s", method, e.errors(include_url=False))
            return _error("invalid_request", f"invalid params for {method}",
                          errors=e.errors(include_url=False, include_context=False))
        except ValueError as e:
            return _error("invalid_request", str(e))
        except MediaLibraryError as e:
            return {"ok": False, "error": e.to_dict()}
        return {"ok": True, "result": result}

    # --- Folders
    def _create_folder(self, req: CreateFolderIn) -> dict:
        return _dump(FolderOut, self.folders.create_folder(req.name, req.parent_id))

    def _list_folders(self, _req: None) -> list[dict]:
        return [_dump(FolderOut, f) for f in self.folders.list_folders()]

    def _get_folder(self, req: IdIn) -> dict | None:
        f = self.folders.get_folder(req.id)
        return _dump(FolderOut, f) if f is not None else None

    def _update_folder(self, req: UpdateFolderIn) -> dict:
        parent_id = req.parent_id if "parent_id" in req.model_fields_set else UNSET
        return _dump(FolderOut, self.folders.update_folder(req.id, name=req.name, parent_id=parent_id))

    def _delete_folder(self, req: IdIn) -> None:
        self.folders.delete_folder(req.id)

    def _move_media(self, req: MoveMediaIn) -> None:
        self.folders.move_media(req.media_ids, req.folder_id)

    def _folder_media(self, req: FolderMediaIn) -> list[dict]:
        return [_dump(MediaOut, m) for m in self.folders.folder_media(req.folder_id)]

    def _folder_path(self, req: IdIn) -> list[dict]:
        return [_dump(FolderOut, f) for f in self.folders.breadcrumb(req.id)]

    # --- Galleries
    def _add_gallery_image(self, req: AddGalleryImageIn) -> dict:
        lnk = self.galleries.add_image(req.gallery_id, req.media_id, req.caption, req.sort_order)
        return _dump(GalleryImageOut, lnk)

    def _remove_gallery_image(self, req: IdIn) -> None:
        self.galleries.remove_image(req.id)

    def _reorder_gallery_images(self, req: ReorderGalleryImagesIn) -> None:
        self.galleries.reorder(req.gallery_id, [OrderEntry(e.id, e.sort_order) for e in req.entries])

    def _update_caption(self, req: UpdateCaptionIn) -> dict:
        return _dump(GalleryImageOut, self.galleries.update_caption(req.id, req.caption))

    def _gallery_images(self, req: GalleryIn) -> list[dict]:
        return [_dump(GalleryImageOut, l) for l in self.galleries.list_images(req.gallery_id)]


def _dump(model: type[_Out], obj: Any) -> dict:
    return model.model_validate(obj).model_dump()


def _error(kind: str, message: str, **details: Any) -> dict[str, Any]:
    return {"ok": False, "error": {"kind": kind, "message": message, **details}}
