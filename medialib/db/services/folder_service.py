from __future__ import annotations
import logging
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from medialib.db.errors import Conflict, EntityKind, InvalidParent, NotFound, StorageError
from medialib.db.manager import DatabaseManager
from medialib.db.models import Media, MediaFolder
from medialib.db.repositories import FolderRepo, MediaRepo
from medialib.db.services.validator import ReferentialValidator

log = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks an update argument the caller did not supply (None is a real value for parent_id).
UNSET: Any = _Unset()


def _clean_name(name: str) -> str:
    nm = (name or "").strip()
    if not nm:
        raise ValueError("Folder name must not be empty")
    return nm


class FolderService:
    """Folder forest operations and the media promotion that folder removal triggers."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.folder_repo = FolderRepo()
        self.media_repo = MediaRepo()
        self.validator = ReferentialValidator()

    # ---------- Reads ----------
    def list_folders(self) -> list[MediaFolder]:
        with self.db.session() as s:
            return self.folder_repo.list(s)

    def get_folder(self, folder_id: int) -> MediaFolder | None:
        with self.db.session() as s:
            return self.folder_repo.get(s, folder_id)

    def subfolders(self, parent_id: Optional[int]) -> list[MediaFolder]:
        """Direct children of parent_id, or the root folders when parent_id is None."""
        with self.db.session() as s:
            if parent_id is not None:
                self.validator.require(s, EntityKind.folder, parent_id)
            return self.folder_repo.children(s, parent_id)

    def folder_media(self, folder_id: Optional[int]) -> list[Media]:
        """Media filed directly in folder_id (None lists root media), newest first."""
        with self.db.session() as s:
            if folder_id is not None:
                self.validator.require(s, EntityKind.folder, folder_id)
            return self.media_repo.in_folder(s, folder_id)

    def breadcrumb(self, folder_id: int) -> list[MediaFolder]:
        """Return the folders from the root down to folder_id, inclusive."""
        with self.db.session() as s:
            self.validator.require(s, EntityKind.folder, folder_id)
            chain, rooted = self._parent_chain(s, folder_id)
            if not rooted:
                raise StorageError(f"folder tree is corrupt above folder {folder_id}")
            return [self.folder_repo.get(s, fid) for fid in reversed(chain)]

    # ---------- Writes ----------
    def create_folder(self, name: str, parent_id: Optional[int] = None) -> MediaFolder:
        nm = _clean_name(name)
        with self.db.session() as s:
            if parent_id is not None and not self.validator.exists(s, EntityKind.folder, parent_id):
                raise NotFound(EntityKind.folder, parent_id)
            f = self.folder_repo.create(s, parent_id, nm)
            s.refresh(f)
            log.info("Created folder %s '%s' under %s", f.id, f.name, parent_id)
            return f

    def update_folder(self, folder_id: int, *, name: Optional[str] = None,
                      parent_id: Optional[int] = UNSET) -> MediaFolder:
        """Rename and/or re-parent a folder. Arguments left out are not touched;
        parent_id=None moves the folder to the root."""
        nm = _clean_name(name) if name is not None else None
        with self.db.session() as s:
            f = self.folder_repo.get_for_update(s, folder_id)
            if f is None:
                raise NotFound(EntityKind.folder, folder_id)

            if parent_id is not UNSET and parent_id is not None:
                if not self.validator.exists(s, EntityKind.folder, parent_id):
                    raise NotFound(EntityKind.folder, parent_id)
                if parent_id == folder_id:
                    raise InvalidParent(folder_id, parent_id)
                chain, rooted = self._parent_chain(s, parent_id, lock=True)
                if folder_id in chain or not rooted:
                    log.warning("Rejected moving folder %s under %s: would form a cycle", folder_id, parent_id)
                    raise InvalidParent(folder_id, parent_id)

            if nm is not None:
                f.name = nm
            if parent_id is not UNSET:
                f.parent_id = parent_id
            s.flush()
            s.refresh(f)
            log.info("Updated folder %s (name=%r parent=%s)", f.id, f.name, f.parent_id)
            return f

    def delete_folder(self, folder_id: int) -> int:
        """
        Remove an empty-of-subfolders folder. Media filed in it are promoted to its
        parent (the root for a top-level folder) in the same transaction.
        Returns the number of media rows promoted.
        """
        with self.db.session() as s:
            f = self.folder_repo.get_for_update(s, folder_id)
            if f is None:
                raise NotFound(EntityKind.folder, folder_id)
            n_children = self.folder_repo.count_children(s, folder_id)
            if n_children:
                log.warning("Refused to delete folder %s: %d subfolder(s)", folder_id, n_children)
                raise Conflict(folder_id, n_children)

            promoted = self.media_repo.reassign_folder(s, folder_id, f.parent_id)
            self.folder_repo.delete(s, f)
            log.info("Deleted folder %s; promoted %d media to %s", folder_id, promoted, f.parent_id)
            return promoted

    def move_media(self, media_ids: Iterable[int], folder_id: Optional[int]) -> int:
        """File every media id in folder_id (root when None). All or nothing."""
        ids = list(dict.fromkeys(media_ids))
        with self.db.session() as s:
            if folder_id is not None and not self.validator.exists(s, EntityKind.folder, folder_id):
                raise NotFound(EntityKind.folder, folder_id)
            found = self.media_repo.existing_ids_for_update(s, ids)
            for mid in ids:
                if mid not in found:
                    raise NotFound(EntityKind.media, mid)
            moved = self.media_repo.move(s, ids, folder_id)
            log.info("Moved %d media to folder %s", moved, folder_id)
            return moved

    # ---------- Helpers ----------
    def _parent_chain(self, s: Session, start_id: int, *, lock: bool = False) -> tuple[list[int], bool]:
        """
        Walk parent pointers from start_id. Returns (ids nearest first, reached_root).
        With lock=True every ancestor row is read FOR UPDATE, so a concurrent
        re-parent cannot change the chain before this transaction commits.
        At most one hop per stored folder is taken, so a corrupt cycle ends the walk
        with reached_root=False instead of looping.
        """
        limit = self.folder_repo.count(s)
        chain: list[int] = []
        cur: Optional[int] = start_id
        while cur is not None and len(chain) <= limit:
            chain.append(cur)
            cur = self.folder_repo.parent_id_of(s, cur, for_update=lock)
        if cur is not None:
            log.error("Parent chain from folder %s never reaches a root", start_id)
            return chain, False
        return chain, True
