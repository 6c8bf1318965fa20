import sqlite3

import pytest
from sqlalchemy import inspect

from medialib.db.errors import NotFound, EntityKind, StorageError
from medialib.db.manager import DatabaseManager, _ensure_upgraded
from medialib.db.models import Media, MediaFolder


def test_session_requires_open():
    with pytest.raises(RuntimeError):
        with DatabaseManager().session():
            pass


def test_session_commits(dbm):
    with dbm.session() as s:
        s.add(MediaFolder(name="Kept"))

    with dbm.session() as s:
        assert s.query(MediaFolder).count() == 1


def test_domain_error_rolls_back(dbm):
    with pytest.raises(NotFound):
        with dbm.session() as s:
            s.add(MediaFolder(name="Discarded"))
            s.flush()
            raise NotFound(EntityKind.folder, 1)

    with dbm.session() as s:
        assert s.query(MediaFolder).count() == 0


def test_store_failure_becomes_storage_error(dbm):
    with pytest.raises(StorageError):
        with dbm.session() as s:
            s.add(Media(filename="dangling.png", size=1, folder_id=12345))

    with dbm.session() as s:
        assert s.query(Media).count() == 0


def test_open_with_migrations_builds_schema(tmp_path):
    path = tmp_path / "nested" / "library.db"
    m = DatabaseManager()
    m.open(path, migrate=True)
    try:
        tables = set(inspect(m.engine).get_table_names())
        assert {"media_folder", "media", "image_gallery", "gallery_image", "alembic_version"} <= tables
        with m.session() as s:
            s.add(MediaFolder(name="Root"))
    finally:
        m.dispose()

    # Re-opening a database already at head leaves it (and its rows) alone
    again = DatabaseManager()
    again.open(path, migrate=True)
    try:
        with again.session() as s:
            assert [f.name for f in s.query(MediaFolder)] == ["Root"]
    finally:
        again.dispose()
    assert list(tmp_path.glob("nested/library.db.bak.*")) == []


def test_open_stamps_unversioned_database(tmp_path):
    path = tmp_path / "legacy.db"
    legacy = DatabaseManager()
    legacy.open(path, migrate=False)
    legacy.dispose()

    m = DatabaseManager()
    m.open(path, migrate=True)
    m.dispose()

    with sqlite3.connect(path) as con:
        assert con.execute("SELECT version_num FROM alembic_version").fetchone() is not None


def test_open_accepts_url(tmp_path):
    m = DatabaseManager()
    m.open(f"sqlite:///{(tmp_path / 'by-url.db').as_posix()}", migrate=False)
    try:
        assert m.url.startswith("sqlite:///")
        assert (tmp_path / "by-url.db").exists()
    finally:
        m.dispose()


def test_open_in_memory_with_migrations():
    m = DatabaseManager()
    m.open("sqlite://", migrate=True)
    try:
        with m.session() as s:
            s.add(MediaFolder(name="Root"))
        with m.session() as s:
            assert [f.name for f in s.query(MediaFolder)] == ["Root"]
    finally:
        m.dispose()


def test_unversioned_url_store_is_stamped(tmp_path):
    path = tmp_path / "url-legacy.db"
    legacy = DatabaseManager()
    legacy.open(path, migrate=False)
    with legacy.session() as s:
        s.add(MediaFolder(name="Existing"))
    legacy.dispose()

    # No file path is handed over, as for a server database URL
    _ensure_upgraded(f"sqlite:///{path.as_posix()}", None)

    with sqlite3.connect(path) as con:
        assert con.execute("SELECT version_num FROM alembic_version").fetchone() is not None
        assert con.execute("SELECT name FROM media_folder").fetchall() == [("Existing",)]
