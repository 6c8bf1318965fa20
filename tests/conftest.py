import pytest
from sqlalchemy import event, Engine, create_engine
from sqlalchemy.orm import sessionmaker

from medialib.db.manager import DatabaseManager
from medialib.db.models import Base, MediaFolder, Media, ImageGallery, GalleryImage
from medialib.db.services import FolderService, GalleryService


# --- SQLite tuning for tests --------------------------------------------------
@event.listens_for(Engine, "connect")
def _sqlite_enable_fk(dbapi_connection, _):
    # Ensure ON DELETE CASCADE and general FK correctness in SQLite
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


# --- Model-level fixtures -----------------------------------------------------
@pytest.fixture()
def session():
    """Fresh session per test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)
    with session() as s:
        yield s
        s.rollback()  # clean even if the test forgot


@pytest.fixture()
def make_folder(session):
    def _mk(name: str, parent: MediaFolder | None = None) -> MediaFolder:
        f = MediaFolder(name=name, parent=parent)
        session.add(f)
        session.flush()
        return f

    return _mk


@pytest.fixture()
def make_media(session):
    def _mk(filename: str, folder: MediaFolder | None = None) -> Media:
        m = Media(filename=filename, mime_type="image/png", size=1024, folder=folder)
        session.add(m)
        session.flush()
        return m

    return _mk


@pytest.fixture()
def make_gallery(session):
    def _mk(title: str, slug: str | None = None) -> ImageGallery:
        g = ImageGallery(title=title, slug=slug or title.lower().replace(" ", "-"))
        session.add(g)
        session.flush()
        return g

    return _mk


@pytest.fixture()
def make_gallery_image(session):
    def _mk(gallery: ImageGallery, media: Media, sort_order: int = 0,
            caption: str | None = None) -> GalleryImage:
        gi = GalleryImage(gallery=gallery, media=media, sort_order=sort_order, caption=caption)
        session.add(gi)
        session.flush()
        return gi

    return _mk


# --- Service-level fixtures ---------------------------------------------------
@pytest.fixture()
def dbm(tmp_path):
    """A file-backed DatabaseManager with the schema built directly from the models."""
    m = DatabaseManager()
    m.open(tmp_path / "library.db", migrate=False)
    yield m
    m.dispose()


@pytest.fixture()
def folders(dbm):
    return FolderService(dbm)


@pytest.fixture()
def galleries(dbm):
    return GalleryService(dbm)


@pytest.fixture()
def new_media(dbm):
    """Insert a media row the way the upload subsystem would; returns its id."""
    def _mk(filename: str = "photo.png", folder_id: int | None = None) -> int:
        with dbm.session() as s:
            m = Media(filename=filename, mime_type="image/png", size=2048, folder_id=folder_id)
            s.add(m)
            s.flush()
            return m.id

    return _mk


@pytest.fixture()
def new_gallery(dbm):
    def _mk(title: str = "Fieldwork") -> int:
        with dbm.session() as s:
            n = s.query(ImageGallery).count()
            g = ImageGallery(title=title, slug=f"{title.lower()}-{n}")
            s.add(g)
            s.flush()
            return g.id

    return _mk


@pytest.fixture()
def media_row(dbm):
    """Read a media row back in its own session."""
    def _get(media_id: int) -> Media | None:
        with dbm.session() as s:
            return s.get(Media, media_id)

    return _get
