from __future__ import annotations

import logging
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path
from contextlib import contextmanager
from typing import Iterator, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from .errors import StorageError
from .models import Base

log = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _sqlite_url(path: Path) -> str:
    p = path.resolve()
    return f"sqlite:///{p.as_posix()}"


def _resolve_target(target: Path | str) -> tuple[str, Optional[Path]]:
    """Turn a file path or database URL into (url, sqlite file path or None)."""
    if isinstance(target, Path) or "://" not in target:
        path = Path(target)
        return _sqlite_url(path), path
    url = make_url(target)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        return target, Path(url.database)
    return target, None


def _is_memory_sqlite(url: str) -> bool:
    u = make_url(url)
    return u.get_backend_name() == "sqlite" and u.database in (None, "", ":memory:")


def _apply_sqlite_pragmas(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, conn_rec):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys = ON;")
        cur.execute("PRAGMA journal_mode = WAL;")
        cur.execute("PRAGMA synchronous = NORMAL;")
        cur.execute("PRAGMA temp_store = MEMORY;")
        cur.close()


def _alembic_cfg(db_url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def _is_empty(db_path: Path) -> bool:
    with sqlite3.connect(db_path) as con:
        cur = con.execute(
            "SELECT count(*) FROM sqlite_master "
            "WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        )
        return cur.fetchone()[0] == 0


def _backup_db_file(path: Path) -> Path | None:
    """Create a timestamped backup beside the DB. Returns backup path or None."""
    if not path.exists():
        return None
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    backup_path = path.with_suffix(path.suffix + f".bak.{ts}")
    shutil.copy2(path, backup_path)
    log.info("Backed up %s to %s before migrating", path, backup_path)
    return backup_path


def _ensure_upgraded(db_url: str, db_path: Optional[Path], *, do_backup: bool = True) -> None:
    """Ensure the store at db_url is migrated to Alembic 'head'.

    - SQLite files that are missing or empty just get the schema built.
    - Unversioned stores that already hold tables are assumed to match head and are
      stamped; unversioned stores without tables are upgraded from scratch.
    - A backup of the SQLite file is taken only when a real upgrade will run.
    """
    cfg = _alembic_cfg(db_url)
    script = ScriptDirectory.from_config(cfg)

    if db_path is not None and (not db_path.exists() or _is_empty(db_path)):
        command.upgrade(cfg, "head")
        return

    engine = create_engine(db_url)
    try:
        with engine.connect() as conn:
            current_rev = MigrationContext.configure(conn).get_current_revision()
            has_tables = bool(set(inspect(conn).get_table_names()) - {"alembic_version"})
    finally:
        engine.dispose()

    heads = set(script.get_heads())

    if current_rev is None and has_tables:
        log.info("Stamping unversioned database at head")
        command.stamp(cfg, "head")
        return

    if current_rev in heads:
        return

    if do_backup and db_path is not None:
        _backup_db_file(db_path)
    log.info("Upgrading database from revision %s to head", current_rev)
    command.upgrade(cfg, "head")


class DatabaseManager:
    """
    Holds the SQLAlchemy engine and session factory for the media library.
    Call .open(target) once at startup; target is a SQLite file path or a database URL.
    """

    def __init__(self) -> None:
        self._engine: Optional[Engine] = None
        self._Session: Optional[sessionmaker[Session]] = None
        self._url: Optional[str] = None

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    def open(self, target: Path | str, *, migrate: bool = True, echo: bool = False) -> None:
        url, db_path = _resolve_target(target)
        if db_path is not None:
            _ensure_parent_dir(db_path)

        # A private in-memory database cannot be shared with Alembic's own engine.
        in_memory = _is_memory_sqlite(url)
        if migrate and not in_memory:
            _ensure_upgraded(url, db_path, do_backup=True)

        is_sqlite = make_url(url).get_backend_name() == "sqlite"
        if is_sqlite:
            engine = create_engine(url, echo=echo)
            _apply_sqlite_pragmas(engine)
        else:
            engine = create_engine(url, echo=echo, isolation_level="READ COMMITTED")

        if not migrate or in_memory:
            Base.metadata.create_all(engine)

        # Swap in atomically
        self._engine = engine
        self._Session = sessionmaker(bind=engine, expire_on_commit=False)
        self._url = url
        log.info("Opened media library database %s", engine.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._Session = None
        self._url = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context-managed session; one unit of work, committed or fully rolled back."""
        if self._Session is None:
            raise RuntimeError("Database not opened. Call DatabaseManager.open() first.")
        s = self._Session()
        try:
            yield s
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            log.exception("Storage failure, transaction rolled back")
            raise StorageError(str(e)) from e
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()
