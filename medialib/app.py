from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Optional, Sequence

from .core.config import DEFAULT_CONFIG, load_config, save_config
from .core.logs import configure_logging
from .db.errors import StorageError
from .db.manager import DatabaseManager
from .db.services import FolderService, GalleryService
from .rpc import MediaRpc

log = logging.getLogger(__name__)


def build_rpc(db: DatabaseManager) -> MediaRpc:
    return MediaRpc(FolderService(db), GalleryService(db))


def serve(rpc: MediaRpc, stdin: IO[str], stdout: IO[str]) -> int:
    """Answer one JSON request per input line: {"method": ..., "params": {...}, "id": ...}."""
    handled = 0
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            req = json.loads(line)
        except json.JSONDecodeError as e:
            resp = {"ok": False, "error": {"kind": "invalid_request", "message": f"bad json: {e.msg}"}}
        else:
            if not isinstance(req, dict) or not isinstance(req.get("method"), str):
                resp = {"ok": False, "error": {"kind": "invalid_request", "message": "missing method"}}
            else:
                try:
                    resp = rpc.call(req["method"], req.get("params"))
                except StorageError as e:
                    log.error("Storage failure in %s: %s", req["method"], e)
                    resp = {"ok": False, "error": {"kind": "storage_error", "message": str(e)}}
                if "id" in req:
                    resp["id"] = req["id"]
        stdout.write(json.dumps(resp) + "\n")
        stdout.flush()
        handled += 1
    return handled


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="medialib", description="Media library RPC over stdin/stdout")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="JSON config file")
    p.add_argument("--db", help="SQLite file or database URL (overrides config)")
    p.add_argument("--no-migrate", action="store_true", help="build schema without Alembic")
    p.add_argument("--save-config", action="store_true", help="remember --db in the config file")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    cfg = load_config(args.config)
    if args.db:
        cfg.database_url = args.db
    if args.no_migrate:
        cfg.migrate_on_open = False
    configure_logging(cfg.log_level)

    db = DatabaseManager()
    db.open(cfg.database_url, migrate=cfg.migrate_on_open, echo=cfg.echo_sql)
    if args.save_config:
        save_config(cfg, args.config)

    try:
        n = serve(build_rpc(db), sys.stdin, sys.stdout)
        log.info("Handled %d request(s)", n)
    finally:
        db.dispose()


if __name__ == "__main__":
    main()
