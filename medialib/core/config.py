from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

APP = "medialib"

DEFAULT_DB = Path.home() / ".medialib" / "library.db"
DEFAULT_CONFIG = Path.home() / ".medialib" / "config.json"

# Environment overrides, applied after the config file
ENV_DATABASE_URL = "MEDIALIB_DATABASE_URL"
ENV_LOG_LEVEL = "MEDIALIB_LOG_LEVEL"


class Config(BaseModel):
    database_url: str = Field(default_factory=lambda: str(DEFAULT_DB))
    log_level: str = "INFO"
    migrate_on_open: bool = True
    echo_sql: bool = False


def _read_json(path: Path, default: dict) -> dict:
    if not path.exists():
        return default
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return default
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return default
    return data if isinstance(data, dict) else default


def _write_json(path: Path, obj: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


def load_config(path: Optional[Path] = None) -> Config:
    data = _read_json(path or DEFAULT_CONFIG, {})

    # --- Environment ---
    if os.getenv(ENV_DATABASE_URL):
        data["database_url"] = os.environ[ENV_DATABASE_URL]
    if os.getenv(ENV_LOG_LEVEL):
        data["log_level"] = os.environ[ENV_LOG_LEVEL]

    return Config.model_validate(data)


def save_config(cfg: Config, path: Optional[Path] = None) -> None:
    _write_json(path or DEFAULT_CONFIG, cfg.model_dump())
