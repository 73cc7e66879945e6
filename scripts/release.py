"""
Release phase for the forum: bring the database schema to head.

Refuses to migrate a SQLite database when ENV is production, and refuses to
fall back to the development default when DATABASE_URL is unset.

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def alembic_config(database_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    # ConfigParser interpolation: escape % in passwords
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def run_release() -> None:
    from dotenv import load_dotenv

    from app.forum.config import load_settings

    load_dotenv()
    if not (os.environ.get("DATABASE_URL") or "").strip():
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    settings = load_settings()
    is_production = settings.env in ("prod", "production")
    if is_production and settings.database_url.startswith("sqlite"):
        raise RuntimeError("Refusing to migrate a sqlite DATABASE_URL in production. Use Postgres.")

    print(f"=== forum release (ENV={settings.env}) ===", flush=True)

    from alembic import command

    command.upgrade(alembic_config(settings.database_url), "head")
    print("Forum schema is at head.", flush=True)


if __name__ == "__main__":
    run_release()
