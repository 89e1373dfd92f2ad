import io
import json
import logging
import sqlite3
import zipfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping

import config
from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".passaporte"
DB_PATH = CONFIG_DIR / "passaporte.db"
BACKUP_KEEP = 7


def init_db():
    """Initialize the database by creating tables, indexes and the achievement catalog."""
    from utils.achievements import SEED_ACHIEVEMENTS

    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(INDEXES_SQL)
        ensure_child_level_category(conn)
        ensure_book_recommended(conn)
        ensure_reading_session_mood(conn)
        ensure_family_settings(conn)
        seed_achievements(conn, SEED_ACHIEVEMENTS)
        ensure_schema_version(conn)
        conn.commit()
    run_daily_backup()


def _table_columns(conn: sqlite3.Connection, table: str) -> set:
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cursor.fetchall()}


def ensure_child_level_category(conn: sqlite3.Connection) -> None:
    """Ensure children table has level_category column for existing installs."""
    if "level_category" not in _table_columns(conn, "children"):
        conn.execute(
            "ALTER TABLE children ADD COLUMN level_category TEXT NOT NULL DEFAULT 'EXPLORERS'"
        )


def ensure_book_recommended(conn: sqlite3.Connection) -> None:
    """Ensure books table has the recommended flag."""
    if "recommended" not in _table_columns(conn, "books"):
        conn.execute("ALTER TABLE books ADD COLUMN recommended INTEGER NOT NULL DEFAULT 0")


def ensure_reading_session_mood(conn: sqlite3.Connection) -> None:
    """Ensure reading_sessions table has mood column."""
    if "mood" not in _table_columns(conn, "reading_sessions"):
        conn.execute("ALTER TABLE reading_sessions ADD COLUMN mood INTEGER")


def ensure_family_settings(conn: sqlite3.Connection) -> None:
    """Ensure every family has a settings row."""
    conn.execute(
        """
        INSERT OR IGNORE INTO family_settings (family_id)
        SELECT id FROM families
        """
    )


def seed_achievements(conn: sqlite3.Connection, achievements: Iterable[Mapping]) -> None:
    """Insert or refresh catalog entries, keyed by code."""
    for achievement in achievements:
        conn.execute(
            """
            INSERT INTO achievements (code, name, description, icon, category, requirements)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(code) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                icon = excluded.icon,
                category = excluded.category,
                requirements = excluded.requirements
            """,
            (
                achievement["code"],
                achievement["name"],
                achievement["description"],
                achievement["icon"],
                achievement["category"],
                json.dumps(achievement["requirements"]),
            ),
        )


BACKUP_TABLES = ("families", "children", "books", "reading_sessions", "child_achievements")


def read_user_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("PRAGMA user_version").fetchone()
    return int(row[0]) if row else 0


def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Stamp PRAGMA user_version once the additive column checks have run."""
    found = read_user_version(conn)
    if found != SCHEMA_VERSION:
        logger.info("Database schema %s -> %s", found, SCHEMA_VERSION)
        conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")


def database_snapshot() -> dict:
    """Schema version and per-table row counts of the on-disk database."""
    if not DB_PATH.exists():
        return {"schema_version": SCHEMA_VERSION, "rows": {}}
    with get_conn() as conn:
        rows = {
            table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            for table in BACKUP_TABLES
        }
        return {"schema_version": read_user_version(conn), "rows": rows}


def _write_backup(target) -> None:
    for required in (DB_PATH, config.CONFIG_PATH):
        if not required.exists():
            raise FileNotFoundError(f"{required.name} not found")
    manifest = {"created_at": datetime.now(timezone.utc).isoformat(), **database_snapshot()}
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("manifest.json", json.dumps(manifest, indent=2))
        archive.write(DB_PATH, arcname=DB_PATH.name)
        archive.write(config.CONFIG_PATH, arcname=config.CONFIG_PATH.name)


def backup_archive_bytes() -> bytes:
    """Zip of the database, config and a manifest, built in memory."""
    buffer = io.BytesIO()
    _write_backup(buffer)
    return buffer.getvalue()


def backup_dir() -> Path:
    return CONFIG_DIR / "backups"


def run_daily_backup() -> None:
    """Keep at most one backup per day under backups/, pruning to BACKUP_KEEP."""
    if not DB_PATH.exists() or not config.CONFIG_PATH.exists():
        return
    target_dir = backup_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc)
    if any(target_dir.glob(f"passaporte-{stamp:%Y%m%d}-*.zip")):
        return
    backup_path = target_dir / f"passaporte-{stamp:%Y%m%d-%H%M%S}.zip"
    _write_backup(backup_path)
    logger.info("Wrote daily backup %s", backup_path.name)
    archives = sorted(target_dir.glob("passaporte-*.zip"), reverse=True)
    for stale in archives[BACKUP_KEEP:]:
        stale.unlink(missing_ok=True)


@contextmanager
def get_conn():
    """Open the database with Row access and foreign keys enforced."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


def get_db():
    """One connection per request."""
    with get_conn() as conn:
        yield conn
