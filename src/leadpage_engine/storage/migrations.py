"""Versioned SQL migrations for the page database."""

import logging
import sqlite3
from pathlib import Path
from typing import List, Set

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def _ensure_version_table(conn: sqlite3.Connection) -> Set[str]:
    """Create schema_migrations if needed and return the recorded versions."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()
    return {row[0] for row in conn.execute("SELECT version FROM schema_migrations")}


def _statements(migration_file: Path) -> List[str]:
    # Migration files hold plain DDL: no triggers, no semicolons inside literals
    body = "\n".join(
        line for line in migration_file.read_text().splitlines()
        if not line.strip().startswith("--")
    )
    return [s.strip() for s in body.split(";") if s.strip()]


def pending_migrations(conn: sqlite3.Connection) -> List[Path]:
    applied = _ensure_version_table(conn)
    return [f for f in sorted(MIGRATIONS_DIR.glob("*.sql")) if f.stem not in applied]


def run_migrations(db_path: str) -> int:
    """Apply pending migrations in file-name order; return how many ran."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        pending = pending_migrations(conn)
        for migration_file in pending:
            logger.info("Applying migration %s to %s", migration_file.stem, db_path)
            for statement in _statements(migration_file):
                conn.execute(statement)
            conn.execute(
                "INSERT INTO schema_migrations (version) VALUES (?)",
                (migration_file.stem,),
            )
            conn.commit()
        return len(pending)
    finally:
        conn.close()
