import sqlite3
import logging
from datetime import datetime, timezone
from typing import Optional

from auth import StorageUnavailableError

log = logging.getLogger(__name__)


class SQLiteCredentialStorage:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def _get_current_version(self, conn) -> int:
        row = conn.execute("SELECT version FROM schema_info").fetchone()
        return row[0] if row else 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1)."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS credentials (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def init_db(self):
        MIGRATIONS = [self._migrate_v1]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)
            current_version = self._get_current_version(conn)
            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                    log.info(f"Credential DB migrated to v{target_version}")
                except Exception as e:
                    # Leaving the `with` block on error rolls back every step of this run.
                    raise RuntimeError(f"Credential DB migration to v{target_version} failed: {e}") from e

            conn.commit()
        self._initialized = True

    def _ensure_db(self):
        if not self._initialized:
            self.init_db()

    def get(self, key: str) -> Optional[str]:
        try:
            self._ensure_db()
            with self._conn() as conn:
                row = conn.execute("SELECT value FROM credentials WHERE key = ?", (key,)).fetchone()
        except (sqlite3.Error, RuntimeError) as e:
            raise StorageUnavailableError(f"Credential storage unavailable: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self._ensure_db()
            with self._conn() as conn:
                conn.execute("""
                    INSERT INTO credentials (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """, (key, value, datetime.now(timezone.utc).isoformat()))
                conn.commit()
        except (sqlite3.Error, RuntimeError) as e:
            raise StorageUnavailableError(f"Credential storage unavailable: {e}") from e

    def clear(self, key: str) -> None:
        try:
            self._ensure_db()
            with self._conn() as conn:
                conn.execute("DELETE FROM credentials WHERE key = ?", (key,))
                conn.commit()
        except (sqlite3.Error, RuntimeError) as e:
            raise StorageUnavailableError(f"Credential storage unavailable: {e}") from e
