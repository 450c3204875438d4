# src/dotcat_widget/snapshot/snapshot_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from .snapshot_models import TaskSnapshot

logger = logging.getLogger(__name__)


class StoreUnavailable(RuntimeError):
    """The shared snapshot store could not be opened, read or written."""


class SnapshotStore:
    """
    SQLite key/value store shared by the app (writer) and the widgets (readers).

    One row per channel key, replaced wholesale on every put.

    Semantics:
    - a put is a single upsert statement, so readers never see a half-written payload
    - a put that is not strictly newer than the stored snapshot is ignored
    - any sqlite/filesystem failure is raised as StoreUnavailable

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "widget.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"cannot create store directory for {self._db_path}") from exc
        self._ensure_schema()
        logger.info("SnapshotStore ready db=%s", self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot open snapshot store {self._db_path}") from exc
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    generated_at TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot initialise snapshot store {self._db_path}") from exc
        finally:
            conn.close()

    # ---- public API ----

    def put(self, key: str, snapshot: TaskSnapshot) -> bool:
        """
        Persist snapshot under key.

        Returns True if the write landed, False if the stored snapshot is
        already as fresh or fresher (stale writes never overwrite).
        """
        if not key:
            raise ValueError("key is required")

        payload = snapshot.to_json()
        generated_at = snapshot.generated_at_str

        conn = self._get_conn()
        try:
            # generated_at strings share one fixed-width format, so text order is time order.
            cur = conn.execute(
                """
                INSERT INTO snapshots(key, payload, generated_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    payload = excluded.payload,
                    generated_at = excluded.generated_at,
                    updated_at = excluded.updated_at
                WHERE excluded.generated_at > snapshots.generated_at
                """,
                (key, payload, generated_at, time.time()),
            )
            conn.commit()
            written = cur.rowcount == 1
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"put failed key={key}") from exc
        finally:
            conn.close()

        if written:
            logger.debug(
                "Snapshot stored key=%s generated_at=%s tasks=%d pending=%d",
                key,
                generated_at,
                len(snapshot.tasks),
                snapshot.pending_count,
            )
        else:
            logger.warning("Stale snapshot ignored key=%s generated_at=%s", key, generated_at)
        return written

    def get_raw(self, key: str) -> str | None:
        """Return the stored payload for key without decoding it."""
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT payload FROM snapshots WHERE key = ?", (key,))
            row = cur.fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"get failed key={key}") from exc
        finally:
            conn.close()
        return str(row["payload"]) if row else None

    def get(self, key: str) -> TaskSnapshot | None:
        """
        Return the latest snapshot for key, or None if nothing was stored.

        Raises MalformedSnapshot if the stored payload does not decode.
        """
        raw = self.get_raw(key)
        if raw is None:
            return None
        return TaskSnapshot.from_json(raw)

    def clear(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"clear failed key={key}") from exc
        finally:
            conn.close()
        logger.info("Snapshot cleared key=%s", key)

    def keys(self) -> list[str]:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT key FROM snapshots ORDER BY key ASC")
            return [str(r["key"]) for r in cur.fetchall()]
        except sqlite3.Error as exc:
            raise StoreUnavailable("keys failed") from exc
        finally:
            conn.close()
