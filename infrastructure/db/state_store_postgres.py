from __future__ import annotations

from typing import Optional

import psycopg2

from domain.repositories import StateStore


class PostgresStateStore(StateStore):
    """
    Postgres-backed implementation of `StateStore`.

    Uses the same single `app_state` table layout as `SqliteStateStore`, so
    switching backends only needs a copy of two rows.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(**self._db_params)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS app_state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
                conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT value FROM app_state WHERE key = %s", (key,))
                row = cur.fetchone()
                if not row:
                    return None
                return str(row[0])

    def put(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO app_state (key, value)
                    VALUES (%s, %s)
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value
                    """,
                    (key, value),
                )
                conn.commit()
