from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from domain.repositories import StateStore
from domain.stats import STATS_MODES


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and `.env`)."""

    discord_token: Optional[str] = None
    telegram_token: Optional[str] = None
    store_backend: str = "sqlite"
    db_path: str = "poker.db"
    pg_params: dict = field(default_factory=dict)
    stats_mode: str = "incremental"
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from `environ`.

    When `environ` is omitted, `.env` is loaded first and `os.environ` is
    used.
    """

    if environ is None:
        load_dotenv()
        environ = os.environ

    store_backend = environ.get("STORE_BACKEND", "sqlite").lower()
    if store_backend not in ("sqlite", "postgres"):
        raise RuntimeError(f"STORE_BACKEND must be 'sqlite' or 'postgres', got {store_backend!r}.")

    stats_mode = environ.get("STATS_MODE", "incremental").lower()
    if stats_mode not in STATS_MODES:
        raise RuntimeError(f"STATS_MODE must be one of {', '.join(STATS_MODES)}, got {stats_mode!r}.")

    pg_params = {
        "host": environ.get("PGHOST", "localhost"),
        "port": int(environ.get("PGPORT", "5432")),
        "dbname": environ.get("PGDATABASE", "poker"),
        "user": environ.get("PGUSER", "postgres"),
        "password": environ.get("PGPASSWORD", ""),
    }

    return Settings(
        discord_token=environ.get("DISCORD_TOKEN"),
        telegram_token=environ.get("TELEGRAM_TOKEN"),
        store_backend=store_backend,
        db_path=environ.get("DB_PATH", "poker.db"),
        pg_params=pg_params,
        stats_mode=stats_mode,
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
    )


def create_state_store(settings: Settings) -> StateStore:
    if settings.store_backend == "postgres":
        # psycopg2 is only needed for this backend.
        from infrastructure.db.state_store_postgres import PostgresStateStore

        return PostgresStateStore(settings.pg_params)

    from infrastructure.db.state_store_sqlite import SqliteStateStore

    return SqliteStateStore(settings.db_path)
