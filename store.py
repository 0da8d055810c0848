"""
SQLite persistence layer — last searched city, search log.

Zero external dependencies. Swap this for Redis/a browser cookie/etc.
by implementing the same interface.
"""

import sqlite3
from typing import Optional

import config
from models import SearchLogEntry

LAST_QUERY_KEY = "weather_last_city"


def _init_db(conn: sqlite3.Connection):
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT
        );

        CREATE TABLE IF NOT EXISTS searches (
            log_id TEXT PRIMARY KEY,
            query TEXT,
            label TEXT DEFAULT '',
            outcome TEXT,
            timestamp TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_searches_ts ON searches(timestamp DESC);
    """)


# Module-level connection (single session)
_conn: Optional[sqlite3.Connection] = None


def get_conn() -> sqlite3.Connection:
    global _conn
    if _conn is None:
        _conn = sqlite3.connect(config.DB_PATH, check_same_thread=False)
        _conn.row_factory = sqlite3.Row
        _init_db(_conn)
    return _conn


def close():
    global _conn
    if _conn is not None:
        _conn.close()
        _conn = None


# ── Last query ──────────────────────────────────────────────────

def set_last_query(query: str):
    conn = get_conn()
    conn.execute(
        "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
        (LAST_QUERY_KEY, query),
    )
    conn.commit()


def get_last_query() -> Optional[str]:
    conn = get_conn()
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (LAST_QUERY_KEY,)).fetchone()
    return row["value"] if row else None


# ── Search log ──────────────────────────────────────────────────

def log_search(entry: SearchLogEntry):
    conn = get_conn()
    conn.execute("""
        INSERT INTO searches (log_id, query, label, outcome, timestamp)
        VALUES (:log_id, :query, :label, :outcome, :timestamp)
    """, entry.to_dict())
    conn.commit()


def get_searches(limit: int = 20) -> list[SearchLogEntry]:
    conn = get_conn()
    rows = conn.execute(
        "SELECT * FROM searches ORDER BY timestamp DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [SearchLogEntry.from_row(r) for r in rows]
