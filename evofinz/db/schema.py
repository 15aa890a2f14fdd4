"""Database schema DDL definitions and initialization utilities.

Tables:
  - clients: people / companies that reimbursable expenses are billed to
  - expenses: individual expense records (tax status, category, client)
  - tags: free-form labels, unique case-insensitively
  - expense_tags: many-to-many link between expenses and tags
  - metadata: key/value store (schema_version etc.)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CLIENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS clients (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT,
    country TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    amount REAL NOT NULL,
    currency TEXT NOT NULL DEFAULT 'CAD',
    vendor TEXT,
    description TEXT,
    category TEXT NOT NULL DEFAULT 'other',
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN (
        'pending','classified','deductible','non_deductible',
        'reimbursable','rejected','under_review','finalized'
    )),
    client_id INTEGER,
    notes TEXT,
    reimbursement_type TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (client_id) REFERENCES clients(id) ON DELETE SET NULL
);
"""

TAGS_DDL = f"""
CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    color TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSE_TAGS_DDL = """
CREATE TABLE IF NOT EXISTS expense_tags (
    expense_id INTEGER NOT NULL,
    tag_id INTEGER NOT NULL,
    PRIMARY KEY (expense_id, tag_id),
    FOREIGN KEY (expense_id) REFERENCES expenses(id) ON DELETE CASCADE,
    FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_DATE_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);"
EXPENSES_STATUS_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_status ON expenses(status, date);"
)
EXPENSES_CLIENT_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_client ON expenses(client_id);"
)
EXPENSE_TAGS_TAG_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expense_tags_tag ON expense_tags(tag_id);"
)

DDL_ORDER: Sequence[str] = (
    CLIENTS_DDL,
    EXPENSES_DDL,
    TAGS_DDL,
    EXPENSE_TAGS_DDL,
    METADATA_DDL,
)

INDEX_DDL: Sequence[str] = (
    EXPENSES_DATE_INDEX_DDL,
    EXPENSES_STATUS_INDEX_DDL,
    EXPENSES_CLIENT_INDEX_DDL,
    EXPENSE_TAGS_TAG_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing newer columns."""
    for ddl in INDEX_DDL:
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Legacy tables may lack columns; migration adds them.
            continue
