"""Seeding helpers for the default tag set.

`seed_tags` ensures the baseline tags exist. Existing rows (including ones
the user recoloured) are left untouched so this can be safely re-run.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Mapping

from .schema import init_db

DEFAULT_TAGS = {
    "business": "#4F46E5",
    "personal": "#10B981",
    "client-billable": "#F59E0B",
    "receipt-missing": "#EF4444",
    "recurring": "#8B5CF6",
}


def seed_tags(db_path: Path, tags: Mapping[str, str] | None = None) -> int:
    """Insert missing default tags and return how many were created."""
    init_db(db_path)  # ensure tables exist
    created = 0
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        for name, color in (tags or DEFAULT_TAGS).items():
            cur.execute(
                "INSERT OR IGNORE INTO tags (name, color) VALUES (?, ?)",
                (name, color),
            )
            created += cur.rowcount
        conn.commit()
    return created
