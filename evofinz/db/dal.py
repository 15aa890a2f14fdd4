"""Data Access Layer for clients, expenses and tags.

Responsibilities
----------------
- Provide CRUD helpers for clients and expenses, returning plain dicts.
- Keep the expense <-> tag links in sync with the `tags` list on writes.
- Join the client name onto expense rows so exporters never query again.
"""

from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Optional
from datetime import date

from evofinz.models.client import ClientCreate
from evofinz.models.expense import ExpenseIn

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

EXPENSE_COLUMNS = (
    "date",
    "amount",
    "currency",
    "vendor",
    "description",
    "category",
    "status",
    "client_id",
    "notes",
    "reimbursement_type",
)
CLIENT_COLUMNS = ("name", "email", "country", "notes")

_EXPENSE_SELECT = """
    SELECT e.*, c.name AS client_name
    FROM expenses e
    LEFT JOIN clients c ON c.id = e.client_id
"""

logger = logging.getLogger("evofinz.db")


def _db_value(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    # ------------------------------------------------------------------
    # Clients
    def list_clients(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM clients ORDER BY name COLLATE NOCASE, id")
            return [dict(r) for r in cur.fetchall()]

    def get_client(self, client_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM clients WHERE id = ?", (client_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def client_exists(self, client_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,))
            return cur.fetchone() is not None

    def create_client(self, client: ClientCreate) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO clients (name, email, country, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (client.name, client.email, client.country, client.notes),
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_client(self, client_id: int, changes: Dict[str, Any]) -> None:
        fields = {k: v for k, v in changes.items() if k in CLIENT_COLUMNS}
        if not fields:
            return
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE clients SET {assignments}, updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                (*fields.values(), client_id),
            )
            if cur.rowcount == 0:
                raise ValueError("client not found")
            conn.commit()

    def delete_client(self, client_id: int) -> None:
        """Delete a client; its expenses keep existing without a client."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM clients WHERE id = ?", (client_id,))
            if cur.rowcount == 0:
                raise ValueError("client not found")
            conn.commit()

    # ------------------------------------------------------------------
    # Tags
    def _set_expense_tags(
        self, cur: sqlite3.Cursor, expense_id: int, tags: Iterable[str]
    ) -> None:
        cur.execute("DELETE FROM expense_tags WHERE expense_id = ?", (expense_id,))
        for name in tags:
            cur.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (name,))
            cur.execute("SELECT id FROM tags WHERE name = ?", (name,))
            tag_id = int(cur.fetchone()[0])
            cur.execute(
                "INSERT OR IGNORE INTO expense_tags (expense_id, tag_id) VALUES (?, ?)",
                (expense_id, tag_id),
            )

    def _tags_for(
        self, cur: sqlite3.Cursor, expense_ids: List[int]
    ) -> Dict[int, List[str]]:
        if not expense_ids:
            return {}
        placeholders = ", ".join("?" for _ in expense_ids)
        cur.execute(
            f"""
            SELECT et.expense_id, t.name
            FROM expense_tags et
            JOIN tags t ON t.id = et.tag_id
            WHERE et.expense_id IN ({placeholders})
            ORDER BY t.name COLLATE NOCASE
            """,
            expense_ids,
        )
        tags: Dict[int, List[str]] = {}
        for row in cur.fetchall():
            tags.setdefault(int(row[0]), []).append(row[1])
        return tags

    def _with_tags(
        self, cur: sqlite3.Cursor, rows: List[sqlite3.Row]
    ) -> List[Dict[str, Any]]:
        items = [dict(r) for r in rows]
        tags = self._tags_for(cur, [int(r["id"]) for r in items])
        for item in items:
            item["tags"] = tags.get(int(item["id"]), [])
        return items

    # ------------------------------------------------------------------
    # Expenses
    def get_expense(self, expense_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(f"{_EXPENSE_SELECT} WHERE e.id = ?", (expense_id,))
            row = cur.fetchone()
            if not row:
                return None
            return self._with_tags(cur, [row])[0]

    def list_expenses(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        year: Optional[int] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        client_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        if start_date:
            clauses.append("e.date >= ?")
            params.append(start_date.isoformat())
        if end_date:
            clauses.append("e.date <= ?")
            params.append(end_date.isoformat())
        if year is not None:
            clauses.append("substr(e.date, 1, 4) = ?")
            params.append(f"{year:04d}")
        if status:
            clauses.append("e.status = ?")
            params.append(status)
        if category:
            clauses.append("e.category = ?")
            params.append(category)
        if client_id is not None:
            clauses.append("e.client_id = ?")
            params.append(client_id)
        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        sql = f"{_EXPENSE_SELECT}{where} ORDER BY e.date DESC, e.id DESC"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return self._with_tags(cur, cur.fetchall())

    def expense_years(self) -> List[int]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT DISTINCT CAST(substr(date, 1, 4) AS INTEGER) AS year "
                "FROM expenses ORDER BY year DESC"
            )
            return [int(r["year"]) for r in cur.fetchall()]

    def insert_expense(self, expense: ExpenseIn) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO expenses (
                    date, amount, currency, vendor, description, category, status,
                    client_id, notes, reimbursement_type, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (
                    expense.date.isoformat(),
                    expense.amount,
                    expense.currency,
                    expense.vendor,
                    expense.description,
                    expense.category,
                    expense.status,
                    expense.client_id,
                    expense.notes,
                    expense.reimbursement_type,
                ),
            )
            expense_id = int(cur.lastrowid)
            self._set_expense_tags(cur, expense_id, expense.tags)
            conn.commit()
            logger.debug("expense inserted", extra={"expense_id": expense_id})
            return expense_id

    def update_expense(self, expense_id: int, changes: Dict[str, Any]) -> None:
        """Apply a partial update; `tags` (when present) replaces the link set."""
        fields = {k: _db_value(v) for k, v in changes.items() if k in EXPENSE_COLUMNS}
        with self._connect() as conn:
            cur = conn.cursor()
            if fields:
                assignments = ", ".join(f"{name} = ?" for name in fields)
                cur.execute(
                    f"UPDATE expenses SET {assignments}, updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                    (*fields.values(), expense_id),
                )
            else:
                cur.execute(
                    f"UPDATE expenses SET updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                    (expense_id,),
                )
            if cur.rowcount == 0:
                raise ValueError("expense not found")
            if changes.get("tags") is not None:
                self._set_expense_tags(cur, expense_id, changes["tags"])
            conn.commit()

    def delete_expense(self, expense_id: int) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            if cur.rowcount == 0:
                raise ValueError("expense not found")
            conn.commit()


__all__ = ["Database"]
