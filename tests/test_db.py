import datetime as dt
import sqlite3

from evofinz.db.dal import Database
from evofinz.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations
from evofinz.db.seed import DEFAULT_TAGS, seed_tags
from evofinz.models.client import ClientCreate
from evofinz.models.expense import ExpenseIn

LEGACY_V1_EXPENSES = """
CREATE TABLE expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL,
    amount REAL NOT NULL,
    currency TEXT NOT NULL DEFAULT 'CAD',
    vendor TEXT,
    description TEXT,
    category TEXT NOT NULL DEFAULT 'other',
    status TEXT NOT NULL DEFAULT 'pending',
    client_id INTEGER,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT '2024-01-01T00:00:00.000Z',
    updated_at TEXT NOT NULL DEFAULT '2024-01-01T00:00:00.000Z'
);
"""


def test_migrations_are_idempotent(tmp_path):
    path = tmp_path / "fresh.sqlite3"
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION


def test_v1_database_gains_reimbursement_type(tmp_path):
    path = tmp_path / "legacy.sqlite3"
    conn = sqlite3.connect(path)
    conn.execute(LEGACY_V1_EXPENSES)
    conn.execute(
        "INSERT INTO expenses (date, amount, category) VALUES ('2024-05-01', 12.5, ' Meals ')"
    )
    conn.commit()
    conn.close()

    assert apply_migrations(path) == 2

    conn = sqlite3.connect(path)
    columns = {row[1] for row in conn.execute("PRAGMA table_info(expenses)")}
    category = conn.execute("SELECT category FROM expenses").fetchone()[0]
    conn.close()
    assert "reimbursement_type" in columns
    assert category == "meals"


def test_seed_tags_only_inserts_missing(tmp_path):
    path = tmp_path / "seed.sqlite3"
    apply_migrations(path)
    assert seed_tags(path) == len(DEFAULT_TAGS)
    assert seed_tags(path) == 0


class TestDatabase:
    def _db(self, tmp_path) -> Database:
        path = tmp_path / "dal.sqlite3"
        apply_migrations(path)
        return Database(path)

    def test_expense_roundtrip_with_client_and_tags(self, tmp_path):
        db = self._db(tmp_path)
        client_id = db.create_client(ClientCreate(name="Acme Corp", country="ca"))
        expense_id = db.insert_expense(
            ExpenseIn(
                date=dt.date(2025, 2, 3),
                amount=42.0,
                vendor="VIA Rail",
                category="Travel",
                status="reimbursable",
                client_id=client_id,
                tags=["client-billable", "Client-Billable", "q1"],
            )
        )
        row = db.get_expense(expense_id)
        assert row["client_name"] == "Acme Corp"
        assert row["category"] == "travel"
        assert row["tags"] == ["client-billable", "q1"]
        assert db.get_client(client_id)["country"] == "CA"

    def test_list_filters(self, tmp_path):
        db = self._db(tmp_path)
        for day, status in (
            (dt.date(2024, 12, 31), "deductible"),
            (dt.date(2025, 1, 1), "deductible"),
            (dt.date(2025, 6, 1), "pending"),
        ):
            db.insert_expense(ExpenseIn(date=day, amount=10, status=status))
        assert len(db.list_expenses()) == 3
        assert len(db.list_expenses(year=2025)) == 2
        assert len(db.list_expenses(status="pending")) == 1
        assert len(db.list_expenses(start_date=dt.date(2025, 1, 1))) == 2
        assert db.list_expenses()[0]["date"] == "2025-06-01"
        assert db.expense_years() == [2025, 2024]

    def test_update_replaces_tags_and_fields(self, tmp_path):
        db = self._db(tmp_path)
        expense_id = db.insert_expense(
            ExpenseIn(date=dt.date(2025, 1, 5), amount=10, tags=["a", "b"])
        )
        db.update_expense(expense_id, {"amount": 25.0, "tags": ["c"]})
        row = db.get_expense(expense_id)
        assert row["amount"] == 25.0
        assert row["tags"] == ["c"]

    def test_deleting_client_keeps_expenses(self, tmp_path):
        db = self._db(tmp_path)
        client_id = db.create_client(ClientCreate(name="Gone Inc"))
        expense_id = db.insert_expense(
            ExpenseIn(date=dt.date(2025, 1, 5), amount=10, client_id=client_id)
        )
        db.delete_client(client_id)
        row = db.get_expense(expense_id)
        assert row["client_id"] is None
        assert row["client_name"] is None
