import datetime as dt
import itertools
import os
import tempfile

# evofinz.main builds a module-level app on import; keep its database out of
# the working tree.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="evofinz-tests-"))

import pytest
from fastapi.testclient import TestClient

from evofinz.core.config import Settings
from evofinz.db.dal import Database
from evofinz.main import create_app
from evofinz.models.expense import ExpenseOut
from evofinz.services.exports import ExportOptions

FIXED_NOW = dt.datetime(2025, 6, 1, 9, 30)


@pytest.fixture
def settings(tmp_path):
    s = Settings(data_dir=tmp_path, db_filename="test.sqlite3", debug=False)
    s.init_post_load()
    return s


@pytest.fixture
def client(settings):
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client, settings):
    """DAL bound to the same database the client fixture migrated."""
    return Database(settings.db_path)


@pytest.fixture
def make_expense():
    ids = itertools.count(1)

    def _make(**overrides) -> ExpenseOut:
        data = dict(
            id=next(ids),
            date=dt.date(2025, 3, 15),
            amount=100.0,
            vendor="Staples",
            description="Supplies",
            category="other",
            currency="CAD",
            status="deductible",
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )
        data.update(overrides)
        return ExpenseOut(**data)

    return _make


@pytest.fixture
def sample_expenses(make_expense):
    return [
        make_expense(category="meals", amount=100.0, vendor="Tim Hortons"),
        make_expense(category="travel", amount=200.0, date=dt.date(2025, 4, 2)),
        make_expense(category="software", amount=50.0, vendor="GitHub"),
        make_expense(
            category="travel",
            amount=80.0,
            status="reimbursable",
            client_id=7,
            client_name="Acme Corp",
        ),
        make_expense(category="meals", amount=40.0, status="non_deductible"),
        make_expense(category="other", amount=10.0, status="pending"),
        make_expense(category="travel", amount=300.0, date=dt.date(2024, 11, 20)),
    ]


@pytest.fixture
def options():
    def _options(**overrides) -> ExportOptions:
        overrides.setdefault("generated_at", FIXED_NOW)
        return ExportOptions(**overrides)

    return _options
