import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from evofinz.core.config import Settings
from evofinz.main import create_app


def _create_expense(client, **overrides):
    payload = {
        "date": "2025-03-15",
        "amount": 100.0,
        "vendor": "Tim Hortons",
        "category": "meals",
        "status": "deductible",
    }
    payload.update(overrides)
    resp = client.post("/expenses/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_unknown_route_returns_not_found_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


class TestClients:
    def test_crud(self, client):
        created = client.post("/clients/", json={"name": "  Acme Corp ", "country": "ca"})
        assert created.status_code == 201
        body = created.json()
        assert body["name"] == "Acme Corp"
        assert body["country"] == "CA"

        patched = client.patch(f"/clients/{body['id']}", json={"email": "ap@acme.test"})
        assert patched.status_code == 200
        assert patched.json()["email"] == "ap@acme.test"

        assert len(client.get("/clients/").json()) == 1
        assert client.delete(f"/clients/{body['id']}").status_code == 204
        assert client.get(f"/clients/{body['id']}").status_code == 404

    def test_blank_name_rejected(self, client):
        resp = client.post("/clients/", json={"name": "   "})
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"


class TestExpenses:
    def test_create_joins_client_name(self, client):
        acme = client.post("/clients/", json={"name": "Acme Corp"}).json()
        body = _create_expense(
            client, status="reimbursable", client_id=acme["id"], tags=["billable"]
        )
        assert body["client_name"] == "Acme Corp"
        assert body["tags"] == ["billable"]
        assert body["currency"] == "CAD"

    def test_missing_currency_uses_configured_default(self, tmp_path):
        settings = Settings(data_dir=tmp_path, default_currency="usd", debug=False)
        settings.init_post_load()
        with TestClient(create_app(settings_override=settings)) as api:
            assert _create_expense(api)["currency"] == "USD"
            assert _create_expense(api, currency="CLP")["currency"] == "CLP"

    def test_unknown_client_rejected(self, client):
        resp = client.post(
            "/expenses/", json={"date": "2025-01-01", "amount": 5, "client_id": 999}
        )
        assert resp.status_code == 400
        assert "999" in resp.json()["detail"]

    def test_invalid_status_and_negative_amount(self, client):
        resp = client.post(
            "/expenses/", json={"date": "2025-01-01", "amount": -1, "status": "lost"}
        )
        assert resp.status_code == 422

    def test_list_filters(self, client):
        _create_expense(client)
        _create_expense(client, date="2024-05-01", status="pending")
        assert len(client.get("/expenses/").json()) == 2
        assert len(client.get("/expenses/", params={"year": 2024}).json()) == 1
        assert len(client.get("/expenses/", params={"status": "pending"}).json()) == 1
        assert client.get("/expenses/", params={"status": "bogus"}).status_code == 400
        resp = client.get(
            "/expenses/", params={"start_date": "2025-02-01", "end_date": "2025-01-01"}
        )
        assert resp.status_code == 400

    def test_patch_and_delete(self, client):
        expense = _create_expense(client)
        resp = client.patch(
            f"/expenses/{expense['id']}", json={"amount": 60, "status": None}
        )
        assert resp.status_code == 200
        assert resp.json()["amount"] == 60
        assert resp.json()["status"] == "deductible"

        assert client.patch(f"/expenses/{expense['id']}", json={}).status_code == 422
        assert client.delete(f"/expenses/{expense['id']}").status_code == 204
        assert client.get(f"/expenses/{expense['id']}").status_code == 404


class TestTax:
    def test_rules_and_lines(self, client):
        rules = client.get("/tax/rules").json()
        assert {"category": "meals", "deduction_rate": 0.5}.items() <= rules[0].items()
        lines = client.get("/tax/t2125-lines").json()
        assert lines[0]["line"] == "8521"

    def test_deduction_preview(self, client):
        resp = client.post("/tax/deduction", json={"amount": 100, "category": "Meals"})
        assert resp.json() == {"deductible": 50.0, "non_deductible": 50.0, "rate": 0.5}

    def test_summary_and_t2125(self, client):
        _create_expense(client)
        _create_expense(client, category="travel", amount=200)
        _create_expense(client, status="reimbursable", amount=80)
        summary = client.get("/tax/summary", params={"year": 2025}).json()
        assert summary["total_expenses"] == 380.0
        assert summary["total_deductible"] == 250.0
        assert summary["total_reimbursable"] == 80.0
        assert summary["available_years"] == [2025]

        t2125 = client.get("/tax/t2125", params={"year": 2025}).json()
        assert [ln["line"] for ln in t2125["lines"]] == ["8523", "9200"]
        assert t2125["total_gross"] == 300.0
        assert t2125["total_deductible"] == 250.0
        assert t2125["hst_gst_paid"] == round(300 - 300 / 1.13, 2)

    def test_reimbursements(self, client):
        _create_expense(client, status="reimbursable", amount=80)
        body = client.get("/tax/reimbursements").json()
        assert body["total_reimbursable"] == 80.0
        assert body["clients"][0]["client_name"] == "No client"


class TestExportsApi:
    def test_empty_export_is_bad_request(self, client):
        resp = client.get("/exports/expenses", params={"format": "csv"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "no_expenses", "detail": "No expenses to export"}

    def test_empty_export_localized(self, client):
        resp = client.get("/exports/expenses", params={"format": "pdf", "language": "es"})
        assert resp.json()["detail"] == "No hay gastos para exportar"

    def test_unsupported_format(self, client):
        _create_expense(client)
        resp = client.get("/exports/expenses", params={"format": "docx"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "unsupported_format"

    def test_xlsx_download(self, client):
        _create_expense(client)
        resp = client.get("/exports/expenses", params={"format": "xlsx", "year": 2025})
        assert resp.status_code == 200
        assert resp.headers["content-disposition"].startswith(
            'attachment; filename="gastos_fiscales_2025_'
        )
        wb = load_workbook(io.BytesIO(resp.content))
        assert wb.sheetnames[0] == "Gastos - Expenses"

    def test_xlsx_download_with_control_characters(self, client):
        _create_expense(client, vendor="Bad\x0cVendor", notes="tab\x0bbed")
        resp = client.get("/exports/expenses", params={"format": "xlsx"})
        assert resp.status_code == 200
        ws = load_workbook(io.BytesIO(resp.content))["Gastos - Expenses"]
        assert ws["B2"].value == "BadVendor"

    def test_csv_and_pdf_downloads(self, client):
        _create_expense(client)
        csv_resp = client.get("/exports/expenses", params={"format": "csv"})
        assert csv_resp.content.startswith(b"\xef\xbb\xbf")
        pdf_resp = client.get("/exports/expenses", params={"format": "pdf", "draft": True})
        assert pdf_resp.headers["content-type"] == "application/pdf"
        assert pdf_resp.content.startswith(b"%PDF")

    def test_t2125_and_reimbursement_downloads(self, client):
        _create_expense(client)
        _create_expense(client, status="reimbursable", amount=30)
        t2125 = client.get("/exports/t2125", params={"format": "pdf", "year": 2025})
        assert t2125.status_code == 200
        reimb = client.get(
            "/exports/reimbursements",
            params={"format": "xlsx", "start_date": "2025-01-01", "end_date": "2025-12-31"},
        )
        assert reimb.status_code == 200
        assert 'filename="Reimbursements_2025-01-01_2025-12-31.xlsx"' in reimb.headers[
            "content-disposition"
        ]

    def test_years(self, client):
        _create_expense(client)
        _create_expense(client, date="2023-02-02")
        assert client.get("/exports/years").json() == {"years": [2025, 2023]}


def test_unsupported_default_currency_rejected(tmp_path):
    settings = Settings(data_dir=tmp_path, default_currency="GBP")
    with pytest.raises(ValueError, match="default_currency"):
        settings.init_post_load()
