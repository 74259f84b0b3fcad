"""
Ledger Engine - API Tests

Request context handling, error envelopes and the main ledger flows
through the HTTP layer.
"""

import pytest
from decimal import Decimal
from uuid import uuid4


async def seed_chart(client, headers):
    response = await client.post("/api/v1/accounts/initialize", headers=headers)
    assert response.status_code == 200
    return {account["account_code"]: account["id"] for account in response.json()}


def cash_sale_payload(accounts, amount="1000.00", auto_post=False):
    return {
        "entry_date": "2026-07-15",
        "description": "Cash sale",
        "lines": [
            {"account_id": accounts["1000"], "debit_amount": amount},
            {"account_id": accounts["4000"], "credit_amount": amount},
        ],
        "auto_post": auto_post,
    }


class TestRequestContext:
    """Test health and header handling."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_missing_tenant_header(self, client):
        response = await client.get("/api/v1/accounts")
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_malformed_user_header(self, client, tenant_id):
        response = await client.get(
            "/api/v1/accounts",
            headers={"X-Tenant-ID": str(tenant_id), "X-User-ID": "not-a-uuid"},
        )
        assert response.status_code == 400
        assert "X-User-ID" in response.json()["detail"]["message"]


class TestAccountsAPI:
    """Test chart of accounts endpoints."""

    @pytest.mark.asyncio
    async def test_initialize_chart(self, client, headers):
        accounts = await seed_chart(client, headers)
        assert {"1000", "1150", "2100", "4000", "6030"} <= set(accounts)

        response = await client.get("/api/v1/accounts", headers=headers)
        assert len(response.json()) == len(accounts)

    @pytest.mark.asyncio
    async def test_chart_is_tenant_scoped(self, client, headers):
        await seed_chart(client, headers)
        response = await client.get("/api/v1/accounts", headers={"X-Tenant-ID": str(uuid4())})
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_unknown_account_is_404(self, client, headers):
        response = await client.get(f"/api/v1/accounts/{uuid4()}", headers=headers)
        assert response.status_code == 404


class TestJournalEntriesAPI:
    """Test the journal entry lifecycle over HTTP."""

    @pytest.mark.asyncio
    async def test_create_post_void(self, client, headers, user_id):
        accounts = await seed_chart(client, headers)

        response = await client.post(
            "/api/v1/journal-entries", json=cash_sale_payload(accounts), headers=headers,
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["status"] == "draft"
        assert entry["entry_number"] == "JE-00001"
        assert len(entry["lines"]) == 2

        response = await client.post(f"/api/v1/journal-entries/{entry['id']}/post", headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "posted"
        assert response.json()["posted_by_id"] == str(user_id)

        response = await client.get(f"/api/v1/accounts/{accounts['1000']}", headers=headers)
        assert Decimal(response.json()["current_balance"]) == Decimal("1000.00")

        response = await client.post(
            f"/api/v1/journal-entries/{entry['id']}/void",
            json={"reason": "Keyed twice"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "void"
        assert response.json()["void_reason"] == "Keyed twice"

        response = await client.get(f"/api/v1/accounts/{accounts['1000']}", headers=headers)
        assert Decimal(response.json()["current_balance"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_post_twice_is_conflict(self, client, headers):
        accounts = await seed_chart(client, headers)
        response = await client.post(
            "/api/v1/journal-entries", json=cash_sale_payload(accounts, auto_post=True), headers=headers,
        )
        entry_id = response.json()["id"]

        response = await client.post(f"/api/v1/journal-entries/{entry_id}/post", headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_unbalanced_entry_rejected(self, client, headers):
        accounts = await seed_chart(client, headers)
        payload = cash_sale_payload(accounts)
        payload["lines"][1]["credit_amount"] = "900.00"

        response = await client.post("/api/v1/journal-entries", json=payload, headers=headers)
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "UNBALANCED_ENTRY"
        assert "timestamp" in detail

    @pytest.mark.asyncio
    async def test_unknown_entry_is_404(self, client, headers):
        response = await client.get(f"/api/v1/journal-entries/{uuid4()}", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "JOURNAL_ENTRY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_trial_balance(self, client, headers):
        accounts = await seed_chart(client, headers)
        await client.post(
            "/api/v1/journal-entries", json=cash_sale_payload(accounts, auto_post=True), headers=headers,
        )

        response = await client.get("/api/v1/reports/trial-balance", headers=headers)
        report = response.json()
        assert report["is_balanced"] is True
        assert Decimal(report["total_debits"]) == Decimal("1000.00")
        assert {item["account_code"] for item in report["items"]} == {"1000", "4000"}

        response = await client.get("/api/v1/reports/balance-verification", headers=headers)
        assert response.json()["discrepancies"] == []


class TestDocumentsAPI:
    """Test documents that post through the adapters."""

    @pytest.mark.asyncio
    async def test_create_expense(self, client, headers):
        accounts = await seed_chart(client, headers)

        response = await client.post("/api/v1/expenses", json={
            "expense_date": "2026-07-10",
            "category": "office_supplies",
            "description": "Printer paper",
            "amount": "10000.00",
            "gct_amount": "1500.00",
        }, headers=headers)

        assert response.status_code == 201
        expense = response.json()
        assert expense["status"] == "posted"
        assert Decimal(expense["gct_claimable"]) == Decimal("1500.00")

        response = await client.get(f"/api/v1/accounts/{accounts['1150']}", headers=headers)
        assert Decimal(response.json()["current_balance"]) == Decimal("1500.00")

    @pytest.mark.asyncio
    async def test_expense_without_chart_is_rejected(self, client, headers):
        response = await client.post("/api/v1/expenses", json={
            "expense_date": "2026-07-10",
            "category": "office_supplies",
            "description": "Printer paper",
            "amount": "10000.00",
        }, headers=headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "MISSING_GL_ACCOUNT"

    @pytest.mark.asyncio
    async def test_create_and_post_invoice(self, client, headers):
        accounts = await seed_chart(client, headers)

        response = await client.post("/api/v1/invoices", json={
            "invoice_date": "2026-07-05",
            "customer_name": "Ocho Rios Deli",
            "lines": [{"description": "Catering", "unit_price": "10000.00"}],
        }, headers=headers)
        assert response.status_code == 201
        invoice = response.json()
        assert Decimal(invoice["total_amount"]) == Decimal("11500.00")

        response = await client.get(f"/api/v1/accounts/{accounts['2100']}", headers=headers)
        assert Decimal(response.json()["current_balance"]) == Decimal("1500.00")
