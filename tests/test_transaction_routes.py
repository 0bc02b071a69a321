import pytest

from storage.factory import get_storage


def payload(**overrides):
    body = {
        "type": "expense",
        "amount": "50.00",
        "description": "Weekly groceries",
        "category": "Food & Dining",
        "date": "2024-01-05",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_post_then_get_returns_same_transaction(client):
    created = await client.post("/api/transactions", json=payload(amount=50, notes="market"))
    assert created.status_code == 201
    body = created.json()
    assert body["amount"] == "50.00"
    assert body["id"]

    fetched = await client.get(f"/api/transactions/{body['id']}")
    assert fetched.status_code == 200
    got = fetched.json()
    for key in ("amount", "description", "category", "date", "notes"):
        assert got[key] == body[key]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": "-5"},
        {"amount": "abc"},
        {"amount": "1.234"},
        {"type": "transfer"},
        {"date": "05/01/2024"},
        {"date": "20240105"},
        {"date": "2024-W01-1"},
        {"description": ""},
        {"category": "x" * 51},
    ],
)
async def test_invalid_transaction_is_rejected_with_400(client, overrides):
    response = await client.post("/api/transactions", json=payload(**overrides))
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    assert body["errors"]


@pytest.mark.asyncio
async def test_missing_required_field_is_rejected(client):
    body = payload()
    del body["amount"]
    response = await client.post("/api/transactions", json=body)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_transaction_returns_404(client):
    assert (await client.get("/api/transactions/missing")).status_code == 404
    assert (await client.put("/api/transactions/missing", json={"notes": "x"})).status_code == 404
    response = await client.delete("/api/transactions/missing")
    assert response.status_code == 404
    assert response.json() == {"message": "Transaction not found"}


@pytest.mark.asyncio
async def test_put_applies_partial_update(client):
    created = (await client.post("/api/transactions", json=payload())).json()

    response = await client.put(f"/api/transactions/{created['id']}", json={"amount": "80", "category": "Shopping"})
    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == "80.00"
    assert body["category"] == "Shopping"
    assert body["description"] == "Weekly groceries"


@pytest.mark.asyncio
async def test_put_rejects_null_for_required_field(client):
    created = (await client.post("/api/transactions", json=payload())).json()
    response = await client.put(f"/api/transactions/{created['id']}", json={"amount": None})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_removes_transaction_from_list(client):
    first = (await client.post("/api/transactions", json=payload())).json()
    second = (await client.post("/api/transactions", json=payload(date="2024-01-06"))).json()

    response = await client.delete(f"/api/transactions/{first['id']}")
    assert response.status_code == 204

    listed = (await client.get("/api/transactions")).json()
    assert [t["id"] for t in listed] == [second["id"]]


@pytest.mark.asyncio
async def test_list_supports_search_filters_and_paging(client):
    await client.post("/api/transactions", json=payload(description="Coffee beans", date="2024-01-01"))
    await client.post("/api/transactions", json=payload(description="Bus pass", category="Transportation", date="2024-01-02"))
    await client.post("/api/transactions", json=payload(type="income", description="Salary", category="Income", date="2024-01-03"))
    await client.post("/api/transactions", json=payload(description="Cold brew COFFEE", date="2024-01-04"))

    searched = await client.get("/api/transactions", params={"search": "coffee"})
    assert [t["description"] for t in searched.json()] == ["Cold brew COFFEE", "Coffee beans"]
    assert searched.headers["X-Total-Count"] == "2"

    by_category = await client.get("/api/transactions", params={"search": "transport"})
    assert [t["description"] for t in by_category.json()] == ["Bus pass"]

    incomes = await client.get("/api/transactions", params={"type": "income"})
    assert [t["description"] for t in incomes.json()] == ["Salary"]

    page_two = await client.get("/api/transactions", params={"limit": 3, "page": 2})
    assert [t["description"] for t in page_two.json()] == ["Coffee beans"]
    assert page_two.headers["X-Total-Count"] == "4"


@pytest.mark.asyncio
async def test_export_returns_csv(client):
    await client.post("/api/transactions", json=payload(description='Dinner, "fancy"', notes="anniversary"))
    await client.post("/api/transactions", json=payload(type="income", amount="2000", description="Salary", category="Income", date="2024-01-10"))

    response = await client.get("/api/transactions/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"transactions_" in response.headers["content-disposition"]

    lines = response.text.strip().split("\n")
    assert lines[0] == "Date,Description,Category,Type,Amount,Notes"
    assert lines[1] == "2024-01-10,Salary,Income,income,2000.00,"
    assert lines[2] == '2024-01-05,"Dinner, ""fancy""",Food & Dining,expense,50.00,anniversary'


@pytest.mark.asyncio
async def test_export_without_transactions_is_404(client):
    response = await client.get("/api/transactions/export")
    assert response.status_code == 404
    assert response.json() == {"message": "No transactions to export"}


@pytest.mark.asyncio
async def test_storage_failure_returns_500(app, client):
    class BrokenStorage:
        async def get_transactions(self, user_id):
            raise RuntimeError("database is down")

    app.dependency_overrides[get_storage] = lambda: BrokenStorage()

    response = await client.get("/api/transactions")
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch transactions"}


@pytest.mark.asyncio
async def test_requires_login(anon_client):
    response = await anon_client.get("/api/transactions")
    assert response.status_code == 401
