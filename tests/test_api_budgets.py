from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from tests.test_api_accounts import create_account
from tests.test_api_transactions import post_transaction


def put_budget(client, category="Food", month="2024-01", limit="100", currency="USD", method="put"):
    response = getattr(client, method)("/budgets/", json={
        "category": category, "month": month, "limit": limit, "currency": currency,
    })
    assert response.status_code == 200, response.text
    return response.json()


def test_upsert_never_duplicates_category_month(client):
    first = put_budget(client, limit="100")
    second = put_budget(client, limit="250", method="post")

    assert second["id"] == first["id"]
    rows = client.get("/budgets/").json()
    assert len(rows) == 1
    assert Decimal(str(rows[0]["limit"])) == Decimal("250")


def test_list_by_month(client):
    put_budget(client, month="2024-01")
    put_budget(client, month="2024-02")
    put_budget(client, category="Rent", month="2024-02")

    february = client.get("/budgets/", params={"month": "2024-02"}).json()
    assert sorted(item["category"] for item in february) == ["Food", "Rent"]
    assert client.get("/budgets/", params={"month": "Feb"}).status_code == 400


def test_malformed_month_and_negative_limit_are_validation_errors(client):
    assert client.put("/budgets/", json={"category": "Food", "month": "2024-13", "limit": "1"}).status_code == 422
    assert client.put("/budgets/", json={"category": "Food", "month": "2024-01", "limit": "-1"}).status_code == 422


def test_update_by_id(client):
    row = put_budget(client)
    response = client.put(f"/budgets/{row['id']}", json={"limit": "75.555", "currency": "ves"})
    assert response.status_code == 200
    body = response.json()
    assert body["currency"] == "VES"
    assert Decimal(str(body["limit"])) == Decimal("75.56")


def test_update_onto_existing_pair_overwrites_it(client):
    january = put_budget(client, month="2024-01", limit="100")
    february = put_budget(client, month="2024-02", limit="200")

    response = client.put(f"/budgets/{february['id']}", json={"month": "2024-01"})
    assert response.status_code == 200
    assert response.json()["id"] == january["id"]
    assert Decimal(str(response.json()["limit"])) == Decimal("200")

    rows = client.get("/budgets/").json()
    assert [(item["month"], item["id"]) for item in rows] == [("2024-01", january["id"])]
    assert client.get(f"/budgets/{february['id']}").status_code == 404


def test_delete_budget(client):
    row = put_budget(client)
    assert client.delete(f"/budgets/{row['id']}").status_code == 204
    assert client.get("/budgets/").json() == []
    assert client.delete(f"/budgets/{row['id']}").status_code == 404


def test_tracking_carries_budget_forward(client):
    account = create_account(client, balance="1000")
    put_budget(client, month="2024-01", limit="100")
    put_budget(client, category="Rent", month="2024-05", limit="500")
    post_transaction(client, account_id=account["id"], transaction_date="2024-03-04", amount="85")
    post_transaction(client, account_id=account["id"], transaction_date="2024-03-09", amount="455",
                     currency="VES", transaction_type="gasto")

    response = client.get("/budgets/tracking", params={"month": "2024-03"})
    assert response.status_code == 200
    body = response.json()

    assert body["month"] == "2024-03"
    assert len(body["rows"]) == 1
    row = body["rows"][0]
    assert row["category"] == "Food"
    assert row["carried_forward"] is True
    assert row["source_month"] == "2024-01"
    assert Decimal(str(row["spent"])) == Decimal("95")
    assert Decimal(str(row["remaining"])) == Decimal("5")
    assert row["state"] == "warning"

    summary = body["summary"]
    assert [item["currency"] for item in summary] == ["USD"]
    assert Decimal(str(summary[0]["total_limit"])) == Decimal("100")


def test_tracking_after_delete_falls_back_to_earlier_month(client):
    put_budget(client, month="2024-01", limit="100")
    march = put_budget(client, month="2024-03", limit="300")
    client.delete(f"/budgets/{march['id']}")

    rows = client.get("/budgets/tracking", params={"month": "2024-03"}).json()["rows"]
    assert Decimal(str(rows[0]["limit"])) == Decimal("100")


def test_tracking_rejects_bad_inputs(client):
    assert client.get("/budgets/tracking", params={"month": "2024-3"}).status_code == 400
    assert client.get("/budgets/tracking", params={"month": "2024-03", "rate": "-2"}).status_code == 400


def test_blank_category_is_a_validation_error(client):
    response = client.put("/budgets/", json={"category": "   ", "month": "2024-01", "limit": "10"})
    assert response.status_code == 422
    assert client.get("/budgets/").json() == []

    row = put_budget(client, category="  Food  ")
    assert row["category"] == "Food"
    assert client.put(f"/budgets/{row['id']}", json={"category": " "}).status_code == 422


def test_deleting_only_row_removes_budget_from_that_month_onwards(client):
    food = put_budget(client, category="Food", month="2024-01")
    put_budget(client, category="Rent", month="2024-03")

    client.delete(f"/budgets/{food['id']}")

    def tracked(month):
        rows = client.get("/budgets/tracking", params={"month": month}).json()["rows"]
        return [row["category"] for row in rows]

    assert tracked("2024-01") == []
    assert tracked("2024-02") == []
    assert tracked("2024-03") == ["Rent"]


def test_store_failure_is_service_unavailable(client, db_session, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db_session, "commit", failing_commit)

    response = client.put("/budgets/", json={"category": "Food", "month": "2024-01", "limit": "10"})
    assert response.status_code == 503
    assert "Failed to save budget" in response.json()["detail"]
