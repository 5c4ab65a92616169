from decimal import Decimal

from tests.test_api_accounts import create_account
from tests.test_api_budgets import put_budget
from tests.test_api_transactions import post_transaction


def add_investment(client, **fields):
    payload = {"symbol": "voo", "quantity": "2", "buy_price": "100", "buy_commission": "1"}
    payload.update(fields)
    response = client.post("/investments/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_investment_crud(client):
    created = add_investment(client)
    assert created["symbol"] == "VOO"
    assert created["last_price_update"] is None

    response = client.put(f"/investments/{created['id']}", json={"current_price": "120"})
    assert response.status_code == 200
    assert response.json()["last_price_update"] is not None

    assert len(client.get("/investments/").json()) == 1
    assert client.delete(f"/investments/{created['id']}").status_code == 204
    assert client.get(f"/investments/{created['id']}").status_code == 404


def test_investment_rejects_negative_quantity(client):
    response = client.post("/investments/", json={"quantity": "-1", "buy_price": "1"})
    assert response.status_code == 422


def test_categories_lists_defaults(client):
    body = client.get("/categories/").json()
    assert "Food" in body["expense"]
    assert "Salary" in body["income"]


def test_dashboard_net_worth_is_accounts_plus_investments(client):
    create_account(client, "Zelle", balance="100")
    create_account(client, "Banesco", currency="VES", balance="910")
    add_investment(client, current_price="150")

    response = client.get("/dashboard/", params={"month": "2024-03"})
    assert response.status_code == 200
    body = response.json()

    account_total = Decimal(str(body["total_account_value"]))
    invested = Decimal(str(body["total_investment_value"]))
    assert account_total == Decimal("120")
    assert invested == Decimal("300")
    assert Decimal(str(body["net_worth"])) == account_total + invested
    assert body["primary_currency"] == "USD"
    assert Decimal(str(body["exchange_rate"])) == Decimal("45.50")


def test_dashboard_month_navigation_and_flow(client):
    account = create_account(client, balance="0")
    post_transaction(client, account_id=account["id"], transaction_type="ingreso",
                     amount="500", transaction_date="2024-01-02", category="Salary")
    post_transaction(client, account_id=account["id"], amount="40", transaction_date="2024-01-05")
    post_transaction(client, account_id=account["id"], amount="99", transaction_date="2023-12-31")
    put_budget(client, month="2023-11", limit="50")

    body = client.get("/dashboard/", params={"month": "2024-01"}).json()

    assert body["previous_month"] == "2023-12"
    assert body["next_month"] == "2024-02"
    assert Decimal(str(body["monthly_flow"]["income"])) == Decimal("500")
    assert Decimal(str(body["monthly_flow"]["expense"])) == Decimal("40")
    assert [row["category"] for row in body["budgets"]] == ["Food"]
    assert body["budgets"][0]["state"] == "warning"


def test_dashboard_rate_override(client):
    create_account(client, "Banesco", currency="VES", balance="1000")
    body = client.get("/dashboard/", params={"month": "2024-01", "rate": "100"}).json()
    assert Decimal(str(body["total_account_value"])) == Decimal("10")


def test_dashboard_portfolio_and_composition(client):
    create_account(client, balance="100")
    add_investment(client)

    body = client.get("/dashboard/", params={"month": "2024-01"}).json()

    portfolio = body["portfolio"]
    assert portfolio["position_count"] == 1
    assert Decimal(str(portfolio["total_cost"])) == Decimal("201")
    assert Decimal(str(portfolio["unrealized_gain"])) == Decimal("-1")
    assert Decimal(str(body["composition"]["invested_share"])) == Decimal(200) / Decimal(300) * 100


def test_dashboard_rejects_malformed_month(client):
    assert client.get("/dashboard/", params={"month": "01-2024"}).status_code == 400
