from decimal import Decimal

from tests.test_api_accounts import balance_of, create_account


def post_transaction(client, **fields):
    payload = {
        "transaction_date": "2024-03-10",
        "transaction_type": "expense",
        "amount": "10",
        "currency": "USD",
        "category": "Food",
    }
    payload.update(fields)
    return client.post("/transactions/", json=payload)


def test_expense_moves_balance_and_delete_restores_it(client):
    account = create_account(client, balance="100")

    response = post_transaction(client, account_id=account["id"])
    assert response.status_code == 201, response.text
    assert balance_of(client, account["id"]) == Decimal("90")

    assert client.delete(f"/transactions/{response.json()['id']}").status_code == 204
    assert balance_of(client, account["id"]) == Decimal("100")


def test_income_in_other_currency_is_converted(client):
    account = create_account(client, balance="0")
    post_transaction(client, account_id=account["id"], transaction_type="income",
                     amount="455", currency="VES")
    assert balance_of(client, account["id"]) == Decimal("10")


def test_rate_query_parameter_overrides_configured_rate(client):
    account = create_account(client, "Banesco", currency="VES", balance="0")
    response = client.post("/transactions/?rate=50", json={
        "account_id": account["id"], "transaction_date": "2024-03-10",
        "transaction_type": "income", "amount": "2", "currency": "USD",
    })
    assert response.status_code == 201
    assert balance_of(client, account["id"]) == Decimal("100")


def test_invalid_rate_is_rejected(client):
    account = create_account(client)
    response = client.post("/transactions/?rate=0", json={
        "account_id": account["id"], "transaction_date": "2024-03-10",
        "transaction_type": "expense", "amount": "1", "currency": "USD",
    })
    assert response.status_code == 400


def test_legacy_type_is_normalized(client):
    account = create_account(client)
    response = post_transaction(client, account_id=account["id"], transaction_type=" Gasto ")
    assert response.status_code == 201
    assert response.json()["transaction_type"] == "EXPENSE"


def test_unknown_type_and_negative_amount_are_rejected(client):
    account = create_account(client)
    assert post_transaction(client, account_id=account["id"], transaction_type="refund").status_code == 422
    assert post_transaction(client, account_id=account["id"], amount="-5").status_code == 422
    assert balance_of(client, account["id"]) == Decimal("100")


def test_adjustment_requires_direction(client):
    account = create_account(client)
    missing = post_transaction(client, account_id=account["id"], transaction_type="ajuste")
    assert missing.status_code == 422

    down = post_transaction(client, account_id=account["id"], transaction_type="adjustment",
                            adjustment_direction="down", amount="25")
    assert down.status_code == 201
    assert balance_of(client, account["id"]) == Decimal("75")


def test_direction_rejected_outside_adjustments(client):
    account = create_account(client)
    response = post_transaction(client, account_id=account["id"], adjustment_direction="UP")
    assert response.status_code == 422


def test_transfer_moves_money_between_accounts(client):
    usd = create_account(client, "Zelle", balance="100")
    ves = create_account(client, "Banesco", currency="VES", balance="0")

    response = post_transaction(client, account_id=usd["id"], destination_account_id=ves["id"],
                                transaction_type="transferencia", amount="20")
    assert response.status_code == 201

    assert balance_of(client, usd["id"]) == Decimal("80")
    assert balance_of(client, ves["id"]) == Decimal("910")


def test_transfer_to_unknown_account_is_404(client):
    account = create_account(client)
    response = post_transaction(client, account_id=account["id"], destination_account_id=999,
                                transaction_type="transfer")
    assert response.status_code == 404


def test_transaction_on_unknown_account_is_404(client):
    assert post_transaction(client, account_id=999).status_code == 404


def test_update_reverses_and_reapplies(client):
    account = create_account(client, balance="100")
    created = post_transaction(client, account_id=account["id"]).json()

    response = client.put(f"/transactions/{created['id']}", json={"amount": "30"})
    assert response.status_code == 200
    assert balance_of(client, account["id"]) == Decimal("70")

    response = client.put(f"/transactions/{created['id']}", json={"transaction_type": "ingreso"})
    assert response.status_code == 200
    assert balance_of(client, account["id"]) == Decimal("130")


def test_update_to_adjustment_without_direction_is_rejected(client):
    account = create_account(client, balance="100")
    created = post_transaction(client, account_id=account["id"]).json()

    response = client.put(f"/transactions/{created['id']}", json={"transaction_type": "adjustment"})
    assert response.status_code == 400
    assert balance_of(client, account["id"]) == Decimal("90")


def test_list_filters_and_orders_newest_first(client):
    account = create_account(client, balance="1000")
    other = create_account(client, "Other", balance="1000")
    post_transaction(client, account_id=account["id"], transaction_date="2024-03-01")
    post_transaction(client, account_id=account["id"], transaction_date="2024-03-20", category="Rent")
    post_transaction(client, account_id=account["id"], transaction_date="2024-04-02")
    post_transaction(client, account_id=other["id"], transaction_date="2024-03-15")

    march = client.get("/transactions/", params={"month": "2024-03"}).json()
    assert [item["transaction_date"] for item in march] == ["2024-03-20", "2024-03-15", "2024-03-01"]

    mine = client.get("/transactions/", params={"month": "2024-03", "account_id": account["id"]}).json()
    assert len(mine) == 2

    rent = client.get("/transactions/", params={"category": "Rent"}).json()
    assert [item["category"] for item in rent] == ["Rent"]


def test_list_rejects_malformed_month(client):
    assert client.get("/transactions/", params={"month": "2024-3"}).status_code == 400


def test_missing_transaction_is_404(client):
    assert client.get("/transactions/12").status_code == 404
    assert client.put("/transactions/12", json={"amount": "1"}).status_code == 404
    assert client.delete("/transactions/12").status_code == 404


def test_update_strips_category_and_description(client):
    account = create_account(client, balance="100")
    created = post_transaction(client, account_id=account["id"], category="Rent").json()

    response = client.put(f"/transactions/{created['id']}",
                          json={"category": " Food ", "description": "  groceries "})
    assert response.status_code == 200
    assert response.json()["category"] == "Food"
    assert response.json()["description"] == "groceries"

    found = client.get("/transactions/", params={"category": "Food"}).json()
    assert [item["id"] for item in found] == [created["id"]]
