from datetime import date, timedelta

import pytest


def put(client, tx_id, body, user_id="u1"):
    return client.put(f"/expenses/{tx_id}", params={"userId": user_id}, json=body)


def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_list_requires_user_id(client):
    r = client.get("/expenses")
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "userId is required"}


def test_list_unknown_user_is_empty(client):
    r = client.get("/expenses", params={"userId": "nobody"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": []}


def test_put_then_get_round_trip(client, expense):
    r = put(client, "tx-1", {**expense, "isPending": True, "type": "income"})
    assert r.status_code == 200
    created = r.json()["data"]

    r = client.get("/expenses/tx-1", params={"userId": "u1"})
    assert r.status_code == 200
    fetched = r.json()["data"]

    assert fetched == created
    assert fetched == {
        **expense,
        "id": "tx-1",
        "isPending": True,
        "type": "income",
        "userId": "u1",
    }


def test_put_defaults(client, expense):
    data = put(client, "tx-1", expense).json()["data"]
    assert data["isPending"] is False
    assert data["type"] == "expense"


def test_put_twice_keeps_second_values(client, expense):
    put(client, "tx-1", expense)
    second = {**expense, "merchant": "Lyft", "amount": 30.0, "category": "Other"}
    r = put(client, "tx-1", second)
    assert r.status_code == 200

    rows = client.get("/expenses", params={"userId": "u1"}).json()["data"]
    assert len(rows) == 1
    assert rows[0]["merchant"] == "Lyft"
    assert rows[0]["amount"] == 30.0
    assert rows[0]["category"] == "Other"


def test_put_is_scoped_by_user(client, expense):
    put(client, "tx-1", expense, user_id="u1")

    r = client.get("/expenses/tx-1", params={"userId": "u2"})
    assert r.status_code == 404

    r = put(client, "tx-1", expense, user_id="u2")
    assert r.status_code == 409


def test_put_requires_user_id(client, expense):
    r = client.put("/expenses/tx-1", json=expense)
    assert r.status_code == 400


def test_put_invalid_body_is_400(client, expense):
    body = dict(expense)
    del body["amount"]
    r = put(client, "tx-1", body)
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_put_rejects_unknown_type(client, expense):
    r = put(client, "tx-1", {**expense, "type": "transfer"})
    assert r.status_code == 400


def test_get_missing_is_404(client):
    r = client.get("/expenses/missing", params={"userId": "u1"})
    assert r.status_code == 404
    assert r.json()["error"] == "Transaction not found"


def test_delete_missing_is_404_and_store_unchanged(client, expense):
    put(client, "tx-1", expense)

    r = client.delete("/expenses/missing", params={"userId": "u1"})
    assert r.status_code == 404

    rows = client.get("/expenses", params={"userId": "u1"}).json()["data"]
    assert [row["id"] for row in rows] == ["tx-1"]


def test_delete(client, expense):
    put(client, "tx-1", expense)

    r = client.delete("/expenses/tx-1", params={"userId": "u1"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Transaction deleted"}

    assert client.get("/expenses/tx-1", params={"userId": "u1"}).status_code == 404


def test_list_orders_by_date_desc(client, expense):
    put(client, "a", {**expense, "date": "2024-01-05"})
    put(client, "b", {**expense, "date": "2024-03-01"})
    put(client, "c", {**expense, "date": "2024-02-10"})

    rows = client.get("/expenses", params={"userId": "u1"}).json()["data"]
    assert [row["id"] for row in rows] == ["b", "c", "a"]


def test_list_filters(client, expense):
    today = date.today()
    put(client, "recent", {**expense, "date": today.isoformat(), "category": "Food"})
    put(client, "old", {**expense, "date": (today - timedelta(days=60)).isoformat()})
    put(client, "pay", {**expense, "date": today.isoformat(), "type": "income", "category": "Salary"})

    def ids(**params):
        rows = client.get("/expenses", params={"userId": "u1", **params}).json()["data"]
        return sorted(row["id"] for row in rows)

    assert ids(dateFilter="last30days") == ["pay", "recent"]
    assert ids(dateFilter="all") == ["old", "pay", "recent"]
    assert ids(category=["Food", "Transport"]) == ["old", "recent"]
    assert ids(type="income") == ["pay"]


@pytest.mark.parametrize("params", [{"dateFilter": "yesterday"}, {"type": "refund"}])
def test_list_rejects_unknown_filters(client, params):
    r = client.get("/expenses", params={"userId": "u1", **params})
    assert r.status_code == 400


def test_summary(client, expense):
    put(client, "a", {**expense, "amount": 10.0, "category": "Food"})
    put(client, "b", {**expense, "amount": 30.0, "category": "Transport"})
    put(client, "c", {**expense, "amount": 5.0, "category": "Food"})
    put(client, "d", {**expense, "amount": 100.0, "category": "Salary", "type": "income"})

    r = client.get("/expenses/summary", params={"userId": "u1"})
    assert r.status_code == 200
    data = r.json()["data"]

    assert data["incomeTotal"] == 100.0
    assert data["expenseTotal"] == 45.0
    assert data["net"] == 55.0
    assert data["count"] == 4
    assert data["byCategory"] == [
        {"category": "Transport", "total": 30.0},
        {"category": "Food", "total": 15.0},
    ]


def test_summary_requires_user_id(client):
    assert client.get("/expenses/summary").status_code == 400


@pytest.mark.parametrize("amount", ["1e999", "-1e999", "NaN", "Infinity"])
def test_put_rejects_non_finite_amount(client, amount):
    body = (
        '{"merchant": "Uber", "amount": %s, "currency": "USD", '
        '"date": "2024-10-24", "category": "Transport", "summary": "Ride"}' % amount
    )
    r = client.put(
        "/expenses/tx-inf",
        params={"userId": "u1"},
        content=body,
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400

    r = client.get("/expenses", params={"userId": "u1"})
    assert r.status_code == 200
    assert r.json()["data"] == []
