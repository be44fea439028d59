"""API tests against an in-memory store."""
from bson import ObjectId

from smartsplit.expenses.models import EqualSplit, Expense
from smartsplit.services.gemini_summary import DISABLED_MESSAGE


def test_login_creates_then_finds_user(client):
    first = client.post("/api/v1/auth/login", json={"identifier": "alice@example.com"})
    assert first.status_code == 201
    user = first.get_json()["user"]
    assert user["name"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["mobile"] == ""

    again = client.post("/api/v1/auth/login", json={"identifier": "alice@example.com"})
    assert again.status_code == 200
    assert again.get_json()["user"]["_id"] == user["_id"]


def test_login_with_mobile(client):
    resp = client.post("/api/v1/auth/login", json={"identifier": "9876543210"})
    assert resp.status_code == 201
    user = resp.get_json()["user"]
    assert user["mobile"] == "9876543210"
    assert user["email"] == ""


def test_login_rejects_bad_identifier(client):
    resp = client.post("/api/v1/auth/login", json={"identifier": "12345"})
    assert resp.status_code == 400


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401


def test_update_profile_name(client, login):
    _, headers = login("alice@example.com")
    resp = client.put("/api/v1/users/profile", json={"name": "Alice A."}, headers=headers)
    assert resp.status_code == 200
    assert client.get("/api/v1/users/profile", headers=headers).get_json()["name"] == "Alice A."


def test_add_friend_and_peer_balance(client, login):
    alice, headers = login("alice@example.com")

    resp = client.post("/api/v1/users/friends", json={"identifier": "bob@example.com"}, headers=headers)
    assert resp.status_code == 201
    bob = resp.get_json()["friend"]
    assert alice["_id"] in bob["friend_ids"]

    dup = client.post("/api/v1/users/friends", json={"identifier": "bob@example.com"}, headers=headers)
    assert dup.status_code == 409
    me = client.post("/api/v1/users/friends", json={"identifier": "alice@example.com"}, headers=headers)
    assert me.status_code == 400

    friends = client.get("/api/v1/users/friends", headers=headers).get_json()
    assert friends["friends"] == [{"friend": bob, "balance": 0}]

    resp = client.post("/api/v1/expenses/", json={
        "friend_id": bob["_id"],
        "description": "Concert",
        "amount": 60,
        "split_type": "amount",
        "distribution": {alice["_id"]: 20, bob["_id"]: 40},
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.get_json()["expense"]["group_id"] is None

    friends = client.get("/api/v1/users/friends", headers=headers).get_json()
    assert friends["friends"][0]["balance"] == 40
    assert friends["total_balance"] == 40

    detail = client.get(f"/api/v1/users/friends/{bob['_id']}", headers=headers).get_json()
    assert detail["balance"] == 40
    assert len(detail["expenses"]) == 1
    assert detail["settled_up"] is False


def test_peer_expense_validation_error(client, login):
    _, headers = login("alice@example.com")
    bob = client.post("/api/v1/users/friends", json={"identifier": "bob@example.com"},
                      headers=headers).get_json()["friend"]

    resp = client.post("/api/v1/expenses/", json={
        "friend_id": bob["_id"],
        "description": "Cab",
        "amount": 50,
        "split_type": "percentage",
        "distribution": {bob["_id"]: 30},
    }, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Percentages must add up to 100."


def test_group_flow_balances_and_settlements(client, login):
    alice, headers = login("alice@example.com")
    resp = client.post("/api/v1/groups/", json={
        "name": "Goa",
        "members": ["bob@example.com", "carol@example.com", ""],
    }, headers=headers)
    assert resp.status_code == 201
    group = resp.get_json()["group"]
    assert group["members"] == ["alice@example.com", "bob@example.com", "carol@example.com"]
    assert len(resp.get_json()["created_users"]) == 2

    detail = client.get(f"/api/v1/groups/{group['_id']}", headers=headers).get_json()
    ids = {m["email"]: m["_id"] for m in detail["members"]}

    resp = client.post("/api/v1/expenses/", json={
        "group_id": group["_id"],
        "description": "Villa",
        "amount": 90,
        "category": "Accommodation",
        "split_type": "percentage",
        "distribution": {
            ids["alice@example.com"]: 0,
            ids["bob@example.com"]: 50,
            ids["carol@example.com"]: 50,
        },
    }, headers=headers)
    assert resp.status_code == 201

    body = client.get(f"/api/v1/groups/{group['_id']}/balances", headers=headers).get_json()
    balances = {b["user_id"]: b["balance"] for b in body["balances"]}
    assert balances == {
        ids["alice@example.com"]: 90,
        ids["bob@example.com"]: -45,
        ids["carol@example.com"]: -45,
    }
    assert [(s["from_name"], s["to_name"], s["amount"]) for s in body["settlements"]] == [
        ("bob", "alice", 45),
        ("carol", "alice", 45),
    ]

    detail = client.get(f"/api/v1/groups/{group['_id']}", headers=headers).get_json()
    assert len(detail["group"]["expenses"]) == 1
    assert detail["expenses"][0]["category"] == "Accommodation"

    listing = client.get("/api/v1/groups/", headers=headers).get_json()
    assert [g["name"] for g in listing["groups"]] == ["Goa"]
    assert listing["non_group_balance"] == 0

    # Co-members show up as settled-up relations
    friends = client.get("/api/v1/users/friends", headers=headers).get_json()
    assert sorted(f["friend"]["email"] for f in friends["friends"]) == ["bob@example.com", "carol@example.com"]

    activity = client.get("/api/v1/reports/activity", headers=headers).get_json()
    assert [a["description"] for a in activity["activities"]] == ["Villa"]
    assert alice["_id"] == ids["alice@example.com"]


def test_group_defaults_participants_to_members(client, login):
    _, headers = login("alice@example.com")
    group = client.post("/api/v1/groups/", json={"name": "Flat", "members": ["bob@example.com"]},
                        headers=headers).get_json()["group"]

    resp = client.post("/api/v1/expenses/", json={
        "group_id": group["_id"], "description": "Groceries", "amount": 100,
    }, headers=headers)
    assert resp.status_code == 201
    assert len(resp.get_json()["expense"]["participants"]) == 2

    body = client.get(f"/api/v1/groups/{group['_id']}/balances", headers=headers).get_json()
    assert sorted(b["balance"] for b in body["balances"]) == [-50, 50]
    assert len(body["settlements"]) == 1


def test_group_access_for_non_member(client, login):
    _, alice_headers = login("alice@example.com")
    group = client.post("/api/v1/groups/", json={"name": "Private", "members": []},
                        headers=alice_headers).get_json()["group"]

    _, dave_headers = login("dave@example.com")
    assert client.get(f"/api/v1/groups/{group['_id']}", headers=dave_headers).status_code == 403
    assert client.get("/api/v1/groups/not-an-id", headers=dave_headers).status_code == 404


def test_group_requires_name(client, login):
    _, headers = login("alice@example.com")
    resp = client.post("/api/v1/groups/", json={"name": "  "}, headers=headers)
    assert resp.status_code == 400


def test_summary_disabled_without_api_key(client, login):
    _, headers = login("alice@example.com")
    resp = client.get("/api/v1/reports/summary", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["summary"] == DISABLED_MESSAGE


def test_distribution_for_non_participant_rejected(client, login):
    alice, headers = login("alice@example.com")
    group = client.post("/api/v1/groups/", json={"name": "Flat", "members": ["bob@example.com"]},
                        headers=headers).get_json()["group"]

    resp = client.post("/api/v1/expenses/", json={
        "group_id": group["_id"],
        "description": "Rent",
        "amount": 60,
        "split_type": "amount",
        "distribution": {"nobody": 60},
    }, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Split entries must belong to participants."

    detail = client.get(f"/api/v1/groups/{group['_id']}", headers=headers).get_json()
    assert detail["group"]["expenses"] == []


def test_totals_skip_counterparties_that_no_longer_exist(client, login):
    alice, headers = login("alice@example.com")
    bob = client.post("/api/v1/users/friends", json={"identifier": "bob@example.com"},
                      headers=headers).get_json()["friend"]

    client.post("/api/v1/expenses/", json={
        "friend_id": bob["_id"], "description": "Cab", "amount": 30,
    }, headers=headers)
    Expense(
        id=str(ObjectId()), description="Old dinner", amount=100, paid_by=alice["_id"],
        participants=[alice["_id"], str(ObjectId())], split=EqualSplit(),
        date="2024-01-01T00:00:00",
    ).insert()

    friends = client.get("/api/v1/users/friends", headers=headers).get_json()
    listing = client.get("/api/v1/groups/", headers=headers).get_json()

    assert [f["friend"]["_id"] for f in friends["friends"]] == [bob["_id"]]
    assert friends["total_balance"] == 15
    assert listing["non_group_balance"] == friends["total_balance"]
