# tests/test_free_listing_limits.py
"""
API tests for free-listing limit administration
Run: pytest tests/test_free_listing_limits.py -v
"""
from datetime import datetime, timedelta

from conftest import make_user
from database import PROPERTIES, USERS


def add_listing(db, owner, **extra):
    doc = {"ownerId": str(owner["_id"]), "createdAt": datetime.utcnow(),
           "status": "inactive", "approvalStatus": "pending"}
    doc.update(extra)
    db[PROPERTIES].insert_one(doc)


def test_settings_round_trip_and_effect(client, db, seller, admin):
    user, seller_headers = seller
    _, headers = admin
    assert client.get("/api/admin/free-listing-limits/settings", headers=headers).json()["data"] == {
        "defaultLimit": 5, "defaultPeriod": "monthly", "defaultLimitType": 30,
    }
    response = client.put("/api/admin/free-listing-limits/settings",
                          json={"defaultLimit": 1, "defaultPeriod": "yearly"}, headers=headers)
    assert response.json()["data"] == {"defaultLimit": 1, "defaultPeriod": "yearly", "defaultLimitType": 365}

    add_listing(db, user, createdAt=datetime.utcnow() - timedelta(days=200))
    me = client.get("/api/free-listing-limits/me", headers=seller_headers).json()["data"]
    assert me["freeListingsInPeriod"] == 1
    assert me["remainingFreeListings"] == 0
    assert me["pendingFreeListings"] == 1


def test_user_limit_update(client, db, seller, admin):
    user, _ = seller
    _, headers = admin
    url = f"/api/admin/free-listing-limits/users/{user['_id']}"
    response = client.put(url, json={"limit": 10, "period": "yearly"}, headers=headers)
    assert response.status_code == 200
    stored = db[USERS].find_one({"_id": user["_id"]})["freeListingLimit"]
    assert (stored["limit"], stored["period"], stored["limitType"]) == (10, "yearly", 365)

    add_listing(db, user)
    add_listing(db, user, status="active", approvalStatus="approved", packageId="pkg")
    data = client.get(url, headers=headers).json()["data"]
    assert data["totalListings"] == 1
    assert data["freeListingsInPeriod"] == 1
    assert data["remainingFreeListings"] == 9
    assert "password" not in data


def test_user_limit_validation(client, seller, admin):
    user, _ = seller
    _, headers = admin
    url = f"/api/admin/free-listing-limits/users/{user['_id']}"
    assert client.put(url, json={"limit": -1, "period": "monthly"}, headers=headers).status_code == 400
    assert client.put(url, json={"limit": 3, "period": "weekly"}, headers=headers).status_code == 400
    assert client.get("/api/admin/free-listing-limits/users/bad", headers=headers).status_code == 400


def test_users_listing_only_sellers_and_agents(client, db, seller, admin):
    _, headers = admin
    make_user(db, "agent", email="agent@example.com", name="Priya Agent")
    make_user(db, "buyer", email="buyer@example.com")

    data = client.get("/api/admin/free-listing-limits/users", headers=headers).json()["data"]
    assert sorted(u["userType"] for u in data["users"]) == ["agent", "seller"]
    assert all(u["freeListingLimit"]["limit"] == 5 for u in data["users"])

    data = client.get("/api/admin/free-listing-limits/users", params={"search": "priya"},
                      headers=headers).json()["data"]
    assert [u["email"] for u in data["users"]] == ["agent@example.com"]
