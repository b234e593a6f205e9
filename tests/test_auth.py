# tests/test_auth.py
"""
API tests for registration, login and token handling
Run: pytest tests/test_auth.py -v
"""
from auth import create_access_token, decode_access_token


def register(client, **overrides):
    data = {"name": "Anil", "email": "Anil@Example.com", "password": "s3cret-pass", "userType": "agent"}
    data.update(overrides)
    return client.post("/api/register", json=data)


def test_register_and_login(client, db):
    response = register(client)
    assert response.status_code == 201
    user = db["users"].find_one({"email": "anil@example.com"})
    assert user["userType"] == "agent"
    assert user["password"] != "s3cret-pass"

    response = client.post("/api/login", json={"email": "anil@example.com", "password": "s3cret-pass"})
    token = response.json()["access_token"]
    assert decode_access_token(token)["sub"] == str(user["_id"])


def test_duplicate_registration(client):
    register(client)
    response = register(client)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "User already exists"}


def test_register_cannot_claim_admin(client):
    assert register(client, userType="admin").status_code == 400


def test_wrong_password(client):
    register(client)
    response = client.post("/api/login", json={"email": "anil@example.com", "password": "nope"})
    assert response.status_code == 401


def test_tampered_token(client):
    token = create_access_token({"sub": "65a1b2c3d4e5f6a7b8c9d0e1"}) + "x"
    assert decode_access_token(token) is None
    response = client.get("/api/user/properties", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
