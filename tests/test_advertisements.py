# tests/test_advertisements.py
"""
API tests for advertisement submissions and banners
Run: pytest tests/test_advertisements.py -v
"""
import pytest

from database import ADVERTISEMENT_SUBMISSIONS


def submission(**overrides):
    data = {
        "bannerType": "homepage_banner",
        "fullName": "Ravi Kumar",
        "email": "ravi@example.com",
        "phone": "+91 98765-43210",
        "projectName": "Green Meadows",
        "location": "Sector 9",
        "description": "Launching 120 plots next month",
    }
    data.update(overrides)
    return data


def submit(client, **overrides):
    response = client.post("/api/advertisements/submissions", json=submission(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]["_id"]


def test_public_submission_is_stored_as_new(client, db):
    submission_id = submit(client, budget="50000")
    doc = db[ADVERTISEMENT_SUBMISSIONS].find_one({})
    assert str(doc["_id"]) == submission_id
    assert doc["status"] == "new"
    assert doc["budget"] == "50000"


@pytest.mark.parametrize("overrides", [
    {"email": "not-an-email"},
    {"email": "a@b..com"},
    {"phone": "12345"},
    {"phone": "98765abc43210"},
    {"fullName": "  "},
    {"description": ""},
])
def test_invalid_submission_is_400(client, overrides):
    response = client.post("/api/advertisements/submissions", json=submission(**overrides))
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_admin_listing_filters_and_search(client, admin):
    _, headers = admin
    submit(client)
    submit(client, bannerType="sidebar", fullName="Meera Shah", email="meera@example.com")
    submit(client, bannerType="sidebar", projectName="Skyline Towers")

    data = client.get("/api/admin/advertisements/submissions", params={"bannerType": "sidebar"},
                      headers=headers).json()["data"]
    assert data["pagination"]["total"] == 2
    data = client.get("/api/admin/advertisements/submissions", params={"search": "skyline"},
                      headers=headers).json()["data"]
    assert [s["projectName"] for s in data["submissions"]] == ["Skyline Towers"]
    data = client.get("/api/admin/advertisements/submissions", params={"limit": 500},
                      headers=headers).json()["data"]
    assert data["pagination"]["limit"] == 100


def test_viewing_marks_new_as_viewed(client, admin):
    _, headers = admin
    submission_id = submit(client)
    url = f"/api/admin/advertisements/submissions/{submission_id}"
    assert client.get(url, headers=headers).json()["data"]["status"] == "viewed"

    client.put(f"{url}/status", json={"status": "contacted"}, headers=headers)
    assert client.get(url, headers=headers).json()["data"]["status"] == "contacted"
    assert client.put(f"{url}/status", json={"status": "spam"}, headers=headers).status_code == 400


def test_statistics(client, admin):
    _, headers = admin
    first = submit(client)
    submit(client, bannerType="sidebar")
    submit(client, bannerType="sidebar")
    client.get(f"/api/admin/advertisements/submissions/{first}", headers=headers)

    stats = client.get("/api/admin/advertisements/statistics", headers=headers).json()["data"]
    assert stats == {
        "total": 3, "new": 2, "viewed": 1, "contacted": 0,
        "byBannerType": {"homepage_banner": 1, "sidebar": 2},
    }


def test_delete_submission(client, admin):
    _, headers = admin
    submission_id = submit(client)
    url = f"/api/admin/advertisements/submissions/{submission_id}"
    assert client.delete(url, headers=headers).status_code == 200
    assert client.get(url, headers=headers).status_code == 404


def test_submissions_require_admin(client, seller):
    _, headers = seller
    assert client.get("/api/admin/advertisements/submissions", headers=headers).status_code == 403
    assert client.get("/api/admin/advertisements/submissions").status_code == 401


def test_banners(client, admin):
    _, headers = admin
    banner = {"title": "Monsoon offer", "imageUrl": "/uploads/banners/a.jpg", "position": "homepage"}
    second = client.post("/api/admin/banners", json={**banner, "title": "Second", "sortOrder": 2},
                         headers=headers).json()["data"]
    first = client.post("/api/admin/banners", json={**banner, "sortOrder": 1}, headers=headers).json()["data"]
    client.post("/api/admin/banners", json={**banner, "title": "Off", "isActive": False}, headers=headers)
    client.post("/api/admin/banners", json={**banner, "title": "Elsewhere", "position": "sidebar"}, headers=headers)

    titles = [b["title"] for b in client.get("/api/banners", params={"position": "homepage"}).json()["data"]]
    assert titles == ["Monsoon offer", "Second"]

    response = client.put(f"/api/admin/banners/{second['_id']}", json={"isActive": False}, headers=headers)
    assert response.json()["data"]["isActive"] is False
    titles = [b["title"] for b in client.get("/api/banners", params={"position": "homepage"}).json()["data"]]
    assert titles == ["Monsoon offer"]

    assert client.delete(f"/api/admin/banners/{first['_id']}", headers=headers).status_code == 200
    assert client.delete(f"/api/admin/banners/{first['_id']}", headers=headers).status_code == 404


def test_malformed_email_is_not_stored(client, db):
    response = client.post("/api/advertisements/submissions", json=submission(email="a@b..com"))
    assert response.status_code == 400
    assert db[ADVERTISEMENT_SUBMISSIONS].count_documents({}) == 0
