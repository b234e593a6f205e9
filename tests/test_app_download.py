# tests/test_app_download.py
"""
API tests for the Android app download endpoints
Run: pytest tests/test_app_download.py -v
"""
import os
import pytest

import routes.app_download as app_download
from database import APP_DOWNLOADS


@pytest.fixture
def apk_path(tmp_path, monkeypatch):
    path = tmp_path / "app" / "EstateHub.apk"
    monkeypatch.setattr(app_download, "APK_PATH", str(path))
    return path


def test_info_and_download_when_missing(client, apk_path):
    info = client.get("/api/app/info").json()["data"]
    assert info["available"] is False
    assert client.get("/api/app/download").status_code == 404


def test_download_streams_apk_and_records(client, db, apk_path):
    apk_path.parent.mkdir(parents=True)
    apk_path.write_bytes(b"PK-apk-bytes")

    info = client.get("/api/app/info").json()["data"]
    assert info["available"] is True
    assert info["size"] == len(b"PK-apk-bytes")

    response = client.get("/api/app/download")
    assert response.status_code == 200
    assert response.content == b"PK-apk-bytes"
    assert response.headers["content-type"] == "application/vnd.android.package-archive"
    assert response.headers["content-disposition"].startswith("attachment")
    assert response.headers["cache-control"] == "no-cache"
    assert db[APP_DOWNLOADS].count_documents({}) == 1


def test_admin_upload_and_stats(client, db, admin, apk_path):
    _, headers = admin
    response = client.post("/api/admin/app/upload",
                           files={"apk": ("EstateHub.apk", b"new-build", "application/octet-stream")},
                           headers=headers)
    assert response.status_code == 200, response.text
    assert os.path.isfile(apk_path)

    client.get("/api/app/download")
    client.get("/api/app/download")
    stats = client.get("/api/admin/app/stats", headers=headers).json()["data"]
    assert stats == {"total": 2, "today": 2, "week": 2, "month": 2}


def test_upload_rejects_other_files(client, admin, apk_path):
    _, headers = admin
    response = client.post("/api/admin/app/upload",
                           files={"apk": ("notes.txt", b"text", "text/plain")}, headers=headers)
    assert response.status_code == 400
