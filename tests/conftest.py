# tests/conftest.py
"""
Shared fixtures: in-memory MongoDB (mongomock), a recording mailer,
the FastAPI test client and authenticated users.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="estatehub-tests-")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["APK_PATH"] = os.path.join(_TMP_DIR, "app", "EstateHub.apk")
os.environ["EMAIL_MODE"] = "log"

import mongomock
import pytest
from datetime import datetime
from fastapi.testclient import TestClient

from auth import create_access_token
from database import USERS, get_db
from mailer import EmailSendError, get_mailer
from main import app


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise EmailSendError("SMTP server unavailable")

    def send_property_confirmation(self, email, name, property_title, property_id):
        self._check()
        self.sent.append(("confirmation", email, property_title, property_id))
        return False

    def send_property_decision(self, email, name, property_title, property_id, approved, rejection_reason=None):
        self._check()
        self.sent.append(("decision", email, property_title, approved))
        return False


@pytest.fixture
def db():
    return mongomock.MongoClient()["estatehub_test"]


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(db, mailer):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, user_type="seller", email=None, **extra):
    now = datetime.utcnow()
    doc = {
        "name": f"Test {user_type}",
        "email": email or f"{user_type}-{db[USERS].count_documents({})}@example.com",
        "password": "not-used",
        "phone": "9876543210",
        "userType": user_type,
        "createdAt": now,
        "updatedAt": now,
        **extra,
    }
    doc["_id"] = db[USERS].insert_one(doc).inserted_id
    token = create_access_token({"sub": str(doc["_id"]), "email": doc["email"], "userType": user_type})
    return doc, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seller(db):
    return make_user(db, "seller")


@pytest.fixture
def admin(db):
    return make_user(db, "admin")
