# tests/test_quota.py
"""
Tests for free-listing quota resolution and counting
Run: pytest tests/test_quota.py -v
"""
import pytest
from datetime import datetime, timedelta

from database import ADMIN_SETTINGS, PROPERTIES
from utils.quota import (
    FreeListingLimitReached,
    check_free_listing_quota,
    count_free_listings,
    resolve_free_listing_limit,
)

NOW = datetime(2024, 6, 30, 12, 0)


def add_property(db, owner_id, days_ago=0, **extra):
    db[PROPERTIES].insert_one({"ownerId": owner_id, "createdAt": NOW - timedelta(days=days_ago), **extra})


def test_environment_default_limit(db):
    assert resolve_free_listing_limit(db, {}) == {"limit": 5, "period": "monthly", "limitType": 30}


def test_admin_default_overrides_environment(db):
    db[ADMIN_SETTINGS].insert_one(
        {"_id": "freeListingLimits", "defaultLimit": 2, "defaultPeriod": "yearly", "defaultLimitType": 365}
    )
    assert resolve_free_listing_limit(db, {}) == {"limit": 2, "period": "yearly", "limitType": 365}


def test_user_limit_overrides_admin_default(db):
    db[ADMIN_SETTINGS].insert_one({"_id": "freeListingLimits", "defaultLimit": 2})
    user = {"freeListingLimit": {"limit": 10, "period": "yearly", "limitType": 365}}
    assert resolve_free_listing_limit(db, user)["limit"] == 10


def test_counts_only_unpackaged_listings_in_window(db):
    add_property(db, "u1", days_ago=1)
    add_property(db, "u1", days_ago=5, packageId=None)
    add_property(db, "u1", days_ago=2, packageId="pkg", approvalStatus="rejected")
    add_property(db, "u1", days_ago=45)
    add_property(db, "u2", days_ago=1)
    assert count_free_listings(db, "u1", 30, NOW) == 2


def test_limit_th_listing_allowed_next_rejected(db):
    user = {"_id": "u1"}
    for day in range(4):
        add_property(db, "u1", days_ago=day)
    assert check_free_listing_quota(db, user, NOW)["used"] == 4
    add_property(db, "u1")
    with pytest.raises(FreeListingLimitReached) as exc:
        check_free_listing_quota(db, user, NOW)
    assert str(exc.value) == "Free listing limit reached: 5 free posts allowed per 30 days."


def test_admin_default_with_missing_period_falls_back(db):
    db[ADMIN_SETTINGS].insert_one(
        {"_id": "freeListingLimits", "defaultLimit": 3, "defaultPeriod": None, "defaultLimitType": None}
    )
    assert resolve_free_listing_limit(db, {}) == {"limit": 3, "period": "monthly", "limitType": 30}
