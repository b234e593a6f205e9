# tests/test_moderation.py
"""
Tests for moderation state transitions
Run: pytest tests/test_moderation.py -v
"""
import pytest
from datetime import datetime

from utils.moderation import decision_update, initial_moderation, moderation_after_edit


def test_new_listing_is_pending_and_inactive():
    assert initial_moderation() == {
        "status": "inactive", "approvalStatus": "pending", "isApproved": False, "featured": False,
    }
    assert initial_moderation("pkg-1")["approvalStatus"] == "pending_approval"


@pytest.mark.parametrize("current,expected", [
    ("approved", "pending"),
    ("rejected", "pending"),
    (None, "pending"),
    ("pending", "pending"),
    ("pending_approval", "pending_approval"),
])
def test_edit_resets_to_pending(current, expected):
    result = moderation_after_edit(current)
    assert result["approvalStatus"] == expected
    assert result["status"] == "inactive"
    assert result["isApproved"] is False


def test_approval_activates():
    now = datetime(2024, 1, 1)
    update = decision_update("approved", "admin-1", admin_comments="ok", now=now)
    assert update["status"] == "active"
    assert update["isApproved"] is True
    assert update["approvedAt"] == now
    assert update["approvedBy"] == "admin-1"
    assert update["adminComments"] == "ok"


def test_rejection_deactivates_and_keeps_reason():
    update = decision_update("rejected", "admin-1", rejection_reason="Blurry photos")
    assert update["status"] == "inactive"
    assert update["isApproved"] is False
    assert update["rejectionReason"] == "Blurry photos"
    assert "approvedAt" not in update


def test_unknown_decision_raises():
    with pytest.raises(ValueError):
        decision_update("maybe", "admin-1")
