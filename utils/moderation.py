"""Moderation state transitions for property listings.

created -> pending(inactive) -> approved(active) | rejected(inactive)

Any owner edit puts the listing back to pending(inactive); only an admin
decision can make it active.
"""
from datetime import datetime
from typing import Dict, Optional

PENDING = "pending"
PENDING_APPROVAL = "pending_approval"
APPROVED = "approved"
REJECTED = "rejected"

PENDING_STATES = (PENDING, PENDING_APPROVAL)
DECISIONS = (APPROVED, REJECTED)


def initial_moderation(package_id: Optional[str] = None) -> Dict:
    return {
        "status": "inactive",
        "approvalStatus": PENDING_APPROVAL if package_id else PENDING,
        "isApproved": False,
        "featured": False,
    }


def moderation_after_edit(current_approval_status: Optional[str]) -> Dict:
    approval_status = current_approval_status if current_approval_status in PENDING_STATES else PENDING
    return {
        "status": "inactive",
        "approvalStatus": approval_status,
        "isApproved": False,
    }


def decision_update(
    decision: str,
    admin_id: str,
    admin_comments: Optional[str] = None,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict:
    if decision not in DECISIONS:
        raise ValueError(f"Invalid approval status: {decision}")
    now = now or datetime.utcnow()
    update = {"approvalStatus": decision, "updatedAt": now}
    if decision == APPROVED:
        update.update({
            "status": "active",
            "isApproved": True,
            "approvedAt": now,
            "approvedBy": str(admin_id or ""),
        })
    else:
        update.update({"status": "inactive", "isApproved": False})
        if rejection_reason:
            update["rejectionReason"] = rejection_reason
    if admin_comments:
        update["adminComments"] = admin_comments
    return update
