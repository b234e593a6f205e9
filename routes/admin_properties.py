from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING
from pymongo.database import Database
from auth import require_admin
from database import PROPERTIES, USERS, get_db
from mailer import Mailer, get_mailer
from models import PropertyApproval
from utils.moderation import APPROVED, PENDING_STATES, decision_update
from utils.serialize import parse_object_id, serialize_doc
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/properties", tags=["admin"])


@router.get("/pending")
async def get_pending_properties(admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        properties = db[PROPERTIES].find(
            {"approvalStatus": {"$in": list(PENDING_STATES)}}
        ).sort("createdAt", DESCENDING)
        return {"success": True, "data": serialize_doc(list(properties))}
    except Exception as e:
        logger.error(f"Error fetching pending properties: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch pending properties")


@router.put("/{property_id}/approval")
async def update_property_approval(
    property_id: str,
    body: PropertyApproval,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    _id = parse_object_id(property_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid property ID")
    try:
        prop = db[PROPERTIES].find_one({"_id": _id})
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")

        update = decision_update(body.approvalStatus, str(admin["_id"]), body.adminComments, body.rejectionReason)
        db[PROPERTIES].update_one({"_id": _id}, {"$set": update})
        logger.info(f"Property {property_id} {body.approvalStatus} by admin {admin['_id']}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating property approval {property_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update property approval")

    try:
        owner_id = parse_object_id(prop.get("ownerId"))
        owner = db[USERS].find_one({"_id": owner_id}) if owner_id else None
        if owner and owner.get("email"):
            mailer.send_property_decision(
                owner["email"], owner.get("name", "User"), prop.get("title", ""), property_id,
                approved=body.approvalStatus == APPROVED, rejection_reason=body.rejectionReason,
            )
    except Exception as e:
        logger.warning(f"Approval email failed for property {property_id}: {str(e)}")

    return {"success": True, "data": {"message": f"Property {body.approvalStatus} successfully"}}
