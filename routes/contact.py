from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from database import PROPERTIES, PROPERTY_ENQUIRIES, get_db
from models import EnquiryRequest
from utils.serialize import parse_object_id
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contact"])


@router.post("/properties/{property_id}/enquiries", status_code=201)
async def contact_owner(property_id: str, request: EnquiryRequest, db: Database = Depends(get_db)):
    _id = parse_object_id(property_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid property ID")
    try:
        property_doc = db[PROPERTIES].find_one({"_id": _id}, {"ownerId": 1})
        if not property_doc:
            raise HTTPException(status_code=404, detail="Property not found")

        enquiry = {
            "name": request.name,
            "contact_no": request.contact_no,
            "message": request.message,
            "property_id": property_id,
            "ownerId": property_doc.get("ownerId"),
            "createdAt": datetime.utcnow(),
        }
        result = db[PROPERTY_ENQUIRIES].insert_one(enquiry)
        db[PROPERTIES].update_one({"_id": _id}, {"$inc": {"inquiries": 1}})
        logger.info(f"Enquiry submitted for property {property_id}, enquiry_id: {str(result.inserted_id)}")
        return {"success": True, "message": "Enquiry submitted successfully", "data": {"_id": str(result.inserted_id)}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing enquiry for property {property_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit enquiry")
