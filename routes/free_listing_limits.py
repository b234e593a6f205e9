from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING
from pymongo.database import Database
from typing import Dict, Optional
from auth import get_current_user, require_admin
from database import ADMIN_SETTINGS, PROPERTIES, USERS, get_db
from models import FreeListingLimitUpdate, FreeListingSettingsUpdate
from utils.filters import paginate, pagination_meta
from utils.moderation import APPROVED, PENDING_STATES
from utils.quota import (
    PERIOD_DAYS,
    SETTINGS_ID,
    count_free_listings,
    default_free_listing_limit,
    free_listings_query,
    resolve_free_listing_limit,
)
from utils.serialize import parse_object_id, serialize_doc
from datetime import datetime
import logging
import re

logger = logging.getLogger(__name__)

router = APIRouter(tags=["free-listing-limits"])

LISTING_USER_TYPES = ["seller", "agent"]
USER_FIELDS = {"name": 1, "email": 1, "phone": 1, "userType": 1, "freeListingLimit": 1, "createdAt": 1}


def listing_stats(db: Database, user: Dict) -> Dict:
    owner_id = str(user["_id"])
    limit = resolve_free_listing_limit(db, user)
    used = count_free_listings(db, owner_id, limit["limitType"])
    return {
        "totalListings": db[PROPERTIES].count_documents(
            {"ownerId": owner_id, "status": "active", "approvalStatus": APPROVED}
        ),
        "freeListingsInPeriod": used,
        "freeListingLimit": limit,
        "remainingFreeListings": max(0, limit["limit"] - used),
    }


def _load_listing_user(db: Database, user_id: str) -> Dict:
    _id = parse_object_id(user_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid user ID")
    user = db[USERS].find_one({"_id": _id}, USER_FIELDS)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/admin/free-listing-limits/users")
async def list_user_limits(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    try:
        query = {"userType": {"$in": LISTING_USER_TYPES}}
        if search and search.strip():
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
                {"phone": {"$regex": pattern, "$options": "i"}},
            ]
        page_num, limit_num, skip = paginate(page, limit)
        total = db[USERS].count_documents(query)
        users = list(db[USERS].find(query, USER_FIELDS).sort("createdAt", DESCENDING).skip(skip).limit(limit_num))
        for user in users:
            user.update(listing_stats(db, user))
        return {
            "success": True,
            "data": {
                "users": serialize_doc(users),
                "pagination": pagination_meta(page_num, limit_num, total),
            },
        }
    except Exception as e:
        logger.error(f"Error fetching free listing limits: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch free listing limits")


@router.get("/admin/free-listing-limits/settings")
async def get_settings(admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        default = default_free_listing_limit(db)
        return {
            "success": True,
            "data": {
                "defaultLimit": default["limit"],
                "defaultPeriod": default["period"],
                "defaultLimitType": default["limitType"],
            },
        }
    except Exception as e:
        logger.error(f"Error fetching free listing settings: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch settings")


@router.put("/admin/free-listing-limits/settings")
async def update_settings(body: FreeListingSettingsUpdate, admin=Depends(require_admin),
                          db: Database = Depends(get_db)):
    try:
        settings = {
            "defaultLimit": body.defaultLimit,
            "defaultPeriod": body.defaultPeriod,
            "defaultLimitType": PERIOD_DAYS[body.defaultPeriod],
        }
        db[ADMIN_SETTINGS].update_one(
            {"_id": SETTINGS_ID},
            {"$set": {**settings, "updatedAt": datetime.utcnow(), "updatedBy": str(admin["_id"])}},
            upsert=True,
        )
        logger.info(f"Default free listing limit set to {body.defaultLimit}/{body.defaultPeriod}")
        return {"success": True, "data": settings}
    except Exception as e:
        logger.error(f"Error updating free listing settings: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update settings")


@router.get("/admin/free-listing-limits/users/{user_id}")
async def get_user_limit(user_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        user = _load_listing_user(db, user_id)
        user.update(listing_stats(db, user))
        return {"success": True, "data": serialize_doc(user)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching free listing limit for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch free listing limit")


@router.put("/admin/free-listing-limits/users/{user_id}")
async def update_user_limit(user_id: str, body: FreeListingLimitUpdate, admin=Depends(require_admin),
                            db: Database = Depends(get_db)):
    try:
        user = _load_listing_user(db, user_id)
        limit = {
            "limit": body.limit,
            "period": body.period,
            "limitType": PERIOD_DAYS[body.period],
            "updatedAt": datetime.utcnow(),
            "updatedBy": str(admin["_id"]),
        }
        db[USERS].update_one({"_id": user["_id"]}, {"$set": {"freeListingLimit": limit}})
        logger.info(f"Free listing limit for user {user_id} set to {body.limit}/{body.period}")
        return {"success": True, "data": serialize_doc({"userId": user_id, "freeListingLimit": limit})}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating free listing limit for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update free listing limit")


@router.get("/free-listing-limits/me")
async def get_my_limit(user=Depends(get_current_user), db: Database = Depends(get_db)):
    try:
        stats = listing_stats(db, user)
        pending = db[PROPERTIES].count_documents({
            **free_listings_query(str(user["_id"]), stats["freeListingLimit"]["limitType"]),
            "approvalStatus": {"$in": list(PENDING_STATES)},
        })
        return {"success": True, "data": serialize_doc({**stats, "pendingFreeListings": pending})}
    except Exception as e:
        logger.error(f"Error fetching free listing limit for {user['_id']}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch free listing limit")
