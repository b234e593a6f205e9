from fastapi import APIRouter, Depends, HTTPException
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from database import ADVERTISEMENT_SUBMISSIONS, BANNERS, get_db
from models import AdvertisementSubmissionCreate, BannerCreate, BannerUpdate, SubmissionStatusUpdate
from utils.filters import paginate, pagination_meta
from utils.serialize import parse_object_id, serialize_doc
from datetime import datetime
import logging
import re

logger = logging.getLogger(__name__)

router = APIRouter(tags=["advertisements"])

SEARCH_FIELDS = ("fullName", "email", "phone", "projectName")
SUBMISSION_STATUSES = ("new", "viewed", "contacted")


def _submission_id(submission_id: str):
    _id = parse_object_id(submission_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid submission ID")
    return _id


def _banner_id(banner_id: str):
    _id = parse_object_id(banner_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid banner ID")
    return _id


# Submissions

@router.post("/advertisements/submissions", status_code=201)
async def create_submission(body: AdvertisementSubmissionCreate, db: Database = Depends(get_db)):
    try:
        now = datetime.utcnow()
        submission = {**body.model_dump(), "status": "new", "createdAt": now, "updatedAt": now}
        result = db[ADVERTISEMENT_SUBMISSIONS].insert_one(submission)
        logger.info(f"Advertisement submission received: {result.inserted_id} ({body.bannerType})")
        return {
            "success": True,
            "message": "Submission received successfully",
            "data": {"_id": str(result.inserted_id)},
        }
    except Exception as e:
        logger.error(f"Error saving advertisement submission: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit advertisement request")


@router.get("/admin/advertisements/submissions")
async def list_submissions(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    bannerType: Optional[str] = None,
    search: Optional[str] = None,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    try:
        query = {}
        if status:
            query["status"] = status
        if bannerType:
            query["bannerType"] = bannerType
        if search and search.strip():
            pattern = re.escape(search.strip())
            query["$or"] = [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]

        page_num, limit_num, skip = paginate(page, limit)
        total = db[ADVERTISEMENT_SUBMISSIONS].count_documents(query)
        submissions = db[ADVERTISEMENT_SUBMISSIONS].find(query).sort("createdAt", DESCENDING).skip(skip).limit(limit_num)
        return {
            "success": True,
            "data": {
                "submissions": serialize_doc(list(submissions)),
                "pagination": pagination_meta(page_num, limit_num, total),
            },
        }
    except Exception as e:
        logger.error(f"Error fetching advertisement submissions: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch submissions")


@router.get("/admin/advertisements/statistics")
async def submission_statistics(admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        collection = db[ADVERTISEMENT_SUBMISSIONS]
        stats = {"total": collection.count_documents({})}
        for status in SUBMISSION_STATUSES:
            stats[status] = collection.count_documents({"status": status})
        by_type = collection.aggregate([{"$group": {"_id": "$bannerType", "count": {"$sum": 1}}}])
        stats["byBannerType"] = {row["_id"]: row["count"] for row in by_type if row["_id"]}
        return {"success": True, "data": stats}
    except Exception as e:
        logger.error(f"Error computing advertisement statistics: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")


@router.get("/admin/advertisements/submissions/{submission_id}")
async def get_submission(submission_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _submission_id(submission_id)
    try:
        submission = db[ADVERTISEMENT_SUBMISSIONS].find_one({"_id": _id})
        if not submission:
            raise HTTPException(status_code=404, detail="Submission not found")
        if submission.get("status") == "new":
            now = datetime.utcnow()
            db[ADVERTISEMENT_SUBMISSIONS].update_one(
                {"_id": _id, "status": "new"}, {"$set": {"status": "viewed", "updatedAt": now}}
            )
            submission.update(status="viewed", updatedAt=now)
        return {"success": True, "data": serialize_doc(submission)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching submission {submission_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch submission")


@router.put("/admin/advertisements/submissions/{submission_id}/status")
async def update_submission_status(submission_id: str, body: SubmissionStatusUpdate,
                                   admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _submission_id(submission_id)
    try:
        result = db[ADVERTISEMENT_SUBMISSIONS].update_one(
            {"_id": _id}, {"$set": {"status": body.status, "updatedAt": datetime.utcnow()}}
        )
        if result.matched_count == 0:
            raise HTTPException(status_code=404, detail="Submission not found")
        return {"success": True, "data": {"_id": submission_id, "status": body.status}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating submission {submission_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update submission")


@router.delete("/admin/advertisements/submissions/{submission_id}")
async def delete_submission(submission_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _submission_id(submission_id)
    try:
        result = db[ADVERTISEMENT_SUBMISSIONS].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Submission not found")
        logger.info(f"Advertisement submission deleted: {submission_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting submission {submission_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete submission")


# Banners

@router.get("/banners")
async def get_banners(position: Optional[str] = None, db: Database = Depends(get_db)):
    try:
        query = {"isActive": True}
        if position:
            query["position"] = position
        banners = db[BANNERS].find(query).sort([("sortOrder", ASCENDING), ("createdAt", DESCENDING)])
        return {"success": True, "data": serialize_doc(list(banners))}
    except Exception as e:
        logger.error(f"Error fetching banners: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch banners")


@router.post("/admin/banners", status_code=201)
async def create_banner(body: BannerCreate, admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        now = datetime.utcnow()
        banner = {**body.model_dump(), "createdAt": now, "updatedAt": now}
        result = db[BANNERS].insert_one(banner)
        banner["_id"] = result.inserted_id
        logger.info(f"Banner created: {result.inserted_id}")
        return {"success": True, "data": serialize_doc(banner)}
    except Exception as e:
        logger.error(f"Error creating banner: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create banner")


@router.put("/admin/banners/{banner_id}")
async def update_banner(banner_id: str, body: BannerUpdate, admin=Depends(require_admin),
                        db: Database = Depends(get_db)):
    _id = _banner_id(banner_id)
    try:
        banner = db[BANNERS].find_one({"_id": _id})
        if not banner:
            raise HTTPException(status_code=404, detail="Banner not found")
        update = {**body.model_dump(exclude_unset=True, exclude_none=True), "updatedAt": datetime.utcnow()}
        db[BANNERS].update_one({"_id": _id}, {"$set": update})
        return {"success": True, "data": serialize_doc({**banner, **update})}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating banner {banner_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update banner")


@router.delete("/admin/banners/{banner_id}")
async def delete_banner(banner_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _banner_id(banner_id)
    try:
        result = db[BANNERS].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Banner not found")
        logger.info(f"Banner deleted: {banner_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting banner {banner_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete banner")
