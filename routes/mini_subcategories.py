from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from database import MINI_SUBCATEGORIES, PROPERTIES, SUBCATEGORIES, get_db
from models import MiniSubcategoryCreate, TaxonomyUpdate
from routes.categories import TAXONOMY_SORT
from utils.filters import paginate, pagination_meta
from utils.moderation import APPROVED
from utils.serialize import parse_object_id, serialize_doc
from utils.taxonomy import active_filter, create_item, toggle_item, update_item
import logging
import re

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mini-subcategories"])


def _mini_id(mini_id: str):
    _id = parse_object_id(mini_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid mini-subcategory ID")
    return _id


@router.get("/mini-subcategories/{subcategory_id}/with-counts")
async def get_mini_subcategories_with_counts(subcategory_id: str, db: Database = Depends(get_db)):
    subcategory_id = parse_object_id(subcategory_id)
    if not subcategory_id:
        raise HTTPException(status_code=400, detail="Invalid subcategoryId")
    try:
        minis = list(db[MINI_SUBCATEGORIES].find(
            {"subcategoryId": str(subcategory_id), "isActive": True}
        ).sort(TAXONOMY_SORT))
        mini_ids = [str(mini["_id"]) for mini in minis]
        counts = db[PROPERTIES].aggregate([
            {"$match": {
                "miniSubcategoryId": {"$in": mini_ids},
                "status": "active",
                "approvalStatus": APPROVED,
            }},
            {"$group": {"_id": "$miniSubcategoryId", "count": {"$sum": 1}}},
        ])
        count_map = {row["_id"]: row["count"] for row in counts}
        for mini in minis:
            mini["propertyCount"] = count_map.get(str(mini["_id"]), 0)
        return {"success": True, "data": serialize_doc(minis)}
    except Exception as e:
        logger.error(f"Error fetching mini-subcategory counts for {subcategory_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch mini-subcategories")


@router.get("/admin/mini-subcategories")
async def list_mini_subcategories(
    search: Optional[str] = None,
    subcategoryId: Optional[str] = None,
    active: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    try:
        query = active_filter(active)
        if subcategoryId:
            query["subcategoryId"] = str(parse_object_id(subcategoryId) or subcategoryId)
        if search and search.strip():
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"slug": {"$regex": pattern, "$options": "i"}},
            ]
        page_num, limit_num, skip = paginate(page, limit)
        total = db[MINI_SUBCATEGORIES].count_documents(query)
        minis = db[MINI_SUBCATEGORIES].find(query).sort(TAXONOMY_SORT).skip(skip).limit(limit_num)
        return {
            "success": True,
            "data": {
                "miniSubcategories": serialize_doc(list(minis)),
                "pagination": pagination_meta(page_num, limit_num, total),
            },
        }
    except Exception as e:
        logger.error(f"Error fetching mini-subcategories: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch mini-subcategories")


@router.post("/admin/mini-subcategories", status_code=201)
async def create_mini_subcategory(body: MiniSubcategoryCreate, admin=Depends(require_admin),
                                  db: Database = Depends(get_db)):
    subcategory_id = parse_object_id(body.subcategoryId)
    if not subcategory_id:
        raise HTTPException(status_code=400, detail="Invalid subcategory ID")
    try:
        if not db[SUBCATEGORIES].find_one({"_id": subcategory_id}, {"_id": 1}):
            raise HTTPException(status_code=404, detail="Subcategory not found")
        mini = create_item(db[MINI_SUBCATEGORIES], body, {"subcategoryId": str(subcategory_id)},
                           scope_field="subcategoryId")
        return {"success": True, "data": serialize_doc(mini)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating mini-subcategory: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create mini-subcategory")


@router.put("/admin/mini-subcategories/{mini_id}")
async def update_mini_subcategory(mini_id: str, body: TaxonomyUpdate, admin=Depends(require_admin),
                                  db: Database = Depends(get_db)):
    _id = _mini_id(mini_id)
    try:
        mini = update_item(db[MINI_SUBCATEGORIES], _id, body, "Mini-subcategory", scope_field="subcategoryId")
        return {"success": True, "data": serialize_doc(mini)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating mini-subcategory {mini_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update mini-subcategory")


@router.patch("/admin/mini-subcategories/{mini_id}/toggle")
async def toggle_mini_subcategory(mini_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _mini_id(mini_id)
    try:
        return {"success": True, "data": {"isActive": toggle_item(db[MINI_SUBCATEGORIES], _id, "Mini-subcategory")}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling mini-subcategory {mini_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to toggle mini-subcategory")


@router.delete("/admin/mini-subcategories/{mini_id}")
async def delete_mini_subcategory(mini_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _mini_id(mini_id)
    try:
        in_use = db[PROPERTIES].count_documents({"miniSubcategoryId": str(_id)})
        if in_use > 0:
            raise HTTPException(
                status_code=400,
                detail=f"Cannot delete mini-subcategory used by {in_use} properties",
            )
        result = db[MINI_SUBCATEGORIES].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Mini-subcategory not found")
        logger.info(f"Mini-subcategory deleted: {mini_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting mini-subcategory {mini_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete mini-subcategory")
