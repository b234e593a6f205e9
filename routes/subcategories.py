from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from database import CATEGORIES, SUBCATEGORIES, MINI_SUBCATEGORIES, get_db
from models import SubcategoryCreate, TaxonomyUpdate
from routes.categories import TAXONOMY_SORT
from utils.serialize import parse_object_id, serialize_doc
from utils.taxonomy import active_filter, create_item, toggle_item, update_item
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/subcategories", tags=["subcategories"])


def _subcategory_id(subcategory_id: str):
    _id = parse_object_id(subcategory_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid subcategory ID")
    return _id


@router.get("")
async def list_subcategories(categoryId: Optional[str] = None, active: Optional[str] = None,
                             admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        query = active_filter(active)
        if categoryId:
            query["categoryId"] = str(parse_object_id(categoryId) or categoryId)
        subcategories = list(db[SUBCATEGORIES].find(query).sort(TAXONOMY_SORT))
        for sub in subcategories:
            sub["miniSubcategoryCount"] = db[MINI_SUBCATEGORIES].count_documents({"subcategoryId": str(sub["_id"])})
        return {"success": True, "data": serialize_doc(subcategories)}
    except Exception as e:
        logger.error(f"Error fetching subcategories: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch subcategories")


@router.post("", status_code=201)
async def create_subcategory(body: SubcategoryCreate, admin=Depends(require_admin), db: Database = Depends(get_db)):
    category_id = parse_object_id(body.categoryId)
    if not category_id:
        raise HTTPException(status_code=400, detail="Invalid category ID")
    try:
        if not db[CATEGORIES].find_one({"_id": category_id}, {"_id": 1}):
            raise HTTPException(status_code=404, detail="Category not found")
        sub = create_item(db[SUBCATEGORIES], body, {"categoryId": str(category_id)}, scope_field="categoryId")
        return {"success": True, "data": serialize_doc(sub)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating subcategory: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create subcategory")


@router.put("/{subcategory_id}")
async def update_subcategory(subcategory_id: str, body: TaxonomyUpdate, admin=Depends(require_admin),
                             db: Database = Depends(get_db)):
    _id = _subcategory_id(subcategory_id)
    try:
        sub = update_item(db[SUBCATEGORIES], _id, body, "Subcategory", scope_field="categoryId")
        return {"success": True, "data": serialize_doc(sub)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating subcategory {subcategory_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update subcategory")


@router.patch("/{subcategory_id}/toggle")
async def toggle_subcategory(subcategory_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _subcategory_id(subcategory_id)
    try:
        return {"success": True, "data": {"isActive": toggle_item(db[SUBCATEGORIES], _id, "Subcategory")}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling subcategory {subcategory_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to toggle subcategory")


@router.delete("/{subcategory_id}")
async def delete_subcategory(subcategory_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _subcategory_id(subcategory_id)
    try:
        if db[MINI_SUBCATEGORIES].count_documents({"subcategoryId": str(_id)}) > 0:
            raise HTTPException(status_code=400, detail="Cannot delete subcategory with existing mini-subcategories")
        result = db[SUBCATEGORIES].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Subcategory not found")
        logger.info(f"Subcategory deleted: {subcategory_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting subcategory {subcategory_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete subcategory")
