from fastapi import APIRouter, Depends, HTTPException
from pymongo import ASCENDING
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from database import CATEGORIES, SUBCATEGORIES, MINI_SUBCATEGORIES, get_db
from models import CategoryCreate, TaxonomyUpdate
from utils.serialize import parse_object_id, serialize_doc
from utils.taxonomy import active_filter, create_item, toggle_item, update_item
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["categories"])

TAXONOMY_SORT = [("sortOrder", ASCENDING), ("name", ASCENDING)]


def _category_id(category_id: str):
    _id = parse_object_id(category_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid category ID")
    return _id


# Public

@router.get("/categories")
async def get_categories(active: Optional[str] = None, type: Optional[str] = None, db: Database = Depends(get_db)):
    try:
        query = active_filter(active)
        if type:
            query["type"] = type
        categories = db[CATEGORIES].find(query).sort(TAXONOMY_SORT)
        return {"success": True, "data": serialize_doc(list(categories))}
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/categories/{slug}")
async def get_category_by_slug(slug: str, db: Database = Depends(get_db)):
    try:
        category = db[CATEGORIES].find_one({"slug": slug.lower()})
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        subcategories = db[SUBCATEGORIES].find(
            {"categoryId": str(category["_id"]), "isActive": True}
        ).sort(TAXONOMY_SORT)
        category["subcategories"] = list(subcategories)
        return {"success": True, "data": serialize_doc(category)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching category {slug}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch category")


@router.get("/subcategories")
async def get_subcategories(categorySlug: Optional[str] = None, active: Optional[str] = None,
                            db: Database = Depends(get_db)):
    if not categorySlug:
        raise HTTPException(status_code=400, detail="categorySlug parameter is required")
    try:
        category = db[CATEGORIES].find_one({"slug": categorySlug.lower()})
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        query = {"categoryId": str(category["_id"]), **active_filter(active)}
        subcategories = db[SUBCATEGORIES].find(query).sort(TAXONOMY_SORT)
        return {"success": True, "data": serialize_doc(list(subcategories))}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching subcategories for {categorySlug}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch subcategories")


@router.get("/subcategories/{subcategory_id}/mini-subcategories")
async def get_mini_subcategories_by_subcategory(subcategory_id: str, db: Database = Depends(get_db)):
    subcategory_id = parse_object_id(subcategory_id)
    if not subcategory_id:
        raise HTTPException(status_code=400, detail="Invalid subcategoryId")
    try:
        minis = db[MINI_SUBCATEGORIES].find(
            {"subcategoryId": str(subcategory_id), "isActive": True}
        ).sort(TAXONOMY_SORT)
        return {"success": True, "data": serialize_doc(list(minis))}
    except Exception as e:
        logger.error(f"Error fetching mini-subcategories for {subcategory_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch mini-subcategories")


# Admin

@router.get("/admin/categories")
async def admin_list_categories(active: Optional[str] = None, admin=Depends(require_admin),
                                db: Database = Depends(get_db)):
    try:
        categories = list(db[CATEGORIES].find(active_filter(active)).sort(TAXONOMY_SORT))
        for category in categories:
            category["subcategoryCount"] = db[SUBCATEGORIES].count_documents({"categoryId": str(category["_id"])})
        return {"success": True, "data": serialize_doc(categories)}
    except Exception as e:
        logger.error(f"Error fetching admin categories: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.post("/admin/categories", status_code=201)
async def create_category(body: CategoryCreate, admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        category = create_item(db[CATEGORIES], body, {})
        return {"success": True, "data": serialize_doc(category)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating category: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create category")


@router.put("/admin/categories/{category_id}")
async def update_category(category_id: str, body: TaxonomyUpdate, admin=Depends(require_admin),
                          db: Database = Depends(get_db)):
    _id = _category_id(category_id)
    try:
        category = update_item(db[CATEGORIES], _id, body, "Category")
        return {"success": True, "data": serialize_doc(category)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating category {category_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update category")


@router.patch("/admin/categories/{category_id}/toggle")
async def toggle_category(category_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _category_id(category_id)
    try:
        return {"success": True, "data": {"isActive": toggle_item(db[CATEGORIES], _id, "Category")}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling category {category_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to toggle category")


@router.delete("/admin/categories/{category_id}")
async def delete_category(category_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = _category_id(category_id)
    try:
        if db[SUBCATEGORIES].count_documents({"categoryId": str(_id)}) > 0:
            raise HTTPException(status_code=400, detail="Cannot delete category with existing subcategories")
        result = db[CATEGORIES].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Category not found")
        logger.info(f"Category deleted: {category_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting category {category_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete category")
