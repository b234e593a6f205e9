from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from database import CATEGORIES, SUBCATEGORIES, MINI_SUBCATEGORIES, get_db
from utils.file_utils import store_upload, validate_excel
from utils.serialize import parse_object_id
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/taxonomy", tags=["categories"])


def _resolve_target(mini_subcategory_id, subcategory_id, category_id):
    # Most specific level wins
    for value, collection, label in (
        (mini_subcategory_id, MINI_SUBCATEGORIES, "Mini-subcategory"),
        (subcategory_id, SUBCATEGORIES, "Subcategory"),
        (category_id, CATEGORIES, "Category"),
    ):
        if value and value.strip():
            _id = parse_object_id(value.strip())
            if not _id:
                raise HTTPException(status_code=400, detail=f"Invalid {label.lower()} ID")
            return collection, _id, label
    raise HTTPException(
        status_code=400,
        detail="One of miniSubcategoryId, subcategoryId or categoryId is required",
    )


@router.post("/excel")
async def upload_taxonomy_excel(
    file: Optional[UploadFile] = File(None),
    miniSubcategoryId: Optional[str] = Form(None),
    subcategoryId: Optional[str] = Form(None),
    categoryId: Optional[str] = Form(None),
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    collection, _id, label = _resolve_target(miniSubcategoryId, subcategoryId, categoryId)
    try:
        if not db[collection].find_one({"_id": _id}, {"_id": 1}):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        validate_excel(file)
        file_url = await store_upload(file, "category-excel", prefix="excel-")
        excel_file = {"fileName": file.filename, "fileUrl": file_url, "uploadedAt": datetime.utcnow()}
        db[collection].update_one({"_id": _id}, {"$set": {"excelFile": excel_file, "updatedAt": datetime.utcnow()}})
        logger.info(f"Excel file attached to {label.lower()} {_id}: {file_url}")
        return {
            "success": True,
            "data": {"fileName": file.filename, "fileUrl": file_url, "uploadedAt": excel_file["uploadedAt"].isoformat()},
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading excel file for {label.lower()} {_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to upload excel file")
