from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from pymongo.database import Database
from typing import Optional
from auth import require_admin
from config import APK_PATH, APK_VERSION
from database import APP_DOWNLOADS, get_db
from utils.file_utils import APK_MAX_SIZE, file_extension, save_file
from datetime import datetime, timedelta
import logging
import os

logger = logging.getLogger(__name__)

router = APIRouter(tags=["app"])

APK_MEDIA_TYPE = "application/vnd.android.package-archive"
DOWNLOAD_URL = "/api/app/download"


def apk_info():
    if not os.path.isfile(APK_PATH):
        return {"available": False, "version": APK_VERSION, "size": None, "lastModified": None,
                "downloadUrl": DOWNLOAD_URL}
    stat = os.stat(APK_PATH)
    return {
        "available": True,
        "version": APK_VERSION,
        "size": stat.st_size,
        "lastModified": datetime.utcfromtimestamp(stat.st_mtime).isoformat(),
        "downloadUrl": DOWNLOAD_URL,
    }


@router.get("/app/info")
async def get_app_info():
    try:
        return {"success": True, "data": apk_info()}
    except Exception as e:
        logger.error(f"Error reading app info: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch app info")


@router.get("/app/download")
async def download_app(request: Request, db: Database = Depends(get_db)):
    if not os.path.isfile(APK_PATH):
        raise HTTPException(status_code=404, detail="App is not available for download")

    try:
        db[APP_DOWNLOADS].insert_one({
            "version": APK_VERSION,
            "ip": request.client.host if request.client else None,
            "userAgent": request.headers.get("user-agent", ""),
            "createdAt": datetime.utcnow(),
        })
    except Exception as e:
        logger.warning(f"Failed to record app download: {str(e)}")

    return FileResponse(
        APK_PATH,
        media_type=APK_MEDIA_TYPE,
        filename=os.path.basename(APK_PATH),
        headers={"Cache-Control": "no-cache"},
    )


@router.post("/admin/app/upload")
async def upload_app(apk: Optional[UploadFile] = File(None), admin=Depends(require_admin)):
    if apk is None or not apk.filename:
        raise HTTPException(status_code=400, detail="No APK file uploaded")
    if file_extension(apk.filename) != ".apk" and apk.content_type != APK_MEDIA_TYPE:
        raise HTTPException(status_code=400, detail="Only APK files are allowed")
    if apk.size is not None and apk.size > APK_MAX_SIZE:
        raise HTTPException(status_code=400, detail="APK exceeds 200MB limit")

    if not await save_file(apk, APK_PATH):
        raise HTTPException(status_code=500, detail="Failed to upload APK")
    logger.info(f"APK uploaded by admin {admin['_id']}: {apk.filename}")
    return {"success": True, "message": "APK uploaded successfully", "data": apk_info()}


@router.get("/admin/app/stats")
async def app_download_stats(admin=Depends(require_admin), db: Database = Depends(get_db)):
    try:
        now = datetime.utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        downloads = db[APP_DOWNLOADS]
        return {
            "success": True,
            "data": {
                "total": downloads.count_documents({}),
                "today": downloads.count_documents({"createdAt": {"$gte": start_of_day}}),
                "week": downloads.count_documents({"createdAt": {"$gte": now - timedelta(days=7)}}),
                "month": downloads.count_documents({"createdAt": {"$gte": now - timedelta(days=30)}}),
            },
        }
    except Exception as e:
        logger.error(f"Error fetching app download stats: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch download stats")
