import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException, UploadFile
from functools import lru_cache
from config import UPLOAD_DIR, UPLOAD_BACKEND, S3_BUCKET_NAME, AWS_REGION
import logging
import os
import uuid

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE_MAX_SIZE = 5 * MB
EXCEL_MAX_SIZE = 10 * MB
APK_MAX_SIZE = 200 * MB

EXCEL_MIME_TYPES = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
)
EXCEL_EXTENSIONS = (".xlsx", ".xls")


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client(
        's3',
        aws_access_key_id=os.getenv('AWS_ACCESS_KEY'),
        aws_secret_access_key=os.getenv('AWS_SECRET_KEY'),
        region_name=AWS_REGION,
    )


def secure_filename(filename: str, prefix: str = ""):
    ext = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
    name = f"{prefix}{uuid.uuid4()}"
    return f"{name}.{ext}" if ext else name


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def validate_image(file: UploadFile):
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Only image files are allowed: {file.filename}")
    if file.size is not None and file.size > IMAGE_MAX_SIZE:
        raise HTTPException(status_code=400, detail=f"Image {file.filename} exceeds 5MB limit")


def validate_excel(file: UploadFile):
    if file.content_type not in EXCEL_MIME_TYPES and file_extension(file.filename) not in EXCEL_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Only Excel files are allowed")
    if file.size is not None and file.size > EXCEL_MAX_SIZE:
        raise HTTPException(status_code=400, detail=f"File {file.filename} exceeds 10MB limit")


async def save_file_to_s3(file: UploadFile, bucket_name: str, file_path: str):
    try:
        get_s3_client().upload_fileobj(file.file, bucket_name, file_path)
        url = f"https://{bucket_name}.s3.amazonaws.com/{file_path}"
        logger.info(f"Successfully uploaded file to S3: {url}")
        return url
    except ClientError as e:
        logger.error(f"Failed to upload file to S3: {str(e)}")
        return None


async def save_file(file: UploadFile, file_path: str):
    try:
        os.makedirs(os.path.dirname(file_path) or '.', exist_ok=True)
        with open(file_path, "wb") as buffer:
            chunk_size = 1024 * 1024  # 1MB chunks
            while content := await file.read(chunk_size):
                buffer.write(content)
        logger.info(f"Successfully saved file: {file_path}")
        return True
    except Exception as e:
        logger.error(f"Failed to save file {file.filename} to {file_path}: {str(e)}")
        return False


async def store_upload(file: UploadFile, subdir: str, prefix: str = "") -> str:
    """Persist an upload and return its public URL."""
    safe_name = secure_filename(file.filename, prefix)
    if UPLOAD_BACKEND == "s3":
        url = await save_file_to_s3(file, S3_BUCKET_NAME, f"{subdir}/{safe_name}")
        if not url:
            raise HTTPException(status_code=500, detail=f"Failed to upload {file.filename}")
        return url

    if not await save_file(file, os.path.join(UPLOAD_DIR, subdir, safe_name)):
        raise HTTPException(status_code=500, detail=f"Failed to upload {file.filename}")
    return f"/uploads/{subdir}/{safe_name}"


async def store_images(files, subdir: str, prefix: str = ""):
    files = [img for img in files or [] if img.filename]
    for img in files:
        validate_image(img)
    return [await store_upload(img, subdir, prefix) for img in files]
