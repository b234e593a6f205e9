from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from typing import List, Optional
from auth import get_optional_user, require_admin
from database import BLOGS, get_db
from utils.file_utils import store_upload, validate_image
from utils.filters import paginate, pagination_meta
from utils.serialize import parse_object_id, serialize_doc
from utils.slugs import ensure_unique_slug, slugify
from datetime import datetime
import logging
import json

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blogs"])

PUBLISHED = "published"
DRAFT = "draft"
PUBLISH_STATUSES = (DRAFT, PUBLISHED)
EXCERPT_LENGTH = 200
META_DESCRIPTION_LENGTH = 160


def parse_list(value) -> List[str]:
    """Accept a JSON array or comma separated text."""
    if value is None or str(value).strip() == "":
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        parsed = str(value).split(",")
    if not isinstance(parsed, list):
        parsed = [parsed]
    return [str(item).strip() for item in parsed if str(item).strip()]


def parse_publish_status(value: Optional[str]) -> str:
    status = (value or DRAFT).strip().lower()
    if status not in PUBLISH_STATUSES:
        raise HTTPException(status_code=400, detail="publishStatus must be 'draft' or 'published'")
    return status


def is_admin(user) -> bool:
    return bool(user) and user.get("userType") == "admin"


def visibility_filter(user):
    return {} if is_admin(user) else {"publishStatus": PUBLISHED}


async def store_featured_image(featured_image: Optional[UploadFile]) -> Optional[str]:
    if featured_image is None or not featured_image.filename:
        return None
    validate_image(featured_image)
    return await store_upload(featured_image, "blogs", prefix="blog-")


@router.get("/blogs")
async def get_blogs(page: Optional[str] = None, limit: Optional[str] = None,
                    user=Depends(get_optional_user), db: Database = Depends(get_db)):
    try:
        query = visibility_filter(user)
        page_num, limit_num, skip = paginate(page, limit, default_limit=10)
        total = db[BLOGS].count_documents(query)
        blogs = db[BLOGS].find(query).sort("createdAt", DESCENDING).skip(skip).limit(limit_num)
        return {
            "success": True,
            "data": {
                "blogs": serialize_doc(list(blogs)),
                "pagination": pagination_meta(page_num, limit_num, total),
            },
        }
    except Exception as e:
        logger.error(f"Error fetching blogs: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch blogs")


@router.get("/blogs/{slug}")
async def get_blog(slug: str, user=Depends(get_optional_user), db: Database = Depends(get_db)):
    try:
        blog = db[BLOGS].find_one_and_update(
            {"slug": slug.lower(), **visibility_filter(user)},
            {"$inc": {"views": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if not blog:
            raise HTTPException(status_code=404, detail="Blog not found")
        return {"success": True, "data": serialize_doc(blog)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching blog {slug}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch blog")


@router.post("/admin/blogs", status_code=201)
async def create_blog(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    metaDescription: Optional[str] = Form(None),
    metaKeywords: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    publishStatus: Optional[str] = Form(None),
    featuredImage: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    if not title or not title.strip() or not content or not content.strip():
        raise HTTPException(status_code=400, detail="Title and content are required")
    status = parse_publish_status(publishStatus)
    base_slug = slugify(slug or title)
    if not base_slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug from title")
    try:
        image_url = await store_featured_image(featuredImage)
        now = datetime.utcnow()
        blog = {
            "title": title.strip(),
            "slug": ensure_unique_slug(db[BLOGS], base_slug),
            "content": content,
            "excerpt": excerpt or content[:EXCERPT_LENGTH],
            "metaDescription": metaDescription or content[:META_DESCRIPTION_LENGTH],
            "metaKeywords": parse_list(metaKeywords),
            "tags": parse_list(tags),
            "featuredImage": image_url,
            "authorId": str(admin["_id"]),
            "authorName": admin.get("name", ""),
            "publishStatus": status,
            "publishedAt": now if status == PUBLISHED else None,
            "views": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        result = db[BLOGS].insert_one(blog)
        blog["_id"] = result.inserted_id
        logger.info(f"Blog created: {result.inserted_id} ({blog['slug']})")
        return {"success": True, "data": serialize_doc(blog)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating blog: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create blog")


@router.put("/admin/blogs/{blog_id}")
async def update_blog(
    blog_id: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    metaDescription: Optional[str] = Form(None),
    metaKeywords: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    publishStatus: Optional[str] = Form(None),
    featuredImage: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    _id = parse_object_id(blog_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid blog ID")
    try:
        blog = db[BLOGS].find_one({"_id": _id})
        if not blog:
            raise HTTPException(status_code=404, detail="Blog not found")

        update = {"updatedAt": datetime.utcnow()}
        if title is not None:
            if not title.strip():
                raise HTTPException(status_code=400, detail="Title cannot be empty")
            update["title"] = title.strip()
        if content is not None:
            if not content.strip():
                raise HTTPException(status_code=400, detail="Content cannot be empty")
            update["content"] = content
        if slug is not None:
            new_slug = slugify(slug)
            if not new_slug:
                raise HTTPException(status_code=400, detail="Slug cannot be empty")
            if new_slug != blog.get("slug"):
                update["slug"] = ensure_unique_slug(db[BLOGS], new_slug, exclude_id=_id)
        if excerpt is not None:
            update["excerpt"] = excerpt
        if metaDescription is not None:
            update["metaDescription"] = metaDescription
        if metaKeywords is not None:
            update["metaKeywords"] = parse_list(metaKeywords)
        if tags is not None:
            update["tags"] = parse_list(tags)
        if publishStatus is not None:
            update["publishStatus"] = parse_publish_status(publishStatus)
            if update["publishStatus"] == PUBLISHED and not blog.get("publishedAt"):
                update["publishedAt"] = update["updatedAt"]
        image_url = await store_featured_image(featuredImage)
        if image_url:
            update["featuredImage"] = image_url

        db[BLOGS].update_one({"_id": _id}, {"$set": update})
        logger.info(f"Blog updated: {blog_id}")
        return {"success": True, "data": serialize_doc({**blog, **update})}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating blog {blog_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update blog")


@router.delete("/admin/blogs/{blog_id}")
async def delete_blog(blog_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    _id = parse_object_id(blog_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid blog ID")
    try:
        result = db[BLOGS].delete_one({"_id": _id})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Blog not found")
        logger.info(f"Blog deleted: {blog_id}")
        return {"success": True, "data": {"deleted": True}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting blog {blog_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete blog")
