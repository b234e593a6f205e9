"""Create/update/toggle helpers shared by the three taxonomy levels.

Categories, subcategories and mini-subcategories live in their own
collections. Slugs are unique globally for categories and within the
parent (``scope_field``) for the lower levels.
"""
from bson import ObjectId
from datetime import datetime
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from typing import Dict, Optional
from utils.slugs import ensure_unique_slug, slug_taken, slugify
import logging

logger = logging.getLogger(__name__)


def active_filter(active: Optional[str]) -> Dict:
    if active is None or active == "":
        return {}
    return {"isActive": str(active).lower() == "true"}


def create_item(collection: Collection, body: BaseModel, extra: Dict, scope_field: Optional[str] = None) -> Dict:
    data = body.model_dump()
    base_slug = slugify(data.pop("slug", None) or data["name"])
    if not base_slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug from name")
    scope = {scope_field: extra[scope_field]} if scope_field else None
    now = datetime.utcnow()
    doc = {
        **data,
        **extra,
        "slug": ensure_unique_slug(collection, base_slug, scope),
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = collection.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="An item with this slug already exists")
    doc["_id"] = result.inserted_id
    logger.info(f"Created {collection.name} {result.inserted_id} with slug {doc['slug']}")
    return doc


def update_item(collection: Collection, item_id: ObjectId, body: BaseModel, label: str,
                scope_field: Optional[str] = None) -> Dict:
    item = collection.find_one({"_id": item_id})
    if not item:
        raise HTTPException(status_code=404, detail=f"{label} not found")

    data = body.model_dump(exclude_unset=True, exclude_none=True)
    if "slug" in data:
        data["slug"] = slugify(data["slug"])
        if not data["slug"]:
            raise HTTPException(status_code=400, detail="Slug cannot be empty")
        scope = {scope_field: item.get(scope_field)} if scope_field else None
        if slug_taken(collection, data["slug"], scope, exclude_id=item_id):
            raise HTTPException(status_code=400, detail=f"{label} with this slug already exists")

    data["updatedAt"] = datetime.utcnow()
    collection.update_one({"_id": item_id}, {"$set": data})
    return {**item, **data}


def toggle_item(collection: Collection, item_id: ObjectId, label: str) -> bool:
    item = collection.find_one({"_id": item_id}, {"isActive": 1})
    if not item:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    is_active = not item.get("isActive", True)
    collection.update_one({"_id": item_id}, {"$set": {"isActive": is_active, "updatedAt": datetime.utcnow()}})
    return is_active
