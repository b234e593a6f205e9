from bson import ObjectId
from pymongo.collection import Collection
from typing import Dict, Optional
import re


def slugify(text: str) -> str:
    slug = str(text or "").strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9\-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def ensure_unique_slug(
    collection: Collection,
    base_slug: str,
    scope: Optional[Dict] = None,
    exclude_id: Optional[ObjectId] = None,
) -> str:
    """Return base_slug, or base_slug-2, base_slug-3, ... whichever is free within scope."""
    slug = base_slug
    counter = 2
    while True:
        query = {**(scope or {}), "slug": slug}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if not collection.find_one(query, {"_id": 1}):
            return slug
        slug = f"{base_slug}-{counter}"
        counter += 1


def slug_taken(
    collection: Collection,
    slug: str,
    scope: Optional[Dict] = None,
    exclude_id: Optional[ObjectId] = None,
) -> bool:
    query = {**(scope or {}), "slug": slug}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    return collection.find_one(query, {"_id": 1}) is not None
