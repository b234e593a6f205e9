"""One-time migration of stored taxonomy documents to the canonical shape.

- ``active`` becomes ``isActive`` and ``order`` becomes ``sortOrder``;
  the legacy fields are removed.
- Subcategories embedded in ``categories.subcategories`` move to the
  ``subcategories`` collection, keyed by ``categoryId``.

Run from the project root: python -m scripts.migrate_taxonomy
"""
from pymongo.database import Database
from database import CATEGORIES, SUBCATEGORIES, MINI_SUBCATEGORIES, db
from utils.slugs import ensure_unique_slug, slugify
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

LEGACY_FIELDS = {"active": "isActive", "order": "sortOrder"}


def canonical_fields(doc: dict) -> dict:
    update = {}
    for legacy, canonical in LEGACY_FIELDS.items():
        if legacy in doc and canonical not in doc:
            update[canonical] = doc[legacy]
    if "isActive" not in doc and "isActive" not in update:
        update["isActive"] = True
    if "sortOrder" not in doc and "sortOrder" not in update:
        update["sortOrder"] = 0
    return update


def migrate_flags(database: Database, collection_name: str) -> int:
    migrated = 0
    collection = database[collection_name]
    for doc in collection.find({}):
        update = {"$set": canonical_fields(doc)}
        unset = {legacy: "" for legacy in LEGACY_FIELDS if legacy in doc}
        if unset:
            update["$unset"] = unset
        if not update["$set"]:
            del update["$set"]
        if update:
            collection.update_one({"_id": doc["_id"]}, update)
            migrated += 1
    logger.info(f"{collection_name}: migrated {migrated} documents")
    return migrated


def extract_embedded_subcategories(database: Database) -> int:
    moved = 0
    for category in database[CATEGORIES].find({"subcategories": {"$exists": True}}):
        category_id = str(category["_id"])
        for embedded in category.get("subcategories") or []:
            if not isinstance(embedded, dict) or not embedded.get("name"):
                continue
            base_slug = slugify(embedded.get("slug") or embedded["name"])
            if not base_slug:
                continue
            now = datetime.utcnow()
            sub = {
                "categoryId": category_id,
                "name": embedded["name"],
                "slug": ensure_unique_slug(database[SUBCATEGORIES], base_slug, {"categoryId": category_id}),
                "icon": embedded.get("icon", ""),
                "iconUrl": embedded.get("iconUrl", ""),
                "description": embedded.get("description", ""),
                **canonical_fields(embedded),
                "createdAt": embedded.get("createdAt", now),
                "updatedAt": now,
            }
            database[SUBCATEGORIES].insert_one(sub)
            moved += 1
        database[CATEGORIES].update_one({"_id": category["_id"]}, {"$unset": {"subcategories": ""}})
    logger.info(f"Moved {moved} embedded subcategories")
    return moved


def migrate(database: Database) -> None:
    extract_embedded_subcategories(database)
    for name in (CATEGORIES, SUBCATEGORIES, MINI_SUBCATEGORIES):
        migrate_flags(database, name)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    migrate(db)
    logger.info("Taxonomy migration complete.")


if __name__ == "__main__":
    main()
