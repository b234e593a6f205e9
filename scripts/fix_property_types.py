"""Rewrite every stored propertyType through the shared normalizer.

Run from the project root: python -m scripts.fix_property_types
"""
from pymongo.database import Database
from database import PROPERTIES, db
from utils.normalize import normalize_property_type
import logging

logger = logging.getLogger(__name__)


def fix_property_types(database: Database) -> int:
    fixed = 0
    for prop in database[PROPERTIES].find({}, {"propertyType": 1}):
        current = prop.get("propertyType")
        normalized = normalize_property_type(current)
        if normalized and normalized != current:
            database[PROPERTIES].update_one({"_id": prop["_id"]}, {"$set": {"propertyType": normalized}})
            logger.info(f"Property {prop['_id']}: propertyType {current!r} -> {normalized!r}")
            fixed += 1
    return fixed


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    fixed = fix_property_types(db)
    logger.info(f"Fixed propertyType on {fixed} properties.")


if __name__ == "__main__":
    main()
