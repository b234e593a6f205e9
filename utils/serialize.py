from bson import ObjectId
from datetime import datetime
import re

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def serialize_doc(value):
    """Make a MongoDB document JSON friendly: ObjectId -> str, datetime -> ISO string."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_doc(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_doc(item) for item in value]
    return value


def is_object_id(value) -> bool:
    # ObjectId.is_valid also accepts any 12 character string
    return bool(value) and bool(OBJECT_ID_RE.match(str(value)))


def parse_object_id(value):
    """ObjectId for a 24 hex character id, otherwise None."""
    if is_object_id(value):
        return ObjectId(str(value))
    return None
