from pymongo import ASCENDING, DESCENDING
from typing import Dict, List, Mapping, Optional, Tuple
from utils.normalize import TYPE_ALIASES, normalize_property_type, normalize_slug
from utils.serialize import is_object_id
import math

# Top tab groupings: (propertyType, priceType) pairs
TAB_GROUPS = {
    "buy": [("residential", "sale"), ("plot", "sale"), ("flat", "sale")],
    "rent": [("residential", "rent"), ("flat", "rent"), ("commercial", "rent")],
}

PUBLIC_VISIBILITY = {
    "status": "active",
    "$or": [
        {"approvalStatus": "approved"},
        {"approvalStatus": {"$exists": False}},
    ],
}

SORT_OPTIONS = {
    "price_asc": [("price", ASCENDING)],
    "price_desc": [("price", DESCENDING)],
    "area_desc": [("specifications.area", DESCENDING)],
    "date_asc": [("createdAt", ASCENDING)],
}
DEFAULT_SORT = [("createdAt", DESCENDING)]


def _first(params: Mapping, *keys) -> Optional[str]:
    for key in keys:
        value = params.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def to_int(value) -> Optional[int]:
    """Integer part of a numeric string, or None when it doesn't parse."""
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return int(number) if math.isfinite(number) else None


def _range(min_value, max_value) -> Optional[Dict]:
    bounds = {}
    low, high = to_int(min_value), to_int(max_value)
    if low is not None:
        bounds["$gte"] = low
    if high is not None:
        bounds["$lte"] = high
    return bounds or None


def build_property_filter(params: Mapping) -> Dict:
    """Build the MongoDB filter for the public property listing."""
    category = normalize_slug(_first(params, "category"))
    property_type = normalize_slug(_first(params, "propertyType"))

    if not property_type and category in TYPE_ALIASES:
        property_type = category
    property_type = normalize_property_type(property_type)

    query = {
        "status": PUBLIC_VISIBILITY["status"],
        "$or": list(PUBLIC_VISIBILITY["$or"]),
    }

    if category in TAB_GROUPS:
        # Tabs override any explicit propertyType, moderation still applies
        tab = [{"propertyType": ptype, "priceType": price_type} for ptype, price_type in TAB_GROUPS[category]]
        query["$and"] = [{"$or": query.pop("$or")}, {"$or": tab}]
    elif property_type:
        query["propertyType"] = property_type

    sub_category = _first(params, "subCategory", "subcategory", "sub")
    if sub_category:
        query["subCategory"] = normalize_slug(sub_category)

    mini = _first(params, "miniSubcategoryId", "miniSubcategory")
    if mini:
        if is_object_id(mini):
            query["miniSubcategoryId"] = mini
        else:
            query["miniSubcategory"] = normalize_slug(mini)

    for param, field in (
        ("priceType", "priceType"),
        ("sector", "location.sector"),
        ("mohalla", "location.mohalla"),
        ("landmark", "location.landmark"),
    ):
        value = _first(params, param)
        if value:
            query[field] = normalize_slug(value)

    bedrooms = _first(params, "bedrooms")
    if bedrooms:
        if bedrooms == "4+":
            query["specifications.bedrooms"] = {"$gte": 4}
        elif to_int(bedrooms) is not None:
            query["specifications.bedrooms"] = to_int(bedrooms)

    bathrooms = to_int(_first(params, "bathrooms"))
    if bathrooms is not None:
        query["specifications.bathrooms"] = bathrooms

    price = _range(_first(params, "minPrice"), _first(params, "maxPrice"))
    if price:
        query["price"] = price

    area = _range(_first(params, "minArea"), _first(params, "maxArea"))
    if area:
        query["specifications.area"] = area

    return query


def build_sort(sort_by: Optional[str]) -> List[Tuple[str, int]]:
    return SORT_OPTIONS.get(normalize_slug(sort_by), DEFAULT_SORT)


def paginate(page=None, limit=None, default_limit: int = 20, max_limit: int = 100) -> Tuple[int, int, int]:
    """Return (page, limit, skip) clamped to sane bounds."""
    page_num = to_int(page) or 1
    limit_num = to_int(limit) or default_limit
    page_num = max(1, page_num)
    limit_num = min(max(1, limit_num), max_limit)
    return page_num, limit_num, (page_num - 1) * limit_num


def pagination_meta(page: int, limit: int, total: int) -> Dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
