# tests/test_filters.py
"""
Tests for the public listing filter, sorting and pagination helpers
Run: pytest tests/test_filters.py -v
"""
from pymongo import ASCENDING, DESCENDING

from utils.filters import TAB_GROUPS, build_property_filter, build_sort, paginate, pagination_meta, to_int


def test_base_filter_only_shows_active_approved():
    query = build_property_filter({})
    assert query["status"] == "active"
    assert {"approvalStatus": "approved"} in query["$or"]
    assert "propertyType" not in query


def test_category_alias_becomes_property_type():
    assert build_property_filter({"category": "Co-Living"})["propertyType"] == "pg"
    assert build_property_filter({"propertyType": "apartment"})["propertyType"] == "flat"


def test_explicit_property_type_wins_over_category_alias():
    query = build_property_filter({"category": "plot", "propertyType": "commercial"})
    assert query["propertyType"] == "commercial"


def test_buy_tab_overrides_property_type_and_keeps_moderation():
    query = build_property_filter({"category": "buy", "propertyType": "commercial"})
    assert "propertyType" not in query
    moderation, tab = query["$and"]
    assert {"approvalStatus": "approved"} in moderation["$or"]
    assert tab["$or"] == [{"propertyType": t, "priceType": p} for t, p in TAB_GROUPS["buy"]]
    assert all(pair["priceType"] == "sale" for pair in tab["$or"])


def test_rent_tab_pairs_are_rentals():
    query = build_property_filter({"category": "rent"})
    assert all(pair["priceType"] == "rent" for pair in query["$and"][1]["$or"])


def test_mini_subcategory_id_vs_slug():
    mini_id = "65a1b2c3d4e5f6a7b8c9d0e1"
    assert build_property_filter({"miniSubcategory": mini_id})["miniSubcategoryId"] == mini_id
    # 12 characters, must not be taken for an ObjectId
    query = build_property_filter({"miniSubcategory": "Agricultural"})
    assert query["miniSubcategory"] == "agricultural"
    assert "miniSubcategoryId" not in query


def test_location_and_sub_category_are_normalized():
    query = build_property_filter({"sector": " Sector 5 ", "mohalla": "Old Town", "subcategory": "Villas"})
    assert query["location.sector"] == "sector 5"
    assert query["location.mohalla"] == "old town"
    assert query["subCategory"] == "villas"


def test_bedrooms_and_ranges():
    query = build_property_filter({"bedrooms": "4+", "bathrooms": "2", "minPrice": "1000", "maxArea": "1500.7"})
    assert query["specifications.bedrooms"] == {"$gte": 4}
    assert query["specifications.bathrooms"] == 2
    assert query["price"] == {"$gte": 1000}
    assert query["specifications.area"] == {"$lte": 1500}


def test_garbage_numbers_are_ignored():
    query = build_property_filter({"bedrooms": "many", "minPrice": "cheap"})
    assert "specifications.bedrooms" not in query
    assert "price" not in query


def test_to_int():
    assert to_int("12.9") == 12
    assert to_int("abc") is None
    assert to_int(None) is None
    assert to_int("nan") is None


def test_sort_options():
    assert build_sort("price_asc") == [("price", ASCENDING)]
    assert build_sort(None) == [("createdAt", DESCENDING)]
    assert build_sort("unknown") == [("createdAt", DESCENDING)]


def test_paginate_clamps_values():
    assert paginate(None, None) == (1, 20, 0)
    assert paginate("3", "10") == (3, 10, 20)
    assert paginate("-1", "1000") == (1, 100, 0)
    assert pagination_meta(2, 10, 25) == {"page": 2, "limit": 10, "total": 25, "pages": 3}
