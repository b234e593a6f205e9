# tests/test_slugs.py
"""
Tests for slug generation and scoped uniqueness
Run: pytest tests/test_slugs.py -v
"""
from utils.slugs import ensure_unique_slug, slug_taken, slugify


def test_slugify():
    assert slugify("  Luxury   Villas & Homes ") == "luxury-villas-homes"
    assert slugify("PG / Co-Living") == "pg-co-living"
    assert slugify("--a--b--") == "a-b"
    assert slugify("!!!") == ""


def test_unique_slug_suffixes(db):
    collection = db["categories"]
    assert ensure_unique_slug(collection, "plots") == "plots"
    collection.insert_one({"slug": "plots"})
    assert ensure_unique_slug(collection, "plots") == "plots-2"
    collection.insert_one({"slug": "plots-2"})
    assert ensure_unique_slug(collection, "plots") == "plots-3"


def test_unique_slug_is_scoped(db):
    collection = db["subcategories"]
    collection.insert_one({"categoryId": "a", "slug": "villas"})
    assert ensure_unique_slug(collection, "villas", {"categoryId": "b"}) == "villas"
    assert ensure_unique_slug(collection, "villas", {"categoryId": "a"}) == "villas-2"


def test_slug_taken_excludes_self(db):
    collection = db["blogs"]
    _id = collection.insert_one({"slug": "hello"}).inserted_id
    assert slug_taken(collection, "hello")
    assert not slug_taken(collection, "hello", exclude_id=_id)
