# tests/test_normalize.py
"""
Tests for slug and property type normalization
Run: pytest tests/test_normalize.py -v
"""
import pytest

from utils.normalize import PROPERTY_TYPES, TYPE_ALIASES, normalize_property_type, normalize_slug


def test_normalize_slug_trims_and_lowercases():
    assert normalize_slug("  Sector-21 ") == "sector-21"
    assert normalize_slug(None) == ""
    assert normalize_slug(42) == "42"


@pytest.mark.parametrize("alias,expected", [
    ("Co-Living", "pg"),
    ("coliving", "pg"),
    ("agricultural-land", "agricultural"),
    ("AGRI", "agricultural"),
    ("showroom", "commercial"),
    ("office", "commercial"),
    ("apartment", "flat"),
    (" Plot ", "plot"),
])
def test_aliases_map_to_canonical_type(alias, expected):
    assert normalize_property_type(alias) == expected


def test_unknown_type_passes_through_normalized():
    assert normalize_property_type("  Villa ") == "villa"


def test_normalization_is_idempotent():
    """normalize(normalize(x)) == normalize(x) for every alias"""
    for alias in list(TYPE_ALIASES) + list(TYPE_ALIASES.values()):
        once = normalize_property_type(alias)
        assert normalize_property_type(once) == once


def test_aliases_only_target_known_types():
    assert set(TYPE_ALIASES.values()) <= set(PROPERTY_TYPES)
