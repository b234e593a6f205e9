"""Slug and property type normalization shared by the write path, the
public listing filters and the repair script."""

PROPERTY_TYPES = ("residential", "flat", "plot", "commercial", "pg", "agricultural")

# UI/seed aliases -> canonical propertyType stored in MongoDB
TYPE_ALIASES = {
    # PG / Co-living
    "co-living": "pg",
    "coliving": "pg",
    "pg": "pg",
    # Agricultural
    "agricultural-land": "agricultural",
    "agri": "agricultural",
    "agricultural": "agricultural",
    # Commercial family
    "commercial": "commercial",
    "showroom": "commercial",
    "office": "commercial",
    # Residential family
    "residential": "residential",
    "flat": "flat",
    "apartment": "flat",
    # Plot
    "plot": "plot",
}


def normalize_slug(value) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def normalize_property_type(value) -> str:
    token = normalize_slug(value)
    return TYPE_ALIASES.get(token, token)
