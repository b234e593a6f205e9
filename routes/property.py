from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form, Request
from pymongo import DESCENDING
from pymongo.database import Database
from typing import Dict, List, Mapping, Optional
from auth import get_current_user
from database import PROPERTIES, MINI_SUBCATEGORIES, get_db
from mailer import Mailer, get_mailer
from utils.file_utils import store_images
from utils.filters import build_property_filter, build_sort, paginate, pagination_meta, to_int
from utils.moderation import initial_moderation, moderation_after_edit
from utils.normalize import normalize_property_type, normalize_slug
from utils.quota import FreeListingLimitReached, check_free_listing_quota
from utils.serialize import parse_object_id, serialize_doc
from datetime import datetime
import logging
import json

logger = logging.getLogger(__name__)

router = APIRouter(tags=["properties"])

PRICE_TYPES = ("sale", "rent")
REQUIRED_FIELDS = ("title", "description", "price", "priceType", "propertyType")
SPEC_NUMBER_FIELDS = ("bedrooms", "bathrooms", "area", "floor", "totalFloors")
LOCATION_KEYS = ("sector", "mohalla", "landmark")


def safe_json(value, fallback):
    if value is None or value == "":
        return fallback
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return fallback
    return parsed if isinstance(parsed, type(fallback)) else fallback


def parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "1", "on")
    return bool(value)


def build_specifications(specs: Dict, existing: Optional[Dict] = None) -> Dict:
    existing = existing or {}
    result = {**existing, **specs}
    for field in SPEC_NUMBER_FIELDS:
        value = to_int(specs.get(field))
        result[field] = value if value is not None else existing.get(field)
    result["parking"] = parse_bool(specs.get("parking", existing.get("parking", False)))
    return result


def build_location(location: Dict) -> Dict:
    # Stored lowercase so the public filters match on exact values
    return {
        **location,
        **{key: normalize_slug(location[key]) for key in LOCATION_KEYS if location.get(key)},
    }


def list_properties(db: Database, params: Mapping):
    query = build_property_filter(params)
    sort = build_sort(params.get("sortBy") or params.get("sort"))
    page, limit, skip = paginate(params.get("page"), params.get("limit"))
    logger.debug(f"Filter properties: {query}")

    properties = list(db[PROPERTIES].find(query).sort(sort).skip(skip).limit(limit))
    total = db[PROPERTIES].count_documents(query)
    return {
        "success": True,
        "data": {
            "properties": serialize_doc(properties),
            "pagination": pagination_meta(page, limit, total),
        },
    }


def resolve_mini_subcategory(db: Database, mini_subcategory_id: Optional[str]):
    if not mini_subcategory_id:
        return None
    mini_id = parse_object_id(mini_subcategory_id)
    if not mini_id:
        raise HTTPException(status_code=400, detail="Invalid miniSubcategoryId")
    mini = db[MINI_SUBCATEGORIES].find_one({"_id": mini_id})
    if not mini:
        raise HTTPException(status_code=404, detail="Mini-subcategory not found")
    return mini


def parse_price(price) -> int:
    # Whole, non-negative numbers only; "12.5" or "1e3" are rejected
    text = str(price or "").strip()
    if not text.isdecimal():
        raise HTTPException(status_code=400, detail="Price must be a whole number")
    return int(text)


def parse_price_type(price_type) -> str:
    value = normalize_slug(price_type)
    if value not in PRICE_TYPES:
        raise HTTPException(status_code=400, detail="priceType must be 'sale' or 'rent'")
    return value


@router.get("/properties")
async def get_properties(request: Request, db: Database = Depends(get_db)):
    try:
        return list_properties(db, dict(request.query_params))
    except Exception as e:
        logger.error(f"Error fetching properties: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch properties")


@router.get("/properties/featured")
async def get_featured_properties(db: Database = Depends(get_db)):
    try:
        properties = db[PROPERTIES].find(
            {"status": "active", "featured": True, "approvalStatus": "approved"}
        ).sort("createdAt", DESCENDING).limit(10)
        return {"success": True, "data": serialize_doc(list(properties))}
    except Exception as e:
        logger.error(f"Error fetching featured properties: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch featured properties")


@router.get("/categories/{category}/properties")
async def get_category_properties(category: str, request: Request, db: Database = Depends(get_db)):
    try:
        return list_properties(db, {**dict(request.query_params), "category": category})
    except Exception as e:
        logger.error(f"Error listing properties for category {category}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list properties")


@router.get("/categories/{category}/{sub}/properties")
async def get_subcategory_properties(category: str, sub: str, request: Request, db: Database = Depends(get_db)):
    try:
        params = {**dict(request.query_params), "category": category, "subCategory": sub}
        return list_properties(db, params)
    except Exception as e:
        logger.error(f"Error listing properties for {category}/{sub}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list properties")


@router.get("/properties/{property_id}")
async def get_property(property_id: str, db: Database = Depends(get_db)):
    _id = parse_object_id(property_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid property ID")
    try:
        prop = db[PROPERTIES].find_one({"_id": _id})
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        db[PROPERTIES].update_one({"_id": _id}, {"$inc": {"views": 1}})
        prop["views"] = prop.get("views", 0) + 1
        return {"success": True, "data": serialize_doc(prop)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching property {property_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch property")


@router.post("/properties", status_code=201)
async def create_property(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    priceType: Optional[str] = Form(None),
    propertyType: Optional[str] = Form(None),
    subCategory: Optional[str] = Form(None),
    miniSubcategoryId: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    specifications: Optional[str] = Form(None),
    amenities: Optional[str] = Form(None),
    contactInfo: Optional[str] = Form(None),
    premium: Optional[str] = Form(None),
    contactVisible: Optional[str] = Form(None),
    packageId: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    user=Depends(get_current_user),
    db: Database = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    submitted = {
        "title": title, "description": description, "price": price,
        "priceType": priceType, "propertyType": propertyType,
    }
    missing = [field for field in REQUIRED_FIELDS if not (submitted[field] or "").strip()]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

    try:
        price_value = parse_price(price)
        price_type = parse_price_type(priceType)
        mini = resolve_mini_subcategory(db, miniSubcategoryId)
        package_id = packageId.strip() if packageId and packageId.strip() else None

        if not package_id:
            check_free_listing_quota(db, user)

        image_urls = await store_images(images, "properties", prefix="images-")
        now = datetime.utcnow()
        owner_id = str(user["_id"])

        property_data = {
            "title": title.strip(),
            "description": description.strip(),
            "price": price_value,
            "priceType": price_type,
            "propertyType": normalize_property_type(propertyType),
            "subCategory": normalize_slug(subCategory),
            "location": build_location(safe_json(location, {})),
            "specifications": build_specifications(safe_json(specifications, {})),
            "images": image_urls,
            "amenities": safe_json(amenities, []),
            "ownerId": owner_id,
            "ownerType": user.get("userType", "seller"),
            "contactInfo": safe_json(contactInfo, {}),
            **initial_moderation(package_id),
            "premium": parse_bool(premium) or bool(package_id),
            "contactVisible": parse_bool(contactVisible),
            "views": 0,
            "inquiries": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        if mini:
            property_data["miniSubcategoryId"] = str(mini["_id"])
            property_data["miniSubcategory"] = mini.get("slug", "")
        if package_id:
            property_data["packageId"] = package_id

        result = db[PROPERTIES].insert_one(property_data)
        property_id = str(result.inserted_id)
        logger.info(
            f"Property created {property_id}: type={property_data['propertyType']} "
            f"approvalStatus={property_data['approvalStatus']} owner={owner_id}"
        )
    except FreeListingLimitReached as e:
        raise HTTPException(status_code=403, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating property: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create property")

    try:
        if user.get("email"):
            mailer.send_property_confirmation(user["email"], user.get("name", "User"), property_data["title"], property_id)
    except Exception as e:
        logger.warning(f"Property confirmation email failed: {str(e)}")

    return {
        "success": True,
        "data": {"_id": property_id},
        "message": "Property submitted. Pending admin approval.",
    }


@router.put("/properties/{property_id}")
async def update_property(
    property_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    priceType: Optional[str] = Form(None),
    propertyType: Optional[str] = Form(None),
    subCategory: Optional[str] = Form(None),
    miniSubcategoryId: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    specifications: Optional[str] = Form(None),
    amenities: Optional[str] = Form(None),
    contactInfo: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    _id = parse_object_id(property_id)
    if not _id:
        raise HTTPException(status_code=400, detail="Invalid property ID")
    try:
        prop = db[PROPERTIES].find_one({"_id": _id})
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        if str(prop.get("ownerId")) != str(user["_id"]):
            raise HTTPException(status_code=403, detail="You can only edit your own properties")

        price_value = parse_price(price) if price else prop.get("price")
        price_type = parse_price_type(priceType) if priceType else prop.get("priceType")
        mini = resolve_mini_subcategory(db, miniSubcategoryId)
        new_images = await store_images(images, "properties", prefix="images-")

        update_data = {
            "title": (title or "").strip() or prop.get("title"),
            "description": (description or "").strip() or prop.get("description"),
            "price": price_value,
            "priceType": price_type,
            "propertyType": normalize_property_type(propertyType or prop.get("propertyType")),
            "subCategory": normalize_slug(subCategory if subCategory is not None else prop.get("subCategory")),
            "location": build_location(safe_json(location, prop.get("location") or {})),
            "specifications": build_specifications(
                safe_json(specifications, prop.get("specifications") or {}), prop.get("specifications")
            ),
            "images": new_images or prop.get("images", []),
            "amenities": safe_json(amenities, prop.get("amenities") or []),
            "contactInfo": safe_json(contactInfo, prop.get("contactInfo") or {}),
            **moderation_after_edit(prop.get("approvalStatus")),
            "updatedAt": datetime.utcnow(),
        }
        if mini:
            update_data["miniSubcategoryId"] = str(mini["_id"])
            update_data["miniSubcategory"] = mini.get("slug", "")

        db[PROPERTIES].update_one({"_id": _id}, {"$set": update_data})
        logger.info(f"Property updated {property_id}: reset to {update_data['approvalStatus']}")
        return {
            "success": True,
            "data": {
                "message": "Property updated and set to pending review",
                "approvalStatus": update_data["approvalStatus"],
            },
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating property {property_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update property")


@router.get("/user/properties")
async def get_user_properties(user=Depends(get_current_user), db: Database = Depends(get_db)):
    try:
        properties = db[PROPERTIES].find({"ownerId": str(user["_id"])}).sort("createdAt", DESCENDING)
        return {"success": True, "data": serialize_doc(list(properties))}
    except Exception as e:
        logger.error(f"Error fetching user properties: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch user properties")
