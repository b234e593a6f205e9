from datetime import datetime, timedelta
from pymongo.database import Database
from typing import Dict, Optional
from config import FREE_POST_LIMIT, FREE_POST_PERIOD_DAYS
from database import ADMIN_SETTINGS, PROPERTIES
import logging

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"monthly": 30, "yearly": 365}
SETTINGS_ID = "freeListingLimits"


class FreeListingLimitReached(Exception):
    def __init__(self, limit: int, days: int):
        self.limit = limit
        self.days = days
        super().__init__(f"Free listing limit reached: {limit} free posts allowed per {days} days.")


def period_name(days: int) -> str:
    for name, period_days in PERIOD_DAYS.items():
        if period_days == days:
            return name
    return "custom"


def default_free_listing_limit(db: Database) -> Dict:
    """Admin-configured default, falling back to environment defaults."""
    settings = db[ADMIN_SETTINGS].find_one({"_id": SETTINGS_ID})
    if settings and settings.get("defaultLimit") is not None:
        return {
            "limit": int(settings["defaultLimit"]),
            "period": settings.get("defaultPeriod") or "monthly",
            "limitType": int(settings.get("defaultLimitType") or FREE_POST_PERIOD_DAYS),
        }
    return {
        "limit": FREE_POST_LIMIT,
        "period": period_name(FREE_POST_PERIOD_DAYS),
        "limitType": FREE_POST_PERIOD_DAYS,
    }


def resolve_free_listing_limit(db: Database, user: Optional[Dict]) -> Dict:
    limit = (user or {}).get("freeListingLimit")
    if limit and limit.get("limit") is not None:
        return {
            "limit": int(limit["limit"]),
            "period": limit.get("period", "monthly"),
            "limitType": int(limit.get("limitType") or PERIOD_DAYS.get(limit.get("period"), FREE_POST_PERIOD_DAYS)),
        }
    return default_free_listing_limit(db)


def free_listings_query(owner_id: str, days: int, now: Optional[datetime] = None) -> Dict:
    """Properties of owner_id created within the window that carry no package."""
    now = now or datetime.utcnow()
    return {
        "ownerId": str(owner_id),
        "createdAt": {"$gte": now - timedelta(days=days)},
        "$or": [
            {"packageId": {"$exists": False}},
            {"packageId": None},
        ],
    }


def count_free_listings(db: Database, owner_id: str, days: int, now: Optional[datetime] = None) -> int:
    return db[PROPERTIES].count_documents(free_listings_query(owner_id, days, now))


def check_free_listing_quota(db: Database, user: Dict, now: Optional[datetime] = None) -> Dict:
    """Raise FreeListingLimitReached when the owner has used up the free quota."""
    limit = resolve_free_listing_limit(db, user)
    used = count_free_listings(db, str(user["_id"]), limit["limitType"], now)
    if used >= limit["limit"]:
        logger.info(f"Free listing limit reached for user {user['_id']}: {used}/{limit['limit']}")
        raise FreeListingLimitReached(limit["limit"], limit["limitType"])
    return {**limit, "used": used}
