from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from config import MONGODB_URI, MONGODB_DB
import logging

logger = logging.getLogger(__name__)

# Collection names
PROPERTIES = "properties"
CATEGORIES = "categories"
SUBCATEGORIES = "subcategories"
MINI_SUBCATEGORIES = "mini_subcategories"
BLOGS = "blogs"
ADVERTISEMENT_SUBMISSIONS = "advertisement_submissions"
BANNERS = "banners"
USERS = "users"
ADMIN_SETTINGS = "admin_settings"
PROPERTY_ENQUIRIES = "property_enquiries"
APP_DOWNLOADS = "app_downloads"

# MongoDB connection (pymongo connects lazily on first operation)
client = MongoClient(MONGODB_URI)
db = client[MONGODB_DB]


def get_db() -> Database:
    return db


def ensure_indexes(database: Database):
    database[CATEGORIES].create_index([("slug", ASCENDING)], unique=True)
    database[SUBCATEGORIES].create_index([("categoryId", ASCENDING), ("slug", ASCENDING)], unique=True)
    database[MINI_SUBCATEGORIES].create_index([("subcategoryId", ASCENDING), ("slug", ASCENDING)], unique=True)
    database[BLOGS].create_index([("slug", ASCENDING)], unique=True)
    database[USERS].create_index([("email", ASCENDING)], unique=True)
    database[PROPERTIES].create_index(
        [("status", ASCENDING), ("approvalStatus", ASCENDING), ("createdAt", DESCENDING)]
    )
    database[PROPERTIES].create_index([("ownerId", ASCENDING), ("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured")
