from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

# MongoDB
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "estatehub")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8080").split(",")
    if origin.strip()
]

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_BACKEND = os.getenv("UPLOAD_BACKEND", "local")
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "estatehub-uploads")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

# Free listing quota defaults
FREE_POST_LIMIT = int(os.getenv("FREE_POST_LIMIT", "5"))
FREE_POST_PERIOD_DAYS = int(os.getenv("FREE_POST_PERIOD_DAYS", "30"))

# Email
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER") or os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD") or os.getenv("SMTP_PASS", "")
SMTP_FROM = os.getenv("SMTP_FROM") or SMTP_USER or "no-reply@localhost"
EMAIL_MODE = os.getenv("EMAIL_MODE", "smtp").lower()
SITE_URL = os.getenv("SITE_URL", "http://localhost:8080")

# Android app package
APK_PATH = os.getenv("APK_PATH", os.path.join("public", "app", "EstateHub.apk"))
APK_VERSION = os.getenv("APK_VERSION", "1.0.0")
