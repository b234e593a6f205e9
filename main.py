from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import (
    APP_ENV, CORS_ORIGINS, EMAIL_MODE, IS_PRODUCTION, SITE_URL, SMTP_FROM, SMTP_HOST,
    SMTP_PASSWORD, SMTP_PORT, SMTP_USER, UPLOAD_DIR,
)
from database import db, ensure_indexes
from mailer import Mailer
from routes.auth import router as auth_router
from routes.property import router as property_router
from routes.contact import router as contact_router
from routes.admin_properties import router as admin_properties_router
from routes.categories import router as categories_router
from routes.subcategories import router as subcategories_router
from routes.mini_subcategories import router as mini_subcategories_router
from routes.category_files import router as category_files_router
from routes.blogs import router as blogs_router
from routes.advertisements import router as advertisements_router
from routes.free_listing_limits import router as free_listing_limits_router
from routes.app_download import router as app_download_router
import logging
import os

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="EstateHub API")


@app.on_event("startup")
def startup() -> None:
    app.state.mailer = Mailer(
        SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, SMTP_FROM,
        mode=EMAIL_MODE, production=IS_PRODUCTION, site_url=SITE_URL,
    )
    try:
        ensure_indexes(db)
    except Exception as e:
        logger.error(f"Failed to ensure MongoDB indexes: {str(e)}")
    logger.info(f"EstateHub API started ({APP_ENV})")


# CORS Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the uploads directory to serve images and spreadsheets
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", [])[1:])
        message = str(first.get("msg", message)).replace("Value error, ", "")
        if field:
            message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(property_router, prefix="/api")
app.include_router(contact_router, prefix="/api")
app.include_router(admin_properties_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(subcategories_router, prefix="/api")
app.include_router(mini_subcategories_router, prefix="/api")
app.include_router(category_files_router, prefix="/api")
app.include_router(blogs_router, prefix="/api")
app.include_router(advertisements_router, prefix="/api")
app.include_router(free_listing_limits_router, prefix="/api")
app.include_router(app_download_router, prefix="/api")

# Root endpoint
@app.get("/")
def read_root():
    return {"message": "EstateHub API is running"}
