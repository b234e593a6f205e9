from pydantic import BaseModel, EmailStr, validator
from typing import Literal, Optional
import re

PHONE_RE = re.compile(r"^[0-9\s\-\+\(\)]{10,}$")


def _not_blank(v):
    if v is None or str(v).strip() == "":
        raise ValueError("must not be empty")
    return str(v).strip()


# Users

class UserRegister(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None
    userType: Literal["buyer", "seller", "agent"] = "seller"

    @validator('name', 'password')
    def not_empty(cls, v):
        return _not_blank(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


# Properties

class PropertyApproval(BaseModel):
    approvalStatus: Literal["approved", "rejected"]
    adminComments: Optional[str] = None
    rejectionReason: Optional[str] = None


class EnquiryRequest(BaseModel):
    name: str
    contact_no: Optional[str] = None
    message: str

    @validator('name', 'message')
    def not_empty(cls, v):
        if not v or v.strip() == "":
            raise ValueError('Name and message cannot be empty')
        return v.strip()

    @validator('contact_no', pre=True, always=True)
    def contact_no_optional(cls, v):
        if v is not None and not v.strip().isdigit():
            raise ValueError('Contact number must contain only digits')
        return v.strip() if v else ""


# Taxonomy

class TaxonomyFields(BaseModel):
    slug: Optional[str] = None
    icon: Optional[str] = ""
    iconUrl: Optional[str] = ""
    description: Optional[str] = ""
    sortOrder: int = 0
    isActive: bool = True


class CategoryCreate(TaxonomyFields):
    name: str
    type: Optional[str] = "property"

    @validator('name')
    def name_not_empty(cls, v):
        return _not_blank(v)


class SubcategoryCreate(TaxonomyFields):
    categoryId: str
    name: str

    @validator('name')
    def name_not_empty(cls, v):
        return _not_blank(v)


class MiniSubcategoryCreate(TaxonomyFields):
    subcategoryId: str
    name: str

    @validator('name')
    def name_not_empty(cls, v):
        return _not_blank(v)


class TaxonomyUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    icon: Optional[str] = None
    iconUrl: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    sortOrder: Optional[int] = None
    isActive: Optional[bool] = None

    @validator('name', 'slug')
    def not_empty_when_given(cls, v):
        if v is None:
            return v
        if str(v).strip() == "":
            raise ValueError("Name and slug cannot be empty")
        return str(v).strip()


# Advertisements

class AdvertisementSubmissionCreate(BaseModel):
    bannerType: str
    fullName: str
    email: EmailStr
    phone: str
    projectName: str
    location: str
    projectType: Optional[str] = ""
    budget: Optional[str] = None
    description: str

    @validator('bannerType', 'fullName', 'projectName', 'location', 'description')
    def required(cls, v):
        return _not_blank(v)

    @validator('phone')
    def valid_phone(cls, v):
        if not PHONE_RE.match(v or ""):
            raise ValueError("Invalid phone format")
        return v.strip()


class SubmissionStatusUpdate(BaseModel):
    status: Literal["new", "viewed", "contacted"]


class BannerCreate(BaseModel):
    title: str
    description: Optional[str] = ""
    imageUrl: str
    link: Optional[str] = ""
    position: str = "advertisement_banners"
    isActive: bool = True
    sortOrder: int = 0


class BannerUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    link: Optional[str] = None
    position: Optional[str] = None
    isActive: Optional[bool] = None
    sortOrder: Optional[int] = None


# Free listing limits

class FreeListingLimitUpdate(BaseModel):
    limit: int
    period: Literal["monthly", "yearly"]

    @validator('limit')
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("limit must be zero or more")
        return v


class FreeListingSettingsUpdate(BaseModel):
    defaultLimit: int
    defaultPeriod: Literal["monthly", "yearly"] = "monthly"

    @validator('defaultLimit')
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("defaultLimit must be zero or more")
        return v
