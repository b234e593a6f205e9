from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from auth import hash_password, verify_password, create_access_token
from database import USERS, get_db
from models import UserRegister, UserLogin
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=201)
def register(user: UserRegister, db: Database = Depends(get_db)):
    email = user.email.lower()
    if db[USERS].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")
    now = datetime.utcnow()
    result = db[USERS].insert_one({
        "name": user.name,
        "email": email,
        "password": hash_password(user.password),
        "phone": user.phone or "",
        "userType": user.userType,
        "createdAt": now,
        "updatedAt": now,
    })
    logger.info(f"User registered: {result.inserted_id} ({user.userType})")
    return {"success": True, "message": "User registered successfully", "data": {"_id": str(result.inserted_id)}}


@router.post("/login")
def login(user: UserLogin, db: Database = Depends(get_db)):
    db_user = db[USERS].find_one({"email": user.email.lower()})
    if not db_user or not verify_password(user.password, db_user["password"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(data={
        "sub": str(db_user["_id"]),
        "email": db_user["email"],
        "userType": db_user.get("userType", "seller"),
    })
    return {"access_token": token, "token_type": "bearer"}
