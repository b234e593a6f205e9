from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from pymongo.database import Database
from typing import Optional
from config import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from database import USERS, get_db
from utils.serialize import parse_object_id
import bcrypt
import jwt

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Invalid hash format.
        return False


def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    payload = dict(data)
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def _load_user(token: str, db: Database):
    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = parse_object_id(payload.get("sub"))
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db[USERS].find_one({"_id": user_id}, {"password": 0})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_current_user(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)):
    return _load_user(token, db)


def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme), db: Database = Depends(get_db)):
    if not token:
        return None
    try:
        return _load_user(token, db)
    except HTTPException:
        return None


def require_admin(user=Depends(get_current_user)):
    if user.get("userType") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
