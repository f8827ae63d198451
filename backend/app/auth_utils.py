from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from passlib.context import CryptContext
from jose import jwt, JWTError

# --- Password hashing ---
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")

def get_password_hash(password: str) -> str:
    return _pwd.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    try:
        return _pwd.verify(plain, hashed)
    except ValueError:
        # hash illisible / mot de passe trop long
        return False

# --- JWT ---
SECRET = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY") or "dev_secret_change_me"
ALGO = "HS256"

def create_access_token(sub: str, user_id: int, company_id: Optional[int], ttl_seconds: int = 60*60*24) -> str:
    exp = int((datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)).timestamp())
    payload = {
        "sub": sub,
        "uid": int(user_id),
        "company_id": int(company_id) if company_id is not None else None,
        "exp": exp,
    }
    return jwt.encode(payload, SECRET, algorithm=ALGO)

def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGO])
    except JWTError as e:
        raise ValueError(f"invalid token: {e}")
    if not payload.get("sub") or payload.get("uid") is None:
        raise ValueError("invalid token payload")
    return payload
