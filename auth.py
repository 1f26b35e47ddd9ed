"""Operator tokens guarding the destructive seed endpoints."""
import hmac
import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

JWT_SECRET = os.getenv("JWT_SECRET", "devsecret")
JWT_ALGO = "HS256"
TOKEN_TTL = timedelta(hours=12)
OPERATOR_ROLE = "operator"

security = HTTPBearer()


def admin_key():
    return os.getenv("ADMIN_KEY")


def create_token(payload: dict) -> str:
    exp = datetime.now(timezone.utc) + TOKEN_TTL
    to_encode = {**payload, "exp": exp}
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGO)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def issue_operator_token(key: str) -> str:
    expected = admin_key()
    if not expected:
        raise HTTPException(status_code=403, detail="Operator access not configured")
    if not hmac.compare_digest(key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return create_token({"role": OPERATOR_ROLE})


def require_operator(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    payload = decode_token(credentials.credentials)
    if payload.get("role") != OPERATOR_ROLE:
        raise HTTPException(status_code=403, detail="Operator only")
    return payload
