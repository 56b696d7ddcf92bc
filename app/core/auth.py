"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies resolving the caller into a Principal
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.core.errors import NotFound, Unauthorized
from app.db.mongodb import get_collection, to_object_id, COLLECTIONS
from app.schemas.schemas import Principal

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds
)

# Bearer token extractors
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def _resolve_principal(token: str) -> Principal:
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        raise Unauthorized("Invalid or expired token")

    try:
        user_id = to_object_id(payload["sub"], "User")
    except NotFound:
        raise Unauthorized("Invalid or expired token")

    # Verify user still exists
    user = get_collection(COLLECTIONS["users"]).find_one(
        {"_id": user_id}, {"email": 1, "name": 1, "role": 1}
    )
    if not user:
        raise Unauthorized("Invalid or expired token")

    return Principal(id=str(user["_id"]), email=user["email"], name=user["name"], role=user["role"])


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Principal:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: Principal = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise Unauthorized("Not authorized, no token")
    return _resolve_principal(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[Principal]:
    """Dependency for public routes whose output depends on who is asking."""
    if credentials is None:
        return None
    try:
        return _resolve_principal(credentials.credentials)
    except Unauthorized:
        return None
