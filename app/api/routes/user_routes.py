"""
User Routes

GET /users - List users (authenticated)
GET /users/{user_id} - Get one user (authenticated)
PUT /users/{user_id} - Update own profile
DELETE /users/{user_id} - Delete own account
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user
from app.core.config import get_settings
from app.services.serializers import serialize_user
from app.services.user_service import UserService
from app.utils.pagination import build_page
from app.schemas.schemas import Principal, ProfileUpdate, UserRole, ApiResponse

settings = get_settings()

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=ApiResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    skills: Optional[List[str]] = Query(None, description="Match any of these skills"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    user: Principal = Depends(get_current_user)
):
    """List users, newest first."""
    docs, total = UserService().list_users(page, limit, role=role.value if role else None, skills=skills)
    return ApiResponse(data=build_page([serialize_user(d) for d in docs], total, page, limit))


@router.get("/{user_id}", response_model=ApiResponse)
async def get_user(user_id: str, user: Principal = Depends(get_current_user)):
    return ApiResponse(data=UserService().get_user(user_id))


@router.put("/{user_id}", response_model=ApiResponse)
async def update_user(user_id: str, update: ProfileUpdate, user: Principal = Depends(get_current_user)):
    """Update own profile. Role and rating cannot be changed."""
    return ApiResponse(data=UserService().update_profile(user, user_id, update))


@router.delete("/{user_id}", response_model=ApiResponse)
async def delete_user(user_id: str, user: Principal = Depends(get_current_user)):
    """Delete own account."""
    UserService().delete_account(user, user_id)
    return ApiResponse(message="User deleted successfully")
