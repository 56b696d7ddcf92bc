"""
Profile Routes

GET /profiles/{user_id} - Profile with projects, statistics and activity
PUT /profiles/{user_id} - Update own profile
GET /profiles/{user_id}/projects - Projects owned by / assigned to a user
GET /profiles/{user_id}/stats - Project statistics and rating
PUT /profiles/{user_id}/avatar - Update own avatar
"""

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.config import get_settings
from app.services.dashboard_service import DashboardService
from app.services.project_service import ProjectService
from app.services.user_service import UserService
from app.schemas.schemas import (
    Principal, ProfileUpdate, AvatarUpdate, ProjectRelation, ApiResponse
)

settings = get_settings()

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/{user_id}", response_model=ApiResponse)
async def get_profile(user_id: str):
    return ApiResponse(data=DashboardService().profile(user_id))


@router.put("/{user_id}", response_model=ApiResponse)
async def update_profile(user_id: str, update: ProfileUpdate, user: Principal = Depends(get_current_user)):
    return ApiResponse(data=UserService().update_profile(user, user_id, update))


@router.get("/{user_id}/projects", response_model=ApiResponse)
async def get_user_projects(
    user_id: str,
    type: ProjectRelation = Query(ProjectRelation.all, description="all, owned or assigned"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
):
    return ApiResponse(data=ProjectService().list_for_user(user_id, page, limit, type))


@router.get("/{user_id}/stats", response_model=ApiResponse)
async def get_user_stats(user_id: str):
    return ApiResponse(data=DashboardService().user_stats(user_id))


@router.put("/{user_id}/avatar", response_model=ApiResponse)
async def update_avatar(user_id: str, update: AvatarUpdate, user: Principal = Depends(get_current_user)):
    return ApiResponse(data=UserService().update_avatar(user, user_id, str(update.avatar)))
