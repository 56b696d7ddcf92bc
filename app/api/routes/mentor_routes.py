"""
Mentor Routes

GET /mentors - List available engineers
GET /mentors/top/rated - Top rated available engineers
GET /mentors/search/skills - Search engineers by skills
GET /mentors/{mentor_id} - Get one engineer
PUT /mentors/{mentor_id}/availability - Toggle own availability
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user
from app.core.config import get_settings
from app.services.serializers import serialize_user
from app.services.user_service import UserService
from app.utils.pagination import build_page
from app.schemas.schemas import Principal, AvailabilityUpdate, UserRole, ApiResponse

settings = get_settings()

router = APIRouter(prefix="/mentors", tags=["Mentors"])


@router.get("", response_model=ApiResponse)
async def list_mentors(
    skills: Optional[List[str]] = Query(None),
    location: Optional[str] = Query(None, description="Case-insensitive substring"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
):
    """Available engineers, best rated first."""
    docs, total = UserService().list_mentors(page, limit, skills=skills, location=location)
    return ApiResponse(data=build_page([serialize_user(d) for d in docs], total, page, limit))


@router.get("/top/rated", response_model=ApiResponse)
async def top_rated_mentors(limit: int = Query(5, ge=1, le=settings.max_page_size)):
    """Available engineers with at least one review, by rating."""
    mentors = [serialize_user(d) for d in UserService().top_rated_mentors(limit)]
    return ApiResponse(data={"items": mentors, "count": len(mentors)})


@router.get("/search/skills", response_model=ApiResponse)
async def search_mentors(
    skills: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
):
    docs, total = UserService().list_mentors(page, limit, skills=skills, require_skills=True)
    return ApiResponse(data=build_page([serialize_user(d) for d in docs], total, page, limit))


@router.get("/{mentor_id}", response_model=ApiResponse)
async def get_mentor(mentor_id: str):
    return ApiResponse(data=UserService().get_user(mentor_id, role=UserRole.engineer.value))


@router.put("/{mentor_id}/availability", response_model=ApiResponse)
async def update_availability(
    mentor_id: str,
    update: AvailabilityUpdate,
    user: Principal = Depends(get_current_user)
):
    """Engineers switch themselves on or off the mentor directory."""
    return ApiResponse(data=UserService().update_availability(user, mentor_id, update.is_available))
