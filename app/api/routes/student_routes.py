"""
Student Routes

GET /students - List students
GET /students/search/skills - Search students by skills
GET /students/{student_id} - Get one student
"""

from fastapi import APIRouter, Query
from typing import List, Optional

from app.core.config import get_settings
from app.services.serializers import serialize_user
from app.services.user_service import UserService
from app.utils.pagination import build_page
from app.schemas.schemas import UserRole, ApiResponse

settings = get_settings()

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=ApiResponse)
async def list_students(
    skills: Optional[List[str]] = Query(None),
    location: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
):
    """Students, newest first."""
    docs, total = UserService().list_students(page, limit, skills=skills, location=location)
    return ApiResponse(data=build_page([serialize_user(d) for d in docs], total, page, limit))


@router.get("/search/skills", response_model=ApiResponse)
async def search_students(
    skills: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
):
    docs, total = UserService().list_students(page, limit, skills=skills, require_skills=True)
    return ApiResponse(data=build_page([serialize_user(d) for d in docs], total, page, limit))


@router.get("/{student_id}", response_model=ApiResponse)
async def get_student(student_id: str):
    return ApiResponse(data=UserService().get_user(student_id, role=UserRole.student.value))
