"""
Dashboard Routes

GET /dashboard/home - Homepage statistics, content and highlights
"""

from fastapi import APIRouter

from app.services.dashboard_service import DashboardService
from app.schemas.schemas import ApiResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/home", response_model=ApiResponse)
async def home():
    """
    Everything the landing page needs in one call:
    platform counts, features, testimonials, top mentors and recent projects.
    """
    return ApiResponse(data=DashboardService().home())
