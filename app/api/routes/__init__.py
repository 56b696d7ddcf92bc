"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.user_routes import router as user_router
from app.api.routes.project_routes import router as project_router
from app.api.routes.mentor_routes import router as mentor_router
from app.api.routes.student_routes import router as student_router
from app.api.routes.profile_routes import router as profile_router
from app.api.routes.dashboard_routes import router as dashboard_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(project_router)
api_router.include_router(mentor_router)
api_router.include_router(student_router)
api_router.include_router(profile_router)
api_router.include_router(dashboard_router)
