"""
Authentication Routes

POST /auth/register - Register new user (returns token)
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.services.user_service import UserService
from app.schemas.schemas import RegisterRequest, LoginRequest, Principal, ApiResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ApiResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new engineer or student account.

    The response already carries a token, no separate login needed.
    """
    return ApiResponse(data=UserService().register(request))


@router.post("/login", response_model=ApiResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    return ApiResponse(data=UserService().authenticate(request.email, request.password))


@router.get("/me", response_model=ApiResponse)
async def get_me(user: Principal = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return ApiResponse(data=UserService().get_user(user.id))
