"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator, model_serializer
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum


GITHUB_PROFILE_PATTERN = r"^https?://(www\.)?github\.com/[a-zA-Z0-9-]+$"
GITHUB_REPO_PATTERN = r"^https?://(www\.)?github\.com/[a-zA-Z0-9-]+/[a-zA-Z0-9-]+$"
LINKEDIN_PATTERN = r"^https?://(www\.)?linkedin\.com/in/[a-zA-Z0-9-]+$"
URL_PATTERN = r"^https?://.+"


# Text is trimmed before length checks run, so these are used as
# mode="before" validators.

def strip_text_input(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def clean_skills_input(v: Any) -> Any:
    """Trim skill names and drop blank ones."""
    if not isinstance(v, list):
        return v
    return [strip_text_input(s) for s in v if not (isinstance(s, str) and not s.strip())]


def empty_as_none_input(v: Any) -> Any:
    # forms send "" for untouched optional inputs
    return None if v == "" else v


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    engineer = "engineer"
    student = "student"


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class ProjectStatus(str, Enum):
    open = "open"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class ApplicationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class ProjectRelation(str, Enum):
    all = "all"
    owned = "owned"
    assigned = "assigned"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class Principal(BaseModel):
    """The authenticated caller, passed explicitly into every service call."""
    id: str
    email: str
    name: str
    role: UserRole


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    skills: List[str] = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)

    @field_validator("name", "experience", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return strip_text_input(v)

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Any:
        return clean_skills_input(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ============================================================
# USER SCHEMAS
# ============================================================

class UserSummary(BaseModel):
    """Related user inlined into projects (owner / assigned student)."""
    id: str
    name: str
    avatar: Optional[str] = None
    role: str


class ApplicantSummary(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = None
    email: Optional[str] = None
    skills: List[str] = []
    experience: str = ""
    bio: Optional[str] = None
    location: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    skills: List[str] = []
    experience: str = ""
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    is_available: bool = True
    rating: float = 0
    total_reviews: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileUpdate(BaseModel):
    """Owner-mutable profile fields. Anything else in the body is ignored."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None
    github: Optional[str] = Field(None, pattern=GITHUB_PROFILE_PATTERN)
    linkedin: Optional[str] = Field(None, pattern=LINKEDIN_PATTERN)
    website: Optional[str] = Field(None, pattern=URL_PATTERN)
    skills: Optional[List[str]] = Field(None, min_length=1)
    experience: Optional[str] = Field(None, min_length=1)
    is_available: Optional[bool] = None

    @field_validator("name", "bio", "location", "experience", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return strip_text_input(v)

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Any:
        return clean_skills_input(v)


class AvatarUpdate(BaseModel):
    avatar: HttpUrl


class AvailabilityUpdate(BaseModel):
    is_available: bool


# ============================================================
# PROJECT SCHEMAS
# ============================================================

class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=2000)
    skills: List[str] = Field(..., min_length=1)
    difficulty: Difficulty
    duration: str = Field(..., min_length=1)
    budget: Optional[float] = Field(None, ge=0)
    github_url: Optional[str] = Field(None, pattern=GITHUB_REPO_PATTERN)
    live_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    images: List[str] = []

    @field_validator("title", "description", "duration", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return strip_text_input(v)

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Any:
        return clean_skills_input(v)

    @field_validator("github_url", "live_url", "budget", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        return empty_as_none_input(v)


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=2000)
    skills: Optional[List[str]] = Field(None, min_length=1)
    difficulty: Optional[Difficulty] = None
    status: Optional[ProjectStatus] = None
    duration: Optional[str] = Field(None, min_length=1)
    budget: Optional[float] = Field(None, ge=0)
    github_url: Optional[str] = Field(None, pattern=GITHUB_REPO_PATTERN)
    live_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    images: Optional[List[str]] = None

    @field_validator("title", "description", "duration", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return strip_text_input(v)

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Any:
        return clean_skills_input(v)

    @field_validator("github_url", "live_url", "budget", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        return empty_as_none_input(v)


class ApplicationResponse(BaseModel):
    id: str
    student_id: str
    student: Optional[ApplicantSummary] = None
    message: str = ""
    status: str
    applied_at: datetime


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: str
    owner: Optional[UserSummary] = None
    student: Optional[UserSummary] = None
    skills: List[str] = []
    difficulty: str
    status: str
    duration: str
    budget: Optional[float] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    images: List[str] = []
    applications: List[ApplicationResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    message: Optional[str] = Field(None, max_length=500)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: Any) -> Any:
        return strip_text_input(v)


class ApplicationDecision(BaseModel):
    # checked by the lifecycle service so that the error carries the field
    action: str


class AssignStudentRequest(BaseModel):
    student_id: str = Field(..., min_length=1)


# ============================================================
# DASHBOARD / PROFILE SCHEMAS
# ============================================================

class ProjectStatistics(BaseModel):
    owned: int
    assigned: int
    completed: int
    in_progress: int


class UserStatsResponse(BaseModel):
    projects: ProjectStatistics
    rating: float = 0
    total_reviews: int = 0
    role: str


class ProjectRef(BaseModel):
    id: str
    title: str


class ActivityItem(BaseModel):
    id: str
    type: str
    title: str
    description: str
    status: str
    updated_at: Optional[datetime] = None
    project: ProjectRef


class ProfileResponse(BaseModel):
    user: UserResponse
    projects: List[ProjectResponse]
    statistics: ProjectStatistics
    recent_activity: List[ActivityItem]


class FeatureResponse(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    order: int = 0


class TestimonialResponse(BaseModel):
    id: str
    name: str
    role: str
    avatar: str
    quote: str
    rating: int = 5


class PlatformStats(BaseModel):
    total_projects: int
    open_projects: int
    active_projects: int
    completed_projects: int
    mentor_count: int
    student_count: int
    completion_rate: int


class Highlights(BaseModel):
    top_mentors: List[UserResponse]
    recent_projects: List[ProjectResponse]


class HomeResponse(BaseModel):
    statistics: PlatformStats
    features: List[FeatureResponse]
    testimonials: List[TestimonialResponse]
    highlights: Highlights


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class Pagination(BaseModel):
    page: int
    limit: int
    pages: int


class Page(BaseModel):
    items: List[Any]
    count: int
    total: int
    pagination: Pagination


class ApiResponse(BaseModel):
    """Envelope for every response, successful or not."""
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None
    errors: Optional[List[dict]] = None

    @model_serializer(mode="wrap")
    def drop_empty_parts(self, handler):
        # only the envelope keys are optional; nulls inside data stay
        body = handler(self)
        return {key: value for key, value in body.items() if value is not None}
