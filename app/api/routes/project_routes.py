"""
Project Routes

GET /projects - List projects with filters (public)
GET /projects/{project_id} - Get project details (public)
POST /projects - Create project (engineer only)
PUT /projects/{project_id} - Update project (owner only)
DELETE /projects/{project_id} - Delete project (owner only)
POST /projects/{project_id}/apply - Apply to project (student only)
GET /projects/{project_id}/applications - List applications (owner only)
PUT /projects/{project_id}/applications/{application_id} - Accept/reject (owner only)
PUT /projects/{project_id}/assign-student - Assign a student directly (owner only)
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user, get_optional_user
from app.core.config import get_settings
from app.services.application_service import ApplicationService, ACCEPT
from app.services.project_service import ProjectService
from app.schemas.schemas import (
    Principal, ProjectCreate, ProjectUpdate, ProjectStatus, Difficulty,
    ApplicationCreate, ApplicationDecision, AssignStudentRequest, ApiResponse
)

settings = get_settings()

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=ApiResponse)
async def list_projects(
    status: Optional[ProjectStatus] = Query(None),
    difficulty: Optional[Difficulty] = Query(None),
    skills: Optional[List[str]] = Query(None, description="Match any of these skills"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    viewer: Optional[Principal] = Depends(get_optional_user)
):
    """List projects with filters and pagination, newest first."""
    result = ProjectService().list_projects(
        page, limit,
        status=status,
        difficulty=difficulty.value if difficulty else None,
        skills=skills,
        viewer=viewer
    )
    return ApiResponse(data=result)


@router.get("/{project_id}", response_model=ApiResponse)
async def get_project(project_id: str, viewer: Optional[Principal] = Depends(get_optional_user)):
    """Get details of a specific project."""
    return ApiResponse(data=ProjectService().get(project_id, viewer))


@router.post("", response_model=ApiResponse, status_code=201)
async def create_project(project: ProjectCreate, user: Principal = Depends(get_current_user)):
    """Create a new project. Only engineers can post projects."""
    return ApiResponse(data=ProjectService().create(user, project))


@router.put("/{project_id}", response_model=ApiResponse)
async def update_project(project_id: str, update: ProjectUpdate, user: Principal = Depends(get_current_user)):
    """Update a project. Only the owner can update."""
    return ApiResponse(data=ProjectService().update(user, project_id, update))


@router.delete("/{project_id}", response_model=ApiResponse)
async def delete_project(project_id: str, user: Principal = Depends(get_current_user)):
    """Delete a project and its applications."""
    ProjectService().delete(user, project_id)
    return ApiResponse(message="Project deleted successfully")


@router.post("/{project_id}/apply", response_model=ApiResponse, status_code=201)
async def apply_to_project(
    project_id: str,
    application: ApplicationCreate,
    user: Principal = Depends(get_current_user)
):
    """Apply to a project. Students only, once per project, while it is open."""
    project = ApplicationService().apply(user, project_id, application.message)
    return ApiResponse(data=project, message="Application submitted successfully")


@router.get("/{project_id}/applications", response_model=ApiResponse)
async def get_applications(project_id: str, user: Principal = Depends(get_current_user)):
    """Applications received on a project, with applicant details."""
    return ApiResponse(data=ApplicationService().list_applications(user, project_id))


@router.put("/{project_id}/applications/{application_id}", response_model=ApiResponse)
async def decide_application(
    project_id: str,
    application_id: str,
    decision: ApplicationDecision,
    user: Principal = Depends(get_current_user)
):
    """
    Accept or reject an application.

    Accepting assigns the student, moves the project to in-progress and
    rejects the other pending applications.
    """
    project = ApplicationService().decide(user, project_id, application_id, decision.action)
    outcome = "accepted" if decision.action == ACCEPT else "rejected"
    return ApiResponse(data=project, message=f"Application {outcome} successfully")


@router.put("/{project_id}/assign-student", response_model=ApiResponse)
async def assign_student(
    project_id: str,
    request: AssignStudentRequest,
    user: Principal = Depends(get_current_user)
):
    """Assign a student directly; recorded as an accepted application."""
    project = ApplicationService().assign_student(user, project_id, request.student_id)
    return ApiResponse(data=project, message="Student assigned successfully")
