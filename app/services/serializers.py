"""
Response shaping - one function per entity type.

Every document leaving the API goes through here, so the public shape is
fixed in one place: ObjectIds become string ids, the password hash never
leaves, related users are inlined with a whitelisted set of fields.
"""

from typing import Dict, Iterable, List, Optional
from bson import ObjectId

from app.schemas.schemas import (
    UserResponse, UserSummary, ApplicantSummary, ApplicationResponse,
    ProjectResponse, FeatureResponse, TestimonialResponse
)


def collect_user_ids(projects: Iterable[dict]) -> List[ObjectId]:
    """All user ids a list of projects refers to (owner, student, applicants)."""
    ids = set()
    for project in projects:
        if project.get("owner"):
            ids.add(project["owner"])
        if project.get("student"):
            ids.add(project["student"])
        for app in project.get("applications", []):
            ids.add(app["student"])
    return list(ids)


def serialize_user(doc: dict) -> UserResponse:
    return UserResponse(
        id=str(doc["_id"]),
        name=doc["name"],
        email=doc["email"],
        role=doc["role"],
        skills=doc.get("skills", []),
        experience=doc.get("experience", ""),
        avatar=doc.get("avatar"),
        bio=doc.get("bio"),
        location=doc.get("location"),
        github=doc.get("github"),
        linkedin=doc.get("linkedin"),
        website=doc.get("website"),
        is_available=doc.get("is_available", True),
        rating=doc.get("rating", 0),
        total_reviews=doc.get("total_reviews", 0),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at")
    )


def serialize_user_summary(doc: Optional[dict]) -> Optional[UserSummary]:
    if doc is None:
        return None
    return UserSummary(id=str(doc["_id"]), name=doc["name"], avatar=doc.get("avatar"), role=doc["role"])


def serialize_applicant(doc: Optional[dict], include_contact: bool = False) -> Optional[ApplicantSummary]:
    if doc is None:
        return None
    return ApplicantSummary(
        id=str(doc["_id"]),
        name=doc["name"],
        avatar=doc.get("avatar"),
        email=doc["email"] if include_contact else None,
        skills=doc.get("skills", []),
        experience=doc.get("experience", ""),
        bio=doc.get("bio"),
        location=doc.get("location")
    )


def serialize_application(
    app: dict,
    users: Dict[ObjectId, dict],
    include_contact: bool = False
) -> ApplicationResponse:
    return ApplicationResponse(
        id=str(app["_id"]),
        student_id=str(app["student"]),
        student=serialize_applicant(users.get(app["student"]), include_contact),
        message=app.get("message") or "",
        status=app["status"],
        applied_at=app["applied_at"]
    )


def serialize_project(
    doc: dict,
    users: Dict[ObjectId, dict],
    viewer_id: Optional[str] = None
) -> ProjectResponse:
    """
    Shape a project document.

    Args:
        doc: raw project document
        users: referenced user documents keyed by _id (see collect_user_ids)
        viewer_id: id of the caller; applicant emails are only shown to the owner
    """
    is_owner = viewer_id is not None and str(doc["owner"]) == viewer_id
    return ProjectResponse(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc["description"],
        owner=serialize_user_summary(users.get(doc["owner"])),
        student=serialize_user_summary(users.get(doc["student"])) if doc.get("student") else None,
        skills=doc.get("skills", []),
        difficulty=doc["difficulty"],
        status=doc["status"],
        duration=doc["duration"],
        budget=doc.get("budget"),
        github_url=doc.get("github_url"),
        live_url=doc.get("live_url"),
        images=doc.get("images", []),
        applications=[
            serialize_application(app, users, include_contact=is_owner)
            for app in doc.get("applications", [])
        ],
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at")
    )


def serialize_feature(doc: dict) -> FeatureResponse:
    return FeatureResponse(
        id=str(doc["_id"]), title=doc["title"], description=doc["description"],
        icon=doc["icon"], order=doc.get("order", 0)
    )


def serialize_testimonial(doc: dict) -> TestimonialResponse:
    return TestimonialResponse(
        id=str(doc["_id"]), name=doc["name"], role=doc["role"], avatar=doc["avatar"],
        quote=doc["quote"], rating=doc.get("rating", 5)
    )
