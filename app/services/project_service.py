"""
Project Service - the project store.

CRUD over project postings. Only engineers create projects, and only a
project's owner may edit or delete it. Owner, assigned student and the
embedded applications are never writable from here; those belong to
the application lifecycle (see application_service).

Every write bumps the project's `version`, which the lifecycle uses for
its conditional writes.
"""

import logging
from typing import Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from app.core.errors import Forbidden, NotFound
from app.db.mongodb import get_collection, to_object_id, COLLECTIONS, utcnow
from app.schemas.schemas import (
    Principal, ProjectCreate, ProjectUpdate, ProjectResponse, ProjectRelation,
    ProjectStatus, UserRole, Page
)
from app.services.serializers import collect_user_ids, serialize_project
from app.services.user_service import UserService
from app.utils.pagination import fetch_page, build_page

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]

EDITABLE_PROJECT_FIELDS = (
    "title", "description", "skills", "difficulty", "status", "duration",
    "budget", "github_url", "live_url", "images"
)


def relation_query(user_oid: ObjectId, relation: ProjectRelation = ProjectRelation.all) -> dict:
    """Projects a user owns, is assigned to, or either."""
    if relation == ProjectRelation.owned:
        return {"owner": user_oid}
    if relation == ProjectRelation.assigned:
        return {"student": user_oid}
    return {"$or": [{"owner": user_oid}, {"student": user_oid}]}


class ProjectService:
    """
    CRUD over the projects collection.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["projects"])
        self.users = UserService()

    # ------------------------------------------------------------
    # Loading / presenting
    # ------------------------------------------------------------

    def get_raw(self, project_id: str) -> dict:
        """Fetch a project document. Raises NotFound."""
        doc = self.collection.find_one({"_id": to_object_id(project_id, "Project")})
        if not doc:
            raise NotFound("Project not found")
        return doc

    def present(self, docs: List[dict], viewer: Optional[Principal] = None) -> List[ProjectResponse]:
        """Serialize projects with their related users loaded in one query."""
        users: Dict[ObjectId, dict] = self.users.get_many(collect_user_ids(docs))
        viewer_id = viewer.id if viewer else None
        return [serialize_project(doc, users, viewer_id) for doc in docs]

    def present_one(self, doc: dict, viewer: Optional[Principal] = None) -> ProjectResponse:
        return self.present([doc], viewer)[0]

    def ensure_owner(self, project: dict, principal: Principal, what: str) -> None:
        if str(project["owner"]) != principal.id:
            raise Forbidden(f"Not authorized to {what}")

    # ------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------

    def create(self, principal: Principal, data: ProjectCreate) -> ProjectResponse:
        """Post a new project. Engineers only."""
        if principal.role != UserRole.engineer:
            raise Forbidden("Only engineers can create projects")

        now = utcnow()
        doc = data.model_dump(mode="json")
        doc.update({
            "owner": ObjectId(principal.id),
            "student": None,
            "status": ProjectStatus.open.value,
            "applications": [],
            "version": 0,
            "created_at": now,
            "updated_at": now
        })
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info("Project %s created by %s", result.inserted_id, principal.id)
        return self.present_one(doc, principal)

    def get(self, project_id: str, viewer: Optional[Principal] = None) -> ProjectResponse:
        return self.present_one(self.get_raw(project_id), viewer)

    def list_projects(
        self,
        page: int,
        limit: int,
        status: Optional[ProjectStatus] = None,
        difficulty: Optional[str] = None,
        skills: Optional[List[str]] = None,
        viewer: Optional[Principal] = None
    ) -> Page:
        """
        Filtered listing, newest first.

        A project matches the skills filter if any of its skills is listed.
        """
        query: dict = {}
        if status:
            query["status"] = ProjectStatus(status).value
        if difficulty:
            query["difficulty"] = difficulty
        if skills:
            query["skills"] = {"$in": skills}

        docs, total = fetch_page(self.collection, query, page, limit, NEWEST_FIRST)
        return build_page(self.present(docs, viewer), total, page, limit)

    def list_for_user(
        self,
        user_id: str,
        page: int,
        limit: int,
        relation: ProjectRelation = ProjectRelation.all
    ) -> Page:
        query = relation_query(to_object_id(user_id, "User"), relation)
        docs, total = fetch_page(self.collection, query, page, limit, NEWEST_FIRST)
        return build_page(self.present(docs), total, page, limit)

    def update(self, principal: Principal, project_id: str, data: ProjectUpdate) -> ProjectResponse:
        """Owner edits. Assignment and applications are not editable here."""
        project = self.get_raw(project_id)
        self.ensure_owner(project, principal, "update this project")

        changes = {
            field: value
            for field, value in data.model_dump(mode="json", exclude_unset=True).items()
            if field in EDITABLE_PROJECT_FIELDS and value is not None
        }
        changes["updated_at"] = utcnow()

        updated = self.collection.find_one_and_update(
            {"_id": project["_id"]},
            {"$set": changes, "$inc": {"version": 1}},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise NotFound("Project not found")
        return self.present_one(updated, principal)

    def delete(self, principal: Principal, project_id: str) -> None:
        project = self.get_raw(project_id)
        self.ensure_owner(project, principal, "delete this project")
        self.collection.delete_one({"_id": project["_id"]})
        logger.info("Project %s deleted by %s", project_id, principal.id)
