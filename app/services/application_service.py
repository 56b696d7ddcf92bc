"""
Application Service - the project application lifecycle.

An application lives inside its project document:

    pending --accept--> accepted
    pending --reject--> rejected

Both outcomes are terminal. Accepting one application assigns its student
to the project, moves the project to in-progress and rejects every other
application that is still pending.

Invariants kept here:
- at most one accepted application per project
- project.student is set iff the accepted application names that student
- one application per (student, project)
- applications are only created while the project is open

CONCURRENCY:
Each operation reads the project, validates in Python, then writes with
find_one_and_update filtered on the `version` it read (and, for accepts,
on `student: None`). The write increments `version`. If anything touched
the project in between, the filter no longer matches, nothing is written
and the caller gets Conflict. Two racing accepts therefore cannot both
succeed.
"""

import logging
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.db.mongodb import get_collection, COLLECTIONS, utcnow
from app.schemas.schemas import (
    Principal, ApplicationStatus, ApplicationResponse, ProjectResponse,
    ProjectStatus, UserRole
)
from app.services.project_service import ProjectService
from app.services.serializers import serialize_application
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

ACCEPT = "accept"
REJECT = "reject"
VALID_ACTIONS = (ACCEPT, REJECT)


def find_application(project: dict, application_id: str) -> Optional[dict]:
    for app in project.get("applications", []):
        if str(app["_id"]) == application_id:
            return app
    return None


def find_application_by_student(project: dict, student_oid: ObjectId) -> Optional[dict]:
    for app in project.get("applications", []):
        if app["student"] == student_oid:
            return app
    return None


def accepted_applications(applications: List[dict], accepted_id: ObjectId) -> List[dict]:
    """
    The application list after accepting `accepted_id`.

    Pending siblings become rejected; already decided ones are left as is.
    """
    result = []
    for app in applications:
        app = dict(app)
        if app["_id"] == accepted_id:
            app["status"] = ApplicationStatus.accepted.value
        elif app["status"] == ApplicationStatus.pending.value:
            app["status"] = ApplicationStatus.rejected.value
        result.append(app)
    return result


class ApplicationService:
    """
    Submit, list and decide applications on a project.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["projects"])
        self.projects = ProjectService()
        self.users = UserService()

    def _commit(self, project: dict, update: dict, guard: Optional[dict] = None) -> dict:
        """
        Write `update` only if the project is still at the version we read.

        Raises:
            Conflict: the project changed underneath us (or the guard failed)
        """
        query = {"_id": project["_id"], "version": project.get("version", 0)}
        if guard:
            query.update(guard)

        update.setdefault("$set", {})["updated_at"] = utcnow()
        update["$inc"] = {"version": 1}

        updated = self.collection.find_one_and_update(
            query, update, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            logger.warning("Conditional write on project %s lost a race", project["_id"])
            raise Conflict("Project was modified by another request, please retry")
        return updated

    # ------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------

    def apply(self, principal: Principal, project_id: str, message: Optional[str] = None) -> ProjectResponse:
        """
        Student applies to an open project.

        Raises:
            Forbidden: caller is not a student
            NotFound: project does not exist
            Conflict: project not open, or already applied
        """
        if principal.role != UserRole.student:
            raise Forbidden("Only students can apply to projects")

        project = self.projects.get_raw(project_id)
        if project["status"] != ProjectStatus.open.value:
            raise Conflict("Project is not open for applications")

        student_oid = ObjectId(principal.id)
        if find_application_by_student(project, student_oid):
            raise Conflict("You have already applied to this project")

        application = {
            "_id": ObjectId(),
            "student": student_oid,
            "message": message or "",
            "status": ApplicationStatus.pending.value,
            "applied_at": utcnow()
        }
        updated = self._commit(
            project,
            {"$push": {"applications": application}},
            guard={"status": ProjectStatus.open.value}
        )

        logger.info("Student %s applied to project %s", principal.id, project_id)
        return self.projects.present_one(updated, principal)

    # ------------------------------------------------------------
    # Owner views
    # ------------------------------------------------------------

    def list_applications(self, principal: Principal, project_id: str) -> List[ApplicationResponse]:
        """All applications on a project, with applicant contact details. Owner only."""
        project = self.projects.get_raw(project_id)
        self.projects.ensure_owner(project, principal, "view applications for this project")

        applications = project.get("applications", [])
        users = self.users.get_many([app["student"] for app in applications])
        return [serialize_application(app, users, include_contact=True) for app in applications]

    # ------------------------------------------------------------
    # Decide
    # ------------------------------------------------------------

    def decide(self, principal: Principal, project_id: str, application_id: str, action: str) -> ProjectResponse:
        """
        Owner accepts or rejects one application.

        Raises:
            ValidationError: action is not accept/reject
            NotFound: project or application missing
            Forbidden: caller is not the owner
            Conflict: accept while a student is assigned, or the
                application was already decided
        """
        if action not in VALID_ACTIONS:
            raise ValidationError(
                "Action must be either accept or reject",
                errors=[{"field": "action", "message": "Action must be either accept or reject"}]
            )

        project = self.projects.get_raw(project_id)
        self.projects.ensure_owner(project, principal, "manage applications for this project")

        application = find_application(project, application_id)
        if application is None:
            raise NotFound("Application not found")

        if action == ACCEPT:
            updated = self._accept(project, application)
        else:
            updated = self._reject(project, application)

        logger.info(
            "Application %s on project %s %sed by owner",
            application_id, project_id, action
        )
        return self.projects.present_one(updated, principal)

    def _ensure_pending(self, application: dict) -> None:
        if application["status"] != ApplicationStatus.pending.value:
            raise Conflict(f"Application has already been {application['status']}")

    def _reject(self, project: dict, application: dict) -> dict:
        self._ensure_pending(application)
        applications = [
            dict(app, status=ApplicationStatus.rejected.value) if app["_id"] == application["_id"] else app
            for app in project["applications"]
        ]
        return self._commit(project, {"$set": {"applications": applications}})

    def _accept(self, project: dict, application: dict) -> dict:
        if project.get("student"):
            raise Conflict("Project already has a student assigned")
        self._ensure_pending(application)

        return self._commit(
            project,
            {"$set": {
                "applications": accepted_applications(project["applications"], application["_id"]),
                "student": application["student"],
                "status": ProjectStatus.in_progress.value
            }},
            guard={"student": None}
        )

    # ------------------------------------------------------------
    # Direct assignment
    # ------------------------------------------------------------

    def assign_student(self, principal: Principal, project_id: str, student_id: str) -> ProjectResponse:
        """
        Owner assigns a student directly.

        Goes through the same rules as accepting: the student's existing
        application is accepted, or an accepted application is recorded
        for them, so an assigned student always has an accepted application.

        Raises:
            NotFound: project or student missing
            Forbidden: caller is not the owner
            Conflict: a student is already assigned, or the student's
                application was already rejected
        """
        project = self.projects.get_raw(project_id)
        self.projects.ensure_owner(project, principal, "assign student to this project")

        student = self.users.get_raw(student_id, role=UserRole.student.value)

        existing = find_application_by_student(project, student["_id"])
        if existing is not None:
            updated = self._accept(project, existing)
        else:
            if project.get("student"):
                raise Conflict("Project already has a student assigned")
            application = {
                "_id": ObjectId(),
                "student": student["_id"],
                "message": "",
                "status": ApplicationStatus.pending.value,
                "applied_at": utcnow()
            }
            applications = accepted_applications(
                project.get("applications", []) + [application], application["_id"]
            )
            updated = self._commit(
                project,
                {"$set": {
                    "applications": applications,
                    "student": student["_id"],
                    "status": ProjectStatus.in_progress.value
                }},
                guard={"student": None}
            )

        logger.info("Student %s assigned to project %s", student_id, project_id)
        return self.projects.present_one(updated, principal)
