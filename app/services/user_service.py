"""
User Service - the user directory.

Handles registration and login, profile reads and owner-only profile
writes, plus the public mentor (engineer) and student directories.

Write authorization is self-or-nothing: a principal may only change or
delete its own record. Role, rating and review counts are never
writable through this service.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app.core.auth import hash_password, verify_password, create_access_token
from app.core.errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from app.db.mongodb import get_collection, to_object_id, COLLECTIONS, utcnow
from app.schemas.schemas import (
    Principal, RegisterRequest, ProfileUpdate, AuthResponse, UserRole
)
from app.services.serializers import serialize_user
from app.utils.pagination import fetch_page

logger = logging.getLogger(__name__)

# Fields a user may change on their own record
EDITABLE_PROFILE_FIELDS = (
    "name", "bio", "location", "github", "linkedin", "website",
    "skills", "experience", "is_available"
)

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]
BEST_RATED_FIRST = [("rating", DESCENDING), ("total_reviews", DESCENDING), ("_id", ASCENDING)]

# Never read the hash unless we are checking a password
PUBLIC_PROJECTION = {"password_hash": 0}


def default_avatar(name: str) -> str:
    """Initials avatar for users who have not uploaded one."""
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=3b82f6&color=fff"


class UserService:
    """
    CRUD over the users collection.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["users"])

    # ------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------

    def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Create an account and sign the caller in.

        Raises:
            Conflict: email already registered
        """
        email = request.email.lower()
        if self.collection.find_one({"email": email}, {"_id": 1}):
            raise Conflict("User with this email already exists")

        now = utcnow()
        doc = {
            "name": request.name,
            "email": email,
            "password_hash": hash_password(request.password),
            "role": request.role.value,
            "skills": request.skills,
            "experience": request.experience,
            "avatar": default_avatar(request.name),
            "is_available": True,
            "rating": 0,
            "total_reviews": 0,
            "created_at": now,
            "updated_at": now
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost a race with a concurrent registration
            raise Conflict("User with this email already exists")
        doc["_id"] = result.inserted_id

        logger.info("Registered %s %s", doc["role"], result.inserted_id)
        return AuthResponse(token=self._issue_token(doc), user=serialize_user(doc))

    def authenticate(self, email: str, password: str) -> AuthResponse:
        """
        Check credentials and issue a token.

        Raises:
            Unauthorized: unknown email or wrong password (same message for both)
        """
        doc = self.collection.find_one({"email": email.lower()})
        if not doc or not verify_password(password, doc["password_hash"]):
            raise Unauthorized("Invalid credentials")
        return AuthResponse(token=self._issue_token(doc), user=serialize_user(doc))

    def _issue_token(self, doc: dict) -> str:
        return create_access_token(data={"sub": str(doc["_id"]), "role": doc["role"]})

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get_raw(self, user_id: str, role: Optional[str] = None) -> dict:
        """Fetch a user document (without hash). Raises NotFound."""
        label = {"engineer": "Mentor", "student": "Student"}.get(role, "User")
        query = {"_id": to_object_id(user_id, label)}
        if role:
            query["role"] = role
        doc = self.collection.find_one(query, PUBLIC_PROJECTION)
        if not doc:
            raise NotFound(f"{label} not found")
        return doc

    def get_user(self, user_id: str, role: Optional[str] = None):
        return serialize_user(self.get_raw(user_id, role))

    def get_many(self, ids: List[ObjectId]) -> Dict[ObjectId, dict]:
        """Load referenced users keyed by _id, for inlining into projects."""
        if not ids:
            return {}
        cursor = self.collection.find({"_id": {"$in": list(ids)}}, PUBLIC_PROJECTION)
        return {doc["_id"]: doc for doc in cursor}

    def list_users(
        self,
        page: int,
        limit: int,
        role: Optional[str] = None,
        skills: Optional[List[str]] = None,
        location: Optional[str] = None,
        available_only: bool = False,
        min_reviews: Optional[int] = None,
        sort: Optional[List[Tuple[str, int]]] = None
    ) -> Tuple[List[dict], int]:
        """
        Filtered, paginated listing. Returns (documents, total).

        skills match if any of the user's skills is in the list;
        location is a case-insensitive substring match.
        """
        query: dict = {}
        if role:
            query["role"] = role
        if skills:
            query["skills"] = {"$in": skills}
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}
        if available_only:
            query["is_available"] = True
        if min_reviews is not None:
            query["total_reviews"] = {"$gt": min_reviews}

        return fetch_page(self.collection, query, page, limit, sort or NEWEST_FIRST, PUBLIC_PROJECTION)

    def list_mentors(self, page, limit, skills=None, location=None, require_skills=False):
        if require_skills and not skills:
            raise ValidationError(
                "Please provide skills to search for",
                errors=[{"field": "skills", "message": "At least one skill is required"}]
            )
        return self.list_users(
            page, limit, role=UserRole.engineer.value, skills=skills, location=location,
            available_only=True, sort=BEST_RATED_FIRST
        )

    def list_students(self, page, limit, skills=None, location=None, require_skills=False):
        if require_skills and not skills:
            raise ValidationError(
                "Please provide skills to search",
                errors=[{"field": "skills", "message": "At least one skill is required"}]
            )
        return self.list_users(page, limit, role=UserRole.student.value, skills=skills, location=location)

    def top_rated_mentors(self, limit: int = 5, require_reviews: bool = True) -> List[dict]:
        """Available engineers by rating, then review count."""
        docs, _ = self.list_users(
            1, limit, role=UserRole.engineer.value, available_only=True,
            min_reviews=0 if require_reviews else None, sort=BEST_RATED_FIRST
        )
        return docs

    # ------------------------------------------------------------
    # Self-only writes
    # ------------------------------------------------------------

    def _ensure_self(self, principal: Principal, user_id: str, what: str) -> ObjectId:
        if user_id != principal.id:
            raise Forbidden(f"Not authorized to {what}")
        return to_object_id(user_id, "User")

    def _set_fields(self, oid: ObjectId, changes: dict) -> dict:
        changes["updated_at"] = utcnow()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes},
            projection=PUBLIC_PROJECTION, return_document=ReturnDocument.AFTER
        )
        if not doc:
            raise NotFound("User not found")
        return doc

    def update_profile(self, principal: Principal, user_id: str, update: ProfileUpdate):
        oid = self._ensure_self(principal, user_id, "update this profile")
        changes = {
            field: value
            for field, value in update.model_dump(exclude_unset=True).items()
            if field in EDITABLE_PROFILE_FIELDS and value is not None
        }
        return serialize_user(self._set_fields(oid, changes))

    def update_avatar(self, principal: Principal, user_id: str, avatar: str):
        oid = self._ensure_self(principal, user_id, "update this avatar")
        return serialize_user(self._set_fields(oid, {"avatar": avatar}))

    def update_availability(self, principal: Principal, user_id: str, is_available: bool):
        oid = self._ensure_self(principal, user_id, "update this mentor")
        if principal.role != UserRole.engineer:
            raise Forbidden("Only engineers can update availability")
        return serialize_user(self._set_fields(oid, {"is_available": is_available}))

    def delete_account(self, principal: Principal, user_id: str) -> None:
        oid = self._ensure_self(principal, user_id, "delete this user")
        result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound("User not found")
        logger.info("Deleted account %s", user_id)
