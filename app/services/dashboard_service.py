"""
Dashboard Service - read-only aggregations.

Nothing in here writes user or project data. The only write is seeding
the default homepage features/testimonials the first time they are read
from an empty collection.
"""

import logging
import math
from typing import List

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from app.db.mongodb import get_collection, to_object_id, COLLECTIONS, utcnow
from app.schemas.schemas import (
    HomeResponse, Highlights, PlatformStats, ProfileResponse, ProjectStatistics,
    UserStatsResponse, ActivityItem, ProjectRef, ProjectStatus, UserRole
)
from app.services.project_service import ProjectService, relation_query, NEWEST_FIRST
from app.services.serializers import serialize_user, serialize_feature, serialize_testimonial
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

HIGHLIGHT_LIMIT = 6
RECENT_PROJECTS_ON_PROFILE = 5
ACTIVITY_DESCRIPTION_LENGTH = 140


DEFAULT_FEATURES = [
    {
        "title": "Project Collaboration",
        "description": "Connect with students who can help build your projects while you mentor them in return.",
        "icon": "CodeBracketIcon",
        "order": 1
    },
    {
        "title": "Skill Development",
        "description": "Students gain real-world experience while engineers get free project assistance.",
        "icon": "AcademicCapIcon",
        "order": 2
    },
    {
        "title": "Community Building",
        "description": "Join a community of passionate engineers and students helping each other grow.",
        "icon": "UsersIcon",
        "order": 3
    },
    {
        "title": "Innovation Hub",
        "description": "Turn your ideas into reality with collaborative development and mentorship.",
        "icon": "RocketLaunchIcon",
        "order": 4
    }
]

DEFAULT_TESTIMONIALS = [
    {
        "name": "Sarah Chen",
        "role": "Senior Software Engineer",
        "avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=40&h=40&fit=crop&crop=face",
        "quote": "As a senior engineer, I've found amazing students to help with my side projects. "
                 "The mentoring aspect is incredibly rewarding.",
        "rating": 5
    },
    {
        "name": "Alex Rodriguez",
        "role": "Computer Science Student",
        "avatar": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=40&h=40&fit=crop&crop=face",
        "quote": "This platform helped me gain real-world experience while working on interesting projects. "
                 "My mentor has been incredibly helpful!",
        "rating": 5
    },
    {
        "name": "Emily Watson",
        "role": "Full Stack Developer",
        "avatar": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=40&h=40&fit=crop&crop=face",
        "quote": "The quality of collaboration here is outstanding. "
                 "I've built several successful projects with talented students.",
        "rating": 5
    }
]


def completion_rate(completed: int, total: int) -> int:
    """Percentage of projects completed, halves rounded up; 0 when there are none."""
    if total == 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


class DashboardService:
    """
    Profile statistics and homepage content.
    """

    def __init__(self):
        self.projects: Collection = get_collection(COLLECTIONS["projects"])
        self.features: Collection = get_collection(COLLECTIONS["features"])
        self.testimonials: Collection = get_collection(COLLECTIONS["testimonials"])
        self.user_service = UserService()
        self.project_service = ProjectService()

    # ------------------------------------------------------------
    # Per-user views
    # ------------------------------------------------------------

    def project_statistics(self, user_id: str) -> ProjectStatistics:
        oid = to_object_id(user_id, "User")
        either = relation_query(oid)["$or"]

        def count_with_status(status: str) -> int:
            return self.projects.count_documents(
                {"$or": [dict(clause, status=status) for clause in either]}
            )

        return ProjectStatistics(
            owned=self.projects.count_documents({"owner": oid}),
            assigned=self.projects.count_documents({"student": oid}),
            completed=count_with_status(ProjectStatus.completed.value),
            in_progress=count_with_status(ProjectStatus.in_progress.value)
        )

    def user_stats(self, user_id: str) -> UserStatsResponse:
        user = self.user_service.get_raw(user_id)
        return UserStatsResponse(
            projects=self.project_statistics(user_id),
            rating=user.get("rating", 0),
            total_reviews=user.get("total_reviews", 0),
            role=user["role"]
        )

    def profile(self, user_id: str) -> ProfileResponse:
        """User, their latest projects, statistics and recent activity."""
        user = self.user_service.get_raw(user_id)
        docs = list(
            self.projects.find(relation_query(user["_id"]))
            .sort(NEWEST_FIRST)
            .limit(RECENT_PROJECTS_ON_PROFILE)
        )

        activity = []
        for doc in docs:
            if doc["owner"] == user["_id"]:
                kind = "owned"
            elif doc.get("student") == user["_id"]:
                kind = "assigned"
            else:
                kind = "project"
            activity.append(ActivityItem(
                id=str(doc["_id"]),
                type=kind,
                title=doc["title"],
                description=(doc.get("description") or "")[:ACTIVITY_DESCRIPTION_LENGTH],
                status=doc["status"],
                updated_at=doc.get("updated_at"),
                project=ProjectRef(id=str(doc["_id"]), title=doc["title"])
            ))

        return ProfileResponse(
            user=serialize_user(user),
            projects=self.project_service.present(docs),
            statistics=self.project_statistics(user_id),
            recent_activity=activity
        )

    # ------------------------------------------------------------
    # Homepage
    # ------------------------------------------------------------

    def platform_stats(self) -> PlatformStats:
        users = self.user_service.collection
        total = self.projects.count_documents({})
        completed = self.projects.count_documents({"status": ProjectStatus.completed.value})
        return PlatformStats(
            total_projects=total,
            open_projects=self.projects.count_documents({"status": ProjectStatus.open.value}),
            active_projects=self.projects.count_documents({
                "status": {"$in": [ProjectStatus.open.value, ProjectStatus.in_progress.value]}
            }),
            completed_projects=completed,
            mentor_count=users.count_documents({"role": UserRole.engineer.value}),
            student_count=users.count_documents({"role": UserRole.student.value}),
            completion_rate=completion_rate(completed, total)
        )

    def _seed(self, collection: Collection, defaults: List[dict], extra: dict) -> None:
        now = utcnow()
        collection.insert_many([dict(item, created_at=now, updated_at=now, **extra) for item in defaults])
        logger.info("Seeded %d default documents into %s", len(defaults), collection.name)

    def active_features(self):
        query = {"is_active": True}
        if self.features.count_documents(query) == 0:
            self._seed(self.features, DEFAULT_FEATURES, {"is_active": True})
        return [serialize_feature(doc) for doc in self.features.find(query).sort("order", ASCENDING)]

    def featured_testimonials(self):
        query = {"is_featured": True}
        if self.testimonials.count_documents(query) == 0:
            self._seed(self.testimonials, DEFAULT_TESTIMONIALS, {"is_featured": True})
        cursor = self.testimonials.find(query).sort([("created_at", DESCENDING), ("_id", ASCENDING)])
        return [serialize_testimonial(doc) for doc in cursor.limit(HIGHLIGHT_LIMIT)]

    def home(self) -> HomeResponse:
        recent = list(self.projects.find({}).sort(NEWEST_FIRST).limit(HIGHLIGHT_LIMIT))
        top_mentors = self.user_service.top_rated_mentors(HIGHLIGHT_LIMIT, require_reviews=False)
        return HomeResponse(
            statistics=self.platform_stats(),
            features=self.active_features(),
            testimonials=self.featured_testimonials(),
            highlights=Highlights(
                top_mentors=[serialize_user(doc) for doc in top_mentors],
                recent_projects=self.project_service.present(recent)
            )
        )
