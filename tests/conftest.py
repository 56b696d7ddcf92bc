import os

# Must be set before app settings are first loaded
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from types import SimpleNamespace

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.db import mongodb
from app.main import app
from app.schemas.schemas import Principal, ProjectCreate, RegisterRequest
from app.services.project_service import ProjectService
from app.services.user_service import UserService


@pytest.fixture(autouse=True)
def db():
    database = mongomock.MongoClient(tz_aware=True)["mentor_connect_test"]
    mongodb.set_mongo_db(database)
    mongodb.init_mongo_indexes()
    yield database
    mongodb.set_mongo_db(None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def create_user():
    counter = {"n": 0}

    def _create(role="student", name=None, skills=None, **profile):
        counter["n"] += 1
        name = name or f"{role.title()} {counter['n']}"
        auth = UserService().register(RegisterRequest(
            name=name,
            email=f"{role}{counter['n']}@example.com",
            password="secret123",
            role=role,
            skills=skills or ["python"],
            experience="2 years"
        ))
        if profile:
            mongodb.get_collection("users").update_one(
                {"email": auth.user.email}, {"$set": profile}
            )
        principal = Principal(id=auth.user.id, email=auth.user.email, name=auth.user.name, role=role)
        return SimpleNamespace(
            id=auth.user.id,
            principal=principal,
            token=auth.token,
            headers={"Authorization": f"Bearer {auth.token}"}
        )

    return _create


@pytest.fixture
def engineer(create_user):
    return create_user("engineer", name="Grace Hopper")


@pytest.fixture
def project_payload():
    def _payload(**overrides):
        payload = {
            "title": "Build a compiler",
            "description": "Write a small compiler for a toy language with tests.",
            "skills": ["python", "parsing"],
            "difficulty": "intermediate",
            "duration": "3 months",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def create_project(engineer, project_payload):
    def _create(owner=None, **overrides):
        owner = owner or engineer
        return ProjectService().create(owner.principal, ProjectCreate(**project_payload(**overrides)))

    return _create
