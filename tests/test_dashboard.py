from bson import ObjectId

from app.services.dashboard_service import completion_rate, DEFAULT_FEATURES, DEFAULT_TESTIMONIALS


def set_status(db, project, status, student=None):
    changes = {"status": status}
    if student:
        changes["student"] = ObjectId(student.id)
    db.projects.update_one({"_id": ObjectId(project.id)}, {"$set": changes})


def test_completion_rate():
    assert completion_rate(0, 0) == 0
    assert completion_rate(1, 3) == 33
    assert completion_rate(2, 3) == 67
    assert completion_rate(1, 8) == 13
    assert completion_rate(4, 4) == 100


def test_home_on_empty_platform_seeds_content(client, db):
    data = client.get("/api/dashboard/home").json()["data"]

    assert data["statistics"] == {
        "total_projects": 0, "open_projects": 0, "active_projects": 0, "completed_projects": 0,
        "mentor_count": 0, "student_count": 0, "completion_rate": 0,
    }
    assert [f["title"] for f in data["features"]] == [f["title"] for f in DEFAULT_FEATURES]
    assert len(data["testimonials"]) == len(DEFAULT_TESTIMONIALS)

    # seeding happens once
    client.get("/api/dashboard/home")
    assert db.features.count_documents({}) == len(DEFAULT_FEATURES)


def test_home_statistics_and_highlights(client, db, create_user, create_project):
    student = create_user("student")
    create_user("engineer", name="Star", rating=5, total_reviews=3)
    create_user("engineer", name="Resting", rating=5, total_reviews=3, is_available=False)
    projects = [create_project(title=f"Project number {i}") for i in range(4)]
    set_status(db, projects[0], "completed", student)
    set_status(db, projects[1], "in-progress", student)
    set_status(db, projects[2], "cancelled")

    data = client.get("/api/dashboard/home").json()["data"]

    assert data["statistics"] == {
        "total_projects": 4, "open_projects": 1, "active_projects": 2, "completed_projects": 1,
        "mentor_count": 3, "student_count": 1, "completion_rate": 25,
    }
    mentors = [m["name"] for m in data["highlights"]["top_mentors"]]
    assert mentors[0] == "Star"
    assert "Resting" not in mentors
    assert [p["title"] for p in data["highlights"]["recent_projects"]] == [
        "Project number 3", "Project number 2", "Project number 1", "Project number 0"
    ]


def test_profile_statistics(client, db, engineer, create_user, create_project):
    student = create_user("student")
    done = create_project(title="Finished project")
    running = create_project(title="Running project")
    create_project(title="Waiting project")
    set_status(db, done, "completed", student)
    set_status(db, running, "in-progress", student)

    owner_stats = client.get(f"/api/profiles/{engineer.id}/stats").json()["data"]
    student_stats = client.get(f"/api/profiles/{student.id}/stats").json()["data"]

    assert owner_stats["projects"] == {"owned": 3, "assigned": 0, "completed": 1, "in_progress": 1}
    assert owner_stats["role"] == "engineer"
    assert student_stats["projects"] == {"owned": 0, "assigned": 2, "completed": 1, "in_progress": 1}
    assert client.get(f"/api/profiles/{ObjectId()}/stats").status_code == 404


def test_profile_view(client, db, engineer, create_user, create_project):
    student = create_user("student")
    project = create_project(description="A" * 200)
    set_status(db, project, "in-progress", student)

    data = client.get(f"/api/profiles/{student.id}").json()["data"]

    assert data["user"]["id"] == student.id
    assert [p["id"] for p in data["projects"]] == [project.id]
    activity = data["recent_activity"][0]
    assert activity["type"] == "assigned"
    assert len(activity["description"]) == 140
    assert activity["project"] == {"id": project.id, "title": project.title}


def test_profile_projects_by_relation(client, db, engineer, create_user, create_project):
    student = create_user("student")
    mine = create_project(title="Owned only")
    shared = create_project(title="Assigned one")
    set_status(db, shared, "in-progress", student)

    def ids(user, kind):
        items = client.get(f"/api/profiles/{user.id}/projects", params={"type": kind}).json()["data"]["items"]
        return [p["id"] for p in items]

    assert ids(engineer, "owned") == [shared.id, mine.id]
    assert ids(student, "assigned") == [shared.id]
    assert ids(student, "owned") == []
    assert ids(student, "all") == [shared.id]
