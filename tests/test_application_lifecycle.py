import copy

import pytest
from bson import ObjectId

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.services.application_service import ApplicationService


def stored(db, project_id):
    return db.projects.find_one({"_id": ObjectId(project_id)})


def assert_assignment_consistent(doc):
    accepted = [a for a in doc["applications"] if a["status"] == "accepted"]
    assert len(accepted) <= 1
    if doc.get("student"):
        assert len(accepted) == 1
        assert accepted[0]["student"] == doc["student"]
    else:
        assert accepted == []


@pytest.fixture
def service():
    return ApplicationService()


@pytest.fixture
def two_applicants(create_user, create_project, service):
    """Open project with two pending applications, as in the usual scenario."""
    project = create_project()
    s1 = create_user("student", name="Student One")
    s2 = create_user("student", name="Student Two")
    service.apply(s1.principal, project.id, "I know parsers")
    result = service.apply(s2.principal, project.id, None)
    a1, a2 = result.applications
    return project, s1, s2, a1, a2


# ------------------------------------------------------------
# Submit
# ------------------------------------------------------------

def test_apply_appends_pending_application(db, create_user, create_project, service):
    project = create_project()
    student = create_user("student")

    result = service.apply(student.principal, project.id, "  hello  ")

    assert len(result.applications) == 1
    app = result.applications[0]
    assert app.status == "pending"
    assert app.student_id == student.id
    assert app.message == "  hello  "
    assert stored(db, project.id)["applications"][0]["status"] == "pending"


def test_apply_twice_conflicts_and_keeps_list(db, create_user, create_project, service):
    project = create_project()
    student = create_user("student")
    service.apply(student.principal, project.id)

    with pytest.raises(Conflict):
        service.apply(student.principal, project.id)

    assert len(stored(db, project.id)["applications"]) == 1


@pytest.mark.parametrize("status", ["in-progress", "completed", "cancelled"])
def test_apply_to_non_open_project_conflicts(db, create_user, create_project, service, status):
    project = create_project()
    db.projects.update_one({"_id": ObjectId(project.id)}, {"$set": {"status": status}})

    with pytest.raises(Conflict):
        service.apply(create_user("student").principal, project.id)


def test_only_students_apply(create_project, engineer, service):
    project = create_project()
    with pytest.raises(Forbidden):
        service.apply(engineer.principal, project.id)


def test_apply_to_missing_project(create_user, service):
    student = create_user("student")
    with pytest.raises(NotFound):
        service.apply(student.principal, str(ObjectId()))
    with pytest.raises(NotFound):
        service.apply(student.principal, "not-an-id")


# ------------------------------------------------------------
# Decide
# ------------------------------------------------------------

def test_accept_assigns_student_and_rejects_pending_siblings(db, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants

    result = service.decide(engineer.principal, project.id, a1.id, "accept")

    statuses = {a.id: a.status for a in result.applications}
    assert statuses == {a1.id: "accepted", a2.id: "rejected"}
    assert result.status == "in-progress"
    assert result.student.id == s1.id
    assert_assignment_consistent(stored(db, project.id))


def test_second_accept_conflicts_without_mutation(db, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    service.decide(engineer.principal, project.id, a1.id, "accept")
    before = stored(db, project.id)

    with pytest.raises(Conflict):
        service.decide(engineer.principal, project.id, a2.id, "accept")

    assert stored(db, project.id) == before


def test_accept_leaves_already_rejected_applications_alone(db, create_user, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    s3 = create_user("student")
    a3 = service.apply(s3.principal, project.id).applications[-1]
    service.decide(engineer.principal, project.id, a2.id, "reject")
    rejected_before = next(a for a in stored(db, project.id)["applications"] if str(a["_id"]) == a2.id)

    result = service.decide(engineer.principal, project.id, a3.id, "accept")

    statuses = {a.id: a.status for a in result.applications}
    assert statuses == {a1.id: "rejected", a2.id: "rejected", a3.id: "accepted"}
    rejected_after = next(a for a in stored(db, project.id)["applications"] if str(a["_id"]) == a2.id)
    assert rejected_after == rejected_before


def test_reject_changes_only_that_application(db, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants

    result = service.decide(engineer.principal, project.id, a2.id, "reject")

    statuses = {a.id: a.status for a in result.applications}
    assert statuses == {a1.id: "pending", a2.id: "rejected"}
    assert result.status == "open"
    assert result.student is None


def test_decided_applications_are_terminal(engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    service.decide(engineer.principal, project.id, a2.id, "reject")

    with pytest.raises(Conflict):
        service.decide(engineer.principal, project.id, a2.id, "reject")
    with pytest.raises(Conflict):
        service.decide(engineer.principal, project.id, a2.id, "accept")


def test_decide_rejects_unknown_action(engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    with pytest.raises(ValidationError) as exc:
        service.decide(engineer.principal, project.id, a1.id, "maybe")
    assert exc.value.errors[0]["field"] == "action"


def test_only_owner_decides(create_user, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    other = create_user("engineer")
    with pytest.raises(Forbidden):
        service.decide(other.principal, project.id, a1.id, "accept")
    with pytest.raises(Forbidden):
        service.decide(s1.principal, project.id, a1.id, "accept")


def test_decide_missing_application(engineer, two_applicants, service):
    project, *_ = two_applicants
    with pytest.raises(NotFound):
        service.decide(engineer.principal, project.id, str(ObjectId()), "accept")


def test_concurrent_accepts_only_one_wins(db, engineer, two_applicants, service, monkeypatch):
    project, s1, s2, a1, a2 = two_applicants
    # the second request read the project before the first write landed
    snapshot = service.projects.get_raw(project.id)

    service.decide(engineer.principal, project.id, a1.id, "accept")
    monkeypatch.setattr(service.projects, "get_raw", lambda project_id: copy.deepcopy(snapshot))

    with pytest.raises(Conflict):
        service.decide(engineer.principal, project.id, a2.id, "accept")

    doc = stored(db, project.id)
    assert doc["student"] == ObjectId(s1.id)
    assert_assignment_consistent(doc)


def test_stale_apply_is_refused(db, create_user, create_project, service, monkeypatch):
    project = create_project()
    student = create_user("student")
    snapshot = service.projects.get_raw(project.id)
    service.apply(student.principal, project.id)

    monkeypatch.setattr(service.projects, "get_raw", lambda project_id: copy.deepcopy(snapshot))
    with pytest.raises(Conflict):
        service.apply(student.principal, project.id)

    assert len(stored(db, project.id)["applications"]) == 1


# ------------------------------------------------------------
# Listing and direct assignment
# ------------------------------------------------------------

def test_owner_sees_applicant_contact_details(engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants

    applications = service.list_applications(engineer.principal, project.id)

    assert [a.student.email for a in applications] == [s1.principal.email, s2.principal.email]
    assert applications[0].message == "I know parsers"


def test_non_owner_cannot_list_applications(two_applicants, service):
    project, s1, *_ = two_applicants
    with pytest.raises(Forbidden):
        service.list_applications(s1.principal, project.id)


def test_assign_student_accepts_existing_application(db, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants

    result = service.assign_student(engineer.principal, project.id, s2.id)

    statuses = {a.id: a.status for a in result.applications}
    assert statuses == {a1.id: "rejected", a2.id: "accepted"}
    assert result.student.id == s2.id
    assert_assignment_consistent(stored(db, project.id))


def test_assign_student_without_application_records_one(db, create_user, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    outsider = create_user("student")

    result = service.assign_student(engineer.principal, project.id, outsider.id)

    assert result.status == "in-progress"
    assert result.student.id == outsider.id
    assert len(result.applications) == 3
    assert result.applications[-1].student_id == outsider.id
    assert result.applications[-1].status == "accepted"
    assert {a.status for a in result.applications[:2]} == {"rejected"}
    assert_assignment_consistent(stored(db, project.id))


def test_assign_student_conflicts_once_assigned(create_user, engineer, two_applicants, service):
    project, s1, s2, a1, a2 = two_applicants
    service.decide(engineer.principal, project.id, a1.id, "accept")

    with pytest.raises(Conflict):
        service.assign_student(engineer.principal, project.id, create_user("student").id)


def test_assign_requires_a_student(engineer, create_project, service):
    project = create_project()
    with pytest.raises(NotFound):
        service.assign_student(engineer.principal, project.id, engineer.id)
