REGISTER = {
    "name": "Ada Lovelace",
    "email": "Ada@Example.com",
    "password": "analytical",
    "role": "engineer",
    "skills": ["python", "math"],
    "experience": "10 years",
}


def register(client, **overrides):
    return client.post("/api/auth/register", json={**REGISTER, **overrides})


def test_register_returns_token_and_public_user(client):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "ada@example.com"
    assert user["role"] == "engineer"
    assert user["avatar"].startswith("https://ui-avatars.com/api/?name=Ada%20Lovelace")
    assert "password" not in user and "password_hash" not in user
    assert "_id" not in user and user["id"]
    assert body["data"]["token"]


def test_duplicate_email_conflicts(client):
    register(client)
    response = register(client, email="ada@example.com", name="Someone Else")

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "User with this email already exists"}


def test_register_validation_reports_fields(client):
    response = register(client, password="123", role="admin", skills=[])

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    fields = {e["field"] for e in body["errors"]}
    assert {"password", "role", "skills"} <= fields


def test_login_and_me(client):
    register(client)
    response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "analytical"})
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["name"] == "Ada Lovelace"


def test_login_with_bad_credentials(client):
    register(client)
    wrong_password = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "analytical"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"] == "Invalid credentials"


def test_protected_route_requires_valid_token(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_token_of_deleted_user_is_rejected(client, create_user):
    student = create_user("student")
    client.delete(f"/api/users/{student.id}", headers=student.headers)

    assert client.get("/api/auth/me", headers=student.headers).status_code == 401


def test_blank_skills_do_not_count(client, db):
    blank = register(client, skills=["   ", ""])
    assert blank.status_code == 400
    assert {e["field"] for e in blank.json()["errors"]} == {"skills"}

    response = register(client, name="  Ada Lovelace  ", skills=[" python ", "  ", "math"])
    assert response.status_code == 201
    stored = db.users.find_one({"email": "ada@example.com"})
    assert stored["skills"] == ["python", "math"]
    assert stored["name"] == "Ada Lovelace"
