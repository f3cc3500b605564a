import pytest
from jose import jwt

from classhub.core.config import settings
from classhub.models.user import User
from tests.conftest import PASSWORD, auth_headers


def _register(client, **overrides):
    body = {
        "name": "Ada",
        "email": "ada@example.com",
        "phone": "5551234",
        "college": "Science",
        "role": "teacher",
        "password": "pw123456",
    }
    body.update(overrides)
    return client.post("/api/register", json=body)


class TestRegister:
    def test_register_success(self, client, db_session):
        resp = _register(client)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

        user = db_session.query(User).filter(User.email == "ada@example.com").one()
        assert user.role == "teacher"
        # never stored in the clear
        assert user.password_hash != "pw123456"

    def test_duplicate_email_rejected(self, client):
        assert _register(client).status_code == 200
        resp = _register(client, phone="5559999")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"

    def test_duplicate_phone_rejected(self, client):
        assert _register(client).status_code == 200
        resp = _register(client, email="other@example.com")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"

    def test_phone_only_users_do_not_collide_on_missing_email(self, client):
        assert _register(client, email=None, phone="111").status_code == 200
        assert _register(client, email=None, phone="222").status_code == 200

    def test_requires_email_or_phone(self, client):
        resp = _register(client, email=None, phone=None)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required fields"

    def test_student_requires_student_id(self, client):
        resp = _register(client, role="student")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Student ID required"

    def test_unknown_role_rejected(self, client):
        resp = _register(client, role="admin")
        assert resp.status_code == 400


class TestLogin:
    def test_login_by_email(self, client, teacher):
        resp = client.post("/api/login", json={"email": "teacher@test.com", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["id"] == teacher.id
        assert body["user"]["role"] == "teacher"

        claims = jwt.decode(body["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert claims["sub"] == str(teacher.id)
        assert claims["role"] == "teacher"
        assert claims["name"] == "Test Teacher"
        assert claims["college"] == "Engineering"
        assert "exp" in claims

    def test_login_by_phone(self, client, other_student):
        resp = client.post("/api/login", json={"phone": " 5550001 ", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == other_student.id

    def test_wrong_password(self, client, teacher):
        resp = client.post("/api/login", json={"email": "teacher@test.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"

    def test_missing_identifier(self, client):
        resp = client.post("/api/login", json={"password": "x"})
        assert resp.status_code == 400

    def test_oauth2_form_login(self, client, teacher):
        resp = client.post(
            "/api/token",
            data={"username": "teacher@test.com", "password": PASSWORD},
        )
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"

    def test_login_with_mixed_case_email_as_registered(self, client, db_session):
        assert _register(client, email="Ada@Example.COM", phone=None).status_code == 200
        assert db_session.query(User).filter(User.email == "Ada@Example.COM").count() == 1

        resp = client.post("/api/login", json={"email": "Ada@Example.COM", "password": "pw123456"})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "Ada@Example.COM"

    def test_register_rejects_malformed_email(self, client):
        resp = _register(client, email="not-an-address")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid email address"


class TestMe:
    def test_me_returns_profile(self, client, student):
        resp = client.get("/api/me", headers=auth_headers(student))
        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["id"] == student.id
        assert user["student_id"] == "S-1"
        assert user["university"] == "State University"

    def test_me_without_token(self, client):
        assert client.get("/api/me").status_code == 401

    def test_me_with_garbage_token(self, client):
        resp = client.get("/api/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_me_with_expired_token(self, client, student):
        from datetime import timedelta

        from classhub.core.security import create_access_token

        token = create_access_token({"sub": str(student.id)}, expires_delta=timedelta(seconds=-1))
        resp = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestRoleDependencies:
    def test_student_dependency(self, student, teacher):
        from fastapi import HTTPException

        from classhub.core.security import get_current_student

        assert get_current_student(student) is student
        with pytest.raises(HTTPException) as exc:
            get_current_student(teacher)
        assert exc.value.status_code == 403
        assert exc.value.detail == "Student role required"

    def test_teacher_dependency(self, student, teacher):
        from fastapi import HTTPException

        from classhub.core.security import get_current_teacher

        assert get_current_teacher(teacher) is teacher
        with pytest.raises(HTTPException) as exc:
            get_current_teacher(student)
        assert exc.value.status_code == 403
