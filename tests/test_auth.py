"""
Test authentication endpoints.

- POST /users - Register
- POST /auth/login - Login
- GET /users/me - Current user
- POST /auth/access-validation - Access flag check
"""

import pytest

from skillsync.auth import authenticate, create_access_token, decode_access_token, hash_password
from skillsync.exceptions import AuthenticationError, InvalidCredentialsError
from skillsync.db_models import DBAccessLog, DBUser

PASSWORD = "s3cure-pass"


def register(client, email="taro@acme-corp.com", name="Taro Yamada", password=PASSWORD):
    return client.post("/users", json={
        "email": email,
        "password": password,
        "name": name,
        "department": "Engineering",
        "position": "Engineer",
    })


def login(client, email="taro@acme-corp.com", password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})

# =============================================================================
# Registration & Login
# =============================================================================

def test_register_and_login(client):
    response = register(client)
    assert response.status_code == 200
    user = response.json()
    assert user["email"] == "taro@acme-corp.com"
    assert "hashed_password" not in user
    assert user["access_rights"]["admin"] is False

    response = login(client)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user["id"]

    me = client.get("/users/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Taro Yamada"


def test_register_duplicate_email_is_case_insensitive(client):
    assert register(client).status_code == 200
    response = register(client, email="TARO@acme-corp.com")
    assert response.status_code == 400


def test_register_rejects_short_password(client):
    response = register(client, password="short")
    assert response.status_code == 422


def test_register_claims_hr_synced_user(client, db_session):
    db_session.add(DBUser(
        employee_id="E100",
        name="Taro Yamada",
        email="taro@acme-corp.com",
        department="Sales",
        profile_data={},
    ))
    db_session.commit()

    response = register(client)
    assert response.status_code == 200
    assert response.json()["employee_id"] == "E100"
    assert response.json()["department"] == "Sales"
    assert db_session.query(DBUser).count() == 1


def test_login_wrong_password(client):
    register(client)
    assert login(client, password="wrong-password").status_code == 401


def test_login_unknown_email(client):
    assert login(client, email="nobody@acme-corp.com").status_code == 401


def test_login_hr_user_without_password(client, db_session):
    db_session.add(DBUser(name="No Password", email="nopass@acme-corp.com", profile_data={}))
    db_session.commit()
    assert login(client, email="nopass@acme-corp.com").status_code == 401


def test_login_is_case_insensitive_on_email(client, db_session):
    db_session.add(DBUser(
        name="Mixed Case",
        email="Mixed@acme-corp.com",
        hashed_password=hash_password(PASSWORD),
        profile_data={},
    ))
    db_session.commit()
    assert login(client, email="mixed@ACME-CORP.com").status_code == 200


def test_me_requires_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

# =============================================================================
# Access Validation
# =============================================================================

def test_access_validation_granted(client, create_user, auth_headers, db_session):
    manager = create_user(user_management=True)

    response = client.post(
        "/auth/access-validation",
        json={"user_id": manager.id, "required_access": ["user_management"]},
        headers=auth_headers(manager),
    )

    assert response.status_code == 200
    assert response.json()["has_access"] is True
    assert response.json()["user_data"]["id"] == manager.id
    assert db_session.query(DBAccessLog).count() == 1


def test_access_validation_denied(client, create_user, auth_headers):
    member = create_user()

    response = client.post(
        "/auth/access-validation",
        json={"user_id": member.id, "required_access": ["admin"]},
        headers=auth_headers(member),
    )

    assert response.status_code == 403
    assert response.json() == {
        "has_access": False,
        "message": "You do not have permission to perform this operation",
    }


def test_access_validation_bad_requests(client, create_user, auth_headers):
    member = create_user()
    headers = auth_headers(member)

    empty = client.post(
        "/auth/access-validation",
        json={"user_id": member.id, "required_access": []},
        headers=headers,
    )
    assert empty.status_code == 400

    unknown = client.post(
        "/auth/access-validation",
        json={"user_id": "missing", "required_access": ["admin"]},
        headers=headers,
    )
    assert unknown.status_code == 404

# =============================================================================
# Token & credential helpers
# =============================================================================

def test_token_decode_and_reject_garbage():
    token = create_access_token({"sub": "user-1"})
    assert decode_access_token(token)["sub"] == "user-1"

    with pytest.raises(AuthenticationError):
        decode_access_token("not-a-token")


def test_authenticate_rejects_bad_credentials():
    user = DBUser(email="a@acme-corp.com", name="A", hashed_password=hash_password(PASSWORD))

    assert authenticate(user, PASSWORD) is user
    with pytest.raises(InvalidCredentialsError):
        authenticate(user, "wrong-pass")
    with pytest.raises(InvalidCredentialsError):
        authenticate(None, PASSWORD)


def test_access_validation_rejects_unknown_flag(client, create_user, auth_headers):
    member = create_user()
    response = client.post(
        "/auth/access-validation",
        json={"user_id": member.id, "required_access": ["superuser"]},
        headers=auth_headers(member),
    )
    assert response.status_code == 422
