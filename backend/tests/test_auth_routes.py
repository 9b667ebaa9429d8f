from conftest import auth_headers, register


def test_register_duplicate_email_is_400(client):
    register(client)
    response = client.post("/api/v1/auth/register", json={"email": "a@x.com", "password": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == 400
    assert body["message"] == "Email already registered"


def test_register_duplicate_email_race_is_400(client, monkeypatch):
    from app.services.user_service import UserService

    register(client)
    monkeypatch.setattr(UserService, "get_user_by_email", staticmethod(lambda db, email: None))

    response = client.post("/api/v1/auth/register", json={"email": "a@x.com", "password": "x"})
    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


def test_register_requires_email_and_password(client):
    response = client.post("/api/v1/auth/register", json={"email": "a@x.com"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_login_errors_are_indistinguishable(client):
    register(client)
    wrong_password = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "bad"})
    unknown_email = client.post("/api/v1/auth/login", json={"email": "zz@x.com", "password": "pw1"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"]


def test_refresh_is_single_use(client):
    session = register(client)

    first = client.post("/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert first.status_code == 200
    assert first.json()["data"]["refresh_token"] != session["refresh_token"]

    replay = client.post("/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert replay.status_code == 401
    assert replay.json()["message"] == "Invalid refresh token"


def test_refresh_requires_token(client):
    response = client.post("/api/v1/auth/refresh", json={})
    assert response.status_code == 400


def test_logout_is_idempotent(client, db):
    from app.services.token_service import token_service

    session = register(client)
    headers = auth_headers(session)

    assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
    assert client.post("/api/v1/auth/logout", json={}, headers=headers).status_code == 200

    body = {"refresh_token": session["refresh_token"]}
    assert client.post("/api/v1/auth/logout", json=body, headers=headers).status_code == 200


def test_logout_cannot_revoke_another_users_token(client, db):
    from app.services.token_service import token_service

    owner = register(client)
    other = register(client, email="b@x.com")

    body = {"refresh_token": owner["refresh_token"]}
    assert client.post("/api/v1/auth/logout", json=body, headers=auth_headers(other)).status_code == 200
    assert token_service.find_refresh_token(db, owner["refresh_token"]) is not None
    assert token_service.find_refresh_token(db, session["refresh_token"]) is None
    assert client.post("/api/v1/auth/logout", json=body, headers=headers).status_code == 200


def test_verify_returns_identity(client):
    session = register(client)
    response = client.get("/api/v1/auth/verify", headers=auth_headers(session))
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Token is valid"
    assert body["data"] == {"userId": session["user"]["id"], "email": "a@x.com"}


def test_guard_requires_bearer_token(client):
    response = client.get("/api/v1/auth/verify")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"

    malformed = client.get("/api/v1/auth/verify", headers={"Authorization": "Token abc"})
    assert malformed.status_code == 401
    assert malformed.json()["message"] == "Access token required"


def test_guard_rejects_invalid_and_refresh_tokens(client):
    session = register(client)

    bogus = client.get("/api/v1/auth/verify", headers={"Authorization": "Bearer not.a.jwt"})
    assert bogus.status_code == 401
    assert bogus.json()["message"] == "Invalid or expired token"

    refresh_as_access = client.get(
        "/api/v1/auth/verify",
        headers={"Authorization": f"Bearer {session['refresh_token']}"},
    )
    assert refresh_as_access.status_code == 401


def test_guard_rejects_token_of_deleted_user(client):
    victim = register(client, "victim@x.com", "pw")
    admin = register(client, "admin@x.com", "pw")

    deleted = client.delete(f"/api/v1/users/{victim['user']['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 204

    response = client.get("/api/v1/sync/status", headers=auth_headers(victim))
    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_user_routes(client):
    session = register(client, name="Ann")
    headers = auth_headers(session)

    fetched = client.get(f"/api/v1/users/{session['user']['id']}", headers=headers)
    assert fetched.status_code == 200
    user = fetched.json()
    assert user["email"] == "a@x.com"
    assert user["name"] == "Ann"
    assert "createdAt" in user and "updatedAt" in user
    assert "password" not in user and "password_hash" not in user

    created = client.post(
        "/api/v1/users", json={"email": "b@x.com", "password": "pw"}, headers=headers
    )
    assert created.status_code == 201

    duplicate = client.post(
        "/api/v1/users", json={"email": "b@x.com", "password": "pw"}, headers=headers
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Email already exists"

    listed = client.get("/api/v1/users", headers=headers).json()
    assert {u["email"] for u in listed} == {"a@x.com", "b@x.com"}

    assert client.get("/api/v1/users/missing", headers=headers).status_code == 404
    assert client.delete("/api/v1/users/missing", headers=headers).status_code == 404


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["code"] == 404
