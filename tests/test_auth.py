from jose import jwt

import config
from auth import create_token, verify_token
from tests.helpers import add_user, login


def test_admin_route_without_session(client):
    resp = client.get("/users")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "unauthorized access"}


def test_admin_route_with_bad_signature(client):
    forged = jwt.encode({"email": "admin@example.com"}, "wrong-secret", algorithm="HS256")
    client.cookies.set("token", forged)
    assert client.get("/users").status_code == 401


def test_admin_route_with_expired_token(client, db):
    add_user(db, "admin@example.com", role="admin")
    client.cookies.set("token", create_token({"email": "admin@example.com"}, expires_days=-1))
    assert client.get("/users").status_code == 401


def test_token_without_email_is_rejected(client):
    client.cookies.set("token", create_token({"name": "nobody"}))
    assert client.get("/users").status_code == 401


def test_admin_route_as_customer(client, db):
    add_user(db, "plain@example.com")
    login(client, "plain@example.com")
    resp = client.get("/users")
    assert resp.status_code == 403
    assert resp.json()["success"] is False


def test_admin_route_for_unknown_user(client):
    login(client, "ghost@example.com")
    assert client.get("/users").status_code == 403


def test_admin_route_as_admin(client, db):
    add_user(db, "admin@example.com", role="admin")
    add_user(db, "a@example.com")
    add_user(db, "b@example.com", role="seller")
    login(client, "admin@example.com")

    resp = client.get("/users")

    assert resp.status_code == 200
    emails = sorted(u["email"] for u in resp.json())
    assert emails == ["a@example.com", "b@example.com"]
    assert all("id" in u and "_id" not in u for u in resp.json())


def test_verify_token_round_trip():
    claims = verify_token(create_token({"email": "x@example.com", "name": "X"}))
    assert claims["email"] == "x@example.com"
    assert claims["name"] == "X"
    assert "exp" in claims


def test_jwt_sets_session_cookie(client):
    resp = client.post("/jwt", json={"email": "buyer@example.com"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith(f"{config.TOKEN_COOKIE}=")
    assert "HttpOnly" in cookie
    assert "samesite=strict" in cookie.lower()
    token = client.cookies.get(config.TOKEN_COOKIE)
    assert verify_token(token)["email"] == "buyer@example.com"


def test_jwt_requires_email(client):
    resp = client.post("/jwt", json={"name": "anon"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_issued_cookie_opens_protected_routes(client, db):
    add_user(db, "buyer@example.com")
    client.post("/jwt", json={"email": "buyer@example.com"})
    resp = client.get("/users/role/buyer@example.com")
    assert resp.json() == {"success": True, "role": "customer"}


def test_logout_clears_cookie(client):
    client.post("/jwt", json={"email": "buyer@example.com"})
    resp = client.get("/logout")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith(f"{config.TOKEN_COOKIE}=")
    assert "Max-Age=0" in cookie


def test_production_cookie_flags(client, monkeypatch):
    monkeypatch.setattr(config, "IS_PRODUCTION", True)

    login_cookie = client.post("/jwt", json={"email": "buyer@example.com"}).headers["set-cookie"]
    logout_cookie = client.get("/logout").headers["set-cookie"]

    for cookie in (login_cookie, logout_cookie):
        assert "Secure" in cookie
        assert "HttpOnly" in cookie
        assert "samesite=none" in cookie.lower()
