# Overview: Pytest coverage for registration, login, tokens and role gating.

"""
Authentication & Authorization Tests

Verifies:
- Shop registration creates the shop and its first admin together
- Login issues a token; bad credentials answer 401
- Missing, forged and expired tokens answer 401
- Staff are denied admin-only routes (403)
- Admins manage staff of their own shop only
"""

from datetime import datetime, timedelta, timezone

import pytest

from glassshop.models import Shop, User, ROLE_ADMIN, ROLE_STAFF
from glassshop.services.auth_service import normalize_role, verify_password
from glassshop.services.token_service import AuthError, TokenService

from conftest import PASSWORD, auth_headers, get_auth_token


class TestRegistration:
    """POST /auth/register-shop"""

    def test_creates_shop_and_admin(self, client, db_session):
        resp = client.post("/auth/register-shop", json={
            "username": "owner", "password": "pass1234", "shop_name": "Clear View Glass",
            "email": "owner@example.com",
        })
        assert resp.status_code == 201
        user = db_session.query(User).filter_by(username="owner").one()
        shop = db_session.get(Shop, user.shop_id)
        assert shop.shop_name == "Clear View Glass"
        assert user.role == ROLE_ADMIN
        assert user.password_hash != "pass1234"
        assert verify_password("pass1234", user.password_hash)

    def test_duplicate_username_conflicts(self, client, shop_a):
        resp = client.post("/auth/register-shop", json={
            "username": "admin_a", "password": "pass1234", "shop_name": "Other",
        })
        assert resp.status_code == 409
        assert Shop.query.count() == 1

    def test_missing_fields(self, client, db_session):
        resp = client.post("/auth/register-shop", json={"username": "x"})
        assert resp.status_code == 400

    def test_short_password_rejected(self, client, db_session):
        resp = client.post("/auth/register-shop", json={
            "username": "x", "password": "abc", "shop_name": "Tiny",
        })
        assert resp.status_code == 400


class TestLogin:
    """POST /auth/login"""

    def test_returns_token_and_role(self, client, admin_a):
        resp = client.post("/auth/login", json={"username": "admin_a", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json["role"] == ROLE_ADMIN
        assert resp.json["token"]

    def test_wrong_password(self, client, admin_a):
        resp = client.post("/auth/login", json={"username": "admin_a", "password": "nope"})
        assert resp.status_code == 401

    def test_unknown_user(self, client, db_session):
        resp = client.post("/auth/login", json={"username": "ghost", "password": "nope"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/auth/login", json={"username": "admin_a"})
        assert resp.status_code == 400


class TestTokens:
    """Bearer token verification."""

    @pytest.mark.parametrize("path", ["/auth/profile", "/stock/all", "/api/invoices", "/audit/recent"])
    def test_requires_token(self, client, db_session, path):
        assert client.get(path).status_code == 401

    def test_garbage_token(self, client, admin_a):
        resp = client.get("/auth/profile", headers=auth_headers("not-a-jwt"))
        assert resp.status_code == 401

    def test_token_signed_with_other_secret(self, client, admin_a):
        forged = TokenService("some-other-secret").issue("admin_a", ROLE_ADMIN)
        resp = client.get("/auth/profile", headers=auth_headers(forged))
        assert resp.status_code == 401

    def test_expired_token(self, app, client, admin_a):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = TokenService(app.config["JWT_SECRET"], 24).issue("admin_a", ROLE_ADMIN, now=issued)
        resp = client.get("/auth/profile", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_verify_round_trip(self):
        service = TokenService("s3cret", expiration_hours=1)
        claims = service.verify(service.issue("alice", ROLE_STAFF))
        assert claims.username == "alice"
        assert claims.role == ROLE_STAFF

    def test_expired_raises(self):
        service = TokenService("s3cret", expiration_hours=1)
        token = service.issue("alice", ROLE_STAFF, now=datetime.now(timezone.utc) - timedelta(hours=2))
        with pytest.raises(AuthError):
            service.verify(token)

    def test_profile(self, client, admin_a_headers, shop_a):
        resp = client.get("/auth/profile", headers=admin_a_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["username"] == "admin_a"
        assert resp.json["shop"]["id"] == shop_a.id
        assert "password_hash" not in resp.json["user"]


class TestRoleGating:
    """Staff may move stock but not touch admin resources."""

    def test_normalize_role(self):
        assert normalize_role("ROLE_ADMIN") == "ADMIN"
        assert normalize_role("staff") == "STAFF"
        assert normalize_role(None) == ""

    @pytest.mark.parametrize("path", [
        "/api/customers",
        "/api/quotations",
        "/api/invoices",
        "/api/glass-price-master",
        "/audit/recent",
        "/auth/staff",
    ])
    def test_staff_denied_admin_routes(self, client, staff_a_headers, path):
        assert client.get(path, headers=staff_a_headers).status_code == 403

    @pytest.mark.parametrize("path", ["/stock/all", "/stock/recent", "/stock/alert/low", "/audit/transfer-count"])
    def test_staff_allowed_stock_routes(self, client, staff_a_headers, path):
        assert client.get(path, headers=staff_a_headers).status_code == 200

    def test_admin_allowed_stock_routes(self, client, admin_a_headers):
        assert client.get("/stock/all", headers=admin_a_headers).status_code == 200


class TestStaffManagement:
    """Admin-managed staff accounts."""

    def test_create_and_login_staff(self, client, admin_a_headers, shop_a):
        resp = client.post("/auth/create-staff", json={"username": "cutter", "password": "cut1"},
                           headers=admin_a_headers)
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == ROLE_STAFF
        assert resp.json["user"]["shop_id"] == shop_a.id
        assert get_auth_token(client, "cutter", "cut1")

    def test_staff_password_min_length(self, client, admin_a_headers):
        resp = client.post("/auth/create-staff", json={"username": "cutter", "password": "abc"},
                           headers=admin_a_headers)
        assert resp.status_code == 400

    def test_staff_cannot_create_staff(self, client, staff_a_headers):
        resp = client.post("/auth/create-staff", json={"username": "x", "password": "xxxx"},
                           headers=staff_a_headers)
        assert resp.status_code == 403

    def test_list_staff_scoped_to_shop(self, client, admin_a_headers, staff_a, admin_b):
        from glassshop.services import auth_service
        auth_service.create_staff(admin=admin_b, username="staff_b", password=PASSWORD)
        resp = client.get("/auth/staff", headers=admin_a_headers)
        assert [u["username"] for u in resp.json["staff"]] == ["staff_a"]

    def test_delete_staff_of_other_shop_forbidden(self, client, admin_b_headers, staff_a):
        resp = client.delete(f"/auth/staff/{staff_a.id}", headers=admin_b_headers)
        assert resp.status_code == 403
        assert User.query.filter_by(username="staff_a").count() == 1

    def test_delete_own_staff(self, client, admin_a_headers, staff_a):
        staff_id = staff_a.id
        resp = client.delete(f"/auth/staff/{staff_id}", headers=admin_a_headers)
        assert resp.status_code == 200
        assert User.query.filter_by(id=staff_id).count() == 0

    def test_change_password(self, client, admin_a_headers):
        resp = client.post("/auth/change-password", json={
            "current_password": PASSWORD, "new_password": "brand-new",
        }, headers=admin_a_headers)
        assert resp.status_code == 200
        assert get_auth_token(client, "admin_a", "brand-new")
        assert get_auth_token(client, "admin_a", PASSWORD) is None
