"""인증 API 테스트 - 회원가입, 로그인, 토큰 갱신, 로그아웃.

Auth API tests - Register, login, refresh-token, and logout endpoints,
including the full session lifecycle scenarios.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.config import Settings, get_settings, settings
from gestor.main import app
from gestor.models.user import User
from gestor.repositories.token_repository import refresh_token_repository
from gestor.utils.jwt import TokenCodec, token_codec
from tests.conftest import AUTH, auth_header, refresh_cookie_header, set_cookie


async def _user_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(User))).scalar()


async def _register(client: AsyncClient, email: str = "a@x.com", password: str = "pass1234", **extra):
    return await client.post(f"{AUTH}/register", json={"email": email, "password": password, **extra})


class TestRegister:
    """회원가입."""

    async def test_register_success(self, client: AsyncClient, db: AsyncSession):
        """가입 성공 - 201, 액세스 토큰, 쿠키, 원장 항목 1개."""
        res = await _register(client, role="user")
        assert res.status_code == 201
        data = res.json()
        assert data["accessToken"]
        assert data["user"]["email"] == "a@x.com"
        assert data["user"]["role"] == "user"
        assert data["user"]["username"].startswith("user-")
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]

        cookie = set_cookie(res)
        user_id = UUID(data["user"]["id"])
        assert await refresh_token_repository.exists(db, cookie["refreshToken"].value)
        assert await refresh_token_repository.count_for_user(db, user_id) == 1
        assert token_codec.verify_access_token(data["accessToken"]).subject_id == str(user_id)

    async def test_register_cookie_attributes(self, client: AsyncClient):
        """쿠키 속성 - HttpOnly, SameSite=strict, 비운영 환경에서는 secure 아님."""
        res = await _register(client)
        morsel = set_cookie(res)["refreshToken"]
        assert morsel["httponly"] is True
        assert morsel["samesite"].lower() == "strict"
        assert not morsel["secure"]

    async def test_register_with_names(self, client: AsyncClient):
        res = await _register(client, firstName="Ana", lastName="Silva")
        assert res.status_code == 201
        assert res.json()["user"]["firstName"] == "Ana"
        assert res.json()["user"]["lastName"] == "Silva"

    async def test_register_stores_hash_not_plaintext(self, client: AsyncClient, db: AsyncSession):
        await _register(client)
        user = (await db.execute(select(User).where(User.email == "a@x.com"))).scalar_one()
        assert user.password_hash != "pass1234"
        assert user.password_hash.startswith("$2")

    async def test_register_email_normalized(self, client: AsyncClient):
        res = await _register(client, email="Mixed@X.com")
        assert res.json()["user"]["email"] == "mixed@x.com"

    async def test_register_duplicate_email(self, client: AsyncClient, db: AsyncSession):
        """동일 이메일 재가입 - 409 DuplicateField, 레코드 1개."""
        assert (await _register(client)).status_code == 201
        res = await _register(client, password="other1234")
        assert res.status_code == 409
        assert res.json()["code"] == "DuplicateField"
        assert res.json()["field"] == "email"
        assert await _user_count(db) == 1

    async def test_register_admin_not_whitelisted(self, client: AsyncClient, db: AsyncSession):
        """허용 목록에 없는 관리자 가입 - 403, 사용자 미생성."""
        res = await _register(client, email="sneaky@x.com", role="admin")
        assert res.status_code == 403
        assert res.json()["code"] == "AuthorizationError"
        assert await _user_count(db) == 0

    async def test_register_admin_whitelisted(self, client: AsyncClient):
        res = await _register(client, email="boss@x.com", role="admin")
        assert res.status_code == 201
        assert res.json()["user"]["role"] == "admin"

    async def test_register_invalid_email(self, client: AsyncClient):
        res = await _register(client, email="not-an-email")
        assert res.status_code == 400
        assert res.json()["code"] == "ValidationError"
        assert "email" in res.json()["errors"]

    async def test_register_email_too_long(self, client: AsyncClient):
        res = await _register(client, email=("a" * 45) + "@x.com")
        assert res.status_code == 400

    async def test_register_short_password(self, client: AsyncClient):
        res = await _register(client, password="abc")
        assert res.status_code == 400
        assert "password" in res.json()["errors"]

    async def test_register_invalid_role(self, client: AsyncClient):
        res = await _register(client, role="superuser")
        assert res.status_code == 400

    async def test_register_name_too_long(self, client: AsyncClient):
        res = await _register(client, firstName="x" * 21)
        assert res.status_code == 400


class TestLogin:
    """로그인."""

    async def test_login_success_adds_ledger_entry(self, client: AsyncClient, db: AsyncSession):
        """가입 후 로그인 - 201, 새 액세스 토큰, 원장 항목 2개."""
        reg = await _register(client)
        user_id = UUID(reg.json()["user"]["id"])

        res = await client.post(f"{AUTH}/login", json={"email": "a@x.com", "password": "pass1234"})
        assert res.status_code == 201
        data = res.json()
        assert data["accessToken"]
        assert data["user"]["id"] == str(user_id)
        assert set_cookie(res)["refreshToken"].value != set_cookie(reg)["refreshToken"].value
        assert await refresh_token_repository.count_for_user(db, user_id) == 2

    async def test_login_unknown_email(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/login", json={"email": "ghost@x.com", "password": "pass1234"})
        assert res.status_code == 404
        assert res.json()["code"] == "NotFound"

    async def test_login_wrong_password(self, client: AsyncClient, regular_user):
        res = await client.post(f"{AUTH}/login", json={"email": "regular@x.com", "password": "wrong-pass"})
        assert res.status_code == 401
        assert res.json()["code"] == "AuthenticationError"

    async def test_login_missing_password(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/login", json={"email": "a@x.com"})
        assert res.status_code == 400


class TestRefreshToken:
    """액세스 토큰 갱신."""

    async def test_refresh_success(self, client: AsyncClient):
        reg = await _register(client)
        refresh = set_cookie(reg)["refreshToken"].value

        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert res.status_code == 200
        new_access = res.json()["accessToken"]
        assert token_codec.verify_access_token(new_access).subject_id == reg.json()["user"]["id"]

    async def test_refresh_after_access_expiry(self, client: AsyncClient):
        """액세스 토큰 만료 후에도 리프레시로 새 토큰 발급."""
        reg = await _register(client)
        user_id = reg.json()["user"]["id"]
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        stale_access = TokenCodec(settings, clock=lambda: past).issue_access_token(user_id)

        me = await client.get("/api/v1/users/current", headers=auth_header(stale_access))
        assert me.status_code == 401

        res = await client.post(
            f"{AUTH}/refresh-token",
            headers=refresh_cookie_header(set_cookie(reg)["refreshToken"].value),
        )
        assert res.status_code == 200
        fresh = res.json()["accessToken"]
        me = await client.get("/api/v1/users/current", headers=auth_header(fresh))
        assert me.status_code == 200

    async def test_refresh_does_not_rotate(self, client: AsyncClient, db: AsyncSession):
        reg = await _register(client)
        refresh = set_cookie(reg)["refreshToken"].value
        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert "refreshToken" not in res.headers.get("set-cookie", "")
        assert await refresh_token_repository.exists(db, refresh)

    async def test_refresh_missing_cookie(self, client: AsyncClient):
        client.cookies.clear()
        res = await client.post(f"{AUTH}/refresh-token")
        assert res.status_code == 401
        assert res.json()["code"] == "AuthenticationError"

    async def test_valid_but_unledgered_token_rejected(self, client: AsyncClient, regular_user):
        """서명·만료 모두 유효하지만 원장에 없는 토큰 - 401."""
        unledgered = token_codec.issue_refresh_token(str(regular_user.id))
        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(unledgered))
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid refresh token"

    async def test_revoked_token_rejected(self, client: AsyncClient, db: AsyncSession):
        reg = await _register(client)
        refresh = set_cookie(reg)["refreshToken"].value
        await refresh_token_repository.revoke(db, refresh)
        await db.commit()

        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert res.status_code == 401
        assert res.json()["code"] == "AuthenticationError"

    async def test_expired_ledgered_token(self, client: AsyncClient, db: AsyncSession, regular_user):
        """원장에 있지만 만료된 토큰 - 401 재로그인 안내."""
        long_ago = datetime.now(timezone.utc) - timedelta(days=30)
        expired = TokenCodec(settings, clock=lambda: long_ago).issue_refresh_token(str(regular_user.id))
        await refresh_token_repository.record(db, expired, regular_user.id)
        await db.commit()

        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(expired))
        assert res.status_code == 401
        assert res.json()["message"] == "Refresh token expired, please login again"

    async def test_access_token_as_refresh_rejected(self, client: AsyncClient, db: AsyncSession, regular_user):
        """원장에 있어도 액세스 토큰은 리프레시로 사용 불가."""
        access = token_codec.issue_access_token(str(regular_user.id))
        await refresh_token_repository.record(db, access, regular_user.id)
        await db.commit()

        res = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(access))
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid refresh token"


class TestLogout:
    """로그아웃."""

    async def test_logout_revokes_and_clears_cookie(self, client: AsyncClient, db: AsyncSession):
        reg = await _register(client)
        access = reg.json()["accessToken"]
        refresh = set_cookie(reg)["refreshToken"].value

        res = await client.post(
            f"{AUTH}/logout",
            headers={**auth_header(access), **refresh_cookie_header(refresh)},
        )
        assert res.status_code == 204
        cleared = set_cookie(res)["refreshToken"]
        assert cleared.value == ""
        assert cleared["max-age"] == "0"
        assert cleared["httponly"] is True
        assert not await refresh_token_repository.exists(db, refresh)

        again = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert again.status_code == 401

    async def test_logout_keeps_other_sessions(self, client: AsyncClient, db: AsyncSession):
        reg = await _register(client)
        login = await client.post(f"{AUTH}/login", json={"email": "a@x.com", "password": "pass1234"})
        first = set_cookie(reg)["refreshToken"].value
        second = set_cookie(login)["refreshToken"].value

        await client.post(
            f"{AUTH}/logout",
            headers={**auth_header(reg.json()["accessToken"]), **refresh_cookie_header(first)},
        )
        assert not await refresh_token_repository.exists(db, first)
        assert await refresh_token_repository.exists(db, second)

    async def test_logout_without_cookie(self, client: AsyncClient, user_token: str):
        client.cookies.clear()
        res = await client.post(f"{AUTH}/logout", headers=auth_header(user_token))
        assert res.status_code == 204

    async def test_logout_requires_access_token(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/logout")
        assert res.status_code == 401


class TestSessionLifecycle:
    """가입 → 로그인 → 갱신 → 로그아웃 전체 흐름."""

    async def test_full_lifecycle(self, client: AsyncClient, db: AsyncSession):
        reg = await _register(client, email="a@x.com", password="pass1234", role="user")
        assert reg.status_code == 201
        user_id = UUID(reg.json()["user"]["id"])
        assert await refresh_token_repository.count_for_user(db, user_id) == 1

        login = await client.post(f"{AUTH}/login", json={"email": "a@x.com", "password": "pass1234"})
        assert login.status_code == 201
        assert await refresh_token_repository.count_for_user(db, user_id) == 2

        refresh = set_cookie(login)["refreshToken"].value
        refreshed = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert refreshed.status_code == 200

        out = await client.post(
            f"{AUTH}/logout",
            headers={**auth_header(refreshed.json()["accessToken"]), **refresh_cookie_header(refresh)},
        )
        assert out.status_code == 204
        assert await refresh_token_repository.count_for_user(db, user_id) == 1

        denied = await client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(refresh))
        assert denied.status_code == 401


class TestProductionCookie:
    """운영 환경 쿠키 - Secure 속성."""

    @pytest.fixture
    def production(self, client: AsyncClient):
        prod: Settings = settings.model_copy(update={"ENVIRONMENT": "production"})
        app.dependency_overrides[get_settings] = lambda: prod
        yield prod
        app.dependency_overrides.pop(get_settings, None)

    async def test_login_cookie_is_secure(self, client: AsyncClient, production: Settings, regular_user: User):
        res = await client.post(f"{AUTH}/login", json={"email": "regular@x.com", "password": "regular1234"})
        assert res.status_code == 201
        morsel = set_cookie(res)["refreshToken"]
        assert morsel["secure"] is True
        assert morsel["httponly"] is True
        assert morsel["samesite"].lower() == "strict"

    async def test_logout_clearing_cookie_is_secure(self, client: AsyncClient, production: Settings):
        reg = await _register(client)
        assert set_cookie(reg)["refreshToken"]["secure"] is True

        res = await client.post(
            f"{AUTH}/logout",
            headers={
                **auth_header(reg.json()["accessToken"]),
                **refresh_cookie_header(set_cookie(reg)["refreshToken"].value),
            },
        )
        assert res.status_code == 204
        cleared = set_cookie(res)["refreshToken"]
        assert cleared.value == ""
        assert cleared["secure"] is True
        assert cleared["samesite"].lower() == "strict"
