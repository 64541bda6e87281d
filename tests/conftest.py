"""테스트 인프라 - 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure - In-memory SQLite DB (aiosqlite), session, and httpx
client fixtures. Each test gets a fresh database with the schema created
from ORM metadata; the engine is disposed afterwards, dropping all data.
"""

import os

# 앱 import 전에 테스트 환경 설정 - Settings are read once at import time
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["ADMIN_EMAIL_WHITELIST"] = "boss@x.com,chief@x.com"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["LOG_JSON"] = "false"
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AXIOM_DATASET"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from http.cookies import SimpleCookie  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient, Response  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from gestor.database import Base, get_db  # noqa: E402
from gestor.main import app  # noqa: E402
from gestor.models import RefreshToken, User, UserRole  # noqa: E402,F401 - register all models with metadata
from gestor.utils.jwt import token_codec  # noqa: E402
from gestor.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

AUTH = "/api/v1/auth"
USERS = "/api/v1/users"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 - 단일 커넥션을 공유하는 인메모리 DB."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 - DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _create_user(db: AsyncSession, username: str, email: str, password: str, role: UserRole) -> User:
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    """관리자 사용자를 생성합니다."""
    return await _create_user(db, "user-admin", "admin@x.com", "admin1234", UserRole.ADMIN)


@pytest_asyncio.fixture
async def regular_user(db: AsyncSession) -> User:
    """일반 사용자를 생성합니다."""
    return await _create_user(db, "user-regular", "regular@x.com", "regular1234", UserRole.USER)


@pytest_asyncio.fixture
async def admin_token(admin_user: User) -> str:
    return token_codec.issue_access_token(str(admin_user.id))


@pytest_asyncio.fixture
async def user_token(regular_user: User) -> str:
    return token_codec.issue_access_token(str(regular_user.id))


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie_header(token: str) -> dict[str, str]:
    """리프레시 토큰 쿠키 헤더 (Explicit Cookie header carrying the refresh token)."""
    return {"Cookie": f"refreshToken={token}"}


def set_cookie(res: Response, name: str = "refreshToken") -> SimpleCookie:
    """응답의 Set-Cookie 헤더를 파싱합니다 (Parse the Set-Cookie header for `name`)."""
    for raw in res.headers.get_list("set-cookie"):
        cookie: SimpleCookie = SimpleCookie()
        cookie.load(raw)
        if name in cookie:
            return cookie
    raise AssertionError(f"no Set-Cookie for {name}")
