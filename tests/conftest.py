import uuid
from collections.abc import AsyncIterator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM, JSONB, UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from newsroom.core.security import hash_password
from newsroom.db.base import Base
from newsroom.db.session import get_db
from newsroom.main import create_app
from newsroom.models.bulletin import Bulletin
from newsroom.models.user import User, UserRole
from newsroom.services.auth_service import create_tokens

# Use SQLite for testing (no PostgreSQL needed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# NullPool: every test gets its own event loop, so connections must not be reused
engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

TEST_PASSWORD = "testpass123"


@event.listens_for(engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _register_sqlite_compilers():
    """Register SQLite-compatible compilers for PG types."""
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_UUID, "sqlite")
    def compile_uuid(type_, compiler, **kw):
        return "VARCHAR(36)"

    @compiles(JSONB, "sqlite")
    def compile_jsonb(type_, compiler, **kw):
        return "TEXT"

    @compiles(PG_ENUM, "sqlite")
    def compile_enum(type_, compiler, **kw):
        return "VARCHAR(50)"


_register_sqlite_compilers()


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    import newsroom.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(db: AsyncSession, email: str, role: UserRole) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        role=role,
        display_name=email.split("@")[0],
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_tokens(user)['access_token']}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "testadmin@test.com", UserRole.ADMIN)


@pytest_asyncio.fixture
async def producer_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "producer@test.com", UserRole.PRODUCER)


@pytest_asyncio.fixture
async def editor_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "editor@test.com", UserRole.EDITOR)


@pytest_asyncio.fixture
async def reporter_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "reporter@test.com", UserRole.REPORTER)


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient, admin_user: User) -> str:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "testadmin@test.com", "password": TEST_PASSWORD},
    )
    return response.json()["access_token"]


@pytest_asyncio.fixture
async def auth_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def producer_headers(producer_user: User) -> dict:
    return _headers_for(producer_user)


@pytest.fixture
def editor_headers(editor_user: User) -> dict:
    return _headers_for(editor_user)


@pytest.fixture
def reporter_headers(reporter_user: User) -> dict:
    return _headers_for(reporter_user)


@pytest_asyncio.fixture
async def bulletin(db_session: AsyncSession, admin_user: User) -> Bulletin:
    """An empty 19:00 bulletin planned for 30 minutes."""
    record = Bulletin(
        title="Evening News",
        air_date=date(2026, 10, 18),
        start_time="19:00",
        planned_duration_secs=1800,
        created_by=admin_user.id,
        producer_id=admin_user.id,
    )
    db_session.add(record)
    await db_session.commit()
    return record
