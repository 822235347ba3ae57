import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from totp_api.app.db.base import Base, get_db
from totp_api.app.models import User
from totp_api.app.security.jwt import create_access_token
from totp_api.main import app

KNOWN_SECRET = "12345678901234567890"
OTHER_SECRET = "ABCDEFGHIJKLMNOPQRST"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'totp-test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def service_account(db):
    user = User(username="service-account-backend", service_account_client_id="backend")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def end_user(db):
    user = User(username="alice")
    db.add(user)
    await db.commit()
    return user


def bearer(user, roles=("manage-totp",)):
    token = create_access_token({"sub": user.id, "realm_access": {"roles": list(roles)}})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(service_account):
    return bearer(service_account)
