import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DIRECTOR_PASSWORD", "1234")
os.environ.setdefault("FINANCE_PASSWORD", "1234")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import portal.models  # noqa: F401
from portal.database import Base, get_db
from portal.main import app
from portal.services.auth_service import create_access_token
from portal.services.workflow import Role


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def director_headers():
    return {"Authorization": f"Bearer {create_access_token('director', Role.DIRECTOR)}"}


@pytest.fixture
def finance_headers():
    return {"Authorization": f"Bearer {create_access_token('finance', Role.FINANCE)}"}


@pytest.fixture
def purchase_payload():
    """A valid submission body; tests override individual fields."""
    return {
        "uploader_name": "Asha Rao",
        "vendor_name": "Quantum Office Supplies",
        "purpose": "Procurement",
        "amount": 5000,
        "bill_type": "quantum",
        "hub": "mumbai",
        "payment_sequence": "bill_first",
        "payment_date": "2026-10-20",
        "file_url": "https://files.example.com/bills/abc.pdf",
        "file_name": "abc.pdf",
    }
