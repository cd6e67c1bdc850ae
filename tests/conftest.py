"""Shared fixtures: in-memory database, API client and the reference fixture data."""

from datetime import date

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import scorecard.models  # noqa: F401
from scorecard.database import Base, build_engine, get_db
from scorecard.services.auth import admin_password, admin_tokens
from scorecard.services.scoring import MemberChoice, ReferenceVote

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_ADMIN_PASSWORD = "test-password"
CURRENT_CONGRESS = 119


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh database session for each test."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession):
    """HTTP client bound to the app, sharing the test database session."""
    from scorecard.main import app, rate_limit_store

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[admin_password] = lambda: TEST_ADMIN_PASSWORD
    rate_limit_store.reset()
    admin_tokens.clear()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    admin_tokens.clear()


@pytest.fixture
def admin_headers(client) -> dict:
    """Authorization header carrying a freshly issued admin token."""
    token = admin_tokens.login(TEST_ADMIN_PASSWORD, TEST_ADMIN_PASSWORD)
    return {"Authorization": f"Bearer {token}"}


def make_vote(vote_id, congress, chamber, day, category, position, weight=1.0) -> ReferenceVote:
    return ReferenceVote(
        id=vote_id,
        congress=congress,
        chamber=chamber,
        category=category,
        reference_position=position,
        importance_weight=weight,
        vote_date=date.fromisoformat(day),
    )


@pytest.fixture
def reference_votes() -> list[ReferenceVote]:
    """Seven tagged votes across two congresses and all five categories."""
    return [
        make_vote("V001", 119, "Senate", "2025-03-12", "IMMIGRATION", "YES", 1.5),
        make_vote("V002", 119, "House", "2025-03-15", "IMMIGRATION", "NO", 1.0),
        make_vote("V003", 119, "Senate", "2025-04-02", "FOREIGN_AID", "NO", 2.0),
        make_vote("V004", 118, "House", "2023-05-10", "FOREIGN_AID", "NO", 1.0),
        make_vote("V005", 119, "House", "2025-02-01", "TAXES_TRADE", "YES", 1.0),
        make_vote("V006", 119, "Senate", "2025-06-20", "HEALTHCARE", "YES", 1.0),
        make_vote("V007", 119, "House", "2025-07-11", "INSURANCE", "YES", 1.0),
    ]


@pytest.fixture
def reference_choices() -> list[MemberChoice]:
    return [
        # M001: aligned on V001 and V006, opposed on V003
        MemberChoice("V001", "M001", "YES"),
        MemberChoice("V003", "M001", "YES"),
        MemberChoice("V006", "M001", "YES"),
        # M002
        MemberChoice("V002", "M002", "NO"),
        MemberChoice("V004", "M002", "NO"),
        MemberChoice("V005", "M002", "YES"),
        MemberChoice("V007", "M002", "ABSENT"),
        # M003: opposite on everything recorded, nothing on the Senate votes
        MemberChoice("V002", "M003", "YES"),
        MemberChoice("V004", "M003", "YES"),
        MemberChoice("V005", "M003", "NO"),
        MemberChoice("V007", "M003", "NO"),
    ]
