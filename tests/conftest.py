"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from quotewise.core.auth.backend import issue_access_token
from quotewise.core.database import get_db
from quotewise.main import create_app
from quotewise.models import Base, Company, Industry, User
from quotewise.modules.users.models import UserRole
from tests.factories.company import CompanyFactory, IndustryFactory
from tests.factories.user import UserFactory


# Each test gets its own in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session shared by the test and the app.

    Services commit on purpose, so the session is not wrapped in an
    outer transaction; the database is thrown away after the test.
    """
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Same commit/rollback contract as the real dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Company and User Fixtures
# ============================================================


@pytest.fixture
async def industry(db: AsyncSession) -> Industry:
    """Create the Construction industry."""
    industry = IndustryFactory.build(name="Construction")
    db.add(industry)
    await db.commit()
    return industry


@pytest.fixture
async def company(db: AsyncSession, industry: Industry) -> Company:
    """Create a company in the Construction industry."""
    company = CompanyFactory.build(name="Acme Builders", industry_id=industry.id)
    db.add(company)
    await db.commit()
    return company


@pytest.fixture
async def other_company(db: AsyncSession) -> Company:
    """Create a second, unrelated company."""
    company = CompanyFactory.build(name="Rival Corp", industry_id=None)
    db.add(company)
    await db.commit()
    return company


@pytest.fixture
async def user(db: AsyncSession, company: Company) -> User:
    """Create a member of ``company`` with password ``Password123``."""
    user = UserFactory.build(username="member", company_id=company.id)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def owner(db: AsyncSession, company: Company) -> User:
    """Create the owner of ``company``."""
    user = UserFactory.build(username="owner", company_id=company.id, role=UserRole.OWNER.value)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def other_user(db: AsyncSession, other_company: Company) -> User:
    """Create a member of ``other_company``."""
    user = UserFactory.build(username="rival", company_id=other_company.id)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def admin(db: AsyncSession) -> User:
    """Create an admin without company."""
    user = UserFactory.build(username="admin", company_id=None, role=UserRole.ADMIN.value)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def make_headers() -> Callable[[User], dict[str, str]]:
    """Build bearer headers for any user."""

    def _make(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_access_token(user)}"}

    return _make


@pytest.fixture
def auth_headers(user: User, make_headers) -> dict[str, str]:
    return make_headers(user)


@pytest.fixture
def admin_headers(admin: User, make_headers) -> dict[str, str]:
    return make_headers(admin)
