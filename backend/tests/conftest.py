"""
ShareXConnect - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'

from sharexconnect.main import app
from sharexconnect.core.database import Base, get_db, enable_sqlite_foreign_keys
from sharexconnect.core.security import get_password_hash, create_access_token
from sharexconnect.models.user import User, UserRole
from sharexconnect.models.project import Project, ProjectVisibility

fake = Faker()

DEFAULT_PASSWORD = 'testpassword123'
INSTITUTION = 'State University'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Factories ====================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory for persisted users; defaults to an active student"""
    async def _make_user(role: UserRole = UserRole.STUDENT, institution: str = INSTITUTION, **overrides) -> User:
        email = fake.unique.email()
        fields = dict(
            username=fake.unique.user_name()[:24] + fake.numerify('###'),
            email=email.lower(),
            hashed_password=get_password_hash(DEFAULT_PASSWORD),
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            role=role,
            institution=institution,
            college_domain=email.split('@')[1],
            department='Computer Science' if role == UserRole.FACULTY else None,
            is_active=True,
            is_verified=True,
        )
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_project(db_session: AsyncSession) -> Callable:
    async def _make_project(owner: User, **overrides) -> Project:
        fields = dict(
            owner_id=owner.id,
            title=fake.catch_phrase()[:200],
            description=fake.text(max_nb_chars=200),
            category='Web Development',
            visibility=ProjectVisibility.INSTITUTION,
        )
        fields.update(overrides)
        project = Project(**fields)
        db_session.add(project)
        await db_session.commit()
        await db_session.refresh(project)
        return project
    return _make_project


@pytest.fixture
async def owner(make_user) -> User:
    return await make_user()


@pytest.fixture
async def student(make_user) -> User:
    return await make_user()


@pytest.fixture
async def outsider(make_user) -> User:
    return await make_user(institution='Other College')


@pytest.fixture
async def faculty(make_user) -> User:
    return await make_user(role=UserRole.FACULTY)


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(role=UserRole.ADMIN)


@pytest.fixture
async def project(make_project, owner) -> Project:
    return await make_project(owner)


@pytest.fixture
def auth_headers_for() -> Callable:
    """Build bearer headers for any user"""
    def _headers(user: User) -> dict:
        token_data = {
            'sub': str(user.id),
            'email': user.email,
            'role': user.role.value
        }
        token = create_access_token(token_data)
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def auth_headers(owner: User, auth_headers_for) -> dict:
    """Generate authentication headers for the project owner"""
    return auth_headers_for(owner)


@pytest.fixture
def password() -> str:
    """Plain-text password shared by every factory-made user"""
    return DEFAULT_PASSWORD
