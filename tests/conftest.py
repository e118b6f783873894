"""
School File Portal - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['API_PREFIX'] = ''
os.environ['LOG_JSON'] = 'false'

from main import app
from shared.auth import create_access_token, get_password_hash
from shared.db import Base, get_db
from services.file_portal.core.bootstrap import ensure_default_classes
from services.file_portal.core.file_store import FileStore, get_file_store
from services.file_portal.core.catalog import list_active_classes
from services.file_portal.models import FileRecord, UserAccount, UserRole

fake = Faker()

ADMIN_PASSWORD = 'adminpassword123'
TEACHER_PASSWORD = 'teacherpassword123'


@pytest.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Fresh SQLite database file for each test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def store(tmp_path) -> FileStore:
    return FileStore(tmp_path / 'storage')


@pytest.fixture
async def school_classes(db_session: AsyncSession) -> list:
    """Classes VI, VII and VIII, active"""
    await ensure_default_classes(db_session, ['VI', 'VII', 'VIII'])
    return await list_active_classes(db_session)


async def _make_user(db_session: AsyncSession, role: UserRole, password: str, classes=()) -> UserAccount:
    user = UserAccount(
        username=fake.unique.user_name()[:40],
        hashed_password=get_password_hash(password),
        role=role,
        is_active=True
    )
    user.assigned_classes = classes
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> UserAccount:
    """Create an admin test user"""
    return await _make_user(db_session, UserRole.ADMIN, ADMIN_PASSWORD)


@pytest.fixture
async def teacher_user(db_session: AsyncSession) -> UserAccount:
    """Create a teacher test user"""
    return await _make_user(db_session, UserRole.TEACHER, TEACHER_PASSWORD, ['VI', 'VII'])


@pytest.fixture
async def other_teacher(db_session: AsyncSession) -> UserAccount:
    """A second teacher, for ownership checks"""
    return await _make_user(db_session, UserRole.TEACHER, TEACHER_PASSWORD, ['VI'])


def identity_for(user: UserAccount) -> dict:
    """Identity dict in the shape shared.auth.get_current_user returns"""
    return {
        'user_id': user.id,
        'username': user.username,
        'role': user.role.value,
        'assigned_classes': user.assigned_classes
    }


def headers_for(user: UserAccount) -> dict:
    token = create_access_token({
        'sub': user.username,
        'user_id': user.id,
        'role': user.role.value,
        'assigned_classes': user.assigned_classes
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_identity(admin_user: UserAccount) -> dict:
    return identity_for(admin_user)


@pytest.fixture
def teacher_identity(teacher_user: UserAccount) -> dict:
    return identity_for(teacher_user)


@pytest.fixture
def admin_auth_headers(admin_user: UserAccount) -> dict:
    """Generate authentication headers for the admin user"""
    return headers_for(admin_user)


@pytest.fixture
def teacher_auth_headers(teacher_user: UserAccount) -> dict:
    """Generate authentication headers for the teacher user"""
    return headers_for(teacher_user)


@pytest.fixture
async def client(db_session: AsyncSession, store: FileStore) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and storage overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_file(db_session: AsyncSession, store: FileStore):
    """Factory that stores bytes and inserts the matching file record"""
    async def _make(owner: UserAccount, file_name: str, class_name: str = 'VI', subject: str = 'Math',
                    content: bytes = b'%PDF-1.4 test', description: str = None) -> FileRecord:
        stored_path = store.save(content, file_name, class_name, subject, owner.id)
        record = FileRecord(
            file_name=file_name,
            file_path=stored_path,
            file_type=os.path.splitext(file_name)[1].lower(),
            class_name=class_name,
            subject=subject,
            uploaded_by=owner.id,
            file_size=len(content),
            description=description
        )
        db_session.add(record)
        await db_session.commit()
        await db_session.refresh(record)
        return record

    return _make


@pytest.fixture
def other_teacher_auth_headers(other_teacher: UserAccount) -> dict:
    return headers_for(other_teacher)


@pytest.fixture
def admin_credentials(admin_user: UserAccount) -> dict:
    return {'username': admin_user.username, 'password': ADMIN_PASSWORD}
