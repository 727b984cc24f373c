"""
EduConnect - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''

from educonnect.main import app
from educonnect.core.database import Base, get_db, enable_sqlite_foreign_keys
from educonnect.core.security import get_password_hash
from educonnect.models.assignment import Assignment
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.exam import Exam, ExamQuestion, ExamType, QuestionType
from educonnect.models.user import User, UserRole, StudentProfile, TeacherProfile
from educonnect.services.session_service import SessionService

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
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
    """Test client; every request gets its own session, like in production"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db: AsyncSession, role: UserRole = UserRole.STUDENT, **fields) -> User:
    """Insert a user with the profile matching its role"""
    user = User(
        name=fields.pop('name', fake.name()),
        email=fields.pop('email', fake.unique.email()),
        hashed_password=get_password_hash(fields.pop('password', TEST_PASSWORD)),
        role=role,
        is_active=fields.pop('is_active', True),
    )
    if role == UserRole.STUDENT:
        user.student_profile = StudentProfile(department='Computer Science', semester=3, **fields)
    elif role == UserRole.TEACHER:
        user.teacher_profile = TeacherProfile(
            department='Computer Science', subject='Algorithms', university='Test University', **fields
        )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def headers_for(db: AsyncSession, user: User) -> dict:
    """Bearer header backed by a real session row"""
    session = await SessionService(db).create_session(user)
    return {'Authorization': f'Bearer {session.session_token}'}


@pytest.fixture
async def student_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def other_student(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def teacher_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.TEACHER)


@pytest.fixture
async def other_teacher(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.TEACHER)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def student_headers(db_session: AsyncSession, student_user: User) -> dict:
    return await headers_for(db_session, student_user)


@pytest.fixture
async def other_student_headers(db_session: AsyncSession, other_student: User) -> dict:
    return await headers_for(db_session, other_student)


@pytest.fixture
async def teacher_headers(db_session: AsyncSession, teacher_user: User) -> dict:
    return await headers_for(db_session, teacher_user)


@pytest.fixture
async def other_teacher_headers(db_session: AsyncSession, other_teacher: User) -> dict:
    return await headers_for(db_session, other_teacher)


@pytest.fixture
async def admin_headers(db_session: AsyncSession, admin_user: User) -> dict:
    return await headers_for(db_session, admin_user)


@pytest.fixture
async def classroom(db_session: AsyncSession, teacher_user: User) -> Classroom:
    """An active class owned by teacher_user"""
    classroom = Classroom(
        name='Data Structures',
        code='CS3AB12',
        department='Computer Science',
        semester=3,
        subject='Algorithms',
        teacher_id=teacher_user.teacher_profile.id,
    )
    db_session.add(classroom)
    await db_session.commit()
    await db_session.refresh(classroom)
    return classroom


async def approve_enrollment(db: AsyncSession, classroom: Classroom, user: User) -> ClassEnrollment:
    enrollment = ClassEnrollment(
        class_id=classroom.id,
        student_id=user.student_profile.id,
        status=EnrollmentStatus.APPROVED,
        joined_at=datetime.utcnow(),
    )
    db.add(enrollment)
    await db.commit()
    await db.refresh(enrollment)
    return enrollment


@pytest.fixture
async def enrollment(db_session: AsyncSession, classroom: Classroom, student_user: User) -> ClassEnrollment:
    """student_user approved into classroom"""
    return await approve_enrollment(db_session, classroom, student_user)


@pytest.fixture
async def assignment(db_session: AsyncSession, classroom: Classroom) -> Assignment:
    """Assignment due in a week"""
    assignment = Assignment(
        title='Linked Lists',
        description='Implement a doubly linked list with tests',
        due_date=datetime.utcnow() + timedelta(days=7),
        total_marks=50,
        class_id=classroom.id,
    )
    db_session.add(assignment)
    await db_session.commit()
    await db_session.refresh(assignment)
    return assignment


@pytest.fixture
async def ongoing_exam(db_session: AsyncSession, classroom: Classroom) -> Exam:
    """Exam whose window is open, with one MCQ and one TRUE_FALSE question"""
    now = datetime.utcnow()
    exam = Exam(
        title='Weekly Quiz',
        type=ExamType.QUIZ,
        class_id=classroom.id,
        duration=30,
        total_marks=3,
        passing_marks=2,
        start_time=now - timedelta(minutes=10),
        end_time=now + timedelta(hours=1),
    )
    exam.questions = [
        ExamQuestion(type=QuestionType.MCQ, question='2 + 2 = ?', options=['3', '4', '5'], answer='4', marks=2, order=0),
        ExamQuestion(type=QuestionType.TRUE_FALSE, question='A stack is FIFO', answer='false', marks=1, order=1),
    ]
    db_session.add(exam)
    await db_session.commit()
    await db_session.refresh(exam)
    return exam
