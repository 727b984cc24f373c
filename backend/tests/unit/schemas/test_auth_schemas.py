"""
Unit Tests for request schemas
Tests for: signup/login validation, join codes, enrollment review, exams, messages
"""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from educonnect.models.classroom import EnrollmentStatus
from educonnect.models.user import UserRole
from educonnect.schemas.auth import UserRegister, UserLogin
from educonnect.schemas.chat import MessageCreate
from educonnect.schemas.classroom import JoinClassRequest, EnrollmentReview
from educonnect.schemas.exam import ExamCreate
from educonnect.schemas.misc import AnnouncementCreate, MarkNotificationsRead


def signup(**overrides):
    data = {
        "name": "Asha Rao",
        "email": "Asha@Example.com",
        "password": "SecurePass123",
        "confirm_password": "SecurePass123",
    }
    data.update(overrides)
    return data


class TestUserRegister:

    def test_student_defaults(self):
        user = UserRegister(**signup())
        assert user.role == UserRole.STUDENT
        assert user.email == "asha@example.com"

    def test_passwords_must_match(self):
        with pytest.raises(ValidationError, match="Passwords don't match"):
            UserRegister(**signup(confirm_password="SomethingElse1"))

    def test_short_password(self):
        with pytest.raises(ValidationError):
            UserRegister(**signup(password="short", confirm_password="short"))

    def test_teacher_requires_details(self):
        with pytest.raises(ValidationError, match="Required fields for teachers: Department, Subject, University"):
            UserRegister(**signup(role="TEACHER"))

    def test_teacher_with_details(self):
        user = UserRegister(**signup(role="TEACHER", department="CS", subject="DB", university="IIT"))
        assert user.role == UserRole.TEACHER

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserRegister(**signup(email="not-an-email"))


class TestUserLogin:

    def test_email_lowercased(self):
        assert UserLogin(email="A@B.COM", password="secret1").email == "a@b.com"


class TestClassroomSchemas:

    def test_join_code_normalized(self):
        assert JoinClassRequest(code="cs3ab12").code == "CS3AB12"

    def test_join_code_length(self):
        with pytest.raises(ValidationError):
            JoinClassRequest(code="CS3")

    def test_review_rejects_pending(self):
        with pytest.raises(ValidationError):
            EnrollmentReview(status="PENDING")
        assert EnrollmentReview(status="APPROVED").status == EnrollmentStatus.APPROVED


class TestExamCreate:

    def test_window_must_be_positive(self):
        start = datetime(2024, 1, 1, 10)
        with pytest.raises(ValidationError, match="End time must be after start time"):
            ExamCreate(title="Quiz", class_id="c1", duration=30, total_marks=10, start_time=start, end_time=start)

    def test_aware_times_become_naive_utc(self):
        start = datetime(2024, 1, 1, 15, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        exam = ExamCreate(
            title="Quiz", class_id="c1", duration=30, total_marks=10,
            start_time=start, end_time=start + timedelta(hours=1),
        )
        assert exam.start_time == datetime(2024, 1, 1, 10, 0)
        assert exam.start_time.tzinfo is None


class TestMisc:

    def test_message_needs_target(self):
        with pytest.raises(ValidationError):
            MessageCreate(content="hello")

    def test_message_blank_content(self):
        with pytest.raises(ValidationError):
            MessageCreate(content="   ", room_id="r1")

    def test_mark_read_needs_target(self):
        with pytest.raises(ValidationError):
            MarkNotificationsRead()
        assert MarkNotificationsRead(mark_all=True).mark_all is True

    def test_class_announcement_needs_class(self):
        with pytest.raises(ValidationError):
            AnnouncementCreate(title="Hello", content="World")
        assert AnnouncementCreate(title="Hello", content="World", is_global=True).class_id is None
